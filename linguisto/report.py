"""Turns per-language aggregates into an ordered, ratio-annotated report."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Mapping, Sequence

from .models import LanguageAggregate, LanguageStat, SortKey

OTHER_LANGUAGE = "Other"


def _sort_key(metric: int, language: str) -> tuple[int, str, str]:
    return (-metric, language.casefold(), language)


class ReportBuilder:
    """Builds deterministic report rows from raw counts and byte totals."""

    def build(
        self,
        aggregates: Mapping[str, LanguageAggregate],
        sort_key: SortKey | str = SortKey.BYTES,
    ) -> List[LanguageStat]:
        """Return rows sorted descending by ``sort_key`` with ratios of its total."""
        rows = [
            (aggregate.language, aggregate.file_count, aggregate.byte_total)
            for aggregate in aggregates.values()
        ]
        return self._rank(rows, SortKey.parse(sort_key))

    def rerank(
        self, stats: Iterable[LanguageStat], sort_key: SortKey | str
    ) -> List[LanguageStat]:
        """Recompute ratios and order for a different metric from the stored raw values."""
        rows = [(stat.language, stat.file_count, stat.byte_total) for stat in stats]
        return self._rank(rows, SortKey.parse(sort_key))

    def collapse_tail(self, stats: Sequence[LanguageStat], keep_top: int) -> List[LanguageStat]:
        """Keep the first ``keep_top`` rows and fold the rest into one "Other" row.

        ``keep_top == 0`` disables collapsing; inputs no longer than
        ``keep_top`` are returned unchanged.
        """
        if keep_top < 0:
            raise ValueError("keep_top must be a non-negative integer")
        if keep_top == 0 or len(stats) <= keep_top:
            return list(stats)

        kept = list(stats[:keep_top])
        tail = stats[keep_top:]
        kept.append(
            LanguageStat(
                language=OTHER_LANGUAGE,
                file_count=sum(stat.file_count for stat in tail),
                byte_total=sum(stat.byte_total for stat in tail),
                ratio=sum(stat.ratio for stat in tail),
            )
        )
        return kept

    def _rank(self, rows: Sequence[tuple[str, int, int]], sort_key: SortKey) -> List[LanguageStat]:
        stats = [
            LanguageStat(language, file_count, byte_total, 0.0)
            for language, file_count, byte_total in rows
        ]
        denominator = sum(stat.metric(sort_key) for stat in stats)
        if denominator <= 0:
            return []

        ordered = sorted(stats, key=lambda stat: _sort_key(stat.metric(sort_key), stat.language))
        return [replace(stat, ratio=stat.metric(sort_key) / denominator) for stat in ordered]


__all__ = ["OTHER_LANGUAGE", "ReportBuilder"]
