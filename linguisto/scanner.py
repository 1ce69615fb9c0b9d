"""Scan pipeline wiring the walker, aggregator and report builder together."""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import replace
from typing import List

from .aggregator import Aggregator
from .classifier import ClassificationPolicy, Classifier
from .config import LinguistoConfig, load_config
from .filters import FilterPolicy, PathFilter
from .knowledge import load_knowledge_base
from .logging import get_logger
from .models import LanguageStat, ScanRequest, SortKey
from .report import ReportBuilder
from .walker import Walker, resolve_root


class LanguageScanner:
    """Runs one stateless scan per request and returns the finished report."""

    def __init__(
        self,
        walker: Walker | None = None,
        aggregator: Aggregator | None = None,
        report_builder: ReportBuilder | None = None,
    ) -> None:
        self.walker = walker or Walker()
        self.aggregator = aggregator or Aggregator()
        self.report_builder = report_builder or ReportBuilder()
        self.logger = get_logger("scanner")

    @classmethod
    def from_config(cls, config: LinguistoConfig) -> "LanguageScanner":
        """Build a scanner whose policies are frozen from ``config``."""
        walker = Walker(PathFilter(FilterPolicy.from_config(config)))
        classifier = Classifier(
            knowledge_base=load_knowledge_base(config.knowledge_base),
            policy=ClassificationPolicy.from_config(config),
        )
        return cls(walker=walker, aggregator=Aggregator(classifier, workers=config.workers))

    def scan(self, request: ScanRequest) -> List[LanguageStat]:
        """Return the sorted, optionally tail-collapsed report for ``request``."""
        started = time.perf_counter()
        self.logger.info("Scanning %s", request.root)
        aggregates = self.aggregator.accumulate_tree(self.walker, request.root)
        stats = self.report_builder.build(aggregates, request.sort_key)
        report = self.report_builder.collapse_tail(stats, request.keep_top)
        self.logger.debug(
            "Classified %d files across %d languages in %.2fs",
            sum(stat.file_count for stat in stats),
            len(stats),
            time.perf_counter() - started,
        )
        return report


def analyze_directory(
    path: str | os.PathLike[str],
    *,
    sort_key: SortKey | str | None = None,
    keep_top: int | None = None,
    workers: int | None = None,
) -> List[LanguageStat]:
    """Scan ``path`` using its .linguisto.yml and return the report rows.

    Keyword arguments override the matching configuration values; without
    configuration the report is sorted by bytes and keeps the top
    ``max_languages`` rows before folding the rest into "Other". Pass
    ``keep_top=0`` to list every language.
    """
    root = resolve_root(path)
    config = load_config(root)
    if workers is not None:
        config = replace(config, workers=workers)
    request = ScanRequest(
        root=str(root),
        sort_key=SortKey.parse(sort_key) if sort_key is not None else config.sort,
        keep_top=keep_top if keep_top is not None else config.max_languages,
    )
    return LanguageScanner.from_config(config).scan(request)


async def analyze_directory_async(
    path: str | os.PathLike[str],
    *,
    sort_key: SortKey | str | None = None,
    keep_top: int | None = None,
    workers: int | None = None,
) -> List[LanguageStat]:
    """Run :func:`analyze_directory` in a worker thread for asyncio callers."""
    return await asyncio.to_thread(
        analyze_directory, path, sort_key=sort_key, keep_top=keep_top, workers=workers
    )


__all__ = ["LanguageScanner", "analyze_directory", "analyze_directory_async"]
