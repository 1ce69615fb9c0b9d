"""Per-language accumulation of classified files."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, Mapping, Sequence

from .classifier import Classifier
from .config import default_workers
from .logging import get_logger
from .models import FileEntry, LanguageAggregate
from .walker import Subtree, Walker

# Keyed by the case-folded language name.
AggregateMap = Dict[str, LanguageAggregate]

logger = get_logger("aggregator")


def merge_aggregates(
    left: Mapping[str, LanguageAggregate], right: Mapping[str, LanguageAggregate]
) -> AggregateMap:
    """Return the key-wise sum of two partial maps without mutating either."""
    merged: AggregateMap = {key: aggregate.copy() for key, aggregate in left.items()}
    for key, aggregate in right.items():
        existing = merged.get(key)
        if existing is None:
            merged[key] = aggregate.copy()
        else:
            existing.merge(aggregate)
    return merged


def total_bytes(aggregates: Mapping[str, LanguageAggregate]) -> int:
    return sum(aggregate.byte_total for aggregate in aggregates.values())


class Aggregator:
    """Classifies files and folds them into per-language counts and byte totals."""

    def __init__(self, classifier: Classifier | None = None, workers: int | None = None) -> None:
        self.classifier = classifier or Classifier()
        self.workers = workers if workers and workers > 0 else default_workers()

    def accumulate(self, entries: Iterable[FileEntry]) -> AggregateMap:
        """Aggregate a single stream of entries on the calling thread."""
        return self._finalise(self.fold(entries))

    def accumulate_tree(self, walker: Walker, root: str | os.PathLike[str]) -> AggregateMap:
        """Walk ``root`` with a pool of workers, one partial map per subtree."""
        subtrees = walker.partitions(root)
        if self.workers <= 1 or len(subtrees) <= 1:
            partial = self.fold(entry for subtree in subtrees for entry in walker.walk(subtree))
            return self._finalise(partial)
        return self._finalise(self._fold_parallel(walker, subtrees))

    def fold(self, entries: Iterable[FileEntry]) -> AggregateMap:
        """Return the partial map for ``entries`` (no zero-total handling)."""
        partial: AggregateMap = {}
        for entry in entries:
            identity = self.classifier.classify(entry.path)
            if identity is None:
                continue
            aggregate = partial.get(identity.key)
            if aggregate is None:
                aggregate = partial[identity.key] = LanguageAggregate(identity.name)
            elif identity.name < aggregate.language:
                aggregate.language = identity.name
            aggregate.add(entry.size)
        return partial

    def _fold_parallel(self, walker: Walker, subtrees: Sequence[Subtree]) -> AggregateMap:
        max_workers = min(self.workers, len(subtrees))
        logger.debug("Folding %d subtrees on %d workers", len(subtrees), max_workers)
        merged: AggregateMap = {}
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="linguisto") as executor:
            futures = [executor.submit(self.fold, walker.walk(subtree)) for subtree in subtrees]
            for future in as_completed(futures):
                merged = merge_aggregates(merged, future.result())
        return merged

    @staticmethod
    def _finalise(aggregates: AggregateMap) -> AggregateMap:
        if total_bytes(aggregates) == 0:
            return {}
        return aggregates


__all__ = ["AggregateMap", "Aggregator", "merge_aggregates", "total_bytes"]
