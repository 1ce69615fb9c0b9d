"""Directory traversal producing the files eligible for classification."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from .filters import IgnoreRules, PathFilter
from .logging import get_logger
from .models import FileEntry

logger = get_logger("walker")


class ScanError(RuntimeError):
    """Raised when a scan cannot start at all."""


class RootNotFoundError(ScanError, FileNotFoundError):
    """The scan root does not exist."""


class RootNotADirectoryError(ScanError, NotADirectoryError):
    """The scan root exists but is not a directory."""


@dataclass(frozen=True)
class Subtree:
    """A disjoint unit of traversal work.

    ``rules`` are the ignore rules in effect for the subtree's parent; the
    walker layers the subtree's own ignore files on top when it enters it.
    The root partition is shallow (``recursive=False``) and only covers the
    files sitting directly in the scan root.
    """

    path: Path
    rel_path: str
    rules: IgnoreRules
    recursive: bool = True


def resolve_root(root: str | os.PathLike[str]) -> Path:
    """Return the absolute scan root or raise a fatal ScanError."""
    root_path = Path(root).expanduser()
    if not root_path.exists():
        raise RootNotFoundError(f"Directory not found: {root}")
    if not root_path.is_dir():
        raise RootNotADirectoryError(f"Path is not a directory: {root}")
    return root_path.resolve()


class Walker:
    """Streams FileEntry records for every eligible regular file under a root."""

    def __init__(self, path_filter: PathFilter | None = None) -> None:
        self.path_filter = path_filter or PathFilter()

    def partitions(self, root: str | os.PathLike[str]) -> List[Subtree]:
        """Split ``root`` into disjoint subtrees that can be walked concurrently."""
        root_path = resolve_root(root)
        rules = self.path_filter.root_rules(root_path)
        subtrees = [Subtree(root_path, "", rules, recursive=False)]

        try:
            with os.scandir(root_path) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("Cannot list %s: %s", root_path, exc)
            return subtrees

        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError as exc:
                logger.debug("Skipping %s: %s", entry.path, exc)
                continue
            if self.path_filter.include(entry.name, True, rules=rules):
                subtrees.append(Subtree(Path(entry.path), entry.name, rules))
        return subtrees

    def traverse(self, root: str | os.PathLike[str]) -> Iterator[FileEntry]:
        """Return a lazy stream of eligible files below ``root``.

        Root validation happens here, before the first entry is requested.
        """
        return self._walk_all(self.partitions(root))

    def _walk_all(self, subtrees: List[Subtree]) -> Iterator[FileEntry]:
        for subtree in subtrees:
            yield from self.walk(subtree)

    def walk(self, subtree: Subtree) -> Iterator[FileEntry]:
        """Yield eligible files inside a single partition."""
        # (directory, root-relative path, rules, whether rules already include the directory)
        stack: List[Tuple[Path, str, IgnoreRules, bool]] = [
            (subtree.path, subtree.rel_path, subtree.rules, not subtree.recursive)
        ]
        while stack:
            directory, rel_dir, rules, loaded = stack.pop()
            if not loaded:
                rules = rules.descend(directory, rel_dir)

            try:
                # Entries are materialised so no directory handle is held across yields.
                with os.scandir(directory) as iterator:
                    entries = sorted(iterator, key=lambda entry: entry.name)
            except OSError as exc:
                logger.debug("Cannot list %s: %s", directory, exc)
                continue

            subdirs: List[Tuple[Path, str]] = []
            for entry in entries:
                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                try:
                    if entry.is_symlink():
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        if subtree.recursive and self.path_filter.include(
                            rel_path, True, rules=rules
                        ):
                            subdirs.append((Path(entry.path), rel_path))
                        continue
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    if not self.path_filter.include(rel_path, False, rules=rules):
                        continue
                    size = entry.stat(follow_symlinks=False).st_size
                except OSError as exc:
                    logger.debug("Skipping %s: %s", entry.path, exc)
                    continue
                yield FileEntry(path=entry.path, size=size)

            for path, rel_path in reversed(subdirs):
                stack.append((path, rel_path, rules, False))


__all__ = [
    "RootNotADirectoryError",
    "RootNotFoundError",
    "ScanError",
    "Subtree",
    "Walker",
    "resolve_root",
]
