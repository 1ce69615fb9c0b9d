"""Core data models shared across linguisto components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class LanguageCategory(str, Enum):
    """Classification axis used to decide whether a language counts as code."""

    PROGRAMMING = "programming"
    MARKUP = "markup"
    DATA = "data"
    PROSE = "prose"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "LanguageCategory":
        if value is None:
            return cls.OTHER
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class SortKey(str, Enum):
    """Metric used both as the ratio denominator and the sort order."""

    BYTES = "bytes"
    FILE_COUNT = "file_count"

    @classmethod
    def parse(cls, value: "SortKey | str") -> "SortKey":
        if isinstance(value, SortKey):
            return value
        compact = str(value).strip().lower().replace("-", "").replace("_", "")
        resolved = _SORT_ALIASES.get(compact)
        if resolved is None:
            raise ValueError(f"Unknown sort metric: {value!r}")
        return cls(resolved)


_SORT_ALIASES = {
    "bytes": "bytes",
    "bybytes": "bytes",
    "filecount": "file_count",
    "byfilecount": "file_count",
    "count": "file_count",
}


@dataclass(frozen=True)
class FileEntry:
    """A regular file discovered during traversal."""

    path: str
    size: int


@dataclass(frozen=True)
class LanguageIdentity:
    """Result of classifying a single file."""

    name: str
    category: LanguageCategory

    @property
    def key(self) -> str:
        return self.name.casefold()


@dataclass
class LanguageAggregate:
    """Running file count and byte total for one language during a scan."""

    language: str
    file_count: int = 0
    byte_total: int = 0

    def add(self, size: int) -> None:
        self.file_count += 1
        self.byte_total += size

    def merge(self, other: "LanguageAggregate") -> None:
        self.file_count += other.file_count
        self.byte_total += other.byte_total
        if other.language < self.language:
            self.language = other.language

    def copy(self) -> "LanguageAggregate":
        return LanguageAggregate(self.language, self.file_count, self.byte_total)


@dataclass(frozen=True)
class LanguageStat:
    """One row of the final report."""

    language: str
    file_count: int
    byte_total: int
    ratio: float

    def metric(self, sort_key: SortKey) -> int:
        if sort_key is SortKey.FILE_COUNT:
            return self.file_count
        return self.byte_total

    def to_dict(self) -> Dict[str, Any]:
        """Return the response shape consumed by the presentation layer."""
        return {
            "language": self.language,
            "fileCount": self.file_count,
            "byteTotal": self.byte_total,
            "ratio": self.ratio,
        }


@dataclass(frozen=True)
class ScanRequest:
    """Inputs of a single scan as received from the presentation layer."""

    root: str
    sort_key: SortKey = SortKey.BYTES
    keep_top: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort_key", SortKey.parse(self.sort_key))
        if self.keep_top < 0:
            raise ValueError("keep_top must be a non-negative integer")


__all__ = [
    "FileEntry",
    "LanguageAggregate",
    "LanguageCategory",
    "LanguageIdentity",
    "LanguageStat",
    "ScanRequest",
    "SortKey",
]
