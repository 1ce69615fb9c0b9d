"""Directory-level programming language statistics."""

from .models import (
    FileEntry,
    LanguageAggregate,
    LanguageCategory,
    LanguageIdentity,
    LanguageStat,
    ScanRequest,
    SortKey,
)
from .scanner import LanguageScanner, analyze_directory, analyze_directory_async
from .walker import RootNotADirectoryError, RootNotFoundError, ScanError

__version__ = "0.1.0"

__all__ = [
    "FileEntry",
    "LanguageAggregate",
    "LanguageCategory",
    "LanguageIdentity",
    "LanguageScanner",
    "LanguageStat",
    "RootNotADirectoryError",
    "RootNotFoundError",
    "ScanError",
    "ScanRequest",
    "SortKey",
    "__version__",
    "analyze_directory",
    "analyze_directory_async",
]
