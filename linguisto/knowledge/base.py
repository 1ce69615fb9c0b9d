"""Contract for language knowledge bases consulted by the classifier."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import LanguageIdentity


class KnowledgeBaseError(RuntimeError):
    """Raised when knowledge-base data cannot be loaded."""


class KnowledgeBase(ABC):
    """Maps filenames, extensions and content samples to language identities.

    Implementations must be safe to query from several threads at once and
    return candidates in their own canonical order.
    """

    @abstractmethod
    def by_filename(self, name: str) -> List[LanguageIdentity]:
        """Return languages conventionally stored under the exact file name."""

    @abstractmethod
    def by_extension(self, extension: str) -> List[LanguageIdentity]:
        """Return languages using ``extension`` (leading dot, lowercase)."""

    @abstractmethod
    def disambiguate(self, path: str, content: str) -> List[LanguageIdentity]:
        """Rank the candidates for ``path`` using a content sample, most likely first."""


def extension_candidates(name: str) -> List[str]:
    """Return the lowercase extensions of ``name``, longest first.

    ``"index.d.ts"`` yields ``[".d.ts", ".ts"]``. Leading dots of hidden
    files do not start an extension.
    """
    parts = name.lstrip(".").lower().split(".")
    if len(parts) < 2 or not parts[-1]:
        return []
    return ["." + ".".join(parts[index:]) for index in range(1, len(parts))]


__all__ = ["KnowledgeBase", "KnowledgeBaseError", "extension_candidates"]
