"""Adapter turning knowledge-base lookups into a single classification per file."""

from __future__ import annotations

import codecs
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_MARKUP_LANGUAGES, DEFAULT_READ_LIMIT
from .knowledge import KnowledgeBase, default_knowledge_base, extension_candidates
from .logging import get_logger
from .models import LanguageCategory, LanguageIdentity

# Dialects reported under their host language.
DEFAULT_LANGUAGE_ALIASES: Dict[str, str] = {
    "TSX": "TypeScript",
}

logger = get_logger("classifier")


def _alias_table(aliases: Mapping[str, str]) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted((dialect.casefold(), host) for dialect, host in aliases.items()))


@dataclass(frozen=True)
class ClassificationPolicy:
    """Immutable rules deciding how classified files are named and which count."""

    markup_allowlist: FrozenSet[str] = field(
        default_factory=lambda: frozenset(name.casefold() for name in DEFAULT_MARKUP_LANGUAGES)
    )
    aliases: Tuple[Tuple[str, str], ...] = field(
        default_factory=lambda: _alias_table(DEFAULT_LANGUAGE_ALIASES)
    )
    read_limit: int = DEFAULT_READ_LIMIT

    @classmethod
    def build(
        cls,
        *,
        markup_languages: Iterable[str] = DEFAULT_MARKUP_LANGUAGES,
        language_aliases: Mapping[str, str] | None = None,
        read_limit: int = DEFAULT_READ_LIMIT,
    ) -> "ClassificationPolicy":
        """Create a policy; ``language_aliases`` extend the built-in folding table."""
        aliases = dict(DEFAULT_LANGUAGE_ALIASES)
        aliases.update(language_aliases or {})
        return cls(
            markup_allowlist=frozenset(name.casefold() for name in markup_languages),
            aliases=_alias_table(aliases),
            read_limit=read_limit,
        )

    @classmethod
    def from_config(cls, config) -> "ClassificationPolicy":
        return cls.build(
            markup_languages=config.markup_languages,
            language_aliases=config.language_aliases,
            read_limit=config.read_limit,
        )

    def canonical_name(self, name: str) -> str:
        """Return the host-language name for folded dialects, else ``name``."""
        lookup = name.casefold()
        for dialect, host in self.aliases:
            if dialect == lookup:
                return host
        return name

    def includes(self, identity: LanguageIdentity) -> bool:
        """Return True when files of ``identity`` count towards the report."""
        if identity.category is LanguageCategory.PROGRAMMING:
            return True
        if identity.category is LanguageCategory.MARKUP:
            return identity.key in self.markup_allowlist
        return False


class LookupStrategy(ABC):
    """One step of the filename-then-extension candidate search."""

    @abstractmethod
    def candidates(self, path: str, knowledge_base: KnowledgeBase) -> List[LanguageIdentity]:
        """Return candidate languages for ``path`` in canonical order."""


class FilenameStrategy(LookupStrategy):
    def candidates(self, path: str, knowledge_base: KnowledgeBase) -> List[LanguageIdentity]:
        return knowledge_base.by_filename(os.path.basename(path))


class ExtensionStrategy(LookupStrategy):
    def candidates(self, path: str, knowledge_base: KnowledgeBase) -> List[LanguageIdentity]:
        for extension in extension_candidates(os.path.basename(path)):
            found = knowledge_base.by_extension(extension)
            if found:
                return found
        return []


DEFAULT_STRATEGIES: Tuple[LookupStrategy, ...] = (FilenameStrategy(), ExtensionStrategy())


def read_sample(path: str, limit: int = DEFAULT_READ_LIMIT) -> Optional[str]:
    """Return up to ``limit`` bytes of ``path`` decoded as UTF-8, or None."""
    try:
        with open(path, "rb") as handle:
            data = handle.read(limit)
    except OSError as exc:
        logger.debug("Cannot sample %s: %s", path, exc)
        return None

    # A sample cut at the limit may end inside a multi-byte sequence.
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        return decoder.decode(data, final=len(data) < limit)
    except UnicodeDecodeError:
        logger.debug("Sample of %s is not valid UTF-8", path)
        return None


class Classifier:
    """Maps a file path to the language it is reported under."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase | None = None,
        policy: ClassificationPolicy | None = None,
        strategies: Sequence[LookupStrategy] | None = None,
    ) -> None:
        self.knowledge_base = knowledge_base or default_knowledge_base()
        self.policy = policy or ClassificationPolicy()
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def classify(self, path: str) -> Optional[LanguageIdentity]:
        """Return the reportable language of ``path`` or None when it does not count."""
        identity = self.identify(path)
        if identity is None or not self.policy.includes(identity):
            return None
        return identity

    def identify(self, path: str) -> Optional[LanguageIdentity]:
        """Return the canonical language of ``path`` regardless of category."""
        for strategy in self.strategies:
            candidates = strategy.candidates(path, self.knowledge_base)
            if candidates:
                chosen = self._resolve(path, candidates)
                return self._normalise(chosen)
        return None

    def _resolve(self, path: str, candidates: Sequence[LanguageIdentity]) -> LanguageIdentity:
        if len(candidates) == 1:
            return candidates[0]
        sample = read_sample(path, self.policy.read_limit)
        if sample is None:
            return candidates[0]
        ranked = self.knowledge_base.disambiguate(path, sample)
        return ranked[0] if ranked else candidates[0]

    def _normalise(self, identity: LanguageIdentity) -> LanguageIdentity:
        name = self.policy.canonical_name(identity.name)
        if name == identity.name:
            return identity
        return LanguageIdentity(name=name, category=identity.category)


__all__ = [
    "ClassificationPolicy",
    "Classifier",
    "DEFAULT_LANGUAGE_ALIASES",
    "DEFAULT_STRATEGIES",
    "ExtensionStrategy",
    "FilenameStrategy",
    "LookupStrategy",
    "read_sample",
]
