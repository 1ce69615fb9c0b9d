"""Knowledge base backed by the YAML tables bundled with linguisto."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Sequence

import yaml
from pygments.lexer import Lexer
from pygments.lexers import find_lexer_class

from .base import KnowledgeBase, KnowledgeBaseError, extension_candidates
from ..models import LanguageCategory, LanguageIdentity

_DATA_DIR = Path(__file__).resolve().parent
LANGUAGES_FILE = _DATA_DIR / "languages.yml"
HEURISTICS_FILE = _DATA_DIR / "heuristics.yml"


@dataclass(frozen=True)
class HeuristicRule:
    """Picks ``language`` when ``pattern`` matches the sample (always when unset)."""

    language: LanguageIdentity
    pattern: Optional[Pattern[str]] = None

    def matches(self, content: str) -> bool:
        return self.pattern is None or self.pattern.search(content) is not None


class BuiltinKnowledgeBase(KnowledgeBase):
    """Read-only language tables; safe to share between worker threads."""

    def __init__(
        self,
        languages_path: Path | None = None,
        heuristics_path: Path | None = None,
    ) -> None:
        self._identities: Dict[str, LanguageIdentity] = {}
        self._lexer_names: Dict[str, str] = {}
        self._by_filename: Dict[str, List[LanguageIdentity]] = {}
        self._by_extension: Dict[str, List[LanguageIdentity]] = {}
        self._heuristics: Dict[str, List[HeuristicRule]] = {}

        self._load_languages(_load_yaml_list(languages_path or LANGUAGES_FILE))
        self._load_heuristics(_load_yaml_list(heuristics_path or HEURISTICS_FILE))

    @property
    def languages(self) -> List[LanguageIdentity]:
        return list(self._identities.values())

    def language(self, name: str) -> Optional[LanguageIdentity]:
        return self._identities.get(name.casefold())

    def by_filename(self, name: str) -> List[LanguageIdentity]:
        return list(self._by_filename.get(name, ()))

    def by_extension(self, extension: str) -> List[LanguageIdentity]:
        return list(self._by_extension.get(extension.lower(), ()))

    def disambiguate(self, path: str, content: str) -> List[LanguageIdentity]:
        name = os.path.basename(path)
        for rule in self._rules_for(name):
            if rule.matches(content):
                return [rule.language]

        candidates = self.by_filename(name)
        if not candidates:
            for extension in extension_candidates(name):
                candidates = self.by_extension(extension)
                if candidates:
                    break
        return self._rank_by_lexer(candidates, content)

    def _rules_for(self, name: str) -> Sequence[HeuristicRule]:
        rules = self._heuristics.get(name)
        if rules:
            return rules
        for extension in extension_candidates(name):
            rules = self._heuristics.get(extension)
            if rules:
                return rules
        return ()

    def _rank_by_lexer(
        self, candidates: Sequence[LanguageIdentity], content: str
    ) -> List[LanguageIdentity]:
        scored = []
        for index, identity in enumerate(candidates):
            lexer = _find_lexer(self._lexer_names.get(identity.key, identity.name))
            if lexer is None:
                continue
            score = lexer.analyse_text(content)
            if score > 0:
                scored.append((-score, index, identity))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [identity for _, _, identity in scored]

    def _load_languages(self, entries: List[Any]) -> None:
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                raise KnowledgeBaseError(f"Invalid language entry: {entry!r}")
            identity = LanguageIdentity(
                name=entry["name"],
                category=LanguageCategory.parse(entry.get("type")),
            )
            if identity.key in self._identities:
                raise KnowledgeBaseError(f"Duplicate language entry: {identity.name}")
            self._identities[identity.key] = identity

            lexer_name = entry.get("pygments")
            if isinstance(lexer_name, str):
                self._lexer_names[identity.key] = lexer_name

            for filename in _as_names(entry.get("filenames")):
                self._by_filename.setdefault(filename, []).append(identity)
            for extension in _as_names(entry.get("extensions")):
                self._by_extension.setdefault(extension.lower(), []).append(identity)

    def _load_heuristics(self, entries: List[Any]) -> None:
        for entry in entries:
            if not isinstance(entry, dict):
                raise KnowledgeBaseError(f"Invalid heuristic entry: {entry!r}")
            rules = [self._build_rule(raw) for raw in entry.get("rules") or []]
            keys = [ext.lower() for ext in _as_names(entry.get("extensions"))]
            keys.extend(_as_names(entry.get("filenames")))
            for key in keys:
                self._heuristics.setdefault(key, []).extend(rules)

    def _build_rule(self, raw: Any) -> HeuristicRule:
        if not isinstance(raw, dict) or not isinstance(raw.get("language"), str):
            raise KnowledgeBaseError(f"Invalid heuristic rule: {raw!r}")
        identity = self.language(raw["language"])
        if identity is None:
            raise KnowledgeBaseError(f"Heuristic refers to unknown language: {raw['language']}")
        pattern = raw.get("pattern")
        if pattern is None:
            return HeuristicRule(language=identity)
        try:
            compiled = re.compile(str(pattern), re.MULTILINE)
        except re.error as exc:
            raise KnowledgeBaseError(f"Invalid heuristic pattern for {identity.name}: {exc}") from exc
        return HeuristicRule(language=identity, pattern=compiled)


@lru_cache(maxsize=None)
def _find_lexer(name: str) -> Optional[type[Lexer]]:
    return find_lexer_class(name)


def _as_names(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _load_yaml_list(path: Path) -> List[Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise KnowledgeBaseError(f"Failed to load {path.name}: {exc}") from exc
    if loaded is None:
        return []
    if not isinstance(loaded, list):
        raise KnowledgeBaseError(f"{path.name} must contain a list at the root")
    return loaded


@lru_cache(maxsize=1)
def default_knowledge_base() -> BuiltinKnowledgeBase:
    """Return the shared built-in knowledge base."""
    return BuiltinKnowledgeBase()


__all__ = ["BuiltinKnowledgeBase", "HeuristicRule", "default_knowledge_base"]
