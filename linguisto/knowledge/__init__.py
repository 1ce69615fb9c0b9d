"""Language knowledge bases and plugin discovery."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable

from .base import KnowledgeBase, KnowledgeBaseError, extension_candidates
from .builtin import BuiltinKnowledgeBase, default_knowledge_base

_ENTRY_POINT_GROUP = "linguisto.knowledge_bases"

_BUILTIN_FACTORIES: Dict[str, Callable[[], KnowledgeBase]] = {
    "builtin": default_knowledge_base,
}


def load_knowledge_base(name: str = "builtin") -> KnowledgeBase:
    """Return the knowledge base registered under ``name``.

    Built-in names win over entry points registered in the
    ``linguisto.knowledge_bases`` group.
    """
    key = name.strip().lower()
    factory = _BUILTIN_FACTORIES.get(key)
    if factory is not None:
        return factory()

    for entry in _iter_entry_points():
        if entry.name.lower() != key:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise KnowledgeBaseError(
                f"Failed to load knowledge base entry point '{entry.name}': {exc}"
            ) from exc
        return _coerce_knowledge_base(loaded)

    raise KnowledgeBaseError(f"Unknown knowledge base: {name}")


def _coerce_knowledge_base(obj: object) -> KnowledgeBase:
    if isinstance(obj, KnowledgeBase):
        return obj
    if isinstance(obj, type) and issubclass(obj, KnowledgeBase):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, KnowledgeBase):
            return instance
    raise KnowledgeBaseError(
        "Knowledge base entry point must be a KnowledgeBase subclass, instance or factory"
    )


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BuiltinKnowledgeBase",
    "KnowledgeBase",
    "KnowledgeBaseError",
    "default_knowledge_base",
    "extension_candidates",
    "load_knowledge_base",
]
