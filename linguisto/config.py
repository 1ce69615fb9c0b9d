"""Configuration loading for linguisto (.linguisto.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import SortKey

CONFIG_FILENAME = ".linguisto.yml"

DEFAULT_MAX_LANGUAGES = 6
DEFAULT_READ_LIMIT = 32 * 1024
DEFAULT_MARKUP_LANGUAGES = ("HTML", "CSS")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LinguistoConfig:
    """Represents the settings defined in .linguisto.yml."""

    root: Path
    exclude_paths: List[str] = field(default_factory=list)
    vendored_paths: List[str] = field(default_factory=list)
    include_hidden: bool = False
    respect_ignore_files: bool = True
    markup_languages: List[str] = field(default_factory=lambda: list(DEFAULT_MARKUP_LANGUAGES))
    language_aliases: Dict[str, str] = field(default_factory=dict)
    sort: SortKey = SortKey.BYTES
    max_languages: int = DEFAULT_MAX_LANGUAGES
    workers: Optional[int] = None
    read_limit: int = DEFAULT_READ_LIMIT
    knowledge_base: str = "builtin"


def load_config(config_path: Path) -> LinguistoConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.is_file():
        return LinguistoConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = LinguistoConfig(root=root)
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.vendored_paths = _as_str_list(data.get("vendored_paths"))

    include_hidden = _as_bool(data.get("include_hidden"))
    if include_hidden is not None:
        config.include_hidden = include_hidden

    respect_ignore = _as_bool(data.get("respect_ignore_files"))
    if respect_ignore is not None:
        config.respect_ignore_files = respect_ignore

    if "markup_languages" in data:
        config.markup_languages = _as_str_list(data.get("markup_languages"))

    config.language_aliases = _as_str_mapping(data.get("language_aliases"))

    sort_value = _as_str(data.get("sort"))
    if sort_value:
        try:
            config.sort = SortKey.parse(sort_value)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    max_languages = _as_int(data.get("max_languages"))
    if max_languages is not None and max_languages >= 0:
        config.max_languages = max_languages

    workers = _as_int(data.get("workers"))
    if workers is not None and workers > 0:
        config.workers = workers

    read_limit = _as_int(data.get("read_limit"))
    if read_limit is not None and read_limit > 0:
        config.read_limit = read_limit

    knowledge_base = _as_str(data.get("knowledge_base"))
    if knowledge_base:
        config.knowledge_base = knowledge_base

    return config


def default_workers() -> int:
    """Return the worker count used when none is configured."""
    return os.cpu_count() or 1


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_str_mapping(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, str] = {}
    for key, target in value.items():
        key_str = _as_str(key)
        target_str = _as_str(target)
        if key_str and target_str:
            result[key_str] = target_str
    return result


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_MARKUP_LANGUAGES",
    "DEFAULT_MAX_LANGUAGES",
    "DEFAULT_READ_LIMIT",
    "LinguistoConfig",
    "default_workers",
    "load_config",
]
