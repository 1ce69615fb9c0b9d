"""Tests for linguisto.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from linguisto.config import (
    DEFAULT_MARKUP_LANGUAGES,
    DEFAULT_MAX_LANGUAGES,
    DEFAULT_READ_LIMIT,
    ConfigError,
    LinguistoConfig,
    load_config,
)
from linguisto.models import SortKey


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, LinguistoConfig)
    assert config.root == tmp_path.resolve()
    assert config.exclude_paths == []
    assert config.vendored_paths == []
    assert config.include_hidden is False
    assert config.respect_ignore_files is True
    assert config.markup_languages == list(DEFAULT_MARKUP_LANGUAGES)
    assert config.language_aliases == {}
    assert config.sort is SortKey.BYTES
    assert config.max_languages == DEFAULT_MAX_LANGUAGES
    assert config.workers is None
    assert config.read_limit == DEFAULT_READ_LIMIT
    assert config.knowledge_base == "builtin"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".linguisto.yml"
    config_file.write_text(
        """
exclude_paths:
  - "fixtures/"
  - "*.generated.ts"
vendored_paths:
  - "^extern/"
include_hidden: yes
respect_ignore_files: false
markup_languages: [HTML, CSS, SCSS]
language_aliases:
  JSX: JavaScript
sort: file-count
max_languages: 3
workers: 2
read_limit: 4096
knowledge_base: custom
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.exclude_paths == ["fixtures/", "*.generated.ts"]
    assert config.vendored_paths == ["^extern/"]
    assert config.include_hidden is True
    assert config.respect_ignore_files is False
    assert config.markup_languages == ["HTML", "CSS", "SCSS"]
    assert config.language_aliases == {"JSX": "JavaScript"}
    assert config.sort is SortKey.FILE_COUNT
    assert config.max_languages == 3
    assert config.workers == 2
    assert config.read_limit == 4096
    assert config.knowledge_base == "custom"


def test_load_config_ignores_invalid_numbers(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text(
        "max_languages: -2\nworkers: 0\nread_limit: lots\n", encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.max_languages == DEFAULT_MAX_LANGUAGES
    assert config.workers is None
    assert config.read_limit == DEFAULT_READ_LIMIT


def test_empty_markup_list_disables_markup(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text("markup_languages: []\n", encoding="utf-8")
    assert load_config(tmp_path).markup_languages == []


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).max_languages == DEFAULT_MAX_LANGUAGES


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text("sort: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert "Failed to parse" in str(excinfo.value)


def test_load_config_rejects_unknown_sort(tmp_path: Path) -> None:
    (tmp_path / ".linguisto.yml").write_text("sort: lines\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert "lines" in str(excinfo.value)
