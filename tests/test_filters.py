"""Tests for linguisto.filters."""

from __future__ import annotations

from pathlib import Path

from linguisto.filters import (
    FilterPolicy,
    IgnoreFrame,
    IgnoreRules,
    PathFilter,
    compile_vendored_patterns,
    is_vendored,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_hidden_entries_are_rejected_unless_enabled() -> None:
    default_filter = PathFilter()
    assert not default_filter.include(".env", False)
    assert not default_filter.include("src/.cache", True)
    assert default_filter.include("src/app.py", False)

    permissive = PathFilter(FilterPolicy(include_hidden=True))
    assert permissive.include(".eslintrc.js", False)


def test_explicit_hidden_flag_overrides_name_convention() -> None:
    path_filter = PathFilter()
    assert not path_filter.include("Thumbs.db", False, True)
    assert path_filter.include(".profile", False, False)


def test_version_control_directories_are_always_pruned() -> None:
    permissive = PathFilter(FilterPolicy(include_hidden=True))
    assert not permissive.include(".git", True)
    assert not permissive.include("sub/.hg", True)
    assert permissive.include(".github", True)


def test_vendored_paths_are_detected() -> None:
    assert is_vendored("node_modules", is_dir=True)
    assert is_vendored("web/vendor", is_dir=True)
    assert is_vendored("third_party/zlib/inflate.c")
    assert is_vendored("static/app.min.js")
    assert is_vendored("gradlew")
    assert not is_vendored("src/vendor.py")
    assert not is_vendored("src/distance.py")


def test_extra_vendored_patterns_extend_builtin_list() -> None:
    patterns = compile_vendored_patterns([r"(^|/)generated/"])
    assert is_vendored("api/generated", is_dir=True, patterns=patterns)
    assert is_vendored("node_modules", is_dir=True, patterns=patterns)

    path_filter = PathFilter(FilterPolicy(vendored_patterns=(r"_pb2\.py$",)))
    assert not path_filter.include("proto/service_pb2.py", False)
    assert path_filter.include("proto/service.py", False)


def test_config_excludes_use_gitignore_patterns() -> None:
    path_filter = PathFilter(FilterPolicy(exclude_patterns=("data/", "*.generated.ts")))
    assert not path_filter.include("data", True)
    assert not path_filter.include("src/api.generated.ts", False)
    assert path_filter.include("src/data.ts", False)


def test_ignore_frame_reports_no_verdict_outside_its_directory() -> None:
    frame = IgnoreFrame.from_lines("pkg", ["*.log", "!keep.log"])
    assert frame.verdict("other/debug.log", False) is None
    assert frame.verdict("pkg/debug.log", False) is True
    assert frame.verdict("pkg/keep.log", False) is False
    assert frame.verdict("pkg/main.py", False) is None


def test_ignore_rules_directory_only_patterns() -> None:
    rules = IgnoreRules([IgnoreFrame.from_lines("", ["build/"])])
    assert rules.is_ignored("build", True)
    assert rules.is_ignored("src/build", True)
    assert not rules.is_ignored("build", False)


def test_nested_ignore_file_can_reinclude(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.gen\n")
    _write(tmp_path / "sub" / ".gitignore", "!special.gen\n")

    root_rules = IgnoreRules.for_root(tmp_path)
    sub_rules = root_rules.descend(tmp_path / "sub", "sub")

    assert root_rules.is_ignored("top.gen", False)
    assert sub_rules.is_ignored("sub/other.gen", False)
    assert not sub_rules.is_ignored("sub/special.gen", False)


def test_git_info_exclude_is_loaded(tmp_path: Path) -> None:
    _write(tmp_path / ".git" / "info" / "exclude", "scratch/\n")
    rules = IgnoreRules.for_root(tmp_path)
    assert rules.is_ignored("scratch", True)


def test_descend_without_ignore_files_reuses_rules(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    rules = IgnoreRules.for_root(tmp_path)
    assert rules.descend(tmp_path / "src", "src") is rules


def test_disabled_rules_ignore_ignore_files(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.py\n")
    path_filter = PathFilter(FilterPolicy(respect_ignore_files=False))

    rules = path_filter.root_rules(tmp_path)

    assert not rules.enabled
    assert path_filter.include("main.py", False, rules=rules)
    assert rules.descend(tmp_path, "") is rules


def test_include_consults_ignore_rules(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "out/\n*.log\n")
    path_filter = PathFilter()
    rules = path_filter.root_rules(tmp_path)

    assert not path_filter.include("out", True, rules=rules)
    assert not path_filter.include("debug.log", False, rules=rules)
    assert path_filter.include("src", True, rules=rules)
