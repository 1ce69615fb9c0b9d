"""Tests for linguisto.walker."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from linguisto import walker as walker_module
from linguisto.filters import FilterPolicy, PathFilter
from linguisto.walker import (
    RootNotADirectoryError,
    RootNotFoundError,
    ScanError,
    Walker,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _relative(root: Path, entries) -> dict[str, int]:
    return {Path(entry.path).relative_to(root).as_posix(): entry.size for entry in entries}


def test_traverse_emits_each_regular_file_once_with_size(tmp_path: Path) -> None:
    _write(tmp_path / "main.py", "print('hi')\n")
    _write(tmp_path / "src" / "lib.rs", "fn main() {}\n")
    _write(tmp_path / "src" / "deep" / "util.go", "package util\n")

    entries = list(Walker().traverse(tmp_path))
    found = _relative(tmp_path.resolve(), entries)

    assert found == {
        "main.py": 12,
        "src/lib.rs": 13,
        "src/deep/util.go": 13,
    }
    assert len(entries) == len(found)
    assert all(os.path.isabs(entry.path) for entry in entries)


def test_traverse_skips_hidden_ignored_and_vendored_entries(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "build/\n*.log\n")
    _write(tmp_path / "src" / "app.ts", "export {}\n")
    _write(tmp_path / "build" / "out.js", "bundle\n")
    _write(tmp_path / "debug.log", "noise\n")
    _write(tmp_path / ".hidden" / "secret.py", "x = 1\n")
    _write(tmp_path / "node_modules" / "lib" / "index.js", "module.exports = {}\n")
    _write(tmp_path / "static" / "app.min.js", "!function(){}\n")

    found = _relative(tmp_path.resolve(), Walker().traverse(tmp_path))

    assert set(found) == {"src/app.ts"}


def test_ignored_directories_are_never_listed(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / ".gitignore", "generated/\n")
    _write(tmp_path / "generated" / "nested" / "big.py", "x = 1\n")
    _write(tmp_path / "src" / "main.py", "x = 2\n")

    listed: list[str] = []
    real_scandir = os.scandir

    def _spy(path):
        listed.append(Path(path).name)
        return real_scandir(path)

    monkeypatch.setattr(walker_module.os, "scandir", _spy)

    list(Walker().traverse(tmp_path))

    assert "src" in listed
    assert "generated" not in listed
    assert "nested" not in listed


def test_nested_ignore_files_apply_to_their_subtree(tmp_path: Path) -> None:
    _write(tmp_path / "a" / ".gitignore", "*.py\n")
    _write(tmp_path / "a" / "skip.py", "x = 1\n")
    _write(tmp_path / "b" / "keep.py", "x = 1\n")

    found = _relative(tmp_path.resolve(), Walker().traverse(tmp_path))

    assert set(found) == {"b/keep.py"}


def test_hidden_files_can_be_included(tmp_path: Path) -> None:
    _write(tmp_path / ".config" / "setup.py", "x = 1\n")
    _write(tmp_path / ".git" / "hooks" / "pre-commit.py", "x = 1\n")

    walker = Walker(PathFilter(FilterPolicy(include_hidden=True)))
    found = _relative(tmp_path.resolve(), walker.traverse(tmp_path))

    assert set(found) == {".config/setup.py"}


def test_missing_root_fails_before_iteration(tmp_path: Path) -> None:
    missing = tmp_path / "does" / "not" / "exist"

    with pytest.raises(RootNotFoundError) as excinfo:
        Walker().traverse(missing)

    assert isinstance(excinfo.value, FileNotFoundError)
    assert isinstance(excinfo.value, ScanError)
    assert str(missing) in str(excinfo.value)


def test_file_root_is_rejected(tmp_path: Path) -> None:
    target = tmp_path / "file.py"
    _write(target, "x = 1\n")

    with pytest.raises(RootNotADirectoryError) as excinfo:
        Walker().traverse(target)

    assert isinstance(excinfo.value, NotADirectoryError)


def test_symlinks_are_not_followed(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "main.py", "x = 1\n")
    try:
        os.symlink(tmp_path, tmp_path / "src" / "loop", target_is_directory=True)
        os.symlink(tmp_path / "src" / "main.py", tmp_path / "alias.py")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported on this platform")

    found = _relative(tmp_path.resolve(), Walker().traverse(tmp_path))

    assert set(found) == {"src/main.py"}


def test_unreadable_directory_is_skipped(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "locked" / "hidden.py", "x = 1\n")
    _write(tmp_path / "open" / "visible.py", "x = 1\n")

    real_scandir = os.scandir

    def _deny(path):
        if Path(path).name == "locked":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(walker_module.os, "scandir", _deny)

    found = _relative(tmp_path.resolve(), Walker().traverse(tmp_path))

    assert set(found) == {"open/visible.py"}


def test_traversal_supports_early_termination(tmp_path: Path) -> None:
    for index in range(5):
        _write(tmp_path / f"pkg{index}" / "mod.py", "x = 1\n")

    stream = Walker().traverse(tmp_path)
    first = next(stream)
    stream.close()

    assert first.path.endswith("mod.py")


def test_partitions_are_disjoint_and_cover_the_tree(tmp_path: Path) -> None:
    _write(tmp_path / "root.py", "x = 1\n")
    _write(tmp_path / "a" / "one.py", "x = 1\n")
    _write(tmp_path / "b" / "c" / "two.py", "x = 1\n")
    _write(tmp_path / "node_modules" / "dep.js", "x\n")

    walker = Walker()
    subtrees = walker.partitions(tmp_path)

    assert [subtree.rel_path for subtree in subtrees] == ["", "a", "b"]
    assert subtrees[0].recursive is False

    per_partition = [_relative(tmp_path.resolve(), walker.walk(subtree)) for subtree in subtrees]
    assert per_partition[0] == {"root.py": 6}
    assert set(per_partition[1]) == {"a/one.py"}
    assert set(per_partition[2]) == {"b/c/two.py"}
