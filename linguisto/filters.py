"""Eligibility rules deciding which filesystem entries a scan considers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from pathspec import GitIgnoreSpec

from .logging import get_logger

_IGNORE_FILENAMES = (".gitignore", ".ignore")

# Version-control metadata is pruned even when hidden entries are included.
_ALWAYS_PRUNED = {".git", ".hg", ".svn"}

_VENDORED_PATTERNS: tuple[str, ...] = (
    r"(^|/)node_modules/",
    r"(^|/)vendors?/",
    r"(^|/)bower_components/",
    r"(^|/)third[-_]?party/",
    r"(^|/)3rd[-_]?party/",
    r"(^|/)deps/",
    r"(^|/)Godeps/_workspace/",
    r"(^|/)Pods/",
    r"(^|/)Carthage/Build/",
    r"(^|/)dist/",
    r"(^|/)externals?/",
    r"(^|/)site-packages/",
    r"(^|/)\.?venv/",
    r"(^|/)virtualenv/",
    r"\.min\.(js|css)$",
    r"-vsdoc\.js$",
    r"(^|/)jquery([^.]*)\.js$",
    r"(^|/)gradlew(\.bat)?$",
    r"(^|/)gradle/wrapper/",
    r"(^|/)mvnw(\.cmd)?$",
    r"(^|/)\.mvn/wrapper/",
)

logger = get_logger("filters")


@dataclass(frozen=True)
class FilterPolicy:
    """Immutable eligibility settings shared by every traversal worker."""

    include_hidden: bool = False
    respect_ignore_files: bool = True
    exclude_patterns: Tuple[str, ...] = ()
    vendored_patterns: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config) -> "FilterPolicy":
        return cls(
            include_hidden=config.include_hidden,
            respect_ignore_files=config.respect_ignore_files,
            exclude_patterns=tuple(config.exclude_paths),
            vendored_patterns=tuple(config.vendored_paths),
        )


@dataclass(frozen=True)
class IgnoreFrame:
    """Patterns from one ignore file, scoped to the directory holding it."""

    base: str
    spec: GitIgnoreSpec
    probe: GitIgnoreSpec

    @classmethod
    def from_lines(cls, base: str, lines: Sequence[str]) -> "IgnoreFrame":
        # The probe drops negation so it reports whether any rule matched at all.
        positive = [line[1:] if line.startswith("!") else line for line in lines]
        return cls(
            base=base,
            spec=GitIgnoreSpec.from_lines(lines),
            probe=GitIgnoreSpec.from_lines(positive),
        )

    def verdict(self, rel_path: str, is_dir: bool) -> Optional[bool]:
        """Return True/False when a rule decides the path, None when none applies."""
        if self.base:
            prefix = f"{self.base}/"
            if not rel_path.startswith(prefix):
                return None
            rel_path = rel_path[len(prefix):]
        candidate = f"{rel_path}/" if is_dir else rel_path
        if not self.probe.match_file(candidate):
            return None
        return self.spec.match_file(candidate)


class IgnoreRules:
    """Hierarchical ignore-file evaluator; deeper files override shallower ones."""

    def __init__(self, frames: Sequence[IgnoreFrame] = (), *, enabled: bool = True) -> None:
        self._frames: Tuple[IgnoreFrame, ...] = tuple(frames)
        self.enabled = enabled

    @classmethod
    def disabled(cls) -> "IgnoreRules":
        return cls(enabled=False)

    @classmethod
    def for_root(cls, root: Path) -> "IgnoreRules":
        """Load repository-wide excludes plus the root directory's ignore files."""
        frames: List[IgnoreFrame] = []
        info_exclude = _read_ignore_file(root / ".git" / "info" / "exclude")
        if info_exclude:
            frames.append(IgnoreFrame.from_lines("", info_exclude))
        frames.extend(_load_frames(root, ""))
        return cls(frames)

    def descend(self, directory: Path, rel_dir: str) -> "IgnoreRules":
        """Return the rules in effect inside ``directory``."""
        if not self.enabled:
            return self
        added = _load_frames(directory, rel_dir)
        if not added:
            return self
        return IgnoreRules(self._frames + tuple(added))

    def is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for frame in self._frames:
            verdict = frame.verdict(rel_path, is_dir)
            if verdict is not None:
                ignored = verdict
        return ignored


def _load_frames(directory: Path, rel_dir: str) -> List[IgnoreFrame]:
    frames: List[IgnoreFrame] = []
    for filename in _IGNORE_FILENAMES:
        lines = _read_ignore_file(directory / filename)
        if lines:
            frames.append(IgnoreFrame.from_lines(rel_dir, lines))
    return frames


def _read_ignore_file(path: Path) -> List[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable ignore file %s: %s", path, exc)
        return []
    return [line for line in text.splitlines() if line.strip()]


def compile_vendored_patterns(extra: Iterable[str] = ()) -> Tuple[Pattern[str], ...]:
    """Compile the built-in vendored-path expressions plus ``extra`` ones."""
    return tuple(re.compile(pattern) for pattern in (*_VENDORED_PATTERNS, *extra))


_DEFAULT_VENDORED = compile_vendored_patterns()


def is_vendored(
    rel_path: str,
    is_dir: bool = False,
    patterns: Sequence[Pattern[str]] | None = None,
) -> bool:
    """Return True when ``rel_path`` looks like third-party dependency code."""
    candidate = f"{rel_path}/" if is_dir else rel_path
    active = _DEFAULT_VENDORED if patterns is None else patterns
    return any(pattern.search(candidate) for pattern in active)


def is_hidden(name: str) -> bool:
    return name.startswith(".")


class PathFilter:
    """Pure predicate deciding whether an entry takes part in a scan."""

    def __init__(self, policy: FilterPolicy | None = None) -> None:
        self.policy = policy or FilterPolicy()
        self._vendored = compile_vendored_patterns(self.policy.vendored_patterns)
        self._excludes = (
            GitIgnoreSpec.from_lines(self.policy.exclude_patterns)
            if self.policy.exclude_patterns
            else None
        )

    def root_rules(self, root: Path) -> IgnoreRules:
        """Return the ignore rules that apply at the top of ``root``."""
        if not self.policy.respect_ignore_files:
            return IgnoreRules.disabled()
        return IgnoreRules.for_root(root)

    def include(
        self,
        rel_path: str,
        is_dir: bool,
        is_hidden_entry: bool | None = None,
        *,
        rules: IgnoreRules | None = None,
    ) -> bool:
        """Return True when the root-relative POSIX path should be considered."""
        name = rel_path.rsplit("/", 1)[-1]
        if is_dir and name in _ALWAYS_PRUNED:
            return False

        hidden = is_hidden(name) if is_hidden_entry is None else is_hidden_entry
        if hidden and not self.policy.include_hidden:
            return False

        if self._excludes is not None:
            candidate = f"{rel_path}/" if is_dir else rel_path
            if self._excludes.match_file(candidate):
                return False

        if rules is not None and rules.is_ignored(rel_path, is_dir):
            return False

        return not is_vendored(rel_path, is_dir, self._vendored)


__all__ = [
    "FilterPolicy",
    "IgnoreFrame",
    "IgnoreRules",
    "PathFilter",
    "compile_vendored_patterns",
    "is_hidden",
    "is_vendored",
]
