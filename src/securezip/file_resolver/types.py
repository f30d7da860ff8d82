"""Types shared by the file selection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

IGNORE_FILENAME = ".securezipignore"


@dataclass(frozen=True)
class IgnorePattern:
    """
    One normalized line of an ignore file.

    `pattern` is non-empty, uses `/` separators, has no leading `/`, and a
    directory rule such as `dist/` has already been rewritten to `dist/**`.
    `negated` marks a `!pattern` re-include rule.
    """

    pattern: str
    negated: bool = False


@dataclass
class SecureZipIgnore:
    """Parsed `.securezipignore`: exclude and re-include patterns in file order."""

    excludes: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    exists: bool = False

    def snapshot(self) -> list[str]:
        """Flatten into `excludes` followed by `!`-prefixed `includes`."""
        return [*self.excludes, *(f"!{p}" for p in self.includes)]


SkipReason = Literal["duplicate", "invalid"]


@dataclass(frozen=True)
class SkippedPattern:
    pattern: str
    reason: SkipReason


@dataclass
class AddPatternsResult:
    """Outcome of appending patterns: raw text that was written and what was skipped."""

    added: list[str] = field(default_factory=list)
    skipped: list[SkippedPattern] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.added) and bool(self.skipped)


@dataclass
class ResolverConfig:
    """
    Settings supplied by the host configuration layer.

    `additional_excludes` are extra glob excludes from outside the ignore file.
    They apply to the main pass only; `!` patterns in the ignore file still win
    over them (see `resolver.resolve_files`).
    """

    additional_excludes: list[str] = field(default_factory=list)
    include_node_modules: bool = False
    ignore_filename: str = IGNORE_FILENAME


@dataclass
class ResolvedFileSet:
    """Absolute file paths selected for archiving, plus audit information."""

    root: Path
    files: list[Path]
    git_override: bool = False
    ignore_snapshot: list[str] = field(default_factory=list)

    def relative_paths(self) -> list[str]:
        """POSIX paths relative to `root`, in the same order as `files`."""
        return [p.relative_to(self.root).as_posix() for p in self.files]
