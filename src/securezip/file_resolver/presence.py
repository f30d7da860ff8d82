"""
Presence probing and display ordering for auto-exclude patterns.

Used only for previews: nothing here affects which files are archived.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import Literal

from securezip.file_resolver.defaults import resolve_auto_exclude_patterns
from securezip.file_resolver.ignore_file import load_securezip_ignore
from securezip.file_resolver.matcher import iter_matches
from securezip.file_resolver.patterns import DIRECTORY_SUFFIX, normalize_ignore_pattern
from securezip.file_resolver.types import IGNORE_FILENAME

logger = logging.getLogger(__name__)

SAMPLE_LIMIT = 3

_GLOB_CHARS = re.compile(r"[\\*?\[\]{]")

DisplayState = Literal["reincluded", "active", "inactive"]


@dataclass(frozen=True)
class PatternPresence:
    exists: bool = False
    examples: list[str] = field(default_factory=list)
    has_more: bool = False


@dataclass(frozen=True)
class AutoExcludePatternInfo:
    pattern: str
    reincluded: bool = False
    presence: PatternPresence = field(default_factory=PatternPresence)


@dataclass(frozen=True)
class AutoExcludeDisplayInfo(AutoExcludePatternInfo):
    display_state: DisplayState = "inactive"


def _display_state(info: AutoExcludePatternInfo) -> DisplayState:
    if info.reincluded:
        return "reincluded"
    return "active" if info.presence.exists else "inactive"


def _rank(info: AutoExcludePatternInfo) -> int:
    if info.presence.exists:
        return 0 if info.reincluded else 1
    return 2 if info.reincluded else 3


def classify_auto_exclude_patterns(
    infos: Iterable[AutoExcludePatternInfo],
) -> list[AutoExcludeDisplayInfo]:
    """
    Assign a display state to each pattern and order them: present re-included
    entries first, then present ones, then absent re-included, then absent.
    Entries with equal rank keep their input order.
    """
    ranked = sorted(infos, key=_rank)  # sorted() is stable
    return [
        AutoExcludeDisplayInfo(
            pattern=info.pattern,
            reincluded=info.reincluded,
            presence=info.presence,
            display_state=_display_state(info),
        )
        for info in ranked
    ]


def _has_glob(pattern: str) -> bool:
    return _GLOB_CHARS.search(pattern) is not None


def probe_pattern_presence(
    root: Path,
    pattern: str,
    *,
    sample_limit: int = SAMPLE_LIMIT,
    only_files: bool | None = None,
) -> PatternPresence:
    """
    Check whether `pattern` currently matches anything under `root`.

    Literal paths (and `dir/**` with a literal `dir`) are checked with a stat
    and reported as one example, directories with a trailing `/`. Globs are
    matched lazily, stopping after `sample_limit + 1` hits. `.gitignore` is not
    consulted, since auto-excludes apply regardless of it.
    """
    relative = pattern[1:] if pattern.startswith("/") else pattern
    stat_target = (
        relative[: -len(DIRECTORY_SUFFIX)] if relative.endswith(DIRECTORY_SUFFIX) else relative
    ).rstrip("/")

    if stat_target and not _has_glob(stat_target):
        target = root / stat_target
        if target.is_dir() and not target.is_symlink():
            return PatternPresence(exists=True, examples=[f"{stat_target}/"])
        if target.exists() or target.is_symlink():
            return PatternPresence(exists=True, examples=[stat_target])
        return PatternPresence()
    if not relative:
        return PatternPresence()

    matches = iter_matches(
        root,
        [relative],
        respect_gitignore=False,
        only_files=bool(only_files),
        absolute=False,
    )
    try:
        found = [p.as_posix() for p in islice(matches, sample_limit + 1)]
    except OSError as e:
        logger.debug("Presence probe for %r failed: %s", pattern, e)
        return PatternPresence()
    return PatternPresence(
        exists=bool(found),
        examples=found[:sample_limit],
        has_more=len(found) > sample_limit,
    )


def is_auto_exclude_pattern_reincluded(pattern: str, includes: Iterable[str]) -> bool:
    """
    Decide whether an auto-exclude pattern should be shown as re-included.

    This is a display heuristic: it relates the auto-exclude pattern to any
    re-include entry that names the same path, a path inside it, or a file of
    the same kind (`.env` variants, certificate extensions).
    """
    include_set = {p for p in includes if p}
    if not include_set:
        return False

    candidate_keys = {pattern}
    if pattern.endswith(DIRECTORY_SUFFIX):
        candidate_keys.add(pattern[: -len(DIRECTORY_SUFFIX)])
    elif "*" not in pattern:
        candidate_keys.add(pattern + DIRECTORY_SUFFIX)
    if pattern.startswith("**/"):
        candidate_keys.add(pattern[3:])
    if candidate_keys & include_set:
        return True

    auto_extension = pattern[4:] if pattern.startswith("**/*.") else None

    for include in include_set:
        if pattern.endswith(DIRECTORY_SUFFIX):
            base = pattern[: -len(DIRECTORY_SUFFIX)]
            if include == base or include.startswith(f"{base}/") or include.startswith(f"{base}."):
                return True

        if "*" not in pattern:
            if include.startswith(f"{pattern}/") or include.startswith(f"{pattern}."):
                return True

        if include.endswith(DIRECTORY_SUFFIX):
            include_base = include[: -len(DIRECTORY_SUFFIX)]
            if include_base and (
                pattern == include_base
                or pattern.startswith(f"{include_base}/")
                or pattern.startswith(f"{include_base}.")
            ):
                return True

        if pattern in (".env", "**/.env"):
            if include in (".env", "**/.env") or include.endswith("/.env") or include.startswith(".env"):
                return True

        if pattern in (".env.*", "**/.env.*"):
            if (
                include in (".env", ".env.*", "**/.env.*")
                or include.startswith(".env.")
                or "/.env." in include
            ):
                return True

        if auto_extension and (include == f"**/*{auto_extension}" or include.endswith(auto_extension)):
            return True

    return False


def _probe_auto_exclude(root: Path, pattern: str) -> PatternPresence:
    if pattern in (".git", ".git/**"):
        return probe_pattern_presence(root, ".git")
    if pattern in (".vscode", ".vscode/**"):
        return probe_pattern_presence(root, ".vscode")
    if pattern.startswith("**/"):
        return probe_pattern_presence(root, pattern, only_files=True)
    return probe_pattern_presence(root, pattern)


def preview_auto_excludes(
    root: Path,
    include_node_modules: bool = False,
    ignore_filename: str = IGNORE_FILENAME,
) -> list[AutoExcludeDisplayInfo]:
    """Build and classify display entries for every auto-exclude pattern under `root`."""
    includes = load_securezip_ignore(root, ignore_filename).includes
    infos: list[AutoExcludePatternInfo] = []
    cache: dict[str, PatternPresence] = {}
    for pattern in resolve_auto_exclude_patterns(include_node_modules):
        normalized = normalize_ignore_pattern(pattern)
        key = normalized.pattern if normalized else pattern
        if pattern not in cache:
            cache[pattern] = _probe_auto_exclude(root, pattern)
        infos.append(
            AutoExcludePatternInfo(
                pattern=pattern,
                reincluded=is_auto_exclude_pattern_reincluded(key, includes),
                presence=cache[pattern],
            )
        )
    return classify_auto_exclude_patterns(infos)

