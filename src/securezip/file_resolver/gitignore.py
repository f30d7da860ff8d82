"""Gitignore handling using pathspec."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

import pathspec

logger = logging.getLogger(__name__)


def _read_ignore_file(path: Path) -> list[str] | None:
    """
    Read non-blank, non-comment lines of an ignore file, or `None` if the file
    is missing, unreadable, or not valid UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if path.exists():
            logger.debug("Skipping unreadable ignore file %s: %s", path, e)
        return None
    lines = [line for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]
    return lines or None


def load_gitignore(directory: Path) -> pathspec.PathSpec | None:
    """
    Read `.gitignore` in the given directory and return a compiled `PathSpec`,
    or `None` if the file doesn't exist or is empty.
    """
    lines = _read_ignore_file(directory / ".gitignore")
    if lines is None:
        return None
    return pathspec.PathSpec.from_lines("gitignore", lines)


class GitIgnoreRules:
    """
    Version-control ignore rules for one walk root.

    Every directory's `.gitignore` applies to paths below it. Deeper files take
    precedence, so a `!pattern` in a subdirectory can undo a parent rule.
    Specs are loaded lazily and cached per directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._cache: dict[PurePosixPath, pathspec.PathSpec | None] = {}

    def _spec_for(self, rel_dir: PurePosixPath) -> pathspec.PathSpec | None:
        if rel_dir not in self._cache:
            self._cache[rel_dir] = load_gitignore(self.root / rel_dir)
        return self._cache[rel_dir]

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        """Check a root-relative POSIX path against the `.gitignore` chain above it."""
        path = PurePosixPath(rel_path)
        ignored = False
        # Walk from the root down to the path's parent directory.
        for rel_dir in reversed(path.parents):
            spec = self._spec_for(rel_dir)
            if spec is None:
                continue
            local = path.relative_to(rel_dir).as_posix()
            if is_dir:
                local += "/"
            result = spec.check_file(local)
            if result.include is not None:
                ignored = result.include
        return ignored
