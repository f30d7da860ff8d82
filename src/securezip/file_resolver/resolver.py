"""
File selection for archiving.

Combines three exclusion sources into one file set:

1. built-in auto-excludes (`defaults.py`), plus caller-supplied `additional_excludes`
   and the exclude lines of `.securezipignore`
2. `.gitignore` rules
3. `!pattern` re-include lines of `.securezipignore`, applied in a second pass

The second pass only ever adds paths. It is not constrained by
`additional_excludes`, by ignore-file excludes, or by auto-excludes other than
`.git`. The `.git` auto-excludes are lifted only by a re-include that names
`.git` explicitly.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from securezip.errors import NoFilesToArchiveError
from securezip.file_resolver.defaults import (
    GIT_AUTO_EXCLUDES,
    NODE_MODULES_EXCLUDE,
    resolve_auto_exclude_patterns,
)
from securezip.file_resolver.ignore_file import load_securezip_ignore
from securezip.file_resolver.matcher import ALL_FILES_PATTERNS, glob_files
from securezip.file_resolver.types import ResolvedFileSet, ResolverConfig

logger = logging.getLogger(__name__)


def has_git_override(includes: set[str] | list[str]) -> bool:
    """True if any re-include explicitly targets `.git` or something inside it."""
    return any(p == ".git" or p == ".git/**" or p.startswith(".git/") for p in includes)


def collect_reinclude_patterns(includes: list[str]) -> list[str]:
    """
    Deduplicate re-include patterns, keeping first-seen order. A bare `.git`
    also re-includes `.git/**`, since the directory entry alone matches no files.
    """
    patterns = list(dict.fromkeys(includes))
    if ".git" in patterns and ".git/**" not in patterns:
        patterns.append(".git/**")
    return patterns


class FileResolver:
    """
    Computes the set of files to archive under one root.

    Stateless apart from its config; every `resolve()` call re-reads the ignore
    file and walks the tree again.
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self._config: ResolverConfig = config or ResolverConfig()

    def resolve(self, root: Path, cancel: threading.Event | None = None) -> ResolvedFileSet:
        """
        Resolve the final file set for `root`.

        Raises `NoFilesToArchiveError` if nothing survives the exclude passes.
        """
        root = root.resolve()
        config = self._config

        auto_excludes = resolve_auto_exclude_patterns(config.include_node_modules)
        sz_ignore = load_securezip_ignore(root, config.ignore_filename)

        reinclude_patterns = collect_reinclude_patterns(sz_ignore.includes)
        git_override = has_git_override(reinclude_patterns)

        base_ignore = [*auto_excludes, *config.additional_excludes, *sz_ignore.excludes]

        selected: set[Path] = set(
            glob_files(root, ALL_FILES_PATTERNS, exclude=base_ignore, cancel=cancel)
        )
        logger.debug("Main pass selected %d file(s) under %s", len(selected), root)

        if config.include_node_modules:
            # Explicit opt-in: a `.gitignore` entry for node_modules must not win here.
            node_modules = glob_files(
                root,
                [NODE_MODULES_EXCLUDE],
                exclude=base_ignore,
                respect_gitignore=False,
                cancel=cancel,
            )
            logger.debug("node_modules pass selected %d file(s)", len(node_modules))
            selected.update(node_modules)

        if not selected:
            raise NoFilesToArchiveError(root)

        if reinclude_patterns:
            guard = [] if git_override else list(GIT_AUTO_EXCLUDES)
            reincluded = glob_files(root, reinclude_patterns, exclude=guard, cancel=cancel)
            logger.debug(
                "Re-include pass matched %d file(s) for %s", len(reincluded), reinclude_patterns
            )
            selected.update(reincluded)

        if git_override:
            logger.info(".securezipignore re-includes .git contents under %s", root)

        return ResolvedFileSet(
            root=root,
            files=sorted(selected),
            git_override=git_override,
            ignore_snapshot=sz_ignore.snapshot(),
        )


def resolve_files(
    root: Path, config: ResolverConfig | None = None, *, cancel: threading.Event | None = None
) -> ResolvedFileSet:
    """Convenience wrapper around `FileResolver(config).resolve(root)`."""
    return FileResolver(config).resolve(root, cancel=cancel)
