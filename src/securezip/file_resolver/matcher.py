"""
Root-anchored glob matching over a directory tree.

Patterns are compiled with pathspec's gitignore-style wildmatch and anchored at
the walk root, so `.env.*` only matches at the top level while `**/.env.*`
matches at any depth. A pattern that names a directory also covers everything
below it. Symbolic links are never followed and never returned.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import pathspec

from securezip.errors import OperationCancelledError
from securezip.file_resolver.gitignore import GitIgnoreRules

ALL_FILES_PATTERNS: tuple[str, ...] = ("**/*", "**/.*")


def _anchor(pattern: str) -> str:
    if pattern.startswith(("/", "**")):
        return pattern
    return "/" + pattern


def compile_globs(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile root-relative globs into a single `PathSpec`."""
    return pathspec.PathSpec.from_lines("gitignore", [_anchor(p) for p in patterns if p])


def _raise_walk_error(error: OSError) -> None:
    # Directories removed mid-walk are skipped.
    if isinstance(error, FileNotFoundError):
        return
    raise error


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError("Operation cancelled")


def iter_matches(
    root: Path,
    patterns: Sequence[str],
    *,
    exclude: Sequence[str] = (),
    dot: bool = True,
    respect_gitignore: bool = True,
    only_files: bool = True,
    absolute: bool = True,
    max_depth: int | None = None,
    cancel: threading.Event | None = None,
) -> Iterator[Path]:
    """
    Lazily yield paths under `root` that match any of `patterns`.

    Directories matching `exclude` (or ignored by `.gitignore` when
    `respect_gitignore` is set) are pruned and never entered. Results come out in
    a stable, sorted walk order, so callers can stop early and get the same
    prefix every time. Paths are absolute unless `absolute=False`, in which case
    they are relative to `root`. A directory that cannot be listed raises its
    `OSError`, unless it vanished during the walk.
    """
    include_spec = compile_globs(patterns)
    exclude_spec = compile_globs(exclude)
    gitignore = GitIgnoreRules(root) if respect_gitignore else None

    def excluded(rel: str, is_dir: bool) -> bool:
        key = rel + "/" if is_dir else rel
        if exclude_spec.match_file(key):
            return True
        return gitignore is not None and gitignore.is_ignored(rel, is_dir=is_dir)

    def emit(rel: str) -> Path:
        return root / rel if absolute else Path(rel)

    walk = os.walk(root, onerror=_raise_walk_error, followlinks=False)
    for dirpath, dirnames, filenames in walk:
        _check_cancel(cancel)
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else rel_dir + "/"
        depth = 0 if not prefix else prefix.count("/")

        # Prune in place so os.walk never descends into excluded directories.
        kept: list[str] = []
        for d in sorted(dirnames):
            rel = prefix + d
            if not dot and d.startswith("."):
                continue
            if os.path.islink(current / d) or excluded(rel, is_dir=True):
                continue
            kept.append(d)
            if not only_files and include_spec.match_file(rel + "/"):
                yield emit(rel)
        dirnames[:] = kept if max_depth is None or depth + 1 < max_depth else []

        for filename in sorted(filenames):
            rel = prefix + filename
            if not dot and filename.startswith("."):
                continue
            if not include_spec.match_file(rel):
                continue
            path = current / filename
            if os.path.islink(path) or not path.is_file():
                continue
            if excluded(rel, is_dir=False):
                continue
            yield emit(rel)


def glob_files(
    root: Path,
    patterns: Sequence[str],
    *,
    exclude: Sequence[str] = (),
    dot: bool = True,
    respect_gitignore: bool = True,
    absolute: bool = True,
    cancel: threading.Event | None = None,
) -> list[Path]:
    """Collect every regular file under `root` matching `patterns`, sorted."""
    return sorted(
        iter_matches(
            root,
            patterns,
            exclude=exclude,
            dot=dot,
            respect_gitignore=respect_gitignore,
            only_files=True,
            absolute=absolute,
            cancel=cancel,
        )
    )
