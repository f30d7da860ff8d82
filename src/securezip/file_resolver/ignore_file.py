"""
Loading and appending the `.securezipignore` file at a project root.

The file is plain UTF-8 text with one pattern per line, in the subset accepted
by `normalize_ignore_pattern`. Appends are textual: existing lines, comments
and ordering are never rewritten.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from securezip.errors import IgnoreFileIOError
from securezip.file_resolver.patterns import normalize_ignore_pattern
from securezip.file_resolver.types import (
    IGNORE_FILENAME,
    AddPatternsResult,
    SecureZipIgnore,
    SkippedPattern,
)

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")

# Default template that hides the ignore file from exported archives.
DEFAULT_IGNORE_TEMPLATE = "# Example: exclude this file itself by default\n.securezipignore\n"


def _read_text(path: Path) -> str | None:
    """Return the file's text, or `None` if it does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise IgnoreFileIOError(path, e) from e


def parse_securezip_ignore(text: str) -> SecureZipIgnore:
    """Split ignore-file text into exclude and re-include patterns, in file order."""
    result = SecureZipIgnore(exists=True)
    for line in _LINE_SPLIT.split(text):
        normalized = normalize_ignore_pattern(line)
        if normalized is None:
            continue
        if normalized.negated:
            result.includes.append(normalized.pattern)
        else:
            result.excludes.append(normalized.pattern)
    return result


def load_securezip_ignore(root: Path, filename: str = IGNORE_FILENAME) -> SecureZipIgnore:
    """
    Load and parse the ignore file at `root`.

    A missing file yields empty pattern lists rather than an error. Any other
    read failure raises `IgnoreFileIOError`.
    """
    text = _read_text(root / filename)
    if text is None:
        return SecureZipIgnore()
    return parse_securezip_ignore(text)


def add_patterns_to_securezip_ignore(
    root: Path, raw_patterns: Iterable[str], filename: str = IGNORE_FILENAME
) -> AddPatternsResult:
    """
    Append patterns to the ignore file, skipping invalid and duplicate ones.

    Duplicates are detected on the normalized form, against both the current
    file contents and patterns accepted earlier in the same call. Accepted
    patterns are written as the user typed them (trimmed), not normalized.
    The file is left untouched (and not created) when nothing is accepted.
    """
    path = root / filename
    existing_text = _read_text(path)
    current = parse_securezip_ignore(existing_text) if existing_text is not None else SecureZipIgnore()
    excludes = set(current.excludes)
    includes = set(current.includes)

    result = AddPatternsResult()
    for raw in raw_patterns:
        trimmed = raw.strip()
        normalized = normalize_ignore_pattern(trimmed) if trimmed else None
        if normalized is None:
            result.skipped.append(SkippedPattern(raw, "invalid"))
            continue
        target = includes if normalized.negated else excludes
        if normalized.pattern in target:
            result.skipped.append(SkippedPattern(trimmed, "duplicate"))
            continue
        target.add(normalized.pattern)
        result.added.append(trimmed)

    if not result.added:
        return result

    prefix = "\n" if existing_text and not existing_text.endswith("\n") else ""
    chunk = prefix + "\n".join(result.added) + "\n"
    try:
        with path.open("a", encoding="utf-8", newline="") as f:
            f.write(chunk)
    except OSError as e:
        raise IgnoreFileIOError(path, e) from e

    logger.debug("Appended %d pattern(s) to %s", len(result.added), path)
    return result


def ensure_securezip_ignore_file(root: Path, filename: str = IGNORE_FILENAME) -> bool:
    """
    Create the ignore file from the default template if it does not exist.

    Returns `True` when the file was created.
    """
    path = root / filename
    try:
        with path.open("x", encoding="utf-8", newline="") as f:
            f.write(DEFAULT_IGNORE_TEMPLATE)
    except FileExistsError:
        return False
    except OSError as e:
        raise IgnoreFileIOError(path, e) from e
    logger.info("Created %s", path)
    return True
