"""Normalization of single ignore-file lines."""

from __future__ import annotations

import re

from securezip.file_resolver.types import IgnorePattern

_BACKSLASH_RUN = re.compile(r"\\+")
_TRAILING_SLASHES = re.compile(r"/+$")

DIRECTORY_SUFFIX = "/**"


def normalize_ignore_pattern(line: str) -> IgnorePattern | None:
    """
    Parse one raw line of a `.securezipignore` into an `IgnorePattern`.

    Returns `None` for blank lines, comments, and lines that are empty once
    the `!` prefix and leading `/` are removed, and for text that spans more
    than one line. Supported subset:

    - `#` starts a comment line
    - `!` marks a re-include rule
    - backslashes are treated as path separators
    - a leading `/` is dropped (matching is always relative to the root)
    - a trailing `/` means the directory and everything below it (`dir/**`)
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    # A pattern never spans lines.
    if "\n" in text or "\r" in text:
        return None

    negated = text.startswith("!")
    if negated:
        text = text[1:].strip()
        if not text:
            return None

    text = _BACKSLASH_RUN.sub("/", text)

    if text.startswith("/"):
        text = text[1:]

    if text.endswith("/"):
        text = _TRAILING_SLASHES.sub("/", text) + "**"

    if not text:
        return None

    return IgnorePattern(pattern=text, negated=negated)
