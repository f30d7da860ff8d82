"""Recognizing paths that the auto-exclude list treats as security sensitive."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from securezip.file_resolver.defaults import BASE_AUTO_EXCLUDES
from securezip.file_resolver.patterns import DIRECTORY_SUFFIX

_SLASHES = re.compile(r"[\\/]+")
_EXTENSION_GLOB = re.compile(r"^\*\.([^.]+)$")


@dataclass
class SensitiveRules:
    dir_names: set[str] = field(default_factory=set)
    file_names: set[str] = field(default_factory=set)
    file_prefixes: set[str] = field(default_factory=set)
    extensions: set[str] = field(default_factory=set)


def normalize_path_pattern(value: str) -> str:
    """Collapse separators to `/` and strip leading and trailing slashes."""
    return _SLASHES.sub("/", value).strip("/")


def build_sensitive_rules(patterns: Iterable[str] = BASE_AUTO_EXCLUDES) -> SensitiveRules:
    """Derive name, prefix and extension rules from auto-exclude globs."""
    rules = SensitiveRules()
    for raw in patterns:
        normalized = normalize_path_pattern(raw)
        if not normalized:
            continue

        if normalized.endswith(DIRECTORY_SUFFIX):
            directory = normalized[: -len(DIRECTORY_SUFFIX)]
            if directory and "/" not in directory:
                rules.dir_names.add(directory)
            continue

        if "/" not in normalized:
            if normalized in (".git", ".vscode"):
                rules.dir_names.add(normalized)
                rules.file_names.add(normalized)
                continue
            if normalized == ".env":
                rules.file_names.add(normalized)
                continue
            if normalized.startswith(".env."):
                rules.file_prefixes.add(".env.")
                continue

        last = normalized.rsplit("/", 1)[-1]
        if last == ".env":
            rules.file_names.add(".env")
        elif last.startswith(".env."):
            rules.file_prefixes.add(".env.")

        match = _EXTENSION_GLOB.match(last)
        if match:
            rules.extensions.add("." + match.group(1).lower())

    return rules


def is_sensitive_value(value: str, rules: SensitiveRules) -> bool:
    """True if a path or pattern names something the rules consider sensitive."""
    normalized = normalize_path_pattern(value)
    if not normalized:
        return False

    segments = normalized.split("/")
    if any(segment in rules.dir_names for segment in segments):
        return True

    last = segments[-1]
    if last in rules.file_names:
        return True
    if any(last.startswith(prefix) for prefix in rules.file_prefixes):
        return True
    lower = last.lower()
    return any(lower.endswith(ext) for ext in rules.extensions)
