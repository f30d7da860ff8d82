"""
Built-in exclusion patterns applied before `.securezipignore` and user settings.

These are root-anchored globs. Directory entries come in pairs (`.git` and
`.git/**`) so that both the directory itself and its contents are covered.
"""

from __future__ import annotations

BASE_AUTO_EXCLUDES: tuple[str, ...] = (
    ".git",
    ".git/**",
    ".vscode",
    ".vscode/**",
    ".env",
    ".env.*",
    "**/.env",
    "**/.env.*",
    "**/*.pem",
    "**/*.key",
    "**/*.crt",
    "**/*.pfx",
)

NODE_MODULES_EXCLUDE = "node_modules/**"

# Only an explicit `!.git...` re-include lifts these.
GIT_AUTO_EXCLUDES: tuple[str, ...] = (".git", ".git/**")


def resolve_auto_exclude_patterns(include_node_modules: bool = False) -> list[str]:
    """
    Return the built-in exclusion patterns for the current settings.

    `node_modules/**` follows the `.git` block unless `include_node_modules` is set.
    The order is kept stable for display; matching treats the list as a set.
    """
    patterns = list(BASE_AUTO_EXCLUDES)
    if not include_node_modules:
        patterns.insert(2, NODE_MODULES_EXCLUDE)
    return patterns
