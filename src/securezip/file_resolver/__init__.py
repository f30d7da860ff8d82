"""
File selection engine: decides which files under a project root go into an archive.

Layers built-in security excludes, caller-supplied excludes, `.gitignore` rules
and the `.securezipignore` file, then adds back anything re-included with a
`!pattern` line.

Usage::

    from securezip.file_resolver import FileResolver, ResolverConfig

    config = ResolverConfig(additional_excludes=["**/*.md"], include_node_modules=False)
    resolved = FileResolver(config).resolve(Path("."))
    for path in resolved.files:
        ...
"""

from securezip.file_resolver.defaults import BASE_AUTO_EXCLUDES, resolve_auto_exclude_patterns
from securezip.file_resolver.ignore_file import (
    add_patterns_to_securezip_ignore,
    ensure_securezip_ignore_file,
    load_securezip_ignore,
)
from securezip.file_resolver.patterns import normalize_ignore_pattern
from securezip.file_resolver.presence import (
    classify_auto_exclude_patterns,
    preview_auto_excludes,
    probe_pattern_presence,
)
from securezip.file_resolver.resolver import FileResolver, resolve_files
from securezip.file_resolver.types import (
    IGNORE_FILENAME,
    AddPatternsResult,
    IgnorePattern,
    ResolvedFileSet,
    ResolverConfig,
    SecureZipIgnore,
    SkippedPattern,
)

__all__ = [
    "BASE_AUTO_EXCLUDES",
    "IGNORE_FILENAME",
    "AddPatternsResult",
    "FileResolver",
    "IgnorePattern",
    "ResolvedFileSet",
    "ResolverConfig",
    "SecureZipIgnore",
    "SkippedPattern",
    "add_patterns_to_securezip_ignore",
    "classify_auto_exclude_patterns",
    "ensure_securezip_ignore_file",
    "load_securezip_ignore",
    "normalize_ignore_pattern",
    "preview_auto_excludes",
    "probe_pattern_presence",
    "resolve_auto_exclude_patterns",
    "resolve_files",
]
