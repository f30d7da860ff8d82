#!/usr/bin/env python3
"""
SecureZip: Export a clean, filtered ZIP snapshot of a project

Common usage:
  securezip export .
  securezip export . -o ../release.zip
  securezip list .
  securezip add 'dist/' '!dist/manifest.json'

Files are selected by layering built-in security excludes (.git, .env, keys and
certificates), .gitignore rules and a .securezipignore file. Lines starting with
`!` in .securezipignore re-include paths excluded by any other rule, except .git,
which must be named explicitly.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from securezip.config import find_config_file, load_config, merge_cli_with_config
from securezip.errors import SecureZipError
from securezip.export import DEFAULT_ARCHIVE_NAME_TEMPLATE, default_archive_name, export_targets
from securezip.file_resolver import (
    IGNORE_FILENAME,
    FileResolver,
    ResolverConfig,
    add_patterns_to_securezip_ignore,
    ensure_securezip_ignore_file,
    normalize_ignore_pattern,
    preview_auto_excludes,
)
from securezip.file_resolver.sensitive import build_sensitive_rules, is_sensitive_value
from securezip.suggestions import collect_suggestions
from securezip.targets import build_export_targets

logger = logging.getLogger("securezip")


@dataclass
class Options:
    """Command-line options for the securezip tool."""

    command: str
    roots: list[str]
    output: str | None = None
    patterns: list[str] = field(default_factory=list)
    apply: bool = False
    verbose: bool = False
    # Settings that may also come from a config file
    additional_excludes: list[str] = field(default_factory=list)
    include_node_modules: bool = False
    archive_name_template: str = DEFAULT_ARCHIVE_NAME_TEMPLATE

    def resolver_config(self) -> ResolverConfig:
        return ResolverConfig(
            additional_excludes=list(self.additional_excludes),
            include_node_modules=self.include_node_modules,
        )


def _build_parser() -> argparse.ArgumentParser:
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    # Options shared by every subcommand. Defaults of None let us tell
    # "not passed" apart from "passed the default value" when merging config.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--additional-exclude",
        action="append",
        default=None,
        dest="additional_excludes",
        metavar="PATTERN",
        help="Extra glob to exclude (e.g. '**/*.md'). Can be repeated. "
        "Replaces additional-excludes from the config file",
    )
    common.add_argument(
        "--include-node-modules",
        action="store_const",
        const=True,
        default=None,
        dest="include_node_modules",
        help="Archive node_modules/, even if .gitignore ignores it",
    )
    common.add_argument(
        "--no-include-node-modules",
        action="store_const",
        const=False,
        dest="include_node_modules",
        help="Exclude node_modules/ (the default)",
    )
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Log file selection details to stderr"
    )

    parser = argparse.ArgumentParser(
        prog="securezip",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    export = subparsers.add_parser(
        "export", parents=[common], help="Write the selected files of one or more roots to a ZIP"
    )
    export.add_argument(
        "roots",
        nargs="*",
        default=["."],
        metavar="ROOT",
        help="Project root directories (default: current directory). "
        "Several roots are combined, each under its own folder",
    )
    export.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output ZIP path (default: <root>/<name>-<timestamp>.zip)",
    )

    list_cmd = subparsers.add_parser(
        "list", parents=[common], help="Print the files an export would include"
    )
    list_cmd.add_argument("root", nargs="?", default=".", metavar="ROOT")

    add = subparsers.add_parser(
        "add", parents=[common], help="Append patterns to .securezipignore, skipping duplicates"
    )
    add.add_argument("patterns", nargs="+", metavar="PATTERN")
    add.add_argument("--root", default=".", help="Project root (default: current directory)")

    init = subparsers.add_parser(
        "init", parents=[common], help="Create .securezipignore from the default template"
    )
    init.add_argument("root", nargs="?", default=".", metavar="ROOT")

    preview = subparsers.add_parser(
        "preview", parents=[common], help="Show built-in excludes and whether they match anything"
    )
    preview.add_argument("root", nargs="?", default=".", metavar="ROOT")

    suggest = subparsers.add_parser(
        "suggest", parents=[common], help="Suggest .securezipignore patterns for common artifacts"
    )
    suggest.add_argument("root", nargs="?", default=".", metavar="ROOT")
    suggest.add_argument(
        "--apply", action="store_true", help="Append all suggested patterns to .securezipignore"
    )
    return parser


def _parse_args(args: list[str] | None = None) -> tuple[Options | None, set[str], bool]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags, show_version)`. `options` is `None` when
    no subcommand was given. `explicit_flags` tracks which config-backed
    settings the user passed, for config merge precedence.
    """
    parser = _build_parser()
    opts = parser.parse_args(args)

    if opts.command is None:
        if not opts.version:
            parser.print_help(sys.stderr)
        return None, set(), opts.version

    explicit_flags: set[str] = set()
    if opts.additional_excludes is not None:
        explicit_flags.add("additional_excludes")
    if opts.include_node_modules is not None:
        explicit_flags.add("include_node_modules")

    roots = opts.roots if opts.command == "export" else [opts.root]

    options = Options(
        command=opts.command,
        roots=roots,
        output=getattr(opts, "output", None),
        patterns=getattr(opts, "patterns", []),
        apply=getattr(opts, "apply", False),
        verbose=opts.verbose,
        additional_excludes=opts.additional_excludes or [],
        include_node_modules=bool(opts.include_node_modules),
    )
    return options, explicit_flags, opts.version


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    # basicConfig is a no-op once handlers exist, so set the level directly too.
    logging.getLogger("securezip").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _print_git_override_warning(root: Path) -> None:
    print(
        f"Warning: .securezipignore in {root} re-includes .git; "
        "repository history and credentials in .git/config will be archived.",
        file=sys.stderr,
    )


def _run_export(options: Options) -> int:
    targets = build_export_targets(options.roots)
    if options.output:
        output = Path(options.output)
    else:
        base = targets[0].root if len(targets) == 1 else Path.cwd()
        output = base / default_archive_name(
            targets[0].root, template=options.archive_name_template
        )

    result = export_targets(
        targets,
        output,
        options.resolver_config(),
        on_git_override=_print_git_override_warning,
    )
    print(f"Exported {result.file_count} file(s) to {result.output}")
    return 0


def _run_list(options: Options) -> int:
    root = build_export_targets(options.roots)[0].root
    resolved = FileResolver(options.resolver_config()).resolve(root)
    for rel in resolved.relative_paths():
        print(rel)
    return 0


def _run_add(options: Options) -> int:
    root = build_export_targets(options.roots)[0].root
    result = add_patterns_to_securezip_ignore(root, options.patterns)

    rules = build_sensitive_rules()
    for pattern in result.added:
        print(f"Added: {pattern}")
        normalized = normalize_ignore_pattern(pattern)
        if normalized and normalized.negated and is_sensitive_value(normalized.pattern, rules):
            print(
                f"Warning: {pattern} re-includes a path SecureZip excludes for security reasons",
                file=sys.stderr,
            )
    for skipped in result.skipped:
        print(f"Skipped ({skipped.reason}): {skipped.pattern}")

    if result.partial:
        print(f"Added {len(result.added)} pattern(s); skipped {len(result.skipped)}.")
    if not result.added and result.skipped:
        return 1
    return 0


def _run_init(options: Options) -> int:
    root = build_export_targets(options.roots)[0].root
    if ensure_securezip_ignore_file(root):
        print(f"Created {root / IGNORE_FILENAME}")
    else:
        print(f"{root / IGNORE_FILENAME} already exists")
    return 0


def _run_preview(options: Options) -> int:
    root = build_export_targets(options.roots)[0].root
    for info in preview_auto_excludes(root, options.include_node_modules):
        line = f"{info.display_state:<10}  {info.pattern}"
        if info.presence.examples:
            examples = ", ".join(info.presence.examples)
            more = ", ..." if info.presence.has_more else ""
            line += f"  ({examples}{more})"
        print(line)
    return 0


def _run_suggest(options: Options) -> int:
    root = build_export_targets(options.roots)[0].root
    suggestions = collect_suggestions(root)
    if not suggestions:
        print("No suggestions: .securezipignore already covers the common artifacts found.")
        return 0
    for candidate in suggestions:
        print(f"{candidate.pattern:<22}  {candidate.description}")
    if options.apply:
        result = add_patterns_to_securezip_ignore(root, [c.pattern for c in suggestions])
        print(f"Added {len(result.added)} pattern(s) to {root / IGNORE_FILENAME}")
    return 0


_HANDLERS = {
    "export": _run_export,
    "list": _run_list,
    "add": _run_add,
    "init": _run_init,
    "preview": _run_preview,
    "suggest": _run_suggest,
}


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the securezip CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for user-correctable errors, 2 for other errors)
    """
    options, explicit_flags, show_version = _parse_args(args)

    # Display version information if requested
    if show_version:
        try:
            version = importlib.metadata.version("securezip")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if options is None:
        return 1

    _setup_logging(options.verbose)

    try:
        # Load and merge config file settings, searched from the first root
        config_path = find_config_file(Path(options.roots[0]))
        if config_path:
            logger.debug("Using config file %s", config_path)
            merge_cli_with_config(options, load_config(config_path), explicit_flags)

        return _HANDLERS[options.command](options)
    except (SecureZipError, ValueError) as e:
        # Errors the user can fix: no files, bad config, unwritable output, ...
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        # Catch other potential file or processing errors.
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
