"""
Export orchestration: resolve files for one or more roots and write the archive.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from securezip.archive import ArchiveEntry, write_zip_archive
from securezip.errors import ArchiveWriteError
from securezip.file_resolver import FileResolver, ResolvedFileSet, ResolverConfig
from securezip.targets import ExportTarget

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME_TEMPLATE = "{name}-{timestamp}.zip"


@dataclass
class ExportResult:
    output: Path
    file_count: int
    git_override: bool = False
    ignore_snapshot: list[str] = field(default_factory=list)


def format_timestamp(now: datetime) -> str:
    """Compact timestamp used in archive names, e.g. `20250102-153012`."""
    return now.strftime("%Y%m%d-%H%M%S")


def default_archive_name(
    root: Path,
    now: datetime | None = None,
    template: str = DEFAULT_ARCHIVE_NAME_TEMPLATE,
) -> str:
    """
    Render the archive file name for `root`, e.g. `myproject-20250102-153012.zip`.

    The template may use `{name}`, `{timestamp}` and `{date}`. Any other
    placeholder raises `ValueError`.
    """
    now = now or datetime.now()
    try:
        return template.format(
            name=root.resolve().name or "workspace",
            timestamp=format_timestamp(now),
            date=now.strftime("%Y-%m-%d"),
        )
    except KeyError as e:
        raise ValueError(
            f"Unknown placeholder {{{e.args[0]}}} in archive-name-template {template!r}; "
            "use {name}, {timestamp} or {date}"
        ) from e
    except IndexError as e:
        raise ValueError(
            f"Positional placeholders are not supported in archive-name-template {template!r}"
        ) from e


def _warn_git_override(root: Path) -> None:
    logger.warning(
        "%s: .securezipignore re-includes .git; repository internals will be archived", root
    )


def _entries_for(resolved: ResolvedFileSet, prefix: str = "") -> list[ArchiveEntry]:
    return [
        ArchiveEntry(absolute_path=path, archive_path=prefix + rel)
        for path, rel in zip(resolved.files, resolved.relative_paths())
    ]


def _write(entries: list[ArchiveEntry], output: Path, cancel: threading.Event | None) -> int:
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveWriteError(output, e) from e
    return write_zip_archive(entries, output, cancel=cancel)


def export_project(
    root: Path,
    output: Path,
    config: ResolverConfig | None = None,
    *,
    on_git_override: Callable[[Path], None] | None = None,
    cancel: threading.Event | None = None,
) -> ExportResult:
    """
    Archive the selected files of `root` into `output`.

    Resolution happens before anything is written, so a `NoFilesToArchiveError`
    leaves no archive behind. When `.securezipignore` re-includes `.git`,
    `on_git_override` is called (or a warning logged) before writing.
    """
    resolved = FileResolver(config).resolve(root, cancel=cancel)
    if resolved.git_override:
        (on_git_override or _warn_git_override)(resolved.root)

    count = _write(_entries_for(resolved), output, cancel)
    return ExportResult(
        output=output,
        file_count=count,
        git_override=resolved.git_override,
        ignore_snapshot=resolved.ignore_snapshot,
    )


def export_targets(
    targets: Sequence[ExportTarget],
    output: Path,
    config: ResolverConfig | None = None,
    *,
    on_git_override: Callable[[Path], None] | None = None,
    cancel: threading.Event | None = None,
) -> ExportResult:
    """
    Archive several roots into one file, each under a `label/` folder.

    Every root is resolved independently with the same config. A single target
    is archived without a label prefix, the same as `export_project`.
    """
    if len(targets) == 1:
        return export_project(
            targets[0].root, output, config, on_git_override=on_git_override, cancel=cancel
        )

    resolver = FileResolver(config)
    entries: list[ArchiveEntry] = []
    snapshot: list[str] = []
    git_override = False
    for target in targets:
        resolved = resolver.resolve(target.root, cancel=cancel)
        if resolved.git_override:
            git_override = True
            (on_git_override or _warn_git_override)(resolved.root)
        entries.extend(_entries_for(resolved, prefix=f"{target.label}/"))
        snapshot.extend(f"{target.label}: {line}" for line in resolved.ignore_snapshot)

    count = _write(entries, output, cancel)
    return ExportResult(
        output=output, file_count=count, git_override=git_override, ignore_snapshot=snapshot
    )
