"""ZIP archive writing."""

from __future__ import annotations

import logging
import threading
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from securezip.errors import ArchiveWriteError, OperationCancelledError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    absolute_path: Path
    archive_path: str


def write_zip_archive(
    entries: Iterable[ArchiveEntry],
    output: Path,
    *,
    cancel: threading.Event | None = None,
) -> int:
    """
    Write `entries` to a deflate-compressed ZIP at `output`, in archive-path order.

    Returns the number of entries written. Any `OSError` (for instance `output`
    being a directory) is raised as `ArchiveWriteError`; a partially written
    file is removed.
    """
    ordered = sorted(entries, key=lambda e: e.archive_path)
    count = 0
    try:
        with zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for entry in ordered:
                if cancel is not None and cancel.is_set():
                    raise OperationCancelledError("Archive creation cancelled")
                zf.write(entry.absolute_path, arcname=entry.archive_path)
                count += 1
    except OSError as e:
        _discard_partial(output)
        raise ArchiveWriteError(output, e) from e
    except OperationCancelledError:
        _discard_partial(output)
        raise

    logger.info("Wrote %d file(s) to %s", count, output)
    return count


def _discard_partial(output: Path) -> None:
    if output.is_file():
        try:
            output.unlink()
        except OSError as e:
            logger.warning("Could not remove partial archive %s: %s", output, e)
