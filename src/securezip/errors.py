"""Error types raised by SecureZip operations."""

from __future__ import annotations

from pathlib import Path


class SecureZipError(Exception):
    """Base class for errors the CLI reports to the user as-is."""


class NoWorkspaceError(SecureZipError):
    """There is no project root directory to operate on."""


class NoFilesToArchiveError(SecureZipError):
    """File selection came back empty, so there is nothing to archive."""

    def __init__(self, root: Path) -> None:
        super().__init__(
            f"No files were found to include in the archive under {root}. "
            "Check your excludes and .securezipignore."
        )
        self.root = root


class ArchiveWriteError(SecureZipError):
    """Writing the archive failed (e.g. the output path is a directory)."""

    def __init__(self, output: Path, cause: OSError) -> None:
        super().__init__(f"Could not write archive {output}: {cause}")
        self.output = output
        self.cause = cause


class IgnoreFileIOError(SecureZipError):
    """Reading or appending the ignore file failed for a reason other than absence."""

    def __init__(self, path: Path, cause: OSError | UnicodeDecodeError) -> None:
        super().__init__(f"Could not access {path}: {cause}")
        self.path = path
        self.cause = cause


class OperationCancelledError(SecureZipError):
    """Cancellation was requested while work was in progress."""
