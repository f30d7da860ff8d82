"""Export targets for combining several project roots into one archive."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from securezip.errors import NoWorkspaceError


@dataclass(frozen=True)
class ExportTarget:
    """A project root and the top-level folder name it gets inside the archive."""

    root: Path
    label: str


def dedupe_labels(labels: Iterable[str]) -> list[str]:
    """Make labels unique by suffixing `-2`, `-3`, ... to later collisions."""
    seen: set[str] = set()
    result: list[str] = []
    for label in labels:
        candidate = label
        n = 2
        while candidate in seen:
            candidate = f"{label}-{n}"
            n += 1
        seen.add(candidate)
        result.append(candidate)
    return result


def build_export_targets(roots: Sequence[str | Path]) -> list[ExportTarget]:
    """
    Turn root directories into export targets labelled by directory name.

    Raises `NoWorkspaceError` if no roots are given or one is not a directory.
    """
    if not roots:
        raise NoWorkspaceError("No project root directory was given")
    resolved: list[Path] = []
    for raw in roots:
        root = Path(raw).resolve()
        if not root.is_dir():
            raise NoWorkspaceError(f"Not a directory: {raw}")
        resolved.append(root)
    labels = dedupe_labels(root.name or "workspace" for root in resolved)
    return [ExportTarget(root=root, label=label) for root, label in zip(resolved, labels)]
