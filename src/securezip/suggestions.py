"""Recommended `.securezipignore` patterns for common build and secret artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from securezip.file_resolver import IGNORE_FILENAME, load_securezip_ignore, normalize_ignore_pattern
from securezip.file_resolver.matcher import iter_matches

CandidateType = Literal["file", "dir", "glob"]

# Globs are only searched this many directory levels deep.
_GLOB_MAX_DEPTH = 2


@dataclass(frozen=True)
class ArtifactCandidate:
    pattern: str
    description: str
    type: CandidateType
    path: str | None = None
    glob: str | None = None


ARTIFACT_CANDIDATES: tuple[ArtifactCandidate, ...] = (
    ArtifactCandidate("node_modules/", "Node.js dependencies", "dir", path="node_modules"),
    ArtifactCandidate("dist/", "Build output", "dir", path="dist"),
    ArtifactCandidate("out/", "Build output", "dir", path="out"),
    ArtifactCandidate("build/", "Build output", "dir", path="build"),
    ArtifactCandidate("coverage/", "Test coverage reports", "dir", path="coverage"),
    ArtifactCandidate("logs/", "Log directory", "dir", path="logs"),
    ArtifactCandidate("tmp/", "Temporary files", "dir", path="tmp"),
    ArtifactCandidate(".env", "Environment variable file", "file", path=".env"),
    ArtifactCandidate(".env.*", "Environment variable files", "glob", glob=".env.*"),
    ArtifactCandidate(
        "coverage-final.json", "NYC coverage report", "file", path="coverage-final.json"
    ),
    ArtifactCandidate("**/*.log", "Log files", "glob", glob="**/*.log"),
    ArtifactCandidate("**/*.pem", "Certificates or private keys", "glob", glob="**/*.pem"),
    ArtifactCandidate("**/*.key", "Private keys", "glob", glob="**/*.key"),
)


def candidate_exists(root: Path, candidate: ArtifactCandidate) -> bool:
    if candidate.path:
        target = root / candidate.path
        return target.is_dir() if candidate.type == "dir" else target.is_file()
    if candidate.glob:
        matches = iter_matches(
            root,
            [candidate.glob],
            respect_gitignore=False,
            only_files=candidate.type != "dir",
            max_depth=_GLOB_MAX_DEPTH,
        )
        return next(matches, None) is not None
    return False


def collect_suggestions(root: Path, ignore_filename: str = IGNORE_FILENAME) -> list[ArtifactCandidate]:
    """
    Return candidates that exist under `root` and are not already listed in the
    ignore file (compared on the normalized pattern).
    """
    current = load_securezip_ignore(root, ignore_filename)
    excludes = set(current.excludes)
    includes = set(current.includes)

    suggestions: list[ArtifactCandidate] = []
    for candidate in ARTIFACT_CANDIDATES:
        if not candidate_exists(root, candidate):
            continue
        normalized = normalize_ignore_pattern(candidate.pattern)
        if normalized is None:
            continue
        target = includes if normalized.negated else excludes
        if normalized.pattern in target:
            continue
        suggestions.append(candidate)
    return suggestions
