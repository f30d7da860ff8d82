"""Tests for auto-exclude previews: presence probing, re-include heuristic, ordering."""

from __future__ import annotations

from pathlib import Path

import pytest

from securezip.file_resolver import (
    classify_auto_exclude_patterns,
    preview_auto_excludes,
    probe_pattern_presence,
)
from securezip.file_resolver.presence import (
    AutoExcludePatternInfo,
    PatternPresence,
    is_auto_exclude_pattern_reincluded,
)


def _info(pattern: str, *, exists: bool, reincluded: bool = False) -> AutoExcludePatternInfo:
    return AutoExcludePatternInfo(
        pattern=pattern, reincluded=reincluded, presence=PatternPresence(exists=exists)
    )


def test_classify_ordering():
    result = classify_auto_exclude_patterns(
        [
            _info("a", exists=True),
            _info("b", exists=False, reincluded=True),
            _info("c", exists=True, reincluded=True),
            _info("d", exists=False),
        ]
    )
    assert [r.pattern for r in result] == ["c", "a", "b", "d"]
    assert [r.display_state for r in result] == ["reincluded", "active", "reincluded", "inactive"]


def test_classify_is_stable():
    infos = [
        _info("x1", exists=False),
        _info("y1", exists=True),
        _info("x2", exists=False),
        _info("y2", exists=True),
        _info("x3", exists=False),
    ]
    result = classify_auto_exclude_patterns(infos)
    assert [r.pattern for r in result] == ["y1", "y2", "x1", "x2", "x3"]


def test_classify_empty():
    assert classify_auto_exclude_patterns([]) == []


def test_probe_literal_directory(tmp_path: Path):
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    presence = probe_pattern_presence(tmp_path, "node_modules/**")
    assert presence == PatternPresence(exists=True, examples=["node_modules/"], has_more=False)


def test_probe_literal_file(tmp_path: Path):
    (tmp_path / ".env").write_text("X=1\n")
    presence = probe_pattern_presence(tmp_path, "/.env")
    assert presence.exists is True
    assert presence.examples == [".env"]


def test_probe_missing_literal(tmp_path: Path):
    assert probe_pattern_presence(tmp_path, ".vscode") == PatternPresence()


def test_probe_glob_samples_and_has_more(tmp_path: Path):
    for i in range(1, 6):
        (tmp_path / f"a{i}.pem").write_text("pem\n")
    presence = probe_pattern_presence(tmp_path, "**/*.pem", only_files=True)
    assert presence.exists is True
    assert presence.examples == ["a1.pem", "a2.pem", "a3.pem"]
    assert presence.has_more is True


def test_probe_glob_exact_limit_has_no_more(tmp_path: Path):
    (tmp_path / "certs").mkdir()
    for name in ["one.key", "two.key"]:
        (tmp_path / "certs" / name).write_text("key\n")
    presence = probe_pattern_presence(tmp_path, "**/*.key", sample_limit=2)
    assert presence.examples == ["certs/one.key", "certs/two.key"]
    assert presence.has_more is False


def test_probe_ignores_gitignore(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.crt\n")
    (tmp_path / "ca.crt").write_text("crt\n")
    assert probe_pattern_presence(tmp_path, "**/*.crt").exists is True


def test_probe_glob_without_match(tmp_path: Path):
    (tmp_path / "README.md").write_text("hi\n")
    assert probe_pattern_presence(tmp_path, ".env.*") == PatternPresence()


@pytest.mark.parametrize(
    ("pattern", "includes", "expected"),
    [
        (".git", [".git"], True),
        (".git/**", [".git/config"], True),
        (".git", [".git/HEAD"], True),
        (".env", [".env"], True),
        (".env.*", [".env.local"], True),
        ("**/.env", [".env"], True),
        ("**/.env.*", ["config/.env.production"], True),
        ("**/*.pem", ["certs/server.pem"], True),
        ("**/*.pem", ["**/*.pem"], True),
        (".vscode/**", [".vscode/**"], True),
        ("node_modules/**", ["node_modules/left-pad/**"], True),
        ("**/*.pem", ["secure-config/**"], False),
        ("node_modules/**", ["src/**"], False),
        (".vscode", [], False),
        (".git", [".github/**"], False),
    ],
)
def test_reincluded_heuristic(pattern: str, includes: list[str], expected: bool):
    assert is_auto_exclude_pattern_reincluded(pattern, includes) is expected


def test_preview_auto_excludes(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (tmp_path / ".env").write_text("X=1\n")
    (tmp_path / ".securezipignore").write_text("!.env\n")

    result = preview_auto_excludes(tmp_path)
    assert [(r.pattern, r.display_state) for r in result] == [
        (".env", "reincluded"),
        ("**/.env", "reincluded"),
        (".git", "active"),
        (".git/**", "active"),
        (".env.*", "reincluded"),
        ("**/.env.*", "reincluded"),
        ("node_modules/**", "inactive"),
        (".vscode", "inactive"),
        (".vscode/**", "inactive"),
        ("**/*.pem", "inactive"),
        ("**/*.key", "inactive"),
        ("**/*.crt", "inactive"),
        ("**/*.pfx", "inactive"),
    ]
    git = next(r for r in result if r.pattern == ".git")
    assert git.presence.examples == [".git/"]


def test_preview_without_node_modules_pattern(tmp_path: Path):
    result = preview_auto_excludes(tmp_path, include_node_modules=True)
    assert "node_modules/**" not in [r.pattern for r in result]
    assert all(r.display_state == "inactive" for r in result)
