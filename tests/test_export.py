"""Tests for archive writing and export orchestration."""

from __future__ import annotations

import logging
import threading
import zipfile
from datetime import datetime
from pathlib import Path

import pytest

from securezip.archive import ArchiveEntry, write_zip_archive
from securezip.errors import (
    ArchiveWriteError,
    NoFilesToArchiveError,
    NoWorkspaceError,
    OperationCancelledError,
)
from securezip.export import default_archive_name, export_project, export_targets
from securezip.file_resolver import ResolverConfig
from securezip.targets import build_export_targets, dedupe_labels


def _make_project(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "README.md").write_text("# Fixture\n")
    (root / "src").mkdir()
    (root / "src" / "index.ts").write_text("export const x = 1;\n")
    (root / ".env").write_text("TOKEN=secret\n")
    (root / "node_modules").mkdir()
    (root / "node_modules" / "left.js").write_text("module.exports = 1;\n")
    return root


def test_export_project_writes_selected_files(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    output = tmp_path / "out" / "snapshot.zip"

    result = export_project(project, output)

    assert result.output == output
    assert result.file_count == 2
    assert result.git_override is False
    with zipfile.ZipFile(output) as zf:
        assert zf.namelist() == ["README.md", "src/index.ts"]
        assert zf.read("src/index.ts") == b"export const x = 1;\n"
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())


def test_export_project_respects_config(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    output = tmp_path / "snapshot.zip"
    config = ResolverConfig(additional_excludes=["**/*.md"], include_node_modules=True)

    export_project(project, output, config)

    with zipfile.ZipFile(output) as zf:
        assert zf.namelist() == ["node_modules/left.js", "src/index.ts"]


def test_export_no_files_writes_nothing(tmp_path: Path):
    project = tmp_path / "empty"
    project.mkdir()
    (project / ".env").write_text("TOKEN=1\n")
    output = tmp_path / "snapshot.zip"

    with pytest.raises(NoFilesToArchiveError):
        export_project(project, output)
    assert not output.exists()


def test_export_to_directory_fails(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    output = tmp_path / "taken"
    output.mkdir()

    with pytest.raises(ArchiveWriteError) as exc_info:
        export_project(project, output)
    assert str(output) in str(exc_info.value)
    assert output.is_dir()


def test_export_git_override_callback(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    (project / ".git").mkdir()
    (project / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (project / ".securezipignore").write_text("!.git\n")
    calls: list[Path] = []

    result = export_project(project, tmp_path / "snapshot.zip", on_git_override=calls.append)

    assert calls == [project.resolve()]
    assert result.git_override is True
    assert result.ignore_snapshot == ["!.git"]
    with zipfile.ZipFile(result.output) as zf:
        assert ".git/HEAD" in zf.namelist()


def test_export_git_override_logs_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    project = _make_project(tmp_path / "project")
    (project / ".git").mkdir()
    (project / ".git" / "HEAD").write_text("ref\n")
    (project / ".securezipignore").write_text("!.git/**\n")

    with caplog.at_level(logging.WARNING, logger="securezip"):
        export_project(project, tmp_path / "snapshot.zip")
    assert any("re-includes .git" in r.getMessage() for r in caplog.records)


def test_export_targets_multiple_roots(tmp_path: Path):
    first = _make_project(tmp_path / "one" / "app")
    second = _make_project(tmp_path / "two" / "app")
    (second / ".securezipignore").write_text("src/\n")
    targets = build_export_targets([first, second])
    assert [t.label for t in targets] == ["app", "app-2"]

    result = export_targets(targets, tmp_path / "combined.zip")

    assert result.file_count == 4
    assert result.ignore_snapshot == ["app-2: src/**"]
    with zipfile.ZipFile(result.output) as zf:
        assert zf.namelist() == [
            "app-2/.securezipignore",
            "app-2/README.md",
            "app/README.md",
            "app/src/index.ts",
        ]


def test_export_targets_single_root_has_no_prefix(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    result = export_targets(build_export_targets([project]), tmp_path / "single.zip")
    with zipfile.ZipFile(result.output) as zf:
        assert zf.namelist() == ["README.md", "src/index.ts"]


def test_export_targets_fails_if_any_root_is_empty(tmp_path: Path):
    project = _make_project(tmp_path / "project")
    empty = tmp_path / "empty"
    empty.mkdir()
    output = tmp_path / "combined.zip"

    with pytest.raises(NoFilesToArchiveError):
        export_targets(build_export_targets([project, empty]), output)
    assert not output.exists()


def test_write_zip_archive_sorts_entries(tmp_path: Path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("a")
    b.write_text("b")
    output = tmp_path / "out.zip"

    count = write_zip_archive(
        [ArchiveEntry(b, "z/b.txt"), ArchiveEntry(a, "a.txt")],
        output,
    )

    assert count == 2
    with zipfile.ZipFile(output) as zf:
        assert zf.namelist() == ["a.txt", "z/b.txt"]


def test_write_zip_archive_missing_source_removes_partial(tmp_path: Path):
    output = tmp_path / "out.zip"
    with pytest.raises(ArchiveWriteError):
        write_zip_archive([ArchiveEntry(tmp_path / "missing.txt", "missing.txt")], output)
    assert not output.exists()


def test_write_zip_archive_cancelled(tmp_path: Path):
    source = tmp_path / "a.txt"
    source.write_text("a")
    output = tmp_path / "out.zip"
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        write_zip_archive([ArchiveEntry(source, "a.txt")], output, cancel=cancel)
    assert not output.exists()


def test_dedupe_labels():
    assert dedupe_labels(["a", "b", "a", "a"]) == ["a", "b", "a-2", "a-3"]
    assert dedupe_labels(["a", "a", "a-2", "a"]) == ["a", "a-2", "a-2-2", "a-3"]


def test_build_export_targets_errors(tmp_path: Path):
    with pytest.raises(NoWorkspaceError):
        build_export_targets([])
    with pytest.raises(NoWorkspaceError):
        build_export_targets([tmp_path / "missing"])
    file = tmp_path / "file.txt"
    file.write_text("x")
    with pytest.raises(NoWorkspaceError):
        build_export_targets([file])


def test_default_archive_name(tmp_path: Path):
    now = datetime(2025, 1, 2, 15, 30, 12)
    root = tmp_path / "myproject"
    assert default_archive_name(root, now=now) == "myproject-20250102-153012.zip"
    assert default_archive_name(root, now=now, template="{name}-{date}.zip") == (
        "myproject-2025-01-02.zip"
    )


@pytest.mark.parametrize("template", ["{name}-{foo}.zip", "{0}.zip", "{}.zip"])
def test_default_archive_name_rejects_unknown_placeholders(tmp_path: Path, template: str):
    with pytest.raises(ValueError, match="archive-name-template"):
        default_archive_name(tmp_path / "myproject", template=template)
