"""Tests for recognizing security-sensitive paths and patterns."""

from __future__ import annotations

import pytest

from securezip.file_resolver.sensitive import (
    build_sensitive_rules,
    is_sensitive_value,
    normalize_path_pattern,
)


def test_default_rules():
    rules = build_sensitive_rules()
    assert rules.dir_names == {".git", ".vscode"}
    assert rules.file_names == {".git", ".vscode", ".env"}
    assert rules.file_prefixes == {".env."}
    assert rules.extensions == {".pem", ".key", ".crt", ".pfx"}


def test_custom_directory_rule():
    rules = build_sensitive_rules(["node_modules/**", "", "/"])
    assert rules.dir_names == {"node_modules"}
    assert is_sensitive_value("node_modules/left-pad/index.js", rules)


@pytest.mark.parametrize(
    "value",
    [
        ".env",
        "config/.env.local",
        "certs/Server.PEM",
        ".git/config",
        "src\\.vscode\\settings.json",
        "**/*.pem",
        "/.git/",
    ],
)
def test_sensitive_values(value: str):
    assert is_sensitive_value(value, build_sensitive_rules()) is True


@pytest.mark.parametrize("value", ["README.md", ".envrc", "", "dist/**", ".github/workflows/ci.yml"])
def test_non_sensitive_values(value: str):
    assert is_sensitive_value(value, build_sensitive_rules()) is False


def test_normalize_path_pattern():
    assert normalize_path_pattern("\\\\a//b/") == "a/b"
    assert normalize_path_pattern("/") == ""
