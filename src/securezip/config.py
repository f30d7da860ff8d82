"""
Project-level settings for SecureZip, read from TOML.

The first of `.securezip.toml`, `securezip.toml` or a `pyproject.toml` carrying a
`[tool.securezip]` table, found in the project root or any parent directory,
supplies defaults. Explicit command-line flags always beat the file, and the
file beats built-in defaults.

Example `.securezip.toml`::

    additional-excludes = ["**/*.md", "tmp/**"]
    include-node-modules = false
    archive-name-template = "{name}-{timestamp}.zip"
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class SecureZipConfig:
    """
    Settings found in a config file. `None` means the key was absent, so the
    caller's own default stays in effect.
    """

    additional_excludes: list[str] | None = None
    include_node_modules: bool | None = None
    archive_name_template: str | None = None


# Checked in this order in each directory.
_CONFIG_FILENAMES = (".securezip.toml", "securezip.toml", "pyproject.toml")

_SETTING_NAMES = frozenset(f.name for f in fields(SecureZipConfig))


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError):
        return False
    return "securezip" in data.get("tool", {})


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the nearest config file at or above `start_dir`, or `None`.

    A `pyproject.toml` only counts if it has a `[tool.securezip]` table.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for name in _CONFIG_FILENAMES:
            path = directory / name
            if not path.is_file():
                continue
            if name != "pyproject.toml" or _has_tool_table(path):
                return path
    return None


def load_config(config_path: Path) -> SecureZipConfig:
    """Read and validate a config file. Raises `ValueError` for badly typed values."""
    data: dict[str, Any] = tomllib.loads(config_path.read_text(encoding="utf-8"))
    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("securezip", {})
    return _parse_config_data(data)


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Lift keys of sub-tables such as `[export]` to the top level."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(cast(dict[str, Any], value))
        else:
            flat[key] = value
    return flat


def _parse_config_data(data: dict[str, Any]) -> SecureZipConfig:
    settings: dict[str, Any] = {}
    for key, value in _flatten(data).items():
        name = key.replace("-", "_")
        if name in _SETTING_NAMES:
            settings[name] = value
    config = SecureZipConfig(**settings)
    _validate(config)
    return config


def _validate(config: SecureZipConfig) -> None:
    excludes = config.additional_excludes
    if excludes is not None and (
        not isinstance(excludes, list) or not all(isinstance(p, str) for p in excludes)
    ):
        raise ValueError("additional-excludes must be a list of strings")
    if config.include_node_modules is not None and not isinstance(config.include_node_modules, bool):
        raise ValueError("include-node-modules must be true or false")
    if config.archive_name_template is not None and not isinstance(
        config.archive_name_template, str
    ):
        raise ValueError("archive-name-template must be a string")


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: SecureZipConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy config values onto `cli_opts` in place and return it.

    A value is copied only when the file sets it and the user did not pass the
    matching flag (its name is not in `explicit_flags`).
    """
    if config is None:
        return cli_opts

    for name in _SETTING_NAMES - explicit_flags:
        value = getattr(config, name)
        if value is not None and hasattr(cli_opts, name):
            setattr(cli_opts, name, value)
    return cli_opts
