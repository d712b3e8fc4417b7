"""TOML configuration file reading.

Uses tomlkit, as the release tooling does for pyproject.toml, to read the
optional ``patch-release.toml`` file that holds per-repository input
defaults, so that a patches branch can be released without repeating its
inputs on every invocation.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError

CONFIG_FILE_NAME = "patch-release.toml"
CONFIG_TABLE = "patch-release"
CONFIG_KEYS = ("project_dir", "project_type", "project_name", "base_version")


def load_config_file(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Raises:
        ConfigurationError: If the file is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def get_input_defaults(doc: tomlkit.TOMLDocument) -> dict[str, str]:
    """Extract input defaults from the [patch-release] table.

    Values must be TOML strings; a bare ``base_version = 5.60`` would be read
    as the float 5.6 and is rejected.

    Raises:
        ConfigurationError: If [patch-release] is not a table, or on unknown
            keys or non-string values.
    """
    table = doc.get(CONFIG_TABLE, {})
    if not isinstance(table, Mapping):
        raise ConfigurationError(f"[{CONFIG_TABLE}] must be a table")
    defaults: dict[str, str] = {}
    for key, value in table.items():
        if key not in CONFIG_KEYS:
            raise ConfigurationError(
                f"Unknown key {key!r} in [{CONFIG_TABLE}]; "
                f"expected one of: {', '.join(CONFIG_KEYS)}"
            )
        if not isinstance(value, str):
            raise ConfigurationError(
                f"[{CONFIG_TABLE}].{key} must be a string, e.g. {key} = \"{value}\""
            )
        defaults[key] = str(value)
    return defaults


def read_input_defaults(workspace_root: Path) -> dict[str, str]:
    """Read input defaults from the workspace config file, if there is one."""
    path = workspace_root / CONFIG_FILE_NAME
    if not path.is_file():
        return {}
    return get_input_defaults(load_config_file(path))
