"""Settings file support for tf-affected using TOML.

A repository may carry a ``.tf-affected.toml`` at its root::

    [resolver]
    resolve_root = true
    ignore_paths = [".", "docs"]

    [filter]
    files = ["**/*.tf", "**/*.tfvars"]
    files_ignore = ["**/README.md"]

Values given on the command line or through the environment take
precedence over the file.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .config import DEFAULT_IGNORED_PATHS, config_file_for

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """The settings file is malformed or holds values of the wrong type."""


DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "resolver": {
        "resolve_root": False,
        "ignore_paths": list(DEFAULT_IGNORED_PATHS),
    },
    "filter": {
        "files": [],
        "files_ignore": [],
    },
}

_EXPECTED_TYPES: Dict[str, Dict[str, type]] = {
    "resolver": {"resolve_root": bool, "ignore_paths": list},
    "filter": {"files": list, "files_ignore": list},
}


def _validate(section: str, values: Any, source: Path) -> Dict[str, Any]:
    if not isinstance(values, dict):
        raise ConfigError(f"{source}: [{section}] must be a table")

    validated: Dict[str, Any] = {}
    for key, value in values.items():
        expected = _EXPECTED_TYPES[section].get(key)
        if expected is None:
            logger.warning("Unknown setting '%s.%s' in %s", section, key, source)
            continue
        if not isinstance(value, expected):
            raise ConfigError(f"{source}: '{section}.{key}' must be a {expected.__name__}")
        if expected is list and not all(isinstance(item, str) for item in value):
            raise ConfigError(f"{source}: '{section}.{key}' must be a list of strings")
        validated[key] = value
    return validated


def load_settings(root: Path, config_file: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Load settings for the tree at *root*, falling back to defaults.

    Args:
        root: Repository root searched for ``.tf-affected.toml``.
        config_file: Explicit settings file; it must exist.

    Returns:
        ``DEFAULT_SETTINGS`` updated with the file's ``[resolver]`` and
        ``[filter]`` tables.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    path = config_file or config_file_for(root)

    if not path.exists():
        if config_file is not None:
            raise ConfigError(f"Settings file not found: {path}")
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    for section in settings:
        if section in data:
            settings[section].update(_validate(section, data[section], path))

    logger.debug("Loaded settings from %s", path)
    return settings
