"""Constants and environment-derived settings for tf-affected."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

INFRA_EXTENSION = ".tf"
PROVIDER_FILE = "provider.tf"

ROOT_DIRECTORY = "."
DEFAULT_IGNORED_PATHS: List[str] = [ROOT_DIRECTORY]

# Skipped while walking the tree for content searches.
SEARCH_EXCLUDES: List[str] = [".git", "node_modules", ".terraform"]

CONFIG_FILENAME = ".tf-affected.toml"
CONFIG_ENV_VAR = "TF_AFFECTED_CONFIG"
GITHUB_OUTPUT_ENV_VAR = "GITHUB_OUTPUT"
OUTPUT_NAME = "changed-directories"


def config_file_for(root: Path) -> Path:
    """Return the settings file for *root*, honouring ``TF_AFFECTED_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return root / CONFIG_FILENAME


def github_output_file() -> Optional[Path]:
    value = os.environ.get(GITHUB_OUTPUT_ENV_VAR)
    return Path(value) if value else None
