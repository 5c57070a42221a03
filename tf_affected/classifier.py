"""Path-lexical classification of directories into resolution roles.

The classifier never touches the file system. It looks only at the
segments of a normalised, ``/``-separated path:

- a segment named ``modules`` (or ending in ``modules``, e.g. ``_modules``,
  ``shared-modules``) marks a *shared module*;
- a last segment named ``module`` marks a *project module*;
- anything else is a *project* and is reported as-is.
"""

from __future__ import annotations

import posixpath
from typing import List

from .config import ROOT_DIRECTORY
from .models import DirectoryRole

SHARED_MODULE_SEGMENT = "modules"
PROJECT_MODULE_SEGMENT = "module"


def normalize_path(path: str) -> str:
    """Canonical form used for equality: ``/`` separators, no ``.``/``..`` noise, no trailing slash."""
    cleaned = path.replace("\\", "/").strip()
    if not cleaned:
        return ""
    return posixpath.normpath(cleaned)


def path_segments(path: str) -> List[str]:
    return [s for s in normalize_path(path).split("/") if s and s != "."]


def directory_of(file_path: str) -> str:
    """Containing directory of *file_path*; files at the tree root map to ``"."``."""
    return posixpath.dirname(normalize_path(file_path)) or ROOT_DIRECTORY


def is_shared_module_segment(segment: str) -> bool:
    return segment.endswith(SHARED_MODULE_SEGMENT)


def is_module_path(path: str) -> bool:
    """True if any segment of *path* is a module boundary (``module`` or ``modules``)."""
    return any(
        s == PROJECT_MODULE_SEGMENT or is_shared_module_segment(s)
        for s in path_segments(path)
    )


def classify(path: str) -> DirectoryRole:
    segments = path_segments(path)
    if any(is_shared_module_segment(s) for s in segments):
        return "shared-module"
    if segments and segments[-1] == PROJECT_MODULE_SEGMENT:
        return "project-module"
    return "project"
