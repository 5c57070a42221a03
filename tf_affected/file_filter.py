"""Glob matching and include/exclude filtering of changed-file lists.

Patterns use gitignore-style wildcards (``*``, ``**``, ``?``, character
classes) through :mod:`pathspec`. A pattern without a slash matches the
file name at any depth, so ``*.tf`` selects every Terraform file.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, List, Sequence

import pathspec

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> pathspec.GitIgnoreSpec:
    return pathspec.GitIgnoreSpec.from_lines([pattern])


def matches_glob(path: str, pattern: str) -> bool:
    """Return True if *path* matches the glob *pattern*."""
    if not pattern:
        return False
    return _compile(pattern).match_file(path)


def _contains_segments(path: str, exclude: str) -> bool:
    parts = path.strip("/").split("/")
    wanted = exclude.strip("/").split("/")
    size = len(wanted)
    return any(parts[i:i + size] == wanted for i in range(len(parts) - size + 1))


def matches_exclude(path: str, excludes: Iterable[str]) -> bool:
    """Exclusions match as a glob or as whole consecutive segments of *path*.

    ``.git`` excludes ``.git/config`` but not ``.github/workflows/ci.yml``.
    """
    return any(p and (matches_glob(path, p) or _contains_segments(path, p)) for p in excludes)


class FileFilter:
    """Filter file lists with include and exclude glob patterns.

    Exclusion wins over inclusion. A pattern starting with ``!`` matches
    every file that does *not* match the remainder of the pattern. With no
    include patterns, every file that survives exclusion is kept.
    """

    @staticmethod
    def _matches_any(path: str, patterns: Sequence[str]) -> bool:
        for pattern in patterns:
            if pattern.startswith("!"):
                if not matches_glob(path, pattern[1:]):
                    return True
            elif matches_glob(path, pattern):
                return True
        return False

    def filter(
        self,
        files: Sequence[str],
        include_patterns: Sequence[str] = (),
        exclude_patterns: Sequence[str] = (),
    ) -> List[str]:
        if not files:
            return []

        kept: List[str] = []
        for path in files:
            if exclude_patterns and self._matches_any(path, exclude_patterns):
                logger.debug("Excluded %s", path)
                continue
            if include_patterns and not self._matches_any(path, include_patterns):
                continue
            kept.append(path)
        return kept
