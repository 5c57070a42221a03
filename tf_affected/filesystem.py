"""File store abstraction used by the resolver.

Two implementations satisfy the same contract:

- :class:`LocalFileStore` walks a real directory tree.
- :class:`InMemoryFileStore` serves a ``{path: content}`` mapping, used for
  fixtures and dry runs.

All paths handed in and out are relative to the store root and use ``/``
as separator.
"""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .config import SEARCH_EXCLUDES
from .file_filter import matches_exclude, matches_glob

logger = logging.getLogger(__name__)


def _contains(content: str, search_text: str, word_match: bool) -> bool:
    if word_match:
        return re.search(rf"\b{re.escape(search_text)}\b", content) is not None
    return search_text in content


def _matches_name(path: str, pattern: str) -> bool:
    return path.rsplit("/", 1)[-1] == pattern or matches_glob(path, pattern)


# ===================================================================
# Abstract File Store Interface
# ===================================================================

class FileStore(ABC):
    """Read-only view over a file tree."""

    @abstractmethod
    def find_files(self, pattern: str, exclude_paths: Optional[Sequence[str]] = None) -> List[str]:
        """Return every file whose name equals *pattern* or whose path matches it as a glob."""
        ...

    @abstractmethod
    def search_file_contents(
        self,
        search_text: str,
        file_pattern: Optional[str] = None,
        word_match: bool = False,
    ) -> List[str]:
        """Return files (optionally limited to *file_pattern*) whose content contains *search_text*."""
        ...

    @abstractmethod
    def read_file(self, path: str) -> str:
        """Return the content of *path*; raise ``FileNotFoundError`` if it does not exist."""
        ...

    def _search(
        self,
        candidates: Iterable[str],
        search_text: str,
        file_pattern: Optional[str],
        word_match: bool,
    ) -> List[str]:
        matching: List[str] = []
        for path in candidates:
            if file_pattern and not matches_glob(path, file_pattern):
                continue
            try:
                content = self.read_file(path)
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue
            if _contains(content, search_text, word_match):
                matching.append(path)
        return matching


# ===================================================================
# Local (on-disk) File Store
# ===================================================================

class LocalFileStore(FileStore):
    """File store backed by a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _walk(self, exclude_paths: Sequence[str] = ()) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            base = Path(dirpath)
            kept_dirs = []
            for name in sorted(dirnames):
                rel = (base / name).relative_to(self.root).as_posix()
                if not matches_exclude(rel, exclude_paths):
                    kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for name in sorted(filenames):
                rel = (base / name).relative_to(self.root).as_posix()
                if not matches_exclude(rel, exclude_paths):
                    yield rel

    def find_files(self, pattern: str, exclude_paths: Optional[Sequence[str]] = None) -> List[str]:
        return [p for p in self._walk(exclude_paths or ()) if _matches_name(p, pattern)]

    def search_file_contents(
        self,
        search_text: str,
        file_pattern: Optional[str] = None,
        word_match: bool = False,
    ) -> List[str]:
        return self._search(self._walk(SEARCH_EXCLUDES), search_text, file_pattern, word_match)

    def read_file(self, path: str) -> str:
        full_path = self.root / path
        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        return full_path.read_text(encoding="utf-8", errors="ignore")


# ===================================================================
# In-memory File Store
# ===================================================================

class InMemoryFileStore(FileStore):
    """File store over a ``{relative path: content}`` mapping."""

    def __init__(self, files: Dict[str, str]) -> None:
        self.files = dict(files)

    @classmethod
    def from_tree(cls, tree: Dict[str, object]) -> "InMemoryFileStore":
        """Build a store from nested dicts; string values are file contents."""
        return cls(flatten_tree(tree))

    def find_files(self, pattern: str, exclude_paths: Optional[Sequence[str]] = None) -> List[str]:
        excludes = exclude_paths or ()
        return [
            path
            for path in self.files
            if not matches_exclude(path, excludes) and _matches_name(path, pattern)
        ]

    def search_file_contents(
        self,
        search_text: str,
        file_pattern: Optional[str] = None,
        word_match: bool = False,
    ) -> List[str]:
        return self._search(list(self.files), search_text, file_pattern, word_match)

    def read_file(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(f"File not found: {path}")
        return self.files[path]


def flatten_tree(tree: Dict[str, object], base_path: str = "") -> Dict[str, str]:
    """Flatten ``{"dir": {"file.tf": "..."}}`` into ``{"dir/file.tf": "..."}``."""
    files: Dict[str, str] = {}
    for name, value in tree.items():
        path = f"{base_path}/{name}" if base_path else name
        if isinstance(value, dict):
            files.update(flatten_tree(value, path))
        else:
            files[path] = str(value)
    return files
