"""Discovery of directories that reference a Terraform module.

Two lookup strategies are offered:

- :meth:`ReferenceExtractor.find_dependent_directories` is a broad content
  search for the module path as a plain substring. It is used for shared
  modules, which are referenced with many relative spellings from many
  depths. It can over-match but does not miss a chain.
- :meth:`ReferenceExtractor.find_referencing_directories` parses every
  ``source = "..."`` declaration and compares the resolved path with the
  module directory. It is used for per-project ``module`` directories.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Iterable, Iterator, List

from .classifier import directory_of, normalize_path
from .config import INFRA_EXTENSION, SEARCH_EXCLUDES
from .filesystem import FileStore
from .models import ModuleReference

logger = logging.getLogger(__name__)

SOURCE_PATTERN = re.compile(r'source\s*=\s*"([^"]+)"')


def iter_module_references(declaring_file: str, content: str) -> Iterator[ModuleReference]:
    for match in SOURCE_PATTERN.finditer(content):
        yield ModuleReference(declaring_file=declaring_file, source=match.group(1))


def resolve_source(reference: ModuleReference) -> str:
    """Resolve a declared source against the declaring file's directory."""
    base = directory_of(reference.declaring_file)
    return normalize_path(posixpath.join(base, reference.source))


def unique_directories(files: Iterable[str]) -> List[str]:
    seen = set()
    directories: List[str] = []
    for path in files:
        directory = directory_of(path)
        if directory not in seen:
            seen.add(directory)
            directories.append(directory)
    return directories


class ReferenceExtractor:
    """Find the directories whose infrastructure files point at a module."""

    def __init__(self, store: FileStore, extension: str = INFRA_EXTENSION) -> None:
        self.store = store
        self.extension = extension
        self.file_pattern = f"**/*{extension}"

    def find_dependent_directories(self, module_dir: str) -> List[str]:
        files = self.store.search_file_contents(module_dir, self.file_pattern, word_match=False)
        return unique_directories(files)

    def find_referencing_files(self, module_dir: str) -> List[str]:
        target = normalize_path(module_dir)
        referencing: List[str] = []

        for path in self.store.find_files(f"*{self.extension}", SEARCH_EXCLUDES):
            if directory_of(path) == target:
                continue
            try:
                content = self.store.read_file(path)
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue

            for reference in iter_module_references(path, content):
                if resolve_source(reference) == target:
                    referencing.append(path)
                    break

        return referencing

    def find_referencing_directories(self, module_dir: str) -> List[str]:
        return unique_directories(self.find_referencing_files(module_dir))
