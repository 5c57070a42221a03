"""Resolve changed files to the Terraform project directories they affect.

The module graph is never materialised. Each directory popped from the
worklist is classified by path, and the classification decides what
happens next:

- ``shared-module``: every directory whose ``.tf`` files mention the module
  path is pushed back onto the worklist, since it may itself be a module.
- ``project-module``: every project directory declaring ``source = "..."``
  that resolves to the module is affected. Module directories found this
  way are pushed onto the worklist instead of being reported.
- ``project``: the directory itself is affected.

A visited set guarantees each directory is handled once, so reference
cycles terminate.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Set

from .classifier import classify, directory_of, is_module_path, normalize_path
from .config import INFRA_EXTENSION, PROVIDER_FILE, ROOT_DIRECTORY, SEARCH_EXCLUDES
from .filesystem import FileStore
from .models import ResolutionReport, ResolverConfig
from .references import ReferenceExtractor, unique_directories
from .telemetry import ResolutionTrace

logger = logging.getLogger(__name__)


def _ordered_unique(items: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    result: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class ProjectResolver:
    """Worklist-driven transitive closure over implicit module references."""

    def __init__(
        self,
        store: FileStore,
        extension: str = INFRA_EXTENSION,
        provider_file: str = PROVIDER_FILE,
    ) -> None:
        self.store = store
        self.provider_file = provider_file
        self.references = ReferenceExtractor(store, extension=extension)

    def find_all_projects(self) -> List[str]:
        """Every directory holding a provider file, excluding module directories."""
        provider_files = self.store.find_files(self.provider_file, SEARCH_EXCLUDES)
        return [d for d in unique_directories(provider_files) if not is_module_path(d)]

    def resolve_affected_projects(
        self,
        changed_files: Sequence[str],
        config: Optional[ResolverConfig] = None,
        trace: Optional[ResolutionTrace] = None,
    ) -> List[str]:
        config = config or ResolverConfig()
        trace = trace if trace is not None else ResolutionTrace()
        ignored = {normalize_path(p) for p in config.ignored_paths}

        projects: List[str] = []
        visited: Set[str] = set()

        changed_dirs = _ordered_unique(directory_of(f) for f in changed_files if f)
        trace.record_discovered(changed_dirs)
        stack = list(changed_dirs)

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            if current == ROOT_DIRECTORY and config.resolve_root:
                logger.debug("Root directory changed; every project is affected")
                return [p for p in self.find_all_projects() if p not in ignored]

            if not current or current in ignored:
                logger.debug("Ignoring %s", current)
                continue

            role = classify(current)
            if role == "shared-module":
                dependents = self.references.find_dependent_directories(current)
                trace.record_module_dependency(dependents)
                stack.extend(d for d in dependents if d not in visited)
            elif role == "project-module":
                referencing = self.references.find_referencing_directories(current)
                direct = [d for d in referencing if classify(d) == "project"]
                nested = [d for d in referencing if classify(d) != "project"]
                trace.record_project_dependency(direct)
                trace.record_module_dependency(nested)
                projects.extend(direct)
                stack.extend(d for d in nested if d not in visited)
            else:
                trace.record_direct_project(current)
                projects.append(current)

        return _ordered_unique(p for p in projects if p not in ignored)

    def resolve(
        self,
        changed_files: Sequence[str],
        config: Optional[ResolverConfig] = None,
    ) -> ResolutionReport:
        """Resolve and bundle the result with its trace."""
        trace = ResolutionTrace()
        projects = self.resolve_affected_projects(changed_files, config, trace)
        return ResolutionReport(
            changed_files=list(changed_files),
            projects=projects,
            summary=trace.summary(),
            steps=trace.steps,
        )
