"""Core data models shared by the resolver, the trace and the host layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Tuple

from .config import DEFAULT_IGNORED_PATHS

DirectoryRole = Literal["shared-module", "project-module", "project"]

ResolutionAction = Literal[
    "discovered",
    "module_dependency",
    "project_dependency",
    "direct_project",
]


@dataclass
class ResolverConfig:
    resolve_root: bool = False
    ignored_paths: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_PATHS))


@dataclass(frozen=True)
class ModuleReference:
    """A ``source = "..."`` declaration found in an infrastructure file."""
    declaring_file: str
    source: str


@dataclass(frozen=True)
class ResolutionStep:
    step: int
    action: ResolutionAction
    paths: Tuple[str, ...]
    elapsed_ms: float


@dataclass
class TraceSummary:
    total_steps: int
    total_paths: int
    duration_ms: float
    by_action: Dict[str, int] = field(default_factory=dict)


@dataclass
class ResolutionReport:
    changed_files: List[str]
    projects: List[str]
    summary: TraceSummary
    steps: List[ResolutionStep] = field(default_factory=list)
