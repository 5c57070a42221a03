"""Step-by-step trace of a single resolution run.

The resolver appends a :class:`~tf_affected.models.ResolutionStep` for every
decision it takes. The trace is handed back to the caller, who decides
whether to print it, log it, or serialise it. It never influences the
resolver's result.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .models import ResolutionAction, ResolutionStep, TraceSummary

PathArg = Union[str, Iterable[str]]


class ResolutionTrace:
    """Append-only record of how the affected projects were reached."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._start = clock()
        self._steps: List[ResolutionStep] = []

    def _elapsed_ms(self) -> float:
        return round((self._clock() - self._start) * 1000, 3)

    def record(self, action: ResolutionAction, paths: PathArg) -> Optional[ResolutionStep]:
        """Append a step; empty path sets are not recorded."""
        path_tuple = (paths,) if isinstance(paths, str) else tuple(paths)
        if not path_tuple:
            return None

        step = ResolutionStep(
            step=len(self._steps) + 1,
            action=action,
            paths=path_tuple,
            elapsed_ms=self._elapsed_ms(),
        )
        self._steps.append(step)
        return step

    def record_discovered(self, paths: PathArg) -> Optional[ResolutionStep]:
        return self.record("discovered", paths)

    def record_module_dependency(self, paths: PathArg) -> Optional[ResolutionStep]:
        """A shared module change led to these referencing directories."""
        return self.record("module_dependency", paths)

    def record_project_dependency(self, paths: PathArg) -> Optional[ResolutionStep]:
        """A project ``module`` change led to these project directories."""
        return self.record("project_dependency", paths)

    def record_direct_project(self, path: str) -> Optional[ResolutionStep]:
        return self.record("direct_project", [path])

    @property
    def steps(self) -> List[ResolutionStep]:
        return list(self._steps)

    def summary(self) -> TraceSummary:
        by_action: Dict[str, int] = {}
        for step in self._steps:
            by_action[step.action] = by_action.get(step.action, 0) + len(step.paths)

        return TraceSummary(
            total_steps=len(self._steps),
            total_paths=sum(len(step.paths) for step in self._steps),
            duration_ms=self._elapsed_ms(),
            by_action=by_action,
        )

    def dependency_chain(self, target: str) -> List[str]:
        """Explain why *target* was reached: the first step that mentions it."""
        for step in self._steps:
            if target in step.paths:
                return [f"{step.action}: {target}"]
        return []

    def log_steps(self, logger: logging.Logger) -> None:
        """Write the trace and its summary to *logger* at debug level."""
        if not self._steps:
            logger.debug("No dependency resolution steps recorded")
            return

        logger.debug("Dependency resolution trace")
        for step in self._steps:
            label = step.paths[0] if len(step.paths) == 1 else f"[{len(step.paths)} paths]"
            logger.debug("Step %d (+%.1fms): %s -> %s", step.step, step.elapsed_ms, step.action, label)
            if len(step.paths) > 1:
                for path in step.paths:
                    logger.debug("  - %s", path)

        summary = self.summary()
        logger.debug(
            "Summary: %d steps, %d paths, %.1fms",
            summary.total_steps, summary.total_paths, summary.duration_ms,
        )
        for action, count in summary.by_action.items():
            logger.debug("  %s: %d", action, count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": asdict(self.summary()),
            "steps": [
                {**asdict(step), "paths": list(step.paths)}
                for step in self._steps
            ],
        }
