"""Output helpers: JSON, GitHub Actions outputs, and rich trace rendering."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import List, Sequence

from rich.markup import escape
from rich.table import Table

from .models import TraceSummary
from .telemetry import ResolutionTrace


def projects_to_json(projects: Sequence[str]) -> str:
    return json.dumps(list(projects))


def write_github_output(name: str, value: str, output_file: Path) -> None:
    """Append an output to the GitHub Actions ``$GITHUB_OUTPUT`` file."""
    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
        entry = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
    else:
        entry = f"{name}={value}\n"

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(entry)


def render_trace_table(trace: ResolutionTrace) -> Table:
    table = Table(title="Dependency Resolution Trace", show_lines=False)
    table.add_column("Step", justify="right", style="cyan")
    table.add_column("+ms", justify="right", style="dim")
    table.add_column("Action", style="magenta")
    table.add_column("Paths")

    for step in trace.steps:
        table.add_row(
            str(step.step),
            f"{step.elapsed_ms:.1f}",
            step.action,
            "\n".join(escape(p) for p in step.paths),
        )
    return table


def summary_lines(summary: TraceSummary) -> List[str]:
    lines = [
        f"Total steps: {summary.total_steps}",
        f"Total paths processed: {summary.total_paths}",
        f"Duration: {summary.duration_ms:.1f}ms",
    ]
    for action, count in summary.by_action.items():
        lines.append(f"  {action}: {count}")
    return lines
