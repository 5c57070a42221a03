"""Typer-based CLI for tf-affected."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__, config
from .changes import ChangeDetectionError, ChangeDetector, GitChangeSource, InvalidReferenceError
from .classifier import classify, normalize_path
from .config_manager import ConfigError, load_settings
from .file_filter import FileFilter
from .filesystem import LocalFileStore
from .models import ResolverConfig
from .reporting import projects_to_json, render_trace_table, summary_lines, write_github_output
from .resolver import ProjectResolver
from .telemetry import ResolutionTrace

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="🧭 tf-affected: find the Terraform projects impacted by a change.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"tf-affected v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log resolution details to stderr."),
):
    """tf-affected: resolve changed files to affected Terraform project directories."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )


def _load_settings_or_fail(root: Path, config_file: Optional[Path]) -> dict:
    try:
        return load_settings(root, config_file)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


@app.command("resolve")
def resolve(
    root: Path = typer.Option(Path("."), "--root", "-r", exists=True, file_okay=False, help="Repository root."),
    changed_files: Optional[List[str]] = typer.Option(
        None, "--changed-file", "-c", envvar="INPUT_CHANGED-FILES",
        help="Explicit changed file (repeatable). Skips git detection.",
    ),
    base: Optional[str] = typer.Option(None, "--base", envvar="INPUT_BASE-REF", help="Base revision for git diff."),
    head: Optional[str] = typer.Option(None, "--head", envvar="INPUT_HEAD-REF", help="Head revision for git diff."),
    files: Optional[List[str]] = typer.Option(
        None, "--files", envvar="INPUT_FILES", help="Include glob for changed files (repeatable)."
    ),
    files_ignore: Optional[List[str]] = typer.Option(
        None, "--files-ignore", envvar="INPUT_FILES-IGNORE", help="Exclude glob for changed files (repeatable)."
    ),
    resolve_root: Optional[bool] = typer.Option(
        None, "--resolve-root/--no-resolve-root", envvar="INPUT_RESOLVE-ROOT",
        help="Treat a change at the repository root as affecting every project.",
    ),
    ignore_paths: Optional[List[str]] = typer.Option(
        None, "--ignore-path", envvar="INPUT_IGNORE-PATHS", help="Directory never reported (repeatable)."
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to a .tf-affected.toml file."),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json."),
    show_trace: bool = typer.Option(False, "--trace", help="Print the resolution trace to stderr."),
    explain: Optional[str] = typer.Option(None, "--explain", help="Explain how a directory was reached."),
    github_output: bool = typer.Option(
        False, "--github-output", help="Append the result to the $GITHUB_OUTPUT file."
    ),
):
    """Resolve changed files to the affected project directories."""
    output_format = output_format.lower()
    if output_format not in {"text", "json"}:
        raise typer.BadParameter("Format must be one of: text, json", param_hint="--format")
    if bool(base) != bool(head):
        raise typer.BadParameter("--base and --head must be given together.")

    settings = _load_settings_or_fail(root, config_file)
    resolver_settings = settings["resolver"]
    filter_settings = settings["filter"]

    detector = ChangeDetector(GitChangeSource(root))
    try:
        detected = detector.detect_changed_files(files=changed_files, base=base, head=head)
    except (InvalidReferenceError, ChangeDetectionError) as exc:
        err_console.print(f"[red]❌ {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    logger.debug("Detected %d changed files", len(detected))

    include = files if files else filter_settings["files"]
    exclude = files_ignore if files_ignore else filter_settings["files_ignore"]
    filtered = FileFilter().filter(detected, include, exclude)
    logger.debug(
        "After filtering: %d files (include: %d patterns, exclude: %d patterns)",
        len(filtered), len(include), len(exclude),
    )

    resolver_config = ResolverConfig(
        resolve_root=resolve_root if resolve_root is not None else resolver_settings["resolve_root"],
        ignored_paths=ignore_paths if ignore_paths else resolver_settings["ignore_paths"],
    )
    trace = ResolutionTrace()
    projects = ProjectResolver(LocalFileStore(root)).resolve_affected_projects(
        filtered, resolver_config, trace
    )
    trace.log_steps(logger)

    if output_format == "json":
        typer.echo(projects_to_json(projects))
    else:
        console.print(f"Found [bold]{len(projects)}[/bold] affected project(s)")
        for project in projects:
            console.print(f"  - {escape(project)}")

    if show_trace:
        err_console.print(render_trace_table(trace))
        for line in summary_lines(trace.summary()):
            err_console.print(line)

    if explain:
        target = normalize_path(explain)
        chain = trace.dependency_chain(target)
        if chain:
            for entry in chain:
                err_console.print(f"🔍 {escape(entry)}")
        else:
            err_console.print(f"[yellow]{escape(target)} was not reached.[/yellow]")

    if github_output:
        output_file = config.github_output_file()
        if output_file is None:
            raise typer.BadParameter(f"${config.GITHUB_OUTPUT_ENV_VAR} is not set.", param_hint="--github-output")
        write_github_output(config.OUTPUT_NAME, projects_to_json(projects), output_file)


@app.command("projects")
def list_projects(
    root: Path = typer.Option(Path("."), "--root", "-r", exists=True, file_okay=False, help="Repository root."),
    as_json: bool = typer.Option(False, "--json", help="Print as a JSON list."),
):
    """List every deployable project directory in the repository."""
    projects = ProjectResolver(LocalFileStore(root)).find_all_projects()

    if as_json:
        typer.echo(projects_to_json(projects))
        return
    if not projects:
        typer.echo("No projects found.")
        raise typer.Exit(code=0)
    for project in projects:
        typer.echo(project)


@app.command("classify")
def classify_paths(
    paths: List[str] = typer.Argument(..., help="Directories to classify."),
):
    """Show the resolution role of each directory."""
    for path in paths:
        normalized = normalize_path(path) or config.ROOT_DIRECTORY
        typer.echo(f"{classify(normalized):<15} {normalized}")


if __name__ == "__main__":
    app()
