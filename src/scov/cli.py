"""scov CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler

from scov import __version__
from scov.adapters.simplecov import SimpleCovAdapter, coverage_to_dict
from scov.config import load_config, validate_config
from scov.errors import CoverageLoadError
from scov.models.store import CoverageStore
from scov.reporters.terminal import overall_statistics, reporter
from scov.watchers.coverage import CoverageWatcher

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scov.config import ScovConfig
    from scov.models.source_file import SourceFile
    from scov.models.store import CoverageSnapshot

logger = logging.getLogger(__name__)

_PATH_OPTION_KWARGS: dict[str, Any] = {
    "default": ".",
    "type": click.Path(exists=True, file_okay=False, resolve_path=True),
    "help": "Project root directory.",
}


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _ci_mode(as_json: bool = False) -> bool:
    ctx = click.get_current_context()
    return (ctx.obj.get("ci", False) if ctx.obj else False) or as_json


def _load_valid_config(path: str) -> ScovConfig:
    config = load_config(path)
    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.exceptions.Exit(1)
    return config


def _load_source_files(config: ScovConfig) -> dict[str, SourceFile]:
    """Load and classify the project's result set, exiting on failure."""
    adapter = SimpleCovAdapter(config.coverage_path)
    resultset = adapter.find()
    if resultset is None:
        reporter.print_error(f"No coverage result set found in {config.coverage_path}")
        raise click.exceptions.Exit(1)
    logger.debug("Using result set %s", resultset)
    try:
        return adapter.load(resultset)
    except CoverageLoadError as exc:
        reporter.print_error(str(exc))
        raise click.exceptions.Exit(1) from exc


def _find_source_file(
    files: Mapping[str, SourceFile], name: str, root: Path
) -> SourceFile | None:
    """Look up *name* as stored, as a path under *root*, or by path suffix."""
    if name in files:
        return files[name]
    resolved = str((root / name).resolve())
    if resolved in files:
        return files[resolved]
    suffix = "/" + name.removeprefix("./")
    matches = [f for key, f in files.items() if key.endswith(suffix)]
    if len(matches) == 1:
        return matches[0]
    return None


def _statistics_payload(files: Mapping[str, SourceFile]) -> dict[str, Any]:
    return {
        "files": {name: asdict(files[name].statistics) for name in sorted(files)},
        "overall": asdict(overall_statistics(files)),
    }


def _source_file_payload(source_file: SourceFile) -> dict[str, Any]:
    return {
        "file_name": source_file.file_name,
        "statistics": asdict(source_file.statistics),
        "lines": [
            {
                "line_number": line.line_number,
                "hit_count": line.hit_count,
                "status": line.status.value,
                "branches": [
                    {"type": b.type, "hit_count": b.hit_count} for b in line.branches
                ],
            }
            for line in source_file.lines
        ],
    }


@click.group()
@click.option("--ci", is_flag=True, help="CI mode: machine-readable JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="scov")
@click.pass_context
def cli(ctx: click.Context, *, ci: bool, verbose: bool) -> None:
    """scov: merge and inspect SimpleCov line and branch coverage."""
    ctx.ensure_object(dict)
    ctx.obj["ci"] = ci
    _configure_logging(verbose=verbose)


@cli.command()
@click.option("--path", **_PATH_OPTION_KWARGS)
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of tables.")
def report(path: str, *, as_json: bool) -> None:
    """Show coverage statistics for every file in the result set."""
    config = _load_valid_config(path)
    files = _load_source_files(config)

    if _ci_mode(as_json):
        click.echo(json.dumps(_statistics_payload(files), indent=2))
        return

    if not files:
        reporter.print_warning("Result set contains no files.")
        return
    reporter.print_coverage_table(files, config)


@cli.command()
@click.argument("file_name")
@click.option("--path", **_PATH_OPTION_KWARGS)
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of tables.")
def show(file_name: str, path: str, *, as_json: bool) -> None:
    """Show classified lines and branches for FILE_NAME."""
    config = _load_valid_config(path)
    files = _load_source_files(config)

    source_file = _find_source_file(files, file_name, Path(config.root))
    if source_file is None:
        reporter.print_error(f"No coverage information found for {file_name}")
        raise click.exceptions.Exit(1)

    if _ci_mode(as_json):
        click.echo(json.dumps(_source_file_payload(source_file), indent=2))
        return

    reporter.print_source_file(source_file, config)


@cli.command()
@click.option("--path", **_PATH_OPTION_KWARGS)
@click.option(
    "--input",
    "input_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Result-set file to merge (default: look in the coverage directory).",
)
def merge(path: str, input_path: str | None) -> None:
    """Print the merged per-file coverage of all runs as JSON."""
    config = _load_valid_config(path)
    adapter = SimpleCovAdapter(config.coverage_path)

    resultset = Path(input_path) if input_path else adapter.find()
    if resultset is None:
        reporter.print_error(f"No coverage result set found in {config.coverage_path}")
        raise click.exceptions.Exit(1)

    try:
        merged = adapter.merged_coverage(resultset)
    except CoverageLoadError as exc:
        reporter.print_error(str(exc))
        raise click.exceptions.Exit(1) from exc

    click.echo(json.dumps(coverage_to_dict(merged), indent=2))


@cli.command()
@click.option("--path", **_PATH_OPTION_KWARGS)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between checks (default: watch.interval).",
)
@click.option(
    "--cycles", type=click.IntRange(min=1), default=None, help="Stop after this many checks."
)
def watch(path: str, interval: float | None, cycles: int | None) -> None:
    """Reload coverage whenever the result set changes and print a summary."""
    config = _load_valid_config(path)
    ci_mode = _ci_mode()
    store = CoverageStore()
    watcher = CoverageWatcher(config, store)

    def _on_refresh(snapshot: CoverageSnapshot) -> None:
        if ci_mode:
            payload = _statistics_payload(snapshot.files)
            payload["version"] = snapshot.version
            click.echo(json.dumps(payload))
            return
        if not snapshot.files:
            reporter.print_warning("No coverage loaded.")
            return
        reporter.print_info(f"Snapshot v{snapshot.version} from {snapshot.source}")
        reporter.print_coverage_table(snapshot.files, config)

    if not ci_mode:
        reporter.print_info(f"Watching {config.coverage_path} (Ctrl+C to stop)")
    try:
        watcher.watch(interval=interval, max_cycles=cycles, on_refresh=_on_refresh)
    except KeyboardInterrupt:
        reporter.print_info("Stopped.")


@cli.group("config")
def config_group() -> None:
    """Inspect `.scov.yml` configuration."""


@config_group.command("show")
@click.option("--path", **_PATH_OPTION_KWARGS)
def config_show(path: str) -> None:
    """Show the effective configuration."""
    config = load_config(path)
    data = asdict(config)
    data.pop("raw", None)
    click.echo(json.dumps(data, indent=2))

    errors = validate_config(config)
    for error in errors:
        reporter.print_error(error)
    if errors:
        raise click.exceptions.Exit(1)


def main() -> None:
    cli()
