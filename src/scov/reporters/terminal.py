"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from itertools import chain
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from scov.models.coverage import CoverageStatistics, LineCoverageStatus
from scov.reporters.annotations import annotate_line, group_lines

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scov.config import ScovConfig
    from scov.models.coverage import CoverageSummary
    from scov.models.source_file import SourceFile

console = Console()

_LEVEL_ICONS = {"check": "[green]✓[/green]", "alert": "[yellow]⚠[/yellow]", "x": "[red]✗[/red]"}
_STATUS_STYLES = {
    LineCoverageStatus.COVERED: "green",
    LineCoverageStatus.UNCOVERED: "red",
    LineCoverageStatus.NEVER: "dim",
    LineCoverageStatus.SKIPPED: "yellow",
}


def overall_statistics(files: Mapping[str, SourceFile]) -> CoverageStatistics:
    """Return statistics over the lines of every file."""
    return CoverageStatistics.from_lines(chain.from_iterable(f.lines for f in files.values()))


class CLIReporter:
    """Rich terminal output for coverage snapshots."""

    def __init__(self) -> None:
        self.console = console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def _get_coverage_color(self, percentage: float, config: ScovConfig) -> str:
        if percentage > config.display.good_threshold:
            return "green"
        if percentage > config.display.warn_threshold:
            return "yellow"
        return "red"

    def print_summary(self, file_name: str, summary: CoverageSummary) -> None:
        """Print the one-line status summary of a file."""
        icon = _LEVEL_ICONS.get(summary.level, _LEVEL_ICONS["x"])
        self.console.print(f"{icon} [bold]{summary.text}[/bold] {file_name}")
        self.console.print(f"  [dim]{summary.tooltip}[/dim]")

    def print_coverage_table(self, files: Mapping[str, SourceFile], config: ScovConfig) -> None:
        """Print a per-file statistics table with an overall row."""
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Relevant", justify="right")
        table.add_column("Covered", justify="right")
        table.add_column("Missed", justify="right")
        table.add_column("Strength", justify="right")
        table.add_column("Coverage", justify="right")

        for file_name in sorted(files):
            stats = files[file_name].statistics
            color = self._get_coverage_color(stats.percentage, config)
            table.add_row(
                file_name,
                str(stats.total_lines),
                str(stats.covered_lines),
                str(stats.uncovered_lines),
                f"{stats.strength:.2f}",
                f"[{color}]{stats.percentage:.1f}%[/{color}]",
            )

        overall = overall_statistics(files)
        color = self._get_coverage_color(overall.percentage, config)
        table.add_section()
        table.add_row(
            "[bold]Overall[/bold]",
            str(overall.total_lines),
            str(overall.covered_lines),
            str(overall.uncovered_lines),
            f"{overall.strength:.2f}",
            f"[bold {color}]{overall.percentage:.1f}%[/bold {color}]",
        )

        self.console.print(table)

    def print_source_file(self, source_file: SourceFile, config: ScovConfig) -> None:
        """Print the visible lines of a file with their annotations."""
        groups = group_lines(source_file, config.coverage)
        visible = {
            line.line_number
            for line in chain(groups.covered, groups.uncovered, groups.uncovered_branches)
        }
        branch_lines = {line.line_number for line in groups.uncovered_branches}

        table = Table(title=source_file.file_name, title_style="bold cyan")
        table.add_column("Line", justify="right")
        table.add_column("Status")
        table.add_column("Hits", justify="right")
        table.add_column("Details")

        for line in source_file.lines:
            if line.line_number not in visible:
                continue
            style = _STATUS_STYLES[line.status]
            status = line.status.value
            if line.line_number in branch_lines:
                status = "uncovered branch"
            details = [
                a.after or a.hover
                for a in annotate_line(line, show_counts=config.coverage.show_counts)[1:]
            ]
            table.add_row(
                str(line.line_number),
                f"[{style}]{status}[/{style}]",
                "" if line.hit_count is None else str(line.hit_count),
                ", ".join(details),
            )

        self.console.print(table)
        self.print_summary(
            source_file.file_name,
            source_file.summary(
                good_threshold=config.display.good_threshold,
                warn_threshold=config.display.warn_threshold,
            ),
        )


# Singleton instance for easy import
reporter = CLIReporter()
