"""Rich progress display for audit runs."""

from __future__ import annotations

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from a11ybot.schemas.audit import AuditResult

console = Console()


class AuditProgress:
    """Tracks one audit's steps with a single spinner line."""

    def __init__(self, label: str) -> None:
        self._label = label
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id: int | None = None

    def __enter__(self) -> "AuditProgress":
        self._progress.__enter__()
        self._task_id = self._progress.add_task(f"[cyan]{self._label}[/]", total=None)
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def update(self, status: str) -> None:
        """Show the current step next to the label."""
        if self._task_id is not None:
            self._progress.update(self._task_id, description=f"[cyan]{self._label}[/] — {status}")

    def finish(self) -> None:
        if self._task_id is not None:
            self._progress.update(
                self._task_id, description=f"[green]✓ {self._label}[/]", completed=True,
            )

    def fail(self, error: str) -> None:
        if self._task_id is not None:
            self._progress.update(
                self._task_id, description=f"[red]✗ {self._label}: {error}[/]", completed=True,
            )


def score_style(score: int) -> str:
    # 90+ good, 70+ needs work
    if score >= 90:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def summary_table(result: AuditResult) -> Table:
    """A compact score + impact-count table for the terminal."""
    table = Table(title=f"Accessibility audit: {result.url}", show_header=True)
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    style = score_style(result.score)
    table.add_row("Score", f"[{style}]{result.score}/100[/]")
    table.add_row("Violations", str(result.total_violations))
    for impact, count in result.impact_counts.items():
        table.add_row(f"  {impact.value}", str(count))
    table.add_row("Suggestions", str(result.suggestions.total))
    table.add_row("Focus trap", ", ".join(i.kind.value for i in result.focus_trap) or "-")
    return table
