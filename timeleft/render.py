"""
TIMELEFT Render

Builds rich renderables from a TaskState and its estimate. Pure data in,
renderable out: nothing here reads files or mutates state.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from timeleft.estimator import EstimateResult
from timeleft.formatting import PLACEHOLDER, format_datetime, format_duration
from timeleft.state import Mode, TaskState


def _remaining_cell(estimation: EstimateResult | None) -> str:
    if estimation is None:
        return f"⏱ {PLACEHOLDER}"
    if estimation.is_overdue:
        return f"[red]overdue by {format_duration(-estimation.remaining_time)}[/]"
    return f"⏱ {format_duration(estimation.remaining_time)}"


def _time_left_cell(estimation: EstimateResult | None, now: datetime) -> str:
    if estimation is None:
        return f"⏱ {PLACEHOLDER}"
    left = estimation.time_left(now)
    if left.total_seconds() < 0:
        return f"[red]overdue by {format_duration(-left)}[/]"
    return f"[bold green]⏱ {format_duration(left)}[/]"


def render_setup(state: TaskState) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Start", format_datetime(state.start_date) if state.start_date else "[dim]now, on start[/]")
    table.add_row("Total steps", str(state.total_steps))
    table.add_row("Completed", str(state.completed_steps))

    hint = "[dim]Run [bold]timeleft start[/] to begin tracking.[/]"
    if state.total_steps < 1:
        hint = "[yellow]Set the total steps with [bold]timeleft total N[/].[/]"

    return Panel(Group(table, Text(""), hint), title="Setup", border_style="cyan")


def render_tracking(state: TaskState, estimation: EstimateResult | None, now: datetime) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()

    table.add_row("Steps", f"{state.completed_steps}/{state.total_steps}")
    table.add_row(
        "Remaining steps",
        str(estimation.remaining_steps) if estimation else PLACEHOLDER,
    )
    table.add_row("Started", format_datetime(state.start_date))
    table.add_row("Last measurement", format_datetime(state.last_progress_update))
    table.add_row("", "")
    table.add_row("Elapsed", f"⏱ {format_duration(estimation.elapsed if estimation else None)}")
    table.add_row("Total estimated", f"⏱ {format_duration(estimation.total_estimated if estimation else None)}")
    table.add_row("Remaining", _remaining_cell(estimation))
    table.add_row(
        "Estimated end",
        format_datetime(estimation.estimated_end_date) if estimation else PLACEHOLDER,
    )
    table.add_row("Time left", _time_left_cell(estimation, now))

    parts = [table]
    if state.total_steps > 0:
        parts.append(Text(""))
        parts.append(ProgressBar(total=state.total_steps, completed=state.completed_steps))

    border = "red" if estimation and estimation.is_overdue else "green"
    return Panel(Group(*parts), title="Tracking", border_style=border)


def render(state: TaskState, estimation: EstimateResult | None, now: datetime) -> Panel:
    """Pick the view for the current mode."""
    if state.mode is Mode.TRACKING:
        return render_tracking(state, estimation, now)
    return render_setup(state)
