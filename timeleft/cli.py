"""
TIMELEFT CLI — The Interface

Setup:
  - timeleft total <n>                 (set total steps)
  - timeleft add-total / sub-total     (adjust total steps)
  - timeleft start-at <date> <time>    (backdate the start)
  - timeleft start                     (begin tracking)

Tracking:
  - timeleft done / undo               (adjust completed steps)
  - timeleft progress <n>              (set completed steps)
  - timeleft measure                   (record a measurement now)
  - timeleft show / watch              (current estimate, once or live)
  - timeleft reset                     (back to setup)
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table

from timeleft.config_loader import ConfigError, TimeleftConfig, load_config, timeleft_home
from timeleft.estimator import estimate
from timeleft.feedback import FeedbackBus, FeedbackEvent
from timeleft.formatting import combine_date_and_time
from timeleft.identity import BANNER, __codename__, __tagline__, __version__
from timeleft.render import render
from timeleft.state import STATE_VERSION, TaskState
from timeleft.store import StateStore, utcnow

# Load .env from current directory or home
load_dotenv()
load_dotenv(Path.home() / ".timeleft" / ".env")

app = typer.Typer(
    name="timeleft",
    help=f"{__codename__} — {__tagline__}\nLinear time-left estimate for a single task.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

FEEDBACK_STYLE = {"error": "red", "success": "green", "info": "cyan"}


def version_callback(value: bool):
    if value:
        console.print(f"{__codename__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    pass


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------


def _print_banner():
    console.print(f"[bright_green]{BANNER}[/]")
    console.print(f"  [dim]v{__version__} — {__tagline__}[/]\n")


# ---------------------------------------------------------------------------
# Commands: setup
# ---------------------------------------------------------------------------

@app.command()
def total(
    value: int = typer.Argument(..., help="Total number of steps"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Set the total number of steps."""
    store, _ = _open_store(verbose)
    _apply(store, store.set_total_steps, value)


@app.command("add-total")
def add_total(
    count: Optional[int] = typer.Argument(None, help="Steps to add (default: steps.total_increment)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Add steps to the total."""
    store, cfg = _open_store(verbose)
    delta = count if count is not None else cfg.steps.total_increment
    _apply(store, store.adjust_total_steps, delta)


@app.command("sub-total")
def sub_total(
    count: Optional[int] = typer.Argument(None, help="Steps to remove (default: steps.total_increment)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Remove steps from the total."""
    store, cfg = _open_store(verbose)
    delta = count if count is not None else cfg.steps.total_increment
    _apply(store, store.adjust_total_steps, -delta)


@app.command("start-at")
def start_at(
    date: str = typer.Argument(..., help="Local date, YYYY-MM-DD"),
    at: str = typer.Argument(..., metavar="TIME", help="Local time, HH:MM[:SS]"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Set when work on the task began."""
    store, _ = _open_store(verbose)
    when = combine_date_and_time(date, at)
    if when is None:
        console.print(f"[red]Not a valid date and time: {date} {at}[/]")
        raise typer.Exit(1)
    _apply(store, store.set_start_date, when)


@app.command("start-now")
def start_now(
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Set the start (and the last measurement) to now."""
    store, _ = _open_store(verbose)
    _apply(store, store.start_now)


@app.command()
def start(
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Begin tracking progress."""
    store, _ = _open_store(verbose)
    _apply(store, store.begin)


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Clear progress and go back to setup."""
    store, _ = _open_store(verbose)
    if not yes and not typer.confirm("Reset the task?", default=False):
        raise typer.Exit()
    _apply(store, store.reset)


# ---------------------------------------------------------------------------
# Commands: tracking
# ---------------------------------------------------------------------------

@app.command()
def done(
    count: Optional[int] = typer.Argument(None, help="Steps completed (default: steps.completed_increment)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Mark steps as completed."""
    store, cfg = _open_store(verbose)
    delta = count if count is not None else cfg.steps.completed_increment
    _apply(store, store.adjust_completed_steps, delta)


@app.command()
def undo(
    count: Optional[int] = typer.Argument(None, help="Steps to take back (default: steps.completed_increment)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Take back completed steps."""
    store, cfg = _open_store(verbose)
    delta = count if count is not None else cfg.steps.completed_increment
    _apply(store, store.adjust_completed_steps, -delta)


@app.command()
def progress(
    value: int = typer.Argument(..., help="Number of completed steps"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Set the number of completed steps."""
    store, _ = _open_store(verbose)
    _apply(store, store.set_completed_steps, value)


@app.command()
def measure(
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Record a measurement now without changing the steps."""
    store, _ = _open_store(verbose)
    _apply(store, store.measure_now)


# ---------------------------------------------------------------------------
# Commands: display
# ---------------------------------------------------------------------------

@app.command()
def show(
    raw: bool = typer.Option(False, "--json", help="Print the stored state as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Show the current state and estimate."""
    store, _ = _open_store(verbose)
    state = store.load()
    if raw:
        console.print_json(state.to_json())
        return
    console.print(_view(state))


@app.command()
def watch(
    refresh: Optional[float] = typer.Option(None, "--refresh", "-r", help="Seconds between repaints"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Live view of the estimate. Ctrl-C to quit."""
    store, cfg = _open_store(verbose)
    interval = refresh if refresh and refresh > 0 else cfg.watch.refresh_seconds

    with Live(_view(store.load()), console=console, auto_refresh=False) as live:
        try:
            while True:
                time.sleep(interval)
                # Other invocations may have written the file since the last tick
                live.update(_view(store.load()), refresh=True)
        except KeyboardInterrupt:
            logger.debug("[WATCH] Stopped")


@app.command()
def config(
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Show the effective configuration."""
    _print_banner()
    store, cfg = _open_store(verbose)

    table = Table(title="Configuration", border_style="cyan")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Home", str(timeleft_home()))
    table.add_row("State file", str(store.path))
    table.add_row("State file exists", "[green]✓[/]" if store.path.exists() else "[dim]✗[/]")
    table.add_row("Schema version", str(STATE_VERSION))
    table.add_row("Total increment", str(cfg.steps.total_increment))
    table.add_row("Completed increment", str(cfg.steps.completed_increment))
    table.add_row("Watch refresh", f"{cfg.watch.refresh_seconds}s")

    console.print(table)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _open_store(verbose: bool) -> tuple[StateStore, TimeleftConfig]:
    _configure_logging(verbose)
    try:
        cfg = load_config()
    except ConfigError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    bus = FeedbackBus()
    bus.subscribe(_print_feedback)
    return StateStore(cfg.storage.state_path, bus=bus), cfg


def _print_feedback(event: FeedbackEvent) -> None:
    style = FEEDBACK_STYLE.get(event.kind, "white")
    console.print(f"[{style}]{event.message}[/]")


def _view(state: TaskState):
    return render(state, estimate(state), utcnow())


def _apply(store: StateStore, mutator: Callable[..., TaskState], *args: Any) -> None:
    """Run one mutator against the persisted state, render the result."""
    try:
        state = mutator(store.load(), *args)
    except OSError as e:
        console.print(f"[red]Could not save state to {store.path}: {e}[/]")
        raise typer.Exit(1)

    console.print(_view(state))
    if store.last_transition is not None and not store.last_transition.accepted:
        raise typer.Exit(1)


def _log_sink(msg) -> None:
    err_console.print(f"[dim]{escape(str(msg).rstrip())}[/]", highlight=False)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    if verbose:
        logger.add(
            _log_sink,
            level="DEBUG",
            format="{time:HH:mm:ss} | {level:<7} | {message}",
        )
    else:
        logger.add(
            _log_sink,
            level="WARNING",
            format="{message}",
        )


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
