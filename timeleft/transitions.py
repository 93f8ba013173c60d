"""
TIMELEFT Transitions

Pure state mutations. Every function takes the current TaskState plus the
moment of the interaction and returns a Transition holding the resulting
state and an advisory message. Rejected mutations hand back the input
state untouched with an "error" message; nothing here raises for user
mistakes, and nothing here touches disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from timeleft.feedback import FeedbackKind
from timeleft.state import Mode, TaskState, clamp_steps, default_state


@dataclass(frozen=True)
class Transition:
    state: TaskState
    kind: FeedbackKind
    message: str

    @property
    def accepted(self) -> bool:
        return self.kind != "error"


def _accept(state: TaskState, message: str, kind: FeedbackKind = "success") -> Transition:
    return Transition(state=state, kind=kind, message=message)


def _reject(state: TaskState, message: str) -> Transition:
    return Transition(state=state, kind="error", message=message)


def _with_steps(state: TaskState, total: int, completed: int, **update) -> TaskState:
    total, completed = clamp_steps(total, completed)
    return state.model_copy(update={"total_steps": total, "completed_steps": completed, **update})


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def adjust_total_steps(state: TaskState, delta: int) -> Transition:
    new = _with_steps(state, state.total_steps + delta, state.completed_steps)
    return _accept(new, f"Total steps: {new.total_steps}")


def set_total_steps(state: TaskState, value: int) -> Transition:
    new = _with_steps(state, value, state.completed_steps)
    return _accept(new, f"Total steps: {new.total_steps}")


def adjust_completed_steps(state: TaskState, delta: int, now: datetime) -> Transition:
    """Apply delta, clamp to [0, total] and stamp the measurement time."""
    new = _with_steps(
        state, state.total_steps, state.completed_steps + delta, last_progress_update=now,
    )
    return _accept(new, f"Completed {new.completed_steps}/{new.total_steps}")


def set_completed_steps(state: TaskState, value: int, now: datetime) -> Transition:
    new = _with_steps(state, state.total_steps, value, last_progress_update=now)
    return _accept(new, f"Completed {new.completed_steps}/{new.total_steps}")


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

def begin(state: TaskState, now: datetime) -> Transition:
    """Move from configuration to tracking."""
    if state.mode is Mode.TRACKING:
        return _reject(state, "Already tracking")
    if state.total_steps < 1:
        return _reject(state, "Set the total steps before starting")
    if state.start_date is not None and state.start_date > now:
        return _reject(state, "Start date is in the future")

    new = state.model_copy(update={
        "mode": Mode.TRACKING,
        "start_date": state.start_date or now,
        "last_progress_update": now,
    })
    return _accept(new, "Tracking started")


def reset(state: TaskState) -> Transition:
    return _accept(default_state(), "Reset", kind="info")


def set_start_date(state: TaskState, when: datetime, now: datetime) -> Transition:
    if state.mode is Mode.TRACKING:
        if when > now:
            return _reject(state, "Start date is in the future")
        if state.last_progress_update is not None and when > state.last_progress_update:
            return _reject(state, "Start date is after the last measurement")
    return _accept(state.model_copy(update={"start_date": when}), "Start date updated")


def start_now(state: TaskState, now: datetime) -> Transition:
    new = state.model_copy(update={"start_date": now, "last_progress_update": now})
    return _accept(new, "Start set to now")


def measure_now(state: TaskState, now: datetime) -> Transition:
    """Record a measurement without changing the step counters."""
    if state.mode is not Mode.TRACKING:
        return _reject(state, "Start tracking first")
    return _accept(state.model_copy(update={"last_progress_update": now}), "Measured", kind="info")
