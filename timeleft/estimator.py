"""
TIMELEFT Estimator

Linear extrapolation of the remaining time from the average pace so far.
Assumes the future rate equals the historical average: no smoothing and
no outlier rejection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from timeleft.state import TaskState


@dataclass(frozen=True)
class EstimateResult:
    elapsed: timedelta
    total_estimated: timedelta
    remaining_steps: int
    remaining_time: timedelta
    estimated_end_date: datetime
    completed_steps: int
    total_steps: int

    @property
    def is_overdue(self) -> bool:
        """True when the pace so far has already run past the linear estimate."""
        return self.remaining_time < timedelta(0)

    @property
    def progress(self) -> float:
        return self.completed_steps / self.total_steps

    def time_left(self, now: datetime) -> timedelta:
        """Countdown from `now` to the estimated end. Negative once it has passed."""
        return self.estimated_end_date - now


def is_estimable(state: TaskState) -> bool:
    return (
        state.total_steps > 0
        and 0 < state.completed_steps < state.total_steps
        and state.start_date is not None
        and state.last_progress_update is not None
        and state.start_date < state.last_progress_update
    )


def estimate(state: TaskState) -> EstimateResult | None:
    """
    Project the total duration from the current completion fraction.

    Returns None when there is nothing to extrapolate from: no steps,
    no progress yet, already finished, or no elapsed time between the
    start and the latest measurement.
    """
    if not is_estimable(state):
        return None

    elapsed = state.last_progress_update - state.start_date
    total_estimated = elapsed * state.total_steps / state.completed_steps
    remaining_time = total_estimated - elapsed

    return EstimateResult(
        elapsed=elapsed,
        total_estimated=total_estimated,
        remaining_steps=state.total_steps - state.completed_steps,
        remaining_time=remaining_time,
        estimated_end_date=state.last_progress_update + remaining_time,
        completed_steps=state.completed_steps,
        total_steps=state.total_steps,
    )
