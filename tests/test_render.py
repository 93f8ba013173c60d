import io
from datetime import datetime, timedelta, timezone

from rich.console import Console

from timeleft.estimator import estimate
from timeleft.render import render
from timeleft.state import Mode, TaskState

T = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _text(state: TaskState, now: datetime) -> str:
    out = io.StringIO()
    Console(file=out, width=100, color_system=None).print(render(state, estimate(state), now))
    return out.getvalue()


def _tracking(completed: int = 25) -> TaskState:
    return TaskState(
        start_date=T,
        last_progress_update=T + timedelta(minutes=10),
        total_steps=100,
        completed_steps=completed,
        mode=Mode.TRACKING,
    )


def test_setup_view():
    text = _text(TaskState(total_steps=12), T)

    assert "Setup" in text
    assert "12" in text
    assert "timeleft start" in text


def test_tracking_view():
    text = _text(_tracking(), T + timedelta(minutes=15))

    assert "Tracking" in text
    assert "25/100" in text
    assert "0:10:00" in text
    assert "0:40:00" in text
    assert "0:30:00" in text
    assert "0:25:00" in text


def test_past_the_estimated_end_is_overdue():
    text = _text(_tracking(), T + timedelta(minutes=50))
    assert "overdue by 0:10:00" in text


def test_tracking_view_without_estimate():
    text = _text(_tracking(completed=0), T + timedelta(minutes=15))

    assert "Tracking" in text
    assert "—" in text
    assert "overdue" not in text
