import json
from datetime import datetime, timedelta, timezone

import pytest

from timeleft.feedback import FeedbackBus, FeedbackEvent
from timeleft.state import STATE_VERSION, Mode, TaskState, default_state
from timeleft.store import StateStore

T = datetime(2026, 1, 5, 9, 0, 0, 123456, tzinfo=timezone.utc)


def _store(tmp_path, **kwargs) -> StateStore:
    kwargs.setdefault("bus", FeedbackBus())
    kwargs.setdefault("clock", lambda: T)
    return StateStore(tmp_path / "state.json", **kwargs)


def test_load_without_file_returns_defaults(tmp_path):
    assert _store(tmp_path).load() == default_state()


def test_round_trip(tmp_path):
    store = _store(tmp_path)
    state = TaskState(
        start_date=T - timedelta(hours=1),
        last_progress_update=T,
        total_steps=40,
        completed_steps=13,
        mode=Mode.TRACKING,
    )

    store.save(state)

    assert store.load() == state
    assert store.load().mode is Mode.TRACKING


def test_round_trip_of_defaults(tmp_path):
    store = _store(tmp_path)
    store.save(default_state())
    assert store.load() == default_state()


def test_persisted_record_shape(tmp_path):
    store = _store(tmp_path)
    store.save(TaskState(start_date=T, last_progress_update=T, total_steps=5, mode=Mode.TRACKING))

    record = json.loads((tmp_path / "state.json").read_text())

    assert record["version"] == STATE_VERSION
    assert set(record["state"]) == {
        "startDate", "lastProgressUpdate", "totalSteps", "completedSteps", "mode",
    }
    assert record["state"]["mode"] == "running"
    assert record["state"]["totalSteps"] == 5
    assert datetime.fromisoformat(record["state"]["startDate"].replace("Z", "+00:00")) == T


def test_version_mismatch_yields_defaults(tmp_path):
    old = _store(tmp_path, version=1.0)
    old.save(TaskState(total_steps=10, completed_steps=4))

    assert _store(tmp_path, version=2.0).load() == default_state()


def test_corrupt_records_yield_defaults(tmp_path):
    path = tmp_path / "state.json"
    store = _store(tmp_path)

    for raw in [
        "{not json",
        "[]",
        json.dumps({"state": {}}),
        json.dumps({"version": STATE_VERSION, "state": {"totalSteps": 2, "completedSteps": 5}}),
        json.dumps({"version": STATE_VERSION, "state": {"totalSteps": -1}}),
        json.dumps({"version": STATE_VERSION, "state": {"totalSteps": 3, "mode": "running"}}),
        json.dumps({"version": STATE_VERSION, "state": {"startDate": "yesterday"}}),
    ]:
        path.write_text(raw)
        assert store.load() == default_state()


def test_save_creates_missing_directories(tmp_path):
    store = StateStore(tmp_path / "nested" / "dir" / "state.json", bus=FeedbackBus())
    store.save(default_state())
    assert (tmp_path / "nested" / "dir" / "state.json").exists()


def test_mutators_persist(tmp_path):
    store = _store(tmp_path)

    state = store.set_total_steps(store.load(), 100)
    state = store.begin(state)
    state = store.adjust_completed_steps(state, 25)

    loaded = store.load()
    assert loaded == state
    assert loaded.mode is Mode.TRACKING
    assert loaded.completed_steps == 25
    assert loaded.last_progress_update == T


def test_completed_adjustment_clamps(tmp_path):
    store = _store(tmp_path)
    state = store.set_total_steps(default_state(), 10)
    state = store.set_completed_steps(state, 8)

    state = store.adjust_completed_steps(state, 5)

    assert state.completed_steps == 10
    assert store.load().completed_steps == 10


def test_rejected_begin_writes_nothing(tmp_path):
    store = _store(tmp_path)

    state = store.begin(default_state())

    assert state.mode is Mode.CONFIGURING
    assert not (tmp_path / "state.json").exists()
    assert store.last_transition is not None
    assert not store.last_transition.accepted


def test_mutators_publish_feedback(tmp_path):
    bus = FeedbackBus()
    received: list[FeedbackEvent] = []
    bus.subscribe(received.append)
    store = _store(tmp_path, bus=bus)

    state = store.adjust_total_steps(default_state(), 3)
    store.measure_now(state)

    assert [e.kind for e in received] == ["success", "error"]
    assert received[0].message == "Total steps: 3"
    assert received[0].action == "adjust_total_steps"
    assert received[1].action == "measure_now"


def test_reset_overwrites_the_slot(tmp_path):
    store = _store(tmp_path)
    state = store.set_total_steps(default_state(), 10)
    state = store.begin(state)

    store.reset(state)

    assert store.load() == default_state()


def test_running_state_starting_in_the_future_yields_defaults(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "version": STATE_VERSION,
        "state": {
            "startDate": (T + timedelta(days=3)).isoformat(),
            "lastProgressUpdate": (T + timedelta(days=3)).isoformat(),
            "totalSteps": 10,
            "completedSteps": 2,
            "mode": "running",
        },
    }))

    assert _store(tmp_path).load() == default_state()


def test_future_start_is_kept_during_setup(tmp_path):
    store = _store(tmp_path)
    state = TaskState(start_date=T + timedelta(days=1), total_steps=10)
    store.save(state)

    assert store.load() == state


def test_save_propagates_os_errors(tmp_path):
    (tmp_path / "f").write_text("not a directory")
    store = StateStore(tmp_path / "f" / "state.json", bus=FeedbackBus())

    with pytest.raises(OSError):
        store.save(default_state())


def test_failed_replace_removes_the_temp_file(tmp_path):
    # The slot is occupied by a directory, so the final rename fails
    (tmp_path / "state.json").mkdir()
    store = _store(tmp_path)

    with pytest.raises(OSError):
        store.save(default_state())

    assert not (tmp_path / "state.tmp").exists()


def test_store_without_bus_gets_its_own():
    first = StateStore("a.json")
    second = StateStore("b.json")
    assert first.bus is not second.bus
