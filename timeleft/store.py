"""
TIMELEFT State Store

One JSON file, one versioned record, last write wins.

Loading never fails: a missing file, unreadable JSON, a record that
does not validate, or a record written under another schema version all
fall back to the default state. Mutators take the explicit TaskState,
run the matching transition, persist the result and publish the
advisory message on the feedback bus.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from loguru import logger
from pydantic import ValidationError

from timeleft import transitions
from timeleft.feedback import FeedbackBus
from timeleft.state import STATE_VERSION, PersistedRecord, TaskState, default_state
from timeleft.transitions import Transition


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateStore:
    """
    Persistence plus the mutators that go through it.
    """

    def __init__(
        self,
        path: Path,
        version: float = STATE_VERSION,
        bus: FeedbackBus | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.path = Path(path).expanduser()
        self.version = version
        self.bus = bus if bus is not None else FeedbackBus()
        self.clock = clock
        self.last_transition: Transition | None = None

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def load(self) -> TaskState:
        """Read the persisted record, or return defaults if it is unusable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"[STORE] No state at {self.path}, starting fresh")
            return default_state()
        except OSError as e:
            logger.warning(f"[STORE] Could not read {self.path}: {e}")
            return default_state()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"[STORE] Discarding unreadable state file: {e}")
            return default_state()

        if not isinstance(data, dict) or data.get("version") != self.version:
            found = data.get("version") if isinstance(data, dict) else None
            logger.warning(f"[STORE] Discarding state with version {found!r} (expected {self.version})")
            return default_state()

        try:
            record = PersistedRecord.model_validate(data)
        except ValidationError as e:
            logger.warning(f"[STORE] Discarding invalid state: {e.error_count()} error(s)")
            return default_state()

        if record.state.is_tracking and record.state.start_date > self.clock():
            logger.warning(f"[STORE] Discarding running state that starts in the future ({record.state.start_date})")
            return default_state()

        return record.state

    def save(self, state: TaskState) -> None:
        """Overwrite the slot with the current version tag and state."""
        record = PersistedRecord(version=self.version, state=state)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        try:
            tmp.write_text(record.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug(f"[STORE] Saved state to {self.path}")

    # -----------------------------------------------------------------------
    # Mutators
    # -----------------------------------------------------------------------

    def adjust_total_steps(self, state: TaskState, delta: int) -> TaskState:
        return self._apply("adjust_total_steps", transitions.adjust_total_steps(state, delta))

    def set_total_steps(self, state: TaskState, value: int) -> TaskState:
        return self._apply("set_total_steps", transitions.set_total_steps(state, value))

    def adjust_completed_steps(self, state: TaskState, delta: int) -> TaskState:
        return self._apply("adjust_completed_steps", transitions.adjust_completed_steps(state, delta, self.clock()))

    def set_completed_steps(self, state: TaskState, value: int) -> TaskState:
        return self._apply("set_completed_steps", transitions.set_completed_steps(state, value, self.clock()))

    def begin(self, state: TaskState) -> TaskState:
        return self._apply("begin", transitions.begin(state, self.clock()))

    def reset(self, state: TaskState) -> TaskState:
        return self._apply("reset", transitions.reset(state))

    def set_start_date(self, state: TaskState, when: datetime) -> TaskState:
        return self._apply("set_start_date", transitions.set_start_date(state, when, self.clock()))

    def start_now(self, state: TaskState) -> TaskState:
        return self._apply("start_now", transitions.start_now(state, self.clock()))

    def measure_now(self, state: TaskState) -> TaskState:
        return self._apply("measure_now", transitions.measure_now(state, self.clock()))

    def _apply(self, action: str, transition: Transition) -> TaskState:
        # Rejected mutations leave both the state and the file untouched
        if transition.accepted:
            self.save(transition.state)
        self.last_transition = transition
        publish = {"error": self.bus.error, "success": self.bus.success, "info": self.bus.info}[transition.kind]
        publish(transition.message, action=action)
        return transition.state
