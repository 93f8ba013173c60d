from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Bump whenever the persisted shape changes. Records carrying any other tag
# are discarded on load.
STATE_VERSION = 0.39


class Mode(str, Enum):
    CONFIGURING = "setup"
    TRACKING = "running"


class TaskState(BaseModel):
    """Configuration and progress of the single tracked task."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: datetime | None = Field(default=None, alias="startDate")
    last_progress_update: datetime | None = Field(default=None, alias="lastProgressUpdate")
    total_steps: int = Field(default=0, ge=0, alias="totalSteps")
    completed_steps: int = Field(default=0, ge=0, alias="completedSteps")
    mode: Mode = Mode.CONFIGURING

    @field_validator("start_date", "last_progress_update")
    @classmethod
    def make_aware(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps are read as local time
        if value is not None and value.tzinfo is None:
            return value.astimezone()
        return value

    @model_validator(mode="after")
    def check_invariants(self) -> "TaskState":
        if self.completed_steps > self.total_steps:
            raise ValueError(
                f"completedSteps ({self.completed_steps}) exceeds totalSteps ({self.total_steps})"
            )
        if self.mode is Mode.TRACKING and self.start_date is None:
            raise ValueError("a running task needs a startDate")
        return self

    @property
    def is_tracking(self) -> bool:
        return self.mode is Mode.TRACKING

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class PersistedRecord(BaseModel):
    """The versioned envelope written to the state file."""
    version: float
    state: TaskState


def default_state() -> TaskState:
    return TaskState()


def clamp_steps(total_steps: int, completed_steps: int) -> tuple[int, int]:
    """Clamp both counters so that 0 <= completed <= total."""
    total = max(total_steps, 0)
    completed = min(max(completed_steps, 0), total)
    return total, completed
