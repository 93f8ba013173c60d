import uuid
from datetime import datetime, timezone
from typing import Callable, List, Literal

from loguru import logger
from pydantic import BaseModel, Field

FeedbackKind = Literal["info", "success", "error"]


class FeedbackEvent(BaseModel):
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    kind: FeedbackKind
    message: str
    action: str = ""


class FeedbackBus:
    """A synchronous channel for transient advisory messages about state mutations."""

    def __init__(self):
        self._subscribers: List[Callable[[FeedbackEvent], None]] = []

    def subscribe(self, callback: Callable[[FeedbackEvent], None]) -> None:
        """Register a callback to be executed when feedback is emitted."""
        self._subscribers.append(callback)

    def emit(self, kind: FeedbackKind, message: str, action: str = "") -> FeedbackEvent:
        """Construct and broadcast a FeedbackEvent to all subscribers."""
        event = FeedbackEvent(kind=kind, message=message, action=action)
        logger.debug(f"[FEEDBACK] {kind}: {message}")

        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                # A broken display must not undo a mutation that was already saved
                logger.warning(f"[FEEDBACK] Subscriber failed: {e}")
        return event

    def error(self, message: str, action: str = "") -> FeedbackEvent:
        return self.emit("error", message, action)

    def success(self, message: str, action: str = "") -> FeedbackEvent:
        return self.emit("success", message, action)

    def info(self, message: str, action: str = "") -> FeedbackEvent:
        return self.emit("info", message, action)

