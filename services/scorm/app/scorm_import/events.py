"""Structured import events.

The import core reports recoverable conditions (skipped resources, dropped
values, heuristic decisions) as ``ImportEvent`` records written to an injected
``EventSink``. Sinks are a side channel: nothing in the core branches on them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ImportEvent(BaseModel):
    """A single recoverable condition met while resolving a manifest."""

    model_config = ConfigDict(extra="forbid")

    code: str
    level: str = "info"
    message: str = ""
    context: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EventSink(Protocol):
    def emit(self, event: ImportEvent) -> None: ...


class LoggingEventSink:
    """Forwards events to the standard logging tree."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def emit(self, event: ImportEvent) -> None:
        self._log.log(
            _LEVELS.get(event.level, logging.INFO),
            "%s: %s %s",
            event.code,
            event.message,
            event.context or "",
        )


class CollectingEventSink:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[ImportEvent] = []

    def emit(self, event: ImportEvent) -> None:
        self.events.append(event)

    @property
    def codes(self) -> list[str]:
        return [event.code for event in self.events]


class FanOutEventSink:
    def __init__(self, *sinks: EventSink):
        self.sinks = list(sinks)

    def emit(self, event: ImportEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)
