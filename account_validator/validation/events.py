"""
Observer events — lifecycle notifications for external collaborators.

Listeners are plain callables taking a ValidationEvent. Delivery is
fire-and-forget: a listener that raises is logged and skipped, and never
affects other listeners or the validation that emitted the event.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    VALIDATION_START = "validation_start"
    CACHE_HIT = "cache_hit"
    VALIDATION_COMPLETE = "validation_complete"
    VALIDATION_ERROR = "validation_error"
    BATCH_START = "batch_start"
    BATCH_PROGRESS = "batch_progress"
    BATCH_COMPLETE = "batch_complete"
    HEALTH_DEGRADED = "health_degraded"
    HEALTH_CRITICAL = "health_critical"
    PLUGIN_REGISTERED = "plugin_registered"
    PLUGIN_ERROR = "plugin_error"


@dataclass(frozen=True)
class ValidationEvent:
    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp_ms: float = field(default_factory=lambda: time.time() * 1000)


Listener = Callable[[ValidationEvent], None]


class EventBus:
    """Registry of listeners per event type, plus catch-all listeners."""

    def __init__(self) -> None:
        self._listeners: Dict[EventType, List[Listener]] = defaultdict(list)
        self._catch_all: List[Listener] = []

    def subscribe(self, event_type: EventType, listener: Listener) -> None:
        self._listeners[EventType(event_type)].append(listener)

    def subscribe_all(self, listener: Listener) -> None:
        self._catch_all.append(listener)

    def unsubscribe(self, event_type: EventType, listener: Listener) -> bool:
        listeners = self._listeners.get(EventType(event_type), [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def emit(self, event_type: EventType, **payload: Any) -> ValidationEvent:
        event = ValidationEvent(type=EventType(event_type), payload=payload)
        for listener in [*self._listeners.get(event.type, []), *self._catch_all]:
            try:
                listener(event)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Event listener %r failed on %s: %s",
                    listener, event.type.value, exc,
                )
        return event
