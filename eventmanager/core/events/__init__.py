"""Core event system interfaces and implementations."""

from .bus import EventManager
from .models import (
    CancellableEvent,
    EmissionResult,
    Event,
    EventPriority,
    ExecutedHandler,
    HandlerRecord,
    event_type_identity,
)
from .registry import HandlerRegistry
from .types import Cancellable, EventHandler

__all__ = [
    "Cancellable",
    "CancellableEvent",
    "EmissionResult",
    "Event",
    "EventHandler",
    "EventManager",
    "EventPriority",
    "ExecutedHandler",
    "HandlerRecord",
    "HandlerRegistry",
    "event_type_identity",
]
