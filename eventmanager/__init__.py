"""Prioritized, cancellable in-process event dispatch."""

from eventmanager.core.events import (
    Cancellable,
    CancellableEvent,
    EmissionResult,
    Event,
    EventHandler,
    EventManager,
    EventPriority,
    ExecutedHandler,
    HandlerRecord,
    HandlerRegistry,
    event_type_identity,
)
from eventmanager.utils.settings import EventManagerSettings

__version__ = "0.1.0"

__all__ = [
    "Cancellable",
    "CancellableEvent",
    "EmissionResult",
    "Event",
    "EventHandler",
    "EventManager",
    "EventManagerSettings",
    "EventPriority",
    "ExecutedHandler",
    "HandlerRecord",
    "HandlerRegistry",
    "event_type_identity",
]
