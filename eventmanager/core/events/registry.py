"""Handler registry."""

import itertools
import threading
from operator import attrgetter

from eventmanager.utils.logging_config import get_logger

from .models import EventPriority, HandlerRecord
from .types import EventHandler

logger = get_logger(__name__)

_by_priority = attrgetter("priority")


class HandlerRegistry:
    """Table of handlers keyed by event type identity.

    Every bucket is kept sorted by priority (stable, so equal priorities stay
    in registration order) and a bucket is dropped as soon as it is empty.
    """

    def __init__(self, id_prefix: str = "handler_", req_id: str | None = None) -> None:
        self._handlers: dict[str, list[HandlerRecord]] = {}
        self._counter = itertools.count(1)
        self._id_prefix = id_prefix
        self._lock = threading.RLock()
        self._req_id = req_id

    def add(
        self,
        event_type: str,
        handler: EventHandler,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> str:
        """Register a handler.

        Args:
            event_type: Identity of the event type
            handler: Callable invoked with the event
            priority: Execution priority

        Returns:
            str: The new handler id
        """
        priority = EventPriority(priority)
        with self._lock:
            handler_id = f"{self._id_prefix}{next(self._counter)}"
            bucket = self._handlers.setdefault(event_type, [])
            bucket.append(
                HandlerRecord(
                    id=handler_id,
                    event_type=event_type,
                    priority=priority,
                    handler=handler,
                )
            )
            bucket.sort(key=_by_priority)
            count = len(bucket)

        logger.debug(
            "Registered event handler",
            extra={
                "req_id": self._req_id,
                "component": "event_registry",
                "event_type": event_type,
                "handler_id": handler_id,
                "handler": getattr(handler, "__qualname__", str(handler)),
                "priority": priority.name,
                "handler_count": count,
            },
        )
        return handler_id

    def remove(self, handler_id: str) -> bool:
        """Remove a handler by id.

        Args:
            handler_id: Id returned by ``add``

        Returns:
            bool: True if a handler was removed
        """
        with self._lock:
            found = self._find(handler_id)
            if found is None:
                return False
            event_type, index = found
            bucket = self._handlers[event_type]
            del bucket[index]
            remaining = len(bucket)
            if not bucket:
                del self._handlers[event_type]

        logger.debug(
            "Removed event handler",
            extra={
                "req_id": self._req_id,
                "component": "event_registry",
                "event_type": event_type,
                "handler_id": handler_id,
                "handler_count": remaining,
            },
        )
        return True

    def _find(self, handler_id: str) -> tuple[str, int] | None:
        for event_type, bucket in self._handlers.items():
            for index, record in enumerate(bucket):
                if record.id == handler_id:
                    return event_type, index
        return None

    def clear(self, event_type: str | None = None) -> None:
        """Remove every handler for one event type, or all handlers."""
        with self._lock:
            if event_type is None:
                removed = len(self)
                self._handlers.clear()
            else:
                removed = len(self._handlers.pop(event_type, ()))

        logger.debug(
            "Cleared event handlers",
            extra={
                "req_id": self._req_id,
                "component": "event_registry",
                "event_type": event_type,
                "removed_count": removed,
            },
        )

    def remove_priority(self, event_type: str, priority: EventPriority) -> None:
        """Remove every handler registered at ``priority`` for an event type."""
        with self._lock:
            bucket = self._handlers.get(event_type)
            if bucket is None:
                return
            survivors = [record for record in bucket if record.priority != priority]
            if survivors:
                self._handlers[event_type] = survivors
            else:
                del self._handlers[event_type]

        logger.debug(
            "Removed event handlers by priority",
            extra={
                "req_id": self._req_id,
                "component": "event_registry",
                "event_type": event_type,
                "priority": getattr(priority, "name", priority),
                "removed_count": len(bucket) - len(survivors),
                "handler_count": len(survivors),
            },
        )

    def handler_ids(self, event_type: str) -> list[str]:
        with self._lock:
            return [record.id for record in self._handlers.get(event_type, ())]

    def has_handlers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._handlers.get(event_type))

    def count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, ()))

    def snapshot(self, event_type: str) -> tuple[HandlerRecord, ...]:
        """Copy of an event type's handlers in execution order.

        Later registry changes do not affect the returned tuple.
        """
        with self._lock:
            records = self._handlers.get(event_type, ())
            return tuple(sorted(records, key=_by_priority))

    def event_types(self) -> list[str]:
        """Event type identities that currently have handlers."""
        with self._lock:
            return list(self._handlers)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._handlers.values())
