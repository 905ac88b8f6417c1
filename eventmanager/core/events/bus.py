"""Event manager implementation."""

import inspect
import time
from collections.abc import Callable
from typing import Any, TypeVar

from eventmanager.utils.logging_config import generate_request_id, get_logger
from eventmanager.utils.settings import EventManagerSettings

from .models import (
    EmissionResult,
    EventPriority,
    ExecutedHandler,
    event_type_identity,
)
from .registry import HandlerRegistry
from .types import Cancellable, EventHandler

logger = get_logger(__name__)

HandlerT = TypeVar("HandlerT", bound=Callable[..., Any])


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class EventManager:
    """Registers prioritized handlers and emits events to them.

    Handlers for one emission run one after another in priority order. A
    cancellable event that gets cancelled stops the handlers that have not
    started yet. A handler that raises aborts the emission and the error
    reaches the caller of ``emit``.
    """

    def __init__(self, settings: EventManagerSettings | None = None) -> None:
        """Initialize event manager."""
        self.settings = settings or EventManagerSettings()
        self._req_id = generate_request_id()
        self._registry = HandlerRegistry(
            id_prefix=self.settings.handler_id_prefix, req_id=self._req_id
        )
        logger.debug(
            "Event manager initialized",
            extra={"req_id": self._req_id, "component": "event_manager"},
        )

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def register(
        self,
        event_type: Any,
        handler: EventHandler,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> str:
        """Register a handler for an event type.

        Args:
            event_type: Event class or type tag to listen for
            handler: Sync or async callable taking the event
            priority: Handlers with a lower priority value run earlier

        Returns:
            str: The unique id of the registered handler
        """
        return self._registry.add(event_type_identity(event_type), handler, priority)

    def on(
        self, event_type: Any, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable[[HandlerT], HandlerT]:
        """Decorator form of ``register``.

        The assigned ids are appended to the function's
        ``__event_handler_ids__`` list and the function is returned unchanged.
        For bound methods the list lives on the underlying function, so it is
        shared by every instance of the class.

        Example:
            @manager.on(UserLoggedIn, priority=EventPriority.HIGH)
            async def audit(event):
                ...
        """

        def decorator(handler: HandlerT) -> HandlerT:
            target = getattr(handler, "__func__", handler)
            ids = getattr(target, "__event_handler_ids__", None)
            if ids is None:
                ids = []
                # Attach before registering so a failure leaves nothing behind
                target.__event_handler_ids__ = ids
            ids.append(self.register(event_type, handler, priority))
            return handler

        return decorator

    def unregister(self, handler_id: str) -> bool:
        """Unregister a handler by id.

        Returns:
            bool: True if the handler was found and removed
        """
        return self._registry.remove(handler_id)

    def unregister_all(self, event_type: Any | None = None) -> None:
        """Unregister every handler of an event type, or all handlers."""
        if event_type is None:
            self._registry.clear()
        else:
            self._registry.clear(event_type_identity(event_type))

    def unregister_by_priority(self, event_type: Any, priority: EventPriority) -> None:
        """Unregister the handlers of one priority for an event type."""
        self._registry.remove_priority(event_type_identity(event_type), priority)

    def get_handler_ids(self, event_type: Any) -> list[str]:
        """Handler ids for an event type in execution order."""
        return self._registry.handler_ids(event_type_identity(event_type))

    def has_handlers(self, event_type: Any) -> bool:
        return self._registry.has_handlers(event_type_identity(event_type))

    def get_handler_count(self, event_type: Any) -> int:
        return self._registry.count(event_type_identity(event_type))

    async def emit(self, event: Any) -> EmissionResult:
        """Emit an event to its handlers in priority order.

        Args:
            event: Event instance to deliver

        Returns:
            EmissionResult: Executed handler count, timings and details

        Raises:
            Exception: Whatever a handler raised; remaining handlers are skipped
        """
        start = time.perf_counter()
        event_type = event_type_identity(event)
        handlers = self._registry.snapshot(event_type)
        cancellable = isinstance(event, Cancellable)

        logger.debug(
            "BEGIN Event emission",
            extra={
                "req_id": self._req_id,
                "component": "event_manager",
                "event_type": event_type,
                "handler_count": len(handlers),
            },
        )

        executed = 0
        details: list[ExecutedHandler] = []

        for record in handlers:
            if cancellable and event.is_cancelled():
                logger.debug(
                    "Event cancelled, skipping remaining handlers",
                    extra={
                        "req_id": self._req_id,
                        "component": "event_manager",
                        "event_type": event_type,
                        "cancel_reason": event.get_cancel_reason(),
                        "skipped_count": len(handlers) - executed,
                    },
                )
                break

            handler_start = time.perf_counter()
            try:
                outcome = record.handler(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(
                    f"Error in event handler {record.id}",
                    extra={
                        "req_id": self._req_id,
                        "component": "event_manager",
                        "event_type": event_type,
                        "handler_id": record.id,
                        "handler": getattr(record.handler, "__qualname__", str(record.handler)),
                        "priority": record.priority.name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
                raise

            executed += 1
            details.append(
                ExecutedHandler(
                    priority=record.priority,
                    handler_id=record.id,
                    execution_time_ms=_elapsed_ms(handler_start),
                )
            )

        result = EmissionResult(
            event=event,
            handler_count=executed,
            execution_time_ms=_elapsed_ms(start),
            executed_handlers=details,
        )
        logger.debug(
            "Event emission completed",
            extra={
                "req_id": self._req_id,
                "component": "event_manager",
                "event_type": event_type,
                "executed_count": executed,
                "registered_count": len(handlers),
                "execution_time_ms": result.execution_time_ms,
            },
        )
        return result
