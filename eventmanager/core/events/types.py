"""Core event types."""

from abc import abstractmethod
from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class EventHandler(Protocol):
    """Event handler protocol.

    Handlers may be plain callables or coroutine functions; whatever they
    return is awaited when it is awaitable.
    """

    @abstractmethod
    def __call__(self, event: Any) -> Awaitable[None] | None:
        """Handle an event."""
        ...


@runtime_checkable
class Cancellable(Protocol):
    """Capability of events that can stop the remaining handlers."""

    def cancel(self, reason: str = "") -> None: ...

    def is_cancelled(self) -> bool: ...

    def get_cancel_reason(self) -> str: ...
