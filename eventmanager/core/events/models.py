"""Core event models."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .types import EventHandler


class EventPriority(IntEnum):
    """Handler priority levels.

    Lower values run earlier. MONITOR handlers see the event first.
    """

    MONITOR = 0
    HIGHEST = 1
    HIGH = 2
    NORMAL = 3
    LOW = 4
    LOWEST = 5


class Event(BaseModel):
    """Base event model.

    Concrete events subclass this and declare their own fields. A subclass
    may pin its registry key by declaring ``event_type`` on the class body;
    otherwise the key is derived from the class's module and qualified name.

    ``event_type`` is reserved for the tag: assign it without an annotation.
    Declaring it as a model field raises ``TypeError`` at class creation.
    """

    event_type: ClassVar[str | None] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "event_type" in cls.model_fields:
            raise TypeError(
                f"{cls.__name__} declares 'event_type' as a field; "
                "assign the tag as a plain class attribute instead"
            )


class CancellableEvent(Event):
    """Event that a handler can cancel to stop later handlers from running."""

    _cancelled: bool = PrivateAttr(default=False)
    _cancel_reason: str = PrivateAttr(default="")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def cancel_reason(self) -> str:
        return self._cancel_reason

    def is_cancelled(self) -> bool:
        """Return True once any handler has cancelled the event."""
        return self._cancelled

    def get_cancel_reason(self) -> str:
        """Return the reason given to the last ``cancel`` call."""
        return self._cancel_reason

    def cancel(self, reason: str = "") -> None:
        """Cancel the event.

        Args:
            reason: Optional description of why the event was cancelled
        """
        self._cancelled = True
        self._cancel_reason = reason


def event_type_identity(target: Any) -> str:
    """Resolve the registry key for an event class, instance or tag.

    Args:
        target: A string tag, an event class, or an event instance

    Returns:
        str: The identity used as the registry key
    """
    if isinstance(target, str):
        return target

    cls = target if isinstance(target, type) else type(target)

    # Tags are looked up on the class itself so subclasses never share a key
    # with their parent by accident.
    tag = cls.__dict__.get("event_type")
    if isinstance(tag, str) and tag:
        return tag

    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True)
class HandlerRecord:
    """A registered handler."""

    id: str
    event_type: str
    priority: EventPriority
    handler: EventHandler


class ExecutedHandler(BaseModel):
    """Execution details for one handler invocation."""

    priority: EventPriority
    handler_id: str
    execution_time_ms: float | None = None


class EmissionResult(BaseModel):
    """Summary of a completed emission."""

    event: Any
    handler_count: int = 0
    execution_time_ms: float = 0.0
    executed_handlers: list[ExecutedHandler] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def handler_ids(self) -> list[str]:
        """Ids of the handlers that ran, in execution order."""
        return [detail.handler_id for detail in self.executed_handlers]
