"""Event system for the cancellation reason form.

This module provides the event data structure and the event emitter that
connect the core to the presentation layer. Field updates, state transitions
and submission outcomes are all dispatched as typed FormEvents.

Dispatch is synchronous: listeners run on the caller's thread, in
registration order, before emit() returns.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import logging
import uuid

from .types import EventType, SubmissionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single event in a form session.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        ts: UTC timestamp when the event occurred
        state: Submission state after this event
        payload: Optional event-specific data (changed field, transition, errors)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FORM_CHANGED,
        ...     ts=datetime.now(timezone.utc),
        ...     state=SubmissionState.IDLE,
        ...     payload={"field": "reason"},
        ... )
        >>> event.to_dict()["type"]
        'form.changed'
    """
    event_id: str
    type: EventType
    ts: datetime
    state: SubmissionState
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize string enum values."""
        if isinstance(self.state, str) and not isinstance(self.state, SubmissionState):
            object.__setattr__(self, "state", SubmissionState(self.state))
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "ts": self.ts.isoformat(),
            "state": self.state.value,
        }
        if self.payload is not None:
            result["payload"] = self.payload
        return result


def make_event(
    event_type: EventType,
    state: SubmissionState,
    payload: Optional[Dict[str, Any]] = None,
) -> FormEvent:
    """Create a FormEvent stamped with a fresh id and the current UTC time."""
    return FormEvent(
        event_id=f"evt_{uuid.uuid4().hex[:16]}",
        type=event_type,
        ts=datetime.now(timezone.utc),
        state=state,
        payload=payload,
    )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Event listeners are called synchronously when events are emitted.
They should not perform long-running operations.
"""


class EventEmitter:
    """Event emitter for managing event listeners and dispatching events.

    Features:
    - Type-specific subscriptions (listen to specific event types)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch (listeners called in registration order)
    - Error isolation (a raising listener is logged and skipped)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FORM_RESET, seen.append)
        >>> emitter.listener_count(EventType.FORM_RESET)
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types (wildcard subscription)."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type."""
        if event_type in self._listeners:
            try:
                self._listeners[event_type].remove(listener)
            except ValueError:
                pass  # Listener not registered, ignore

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from wildcard subscription."""
        try:
            self._any_listeners.remove(listener)
        except ValueError:
            pass  # Listener not registered, ignore

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to all registered listeners.

        Listeners are called synchronously in registration order:
        1. Type-specific listeners for this event type
        2. Wildcard listeners (subscribed to all events)

        Args:
            event: Event to dispatch
        """
        # Copy so a listener may unsubscribe itself during dispatch
        listeners = list(self._listeners.get(event.type, []))
        listeners.extend(self._any_listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, event.type.value)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Get count of registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners (including wildcard).
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        total = len(self._any_listeners)
        for listeners in self._listeners.values():
            total += len(listeners)
        return total


__all__ = [
    "FormEvent",
    "make_event",
    "EventType",
    "EventListener",
    "EventEmitter",
]
