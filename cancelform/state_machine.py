"""Submission state machine for the cancellation reason form.

This module implements the four-state machine that governs a submit attempt
and prevents duplicate submits:

    idle -> submitting -> submitted -> idle   (manual reset)
    idle -> submitting -> error     -> idle   (next edit or re-submit)

The state machine:
- Enforces valid transitions between states
- Tracks the current submission state
- Records every transition as a FormEvent and dispatches it to an emitter

Usage:
    >>> from cancelform.state_machine import SubmissionStateMachine
    >>> from cancelform.types import SubmissionState
    >>> sm = SubmissionStateMachine()
    >>> sm.state
    <SubmissionState.IDLE: 'idle'>
    >>> sm.transition_to(SubmissionState.SUBMITTING)
    >>> sm.state
    <SubmissionState.SUBMITTING: 'submitting'>
    >>> len(sm.get_events())
    1
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional
import logging

from cancelform.events import EventEmitter, FormEvent, make_event
from cancelform.types import EventType, SubmissionState

logger = logging.getLogger(__name__)


class InvalidStateTransitionError(Exception):
    """Raised when attempting an invalid state transition.

    Attributes:
        current_state: The current state before the attempted transition
        target_state: The target state that was attempted
    """

    def __init__(self, current_state: SubmissionState, target_state: SubmissionState, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


# Maps each state to the set of states it can transition to
VALID_TRANSITIONS: Dict[SubmissionState, FrozenSet[SubmissionState]] = {
    SubmissionState.IDLE: frozenset({SubmissionState.SUBMITTING}),
    SubmissionState.SUBMITTING: frozenset({
        SubmissionState.SUBMITTED,
        SubmissionState.ERROR,
    }),
    SubmissionState.SUBMITTED: frozenset({SubmissionState.IDLE}),
    SubmissionState.ERROR: frozenset({SubmissionState.IDLE}),
}


@dataclass
class SubmissionStateMachine:
    """State machine for a single form session's submit attempts.

    Attributes:
        state: Current submission state
        emitter: Optional emitter that receives a STATE_CHANGED event per transition

    Examples:
        >>> sm = SubmissionStateMachine()
        >>> sm.can_transition_to(SubmissionState.SUBMITTING)
        True
        >>> sm.can_transition_to(SubmissionState.SUBMITTED)
        False
    """

    state: SubmissionState = SubmissionState.IDLE
    emitter: Optional[EventEmitter] = field(default=None, repr=False)
    _events: List[FormEvent] = field(default_factory=list, init=False, repr=False)

    def can_transition_to(self, target_state: SubmissionState) -> bool:
        """Check if transition to target state is valid."""
        return target_state in VALID_TRANSITIONS.get(self.state, frozenset())

    def transition_to(self, target_state: SubmissionState) -> None:
        """Transition to a new state and emit a state transition event.

        Args:
            target_state: The state to transition to

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            raise InvalidStateTransitionError(
                current_state=self.state,
                target_state=target_state,
                message=(
                    f"Invalid state transition: cannot transition from "
                    f"'{self.state.value}' to '{target_state.value}'. "
                    f"Valid transitions from '{self.state.value}' are: "
                    f"{', '.join(sorted(s.value for s in VALID_TRANSITIONS[self.state]))}"
                ),
            )

        old_state = self.state
        self.state = target_state
        logger.debug("Submission state %s -> %s", old_state.value, target_state.value)

        event = make_event(
            EventType.STATE_CHANGED,
            target_state,
            {"from_state": old_state.value, "to_state": target_state.value},
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)

    def get_events(self) -> List[FormEvent]:
        """Get all transition events in chronological order."""
        return list(self._events)


__all__ = [
    "SubmissionStateMachine",
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
]
