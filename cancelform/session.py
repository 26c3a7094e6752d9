"""Form session orchestrator for the cancellation reason form.

This module provides the CancellationFormSession class that wires the
validation schema, state machine, event emitter, controller and submission
pipeline for one active form session. It is the main entry point for a
presentation layer.

Usage:
    >>> import asyncio
    >>> from cancelform.session import CancellationFormSession
    >>> from cancelform.submitters import DelayedSubmitter
    >>> session = CancellationFormSession(submitter=DelayedSubmitter(delay_seconds=0))
    >>> session.set_field("reason", "family")
    >>> session.set_field("familyDetails", "転居のため")
    >>> asyncio.run(session.submit()).ok
    True
    >>> session.state
    <SubmissionState.SUBMITTED: 'submitted'>
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from cancelform.controller import FormSnapshot, FormStateController, Subscriber
from cancelform.events import EventEmitter, EventListener, FormEvent
from cancelform.notifications import LoggingNotifier, Notifier
from cancelform.pipeline import SubmissionPipeline, SubmitOutcome
from cancelform.state_machine import SubmissionStateMachine
from cancelform.submitters import DelayedSubmitter, SubmitCollaborator
from cancelform.types import FormValues, SubmissionState
from cancelform.validation import ValidationSchema


class CancellationFormSession:
    """One active cancellation form session.

    Owns the single FormValues / SubmissionState pair of the session and
    records every event dispatched during it.

    Attributes:
        schema: Validation rule set
        emitter: Event emitter shared by all components
        controller: Field values and derived state
        pipeline: Submit attempt orchestration
    """

    def __init__(
        self,
        submitter: Optional[SubmitCollaborator] = None,
        notifier: Optional[Notifier] = None,
        schema: Optional[ValidationSchema] = None,
    ):
        """Initialize the session.

        Args:
            submitter: Async submit collaborator; defaults to a 1 second stand-in
            notifier: Notification callback; defaults to logging the outcome
            schema: Validation rules; defaults to the standard limits
        """
        self.schema = schema if schema is not None else ValidationSchema()
        self.emitter = EventEmitter()
        self._events: List[FormEvent] = []
        self.emitter.on_any(self._events.append)

        state_machine = SubmissionStateMachine(emitter=self.emitter)
        self.controller = FormStateController(
            schema=self.schema,
            state_machine=state_machine,
            emitter=self.emitter,
        )
        self.pipeline = SubmissionPipeline(
            self.controller,
            submitter if submitter is not None else DelayedSubmitter(),
            notifier if notifier is not None else LoggingNotifier(),
        )

    @property
    def state(self) -> SubmissionState:
        return self.controller.state

    @property
    def values(self) -> FormValues:
        return self.controller.values

    def set_field(self, name: str, value: Any) -> None:
        self.controller.set_field(name, value)

    async def submit(
        self, values: Optional[Union[FormValues, Mapping[str, Any]]] = None
    ) -> SubmitOutcome:
        return await self.pipeline.submit(values)

    def reset(self) -> None:
        """Return to the form after a completed submission."""
        self.controller.reset()

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        return self.controller.subscribe(subscriber)

    def on_event(self, listener: EventListener) -> None:
        self.emitter.on_any(listener)

    def snapshot(self) -> FormSnapshot:
        return self.controller.snapshot()

    def events(self) -> List[FormEvent]:
        """Return every event dispatched in this session, in order."""
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the session for debugging or display."""
        snapshot = self.snapshot()
        return {
            "state": snapshot.state.value,
            "fields": snapshot.values.to_dict(),
            "visibleRequiredFields": sorted(snapshot.visible_required_fields),
            "errors": snapshot.errors,
            "submitErrors": snapshot.submit_errors,
        }


__all__ = [
    "CancellationFormSession",
]
