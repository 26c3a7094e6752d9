"""Submission pipeline for the cancellation reason form.

The SubmissionPipeline owns a single submit attempt:

1. Guard against duplicate submits (``submitting`` / ``submitted`` are no-ops)
2. Validate the payload; on failure stay ``idle`` and surface the errors
3. Move to ``submitting`` and await the submit collaborator once
4. Move to ``submitted`` or ``error`` and notify the presentation layer

The payload is captured before the first await, so edits made while a
submission is in flight never change what is sent. There is no timeout and
no cancellation: a collaborator that never resolves keeps the state in
``submitting``.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
import logging

from cancelform.controller import FormStateController
from cancelform.errors import SubmissionError
from cancelform.events import make_event
from cancelform.notifications import (
    ERROR_NOTIFICATION,
    SUCCESS_NOTIFICATION,
    Notification,
    Notifier,
)
from cancelform.submitters import SubmitCollaborator
from cancelform.types import EventType, FormValues, SubmissionState
from cancelform.validation import ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of a call to SubmissionPipeline.submit.

    Attributes:
        accepted: False when the call was ignored or failed validation
        state: Submission state after the call
        validation: The validation verdict, if validation ran
        error: The collaborator failure, if the submission failed
    """
    accepted: bool
    state: SubmissionState
    validation: Optional[ValidationResult] = None
    error: Optional[SubmissionError] = None

    @property
    def ok(self) -> bool:
        return self.state == SubmissionState.SUBMITTED


class SubmissionPipeline:
    """Orchestrates submit attempts for one form session.

    Attributes:
        controller: Form state controller whose state machine this pipeline drives

    Examples:
        >>> import asyncio
        >>> from cancelform.notifications import RecordingNotifier
        >>> async def accept(values):
        ...     pass
        >>> controller = FormStateController()
        >>> controller.set_field("reason", "other")
        >>> controller.set_field("otherDetails", "料金が高いため")
        >>> pipeline = SubmissionPipeline(controller, accept, RecordingNotifier())
        >>> asyncio.run(pipeline.submit()).state
        <SubmissionState.SUBMITTED: 'submitted'>
    """

    def __init__(
        self,
        controller: FormStateController,
        submitter: SubmitCollaborator,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.controller = controller
        self._submitter = submitter
        self._notifier = notifier

    @property
    def state(self) -> SubmissionState:
        return self.controller.state

    async def submit(
        self, values: Optional[Union[FormValues, Mapping[str, Any]]] = None
    ) -> SubmitOutcome:
        """Run one submit attempt.

        Args:
            values: Payload to submit; defaults to the controller's current values

        Returns:
            SubmitOutcome describing what happened
        """
        state_machine = self.controller.state_machine
        if state_machine.state in (SubmissionState.SUBMITTING, SubmissionState.SUBMITTED):
            logger.debug("Submit ignored while %s", state_machine.state.value)
            return SubmitOutcome(accepted=False, state=state_machine.state)

        if values is None:
            payload = self.controller.values
        elif isinstance(values, FormValues):
            payload = values
        else:
            payload = FormValues.from_dict(values)

        # Re-submitting after a failure is an explicit retry
        if state_machine.state == SubmissionState.ERROR:
            state_machine.transition_to(SubmissionState.IDLE)

        result = self.controller.schema.validate(payload)
        if not result.is_valid:
            logger.warning(
                "Submit rejected by validation: %s",
                ", ".join(result.first_errors()),
            )
            self._emit(EventType.VALIDATION_FAILED, {"errors": [e.to_dict() for e in result.errors]})
            self.controller.surface_errors(result)
            return SubmitOutcome(accepted=False, state=state_machine.state, validation=result)

        state_machine.transition_to(SubmissionState.SUBMITTING)
        self._emit(EventType.SUBMISSION_STARTED, {"values": payload.to_dict()})
        self.controller.publish()
        logger.info("Submitting cancellation reason")

        try:
            await self._submitter(payload)
        except Exception as exc:
            error = SubmissionError(f"Submission failed: {exc}", values=payload)
            error.__cause__ = exc
            logger.warning("Submission failed: %s", exc)
            state_machine.transition_to(SubmissionState.ERROR)
            self._emit(EventType.SUBMISSION_FAILED, {"error": str(exc)})
            self.controller.publish()
            self._notify(ERROR_NOTIFICATION)
            return SubmitOutcome(
                accepted=True, state=state_machine.state, validation=result, error=error
            )

        state_machine.transition_to(SubmissionState.SUBMITTED)
        self._emit(EventType.SUBMISSION_SUCCEEDED)
        self.controller.publish()
        logger.info("Cancellation reason submitted")
        self._notify(SUCCESS_NOTIFICATION)
        return SubmitOutcome(accepted=True, state=state_machine.state, validation=result)

    def _emit(self, event_type: EventType, payload: Optional[dict] = None) -> None:
        self.controller.emitter.emit(make_event(event_type, self.state, payload))

    def _notify(self, notification: Notification) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier(notification)
        except Exception:
            logger.exception("Notifier failed on %s notification", notification.kind.value)


__all__ = [
    "SubmissionPipeline",
    "SubmitOutcome",
]
