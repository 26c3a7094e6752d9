"""Form state controller for the cancellation reason form.

The FormStateController is the single source of truth for the current field
values and everything derived from them: which detail field is visible and
required, the per-field error messages, and the submission state the
presentation layer renders (e.g. a disabled "送信中..." button).

Updates are synchronous. Every mutation recomputes the derived state and
notifies subscribers exactly once before returning.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple
import logging

from cancelform.events import EventEmitter, make_event
from cancelform.state_machine import SubmissionStateMachine
from cancelform.types import FIELD_ATTRIBUTES, REASON, EventType, FormValues, SubmissionState
from cancelform.validation import ValidationResult, ValidationSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormSnapshot:
    """Derived, read-only view of the form handed to subscribers.

    Attributes:
        values: Current field values
        visible_required_fields: Detail fields to render as required
        errors: First error message per failing field for the current values
        state: Current submission state
        submit_errors: Errors to show inline; empty until a submit attempt
            has failed validation, then that verdict until the next edit,
            after which they follow ``errors``
    """
    values: FormValues
    visible_required_fields: FrozenSet[str]
    errors: Dict[str, str] = field(default_factory=dict)
    state: SubmissionState = SubmissionState.IDLE
    submit_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_submitting(self) -> bool:
        return self.state == SubmissionState.SUBMITTING


Subscriber = Callable[[FormSnapshot], None]


class FormStateController:
    """Holds the field values of one form session.

    Attributes:
        schema: Rule set used to derive visibility and errors
        state_machine: Submission state machine shared with the pipeline
        emitter: Event emitter shared with the pipeline

    Examples:
        >>> controller = FormStateController()
        >>> controller.set_field("reason", "family")
        >>> sorted(controller.visible_required_fields())
        ['familyDetails']
        >>> controller.current_errors()
        {'familyDetails': '具体的内容を入力してください'}
    """

    def __init__(
        self,
        schema: Optional[ValidationSchema] = None,
        state_machine: Optional[SubmissionStateMachine] = None,
        emitter: Optional[EventEmitter] = None,
    ) -> None:
        self.emitter = emitter if emitter is not None else EventEmitter()
        if state_machine is None:
            state_machine = SubmissionStateMachine(emitter=self.emitter)
        self.schema = schema if schema is not None else ValidationSchema()
        self.state_machine = state_machine
        self._values = FormValues.empty()
        self._submit_attempted = False
        self._surfaced_errors: Dict[str, str] = {}
        self._subscribers: List[Subscriber] = []

    @property
    def values(self) -> FormValues:
        return self._values

    @property
    def state(self) -> SubmissionState:
        return self.state_machine.state

    def set_field(self, name: str, value: Any) -> None:
        """Store a field value verbatim and notify subscribers.

        Values longer than the field's limit are kept as-is; the limit is
        enforced by validation, not here. An edit made while the state is
        ``error`` returns the state to ``idle``.

        Args:
            name: Field path (e.g., "familyDetails")
            value: Raw value from the input widget

        Raises:
            ValueError: If name is not a form field
        """
        if name not in FIELD_ATTRIBUTES:
            raise ValueError(f"Unknown form field '{name}'")

        if self.state_machine.state == SubmissionState.ERROR:
            self.state_machine.transition_to(SubmissionState.IDLE)

        self._values = replace(self._values, **{FIELD_ATTRIBUTES[name]: value})
        if self._submit_attempted:
            self._surfaced_errors = self.current_errors()
        logger.debug("Field %s updated", name)

        self.emitter.emit(make_event(EventType.FORM_CHANGED, self.state, {"field": name}))
        self.publish()

    def visible_required_fields(self) -> FrozenSet[str]:
        """Return the detail fields required for the current reason."""
        return self.schema.required_fields_for(self._values.get(REASON))

    def validate(self) -> ValidationResult:
        return self.schema.validate(self._values)

    def current_errors(self) -> Dict[str, str]:
        """Return the first error message of each failing field."""
        return self.validate().messages()

    def character_count(self, name: str) -> Tuple[int, Optional[int]]:
        """Return (current length, limit) for the counter under a text field.

        Raises:
            ValueError: If name is not a form field
        """
        if name not in FIELD_ATTRIBUTES:
            raise ValueError(f"Unknown form field '{name}'")
        value = self._values.get(name)
        count = len(value) if isinstance(value, str) else 0
        return count, self.schema.max_length_for(name)

    def surface_errors(self, result: ValidationResult) -> None:
        """Show the errors of a rejected submit attempt inline.

        The verdict is kept as given, so a rejected payload passed straight to
        the pipeline is reported even when it differs from the current values.
        Later edits re-derive the shown errors from the current values.
        """
        self._submit_attempted = True
        self._surfaced_errors = result.messages()
        logger.debug("Surfacing errors on %s", ", ".join(result.first_errors()))
        self.publish()

    def reset(self) -> None:
        """Return to an empty form after a completed submission.

        Raises:
            InvalidStateTransitionError: If a submission is in flight
        """
        if self.state_machine.state != SubmissionState.IDLE:
            self.state_machine.transition_to(SubmissionState.IDLE)

        self._values = FormValues.empty()
        self._submit_attempted = False
        self._surfaced_errors = {}
        logger.debug("Form reset")

        self.emitter.emit(make_event(EventType.FORM_RESET, self.state))
        self.publish()

    def snapshot(self) -> FormSnapshot:
        errors = self.current_errors()
        return FormSnapshot(
            values=self._values,
            visible_required_fields=self.visible_required_fields(),
            errors=errors,
            state=self.state,
            submit_errors=dict(self._surfaced_errors),
        )

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber and return a callable that removes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self) -> None:
        """Send the current snapshot to every subscriber."""
        snapshot = self.snapshot()
        for subscriber in list(self._subscribers):
            try:
                subscriber(snapshot)
            except Exception:
                logger.exception("Form subscriber %r failed", subscriber)


__all__ = [
    "FormStateController",
    "FormSnapshot",
    "Subscriber",
]
