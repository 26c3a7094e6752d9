"""Core type definitions for the cancellation reason form.

This module defines the fundamental types used throughout the package:
- ReasonCategory: The discriminant that selects which detail field is mandatory
- SubmissionState: Lifecycle states of a single submit attempt
- FieldErrorCode: Validation error codes for individual fields
- EventType: Event types emitted on field updates and state transitions
- NotificationKind: Outcome categories reported to the presentation layer
- FormValues: The aggregate submitted by the user

Field paths use the camelCase names the presentation layer binds to
("familyDetails", "otherDetails"); Python attributes use snake_case.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class ReasonCategory(str, Enum):
    """Reason for cancelling the service."""
    FAMILY = "family"
    OTHER = "other"


class SubmissionState(str, Enum):
    """Submission lifecycle states.

    idle -> submitting -> submitted | error. ``submitted`` returns to ``idle``
    on a manual reset; ``error`` returns to ``idle`` on the next edit or
    re-submit.
    """
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERROR = "error"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    TOO_LONG = "too_long"


class EventType(str, Enum):
    """Event types dispatched through the EventEmitter."""
    FORM_CHANGED = "form.changed"
    FORM_RESET = "form.reset"
    STATE_CHANGED = "state.changed"
    VALIDATION_FAILED = "validation.failed"
    SUBMISSION_STARTED = "submission.started"
    SUBMISSION_SUCCEEDED = "submission.succeeded"
    SUBMISSION_FAILED = "submission.failed"


class NotificationKind(str, Enum):
    """Outcome category of a notification."""
    SUCCESS = "success"
    ERROR = "error"


# Field paths, in display order
REASON = "reason"
FAMILY_DETAILS = "familyDetails"
OTHER_DETAILS = "otherDetails"
IMPROVEMENT = "improvement"
COMMENTS = "comments"

FIELD_PATHS = (REASON, FAMILY_DETAILS, OTHER_DETAILS, IMPROVEMENT, COMMENTS)

# Field path -> FormValues attribute
FIELD_ATTRIBUTES: Dict[str, str] = {
    REASON: "reason",
    FAMILY_DETAILS: "family_details",
    OTHER_DETAILS: "other_details",
    IMPROVEMENT: "improvement",
    COMMENTS: "comments",
}


@dataclass(frozen=True)
class FormValues:
    """The single aggregate submitted by the user.

    Values are stored verbatim: a text field may hold more characters than
    its limit, and ``reason`` may hold a plain string. Judging them is the
    job of ValidationSchema.

    Attributes:
        reason: Selected reason category, or None while unset
        family_details: Details for the "family" reason
        other_details: Details for the "other" reason
        improvement: Optional improvement request
        comments: Optional free comments

    Examples:
        >>> values = FormValues(reason=ReasonCategory.FAMILY, family_details="転居のため")
        >>> values.to_dict()["reason"]
        'family'
        >>> FormValues.empty().reason is None
        True
    """
    reason: Optional[Union[ReasonCategory, str]] = None
    family_details: Any = ""
    other_details: Any = ""
    improvement: Any = ""
    comments: Any = ""

    @classmethod
    def empty(cls) -> "FormValues":
        """Values at session start: no reason, every text field blank."""
        return cls()

    def get(self, path: str) -> Any:
        """Return the value stored under a field path."""
        return getattr(self, FIELD_ATTRIBUTES[path])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dict keyed by field path.

        Unset values (None) are omitted so they read as absent.
        """
        result: Dict[str, Any] = {}
        for path in FIELD_PATHS:
            value = self.get(path)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            result[path] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormValues":
        """Create FormValues from a dict keyed by field path."""
        reason = data.get(REASON)
        if isinstance(reason, str):
            try:
                reason = ReasonCategory(reason)
            except ValueError:
                pass  # kept verbatim; validation reports it
        return cls(
            reason=reason,
            family_details=data.get(FAMILY_DETAILS, ""),
            other_details=data.get(OTHER_DETAILS, ""),
            improvement=data.get(IMPROVEMENT, ""),
            comments=data.get(COMMENTS, ""),
        )


__all__ = [
    "ReasonCategory",
    "SubmissionState",
    "FieldErrorCode",
    "EventType",
    "NotificationKind",
    "FormValues",
    "REASON",
    "FAMILY_DETAILS",
    "OTHER_DETAILS",
    "IMPROVEMENT",
    "COMMENTS",
    "FIELD_PATHS",
    "FIELD_ATTRIBUTES",
]
