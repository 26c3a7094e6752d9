"""Structured error types for the cancellation reason form.

Two kinds of failure exist and neither is fatal:

- FieldError: a per-field validation failure. It is a value returned inside a
  ValidationResult, never raised, and is shown inline next to the field.
- SubmissionError: the submit collaborator failed or rejected the payload.
  The pipeline attaches it to the submit outcome and moves to the ``error``
  state; the form values are kept so the user can correct and retry.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from cancelform.types import FieldErrorCode, FormValues


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Attributes:
        path: Field path (e.g., "familyDetails")
        code: Specific validation error code
        message: Message shown to the user next to the field
        expected: Optional - what was expected (type, enum values, limit)
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="otherDetails",
        ...     code=FieldErrorCode.REQUIRED,
        ...     message="詳細を入力してください",
        ... )
        >>> err.path
        'otherDetails'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result


class SubmissionError(Exception):
    """Raised when the submit collaborator fails.

    The original exception is chained as ``__cause__``.

    Attributes:
        values: The payload that was being submitted
    """

    def __init__(self, message: str, values: Optional[FormValues] = None):
        self.values = values
        super().__init__(message)


__all__ = [
    "FieldError",
    "SubmissionError",
]
