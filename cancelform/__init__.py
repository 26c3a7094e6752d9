"""Cancellation reason form core.

Collects a user's reason for cancelling a service and provides:
- Validation rules with conditional required fields and character limits
- A form state controller with synchronous change notifications
- A submission state machine (idle -> submitting -> submitted / error)
  that prevents duplicate submits
- A submission pipeline that awaits an injected submit collaborator and
  reports the outcome as a notification

Presentation (layout, widgets, toasts) is left to the caller.

Basic usage:
    >>> from cancelform import CancellationFormSession
    >>> session = CancellationFormSession()
    >>> session.set_field("reason", "other")
    >>> session.snapshot().errors
    {'otherDetails': '詳細を入力してください'}
"""

__version__ = "0.1.0"

# Version info
VERSION = (0, 1, 0)

# Core exports
from cancelform.controller import FormSnapshot, FormStateController
from cancelform.pipeline import SubmissionPipeline, SubmitOutcome
from cancelform.session import CancellationFormSession
from cancelform.types import FormValues, ReasonCategory, SubmissionState
from cancelform.validation import ValidationResult, ValidationSchema

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "CancellationFormSession",
    "FormStateController",
    "FormSnapshot",
    "SubmissionPipeline",
    "SubmitOutcome",
    "ValidationSchema",
    "ValidationResult",
    "FormValues",
    "ReasonCategory",
    "SubmissionState",
]
