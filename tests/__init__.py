"""Test suite for the cancellation reason form core.

This package contains tests for:
- Validation rules (required-when rules, character limits, tie-break)
- Submission state machine transitions (valid and invalid)
- Event system (emission, serialization, isolation)
- Form state controller (visibility, subscriptions, reset)
- Submission pipeline and full form sessions
"""
