"""Validation rules for the cancellation reason form.

This module provides a ValidationSchema that judges a FormValues candidate
and produces a structured ValidationResult. Validation runs in two passes:

1. Field-level checks (type, enum, maxLength, ``reason`` presence), expressed
   as a Draft 7 JSON Schema and evaluated with jsonschema.
2. Cross-field required-when rules: a detail field becomes mandatory when
   ``reason`` holds the matching category.

Both passes always run. Invalid input is a normal return value; nothing in
this module raises for bad data.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union

import jsonschema
from jsonschema import Draft7Validator

from cancelform.errors import FieldError
from cancelform.types import (
    COMMENTS,
    FAMILY_DETAILS,
    FIELD_PATHS,
    IMPROVEMENT,
    OTHER_DETAILS,
    REASON,
    FieldErrorCode,
    FormValues,
    ReasonCategory,
)

logger = logging.getLogger(__name__)


DEFAULT_MAX_LENGTHS: Dict[str, int] = {
    FAMILY_DETAILS: 50,
    OTHER_DETAILS: 200,
    IMPROVEMENT: 200,
    COMMENTS: 200,
}

# Reason category -> detail field that becomes required.
# Shared by required_fields_for() and the cross-field pass.
REQUIRED_WHEN: Dict[ReasonCategory, str] = {
    ReasonCategory.FAMILY: FAMILY_DETAILS,
    ReasonCategory.OTHER: OTHER_DETAILS,
}

REASON_MESSAGE = "変更事由を選択してください"
REQUIRED_MESSAGES: Dict[str, str] = {
    FAMILY_DETAILS: "具体的内容を入力してください",
    OTHER_DETAILS: "詳細を入力してください",
}
TOO_LONG_MESSAGE = "{max_length}文字以内で入力してください"
INVALID_TYPE_MESSAGE = "文字列で入力してください"


def required_fields_for(reason: Any) -> FrozenSet[str]:
    """Return the detail fields required for a given reason.

    Examples:
        >>> sorted(required_fields_for("family"))
        ['familyDetails']
        >>> required_fields_for(None)
        frozenset()
    """
    for category, path in REQUIRED_WHEN.items():
        if reason == category.value:
            return frozenset({path})
    return frozenset()


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a FormValues candidate.

    Attributes:
        is_valid: Whether the candidate passed all checks
        errors: Field-level errors, field-level pass first, cross-field pass second
        data: The candidate as a dict keyed by field path

    Examples:
        >>> result = ValidationSchema().validate({"reason": "other", "otherDetails": ""})
        >>> result.is_valid
        False
        >>> result.messages()
        {'otherDetails': '詳細を入力してください'}
    """
    is_valid: bool
    errors: List[FieldError]
    data: Optional[Dict[str, Any]] = None

    def first_errors(self) -> Dict[str, FieldError]:
        """Return the first error of each failing field, keyed by path."""
        result: Dict[str, FieldError] = {}
        for error in self.errors:
            result.setdefault(error.path, error)
        return result

    def messages(self) -> Dict[str, str]:
        """Return the message the UI shows for each failing field."""
        return {path: error.message for path, error in self.first_errors().items()}

    def error_for(self, path: str) -> Optional[FieldError]:
        """Return the error shown for a field, or None if it passed."""
        return self.first_errors().get(path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.data is not None:
            result["data"] = self.data
        return result


class ValidationSchema:
    """Rule set for the cancellation reason form.

    Attributes:
        max_lengths: Maximum character count per text field
        schema: The JSON Schema used for the field-level pass
        validator: The underlying jsonschema validator instance

    Examples:
        >>> schema = ValidationSchema()
        >>> schema.validate({"reason": "family", "familyDetails": "転居のため"}).is_valid
        True
        >>> schema.validate({}).messages()
        {'reason': '変更事由を選択してください'}
    """

    def __init__(self, max_lengths: Optional[Mapping[str, int]] = None) -> None:
        """Initialize the schema.

        Args:
            max_lengths: Optional overrides for the per-field limits

        Raises:
            ValueError: If an override names an unknown text field
            jsonschema.SchemaError: If a limit produces an invalid schema
        """
        limits = dict(DEFAULT_MAX_LENGTHS)
        for path, limit in (max_lengths or {}).items():
            if path not in DEFAULT_MAX_LENGTHS:
                raise ValueError(f"Unknown text field '{path}'")
            limits[path] = limit
        self.max_lengths = limits
        self.schema = self._build_schema(limits)
        Draft7Validator.check_schema(self.schema)
        self.validator = Draft7Validator(self.schema)

    @staticmethod
    def _build_schema(max_lengths: Mapping[str, int]) -> Dict[str, Any]:
        properties: Dict[str, Any] = {
            REASON: {"type": "string", "enum": [c.value for c in ReasonCategory]},
        }
        for path, limit in max_lengths.items():
            properties[path] = {"type": "string", "maxLength": limit}
        return {
            "type": "object",
            "properties": properties,
            "required": [REASON],
        }

    def max_length_for(self, path: str) -> Optional[int]:
        """Return the configured character limit of a field, if any."""
        return self.max_lengths.get(path)

    def required_fields_for(self, reason: Any) -> FrozenSet[str]:
        """Return the detail fields required for a given reason."""
        return required_fields_for(reason)

    def validate(self, candidate: Union[FormValues, Mapping[str, Any]]) -> ValidationResult:
        """Validate a candidate.

        Args:
            candidate: FormValues, or a mapping keyed by field path.
                None values are treated as absent.

        Returns:
            ValidationResult with is_valid flag and ordered errors
        """
        data = self._normalize(candidate)

        errors = self._field_errors(data)
        errors.extend(self._cross_field_errors(data))

        if errors:
            logger.debug(
                "Validation failed for fields: %s",
                ", ".join(sorted({e.path for e in errors})),
            )
        return ValidationResult(is_valid=not errors, errors=errors, data=data)

    @staticmethod
    def _normalize(candidate: Union[FormValues, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(candidate, FormValues):
            return candidate.to_dict()
        result: Dict[str, Any] = {}
        for path, value in candidate.items():
            if value is None:
                continue
            if isinstance(value, ReasonCategory):
                value = value.value
            result[path] = value
        return result

    def _field_errors(self, data: Dict[str, Any]) -> List[FieldError]:
        raw = list(self.validator.iter_errors(data))
        field_errors = [self._translate_error(error) for error in raw]
        # jsonschema yields errors in keyword order; report them in field order
        order = {path: index for index, path in enumerate(FIELD_PATHS)}
        field_errors.sort(key=lambda e: order.get(e.path, len(order)))
        return field_errors

    @staticmethod
    def _cross_field_errors(data: Dict[str, Any]) -> List[FieldError]:
        errors: List[FieldError] = []
        # Every rule is checked on every pass; the active branch does not matter
        for category, path in REQUIRED_WHEN.items():
            if data.get(REASON) == category.value and not data.get(path):
                errors.append(
                    FieldError(
                        path=path,
                        code=FieldErrorCode.REQUIRED,
                        message=REQUIRED_MESSAGES[path],
                        expected="non-empty text",
                        received=data.get(path),
                    )
                )
        return errors

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'required' property errors -> REQUIRED
            - 'type' errors -> INVALID_TYPE
            - 'enum' errors -> INVALID_VALUE
            - 'maxLength' errors -> TOO_LONG
        """
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            return FieldError(
                path=REASON,
                code=FieldErrorCode.REQUIRED,
                message=REASON_MESSAGE,
                expected="required field",
                received=None,
            )

        if error.validator == "type":
            if path == REASON:
                message = REASON_MESSAGE
            else:
                message = INVALID_TYPE_MESSAGE
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=message,
                expected=error.validator_value,
                received=type(error.instance).__name__,
            )

        if error.validator == "enum":
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=REASON_MESSAGE,
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator == "maxLength":
            max_length = error.validator_value
            return FieldError(
                path=path,
                code=FieldErrorCode.TOO_LONG,
                message=TOO_LONG_MESSAGE.format(max_length=max_length),
                expected=f"maximum {max_length} characters",
                received=f"{len(error.instance)} characters",
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.INVALID_VALUE,
            message=error.message,
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "ValidationSchema",
    "ValidationResult",
    "required_fields_for",
    "REQUIRED_WHEN",
    "DEFAULT_MAX_LENGTHS",
]
