"""Unit tests for the validation rules.

Tests cover:
- reason presence and enum membership
- Required-when rules for familyDetails and otherDetails
- Character limits at and just past each maximum
- Per-field tie-break between length/type and requiredness
- ValidationResult helpers and custom limits
"""

import pytest

from cancelform.errors import FieldError
from cancelform.types import FieldErrorCode, FormValues, ReasonCategory
from cancelform.validation import (
    DEFAULT_MAX_LENGTHS,
    REQUIRED_WHEN,
    ValidationResult,
    ValidationSchema,
    required_fields_for,
)


class TestReasonField:
    """Test validation of the reason discriminant."""

    def test_missing_reason(self):
        """Should report a REQUIRED error on reason when it is absent."""
        result = ValidationSchema().validate({})

        assert result.is_valid is False
        error = result.error_for("reason")
        assert error.code == FieldErrorCode.REQUIRED
        assert error.message == "変更事由を選択してください"

    def test_reason_none_is_absent(self):
        """Should treat reason=None the same as a missing reason."""
        result = ValidationSchema().validate({"reason": None})

        assert result.error_for("reason").code == FieldErrorCode.REQUIRED

    def test_reason_unset_reports_only_reason(self):
        """Should not raise requiredness errors for detail fields while reason is unset."""
        result = ValidationSchema().validate(FormValues.empty())

        assert list(result.messages()) == ["reason"]

    def test_unknown_reason_value(self):
        """Should report INVALID_VALUE for a reason outside the enum."""
        result = ValidationSchema().validate({"reason": "moving"})

        error = result.error_for("reason")
        assert error.code == FieldErrorCode.INVALID_VALUE
        assert error.received == "moving"
        assert error.expected == ["family", "other"]

    def test_non_string_reason(self):
        """Should report INVALID_TYPE first for a non-string reason."""
        result = ValidationSchema().validate({"reason": 5})

        error = result.error_for("reason")
        assert error.code == FieldErrorCode.INVALID_TYPE
        assert error.message == "変更事由を選択してください"

    def test_enum_member_accepted(self):
        """Should accept ReasonCategory members as well as plain strings."""
        result = ValidationSchema().validate(
            {"reason": ReasonCategory.OTHER, "otherDetails": "料金が高いため"}
        )

        assert result.is_valid is True


class TestRequiredWhenRules:
    """Test the cross-field required-when rules."""

    def test_family_requires_family_details(self):
        """Should attach the error to familyDetails when reason=family and it is empty."""
        result = ValidationSchema().validate({"reason": "family", "familyDetails": ""})

        assert result.is_valid is False
        assert result.messages() == {"familyDetails": "具体的内容を入力してください"}
        assert result.error_for("familyDetails").code == FieldErrorCode.REQUIRED

    def test_family_requires_family_details_when_key_missing(self):
        """Should treat a missing familyDetails key as empty."""
        result = ValidationSchema().validate({"reason": "family"})

        assert "familyDetails" in result.messages()

    def test_other_requires_other_details(self):
        """Should attach the error to otherDetails when reason=other and it is empty."""
        result = ValidationSchema().validate({"reason": "other", "otherDetails": ""})

        assert result.is_valid is False
        assert result.messages() == {"otherDetails": "詳細を入力してください"}

    def test_family_never_requires_other_details(self):
        """Should not check otherDetails requiredness when reason=family."""
        result = ValidationSchema().validate(
            {"reason": "family", "familyDetails": "介護のため", "otherDetails": ""}
        )

        assert result.is_valid is True
        assert result.error_for("otherDetails") is None

    def test_other_never_requires_family_details(self):
        """Should not check familyDetails requiredness when reason=other."""
        result = ValidationSchema().validate(
            {"reason": "other", "otherDetails": "使わなくなった", "familyDetails": ""}
        )

        assert result.is_valid is True

    def test_rule_follows_data_not_visible_branch(self):
        """Should flag familyDetails even if the only text entered is in otherDetails."""
        result = ValidationSchema().validate(
            {"reason": "family", "familyDetails": "", "otherDetails": "前に入力した内容"}
        )

        assert list(result.messages()) == ["familyDetails"]

    def test_required_fields_for(self):
        """Should map each reason to its detail field and anything else to nothing."""
        assert required_fields_for("family") == frozenset({"familyDetails"})
        assert required_fields_for(ReasonCategory.OTHER) == frozenset({"otherDetails"})
        assert required_fields_for(None) == frozenset()
        assert required_fields_for("moving") == frozenset()

    def test_required_when_table_covers_every_reason(self):
        """Should have exactly one detail field per reason category."""
        assert set(REQUIRED_WHEN) == set(ReasonCategory)


class TestCharacterLimits:
    """Test maxLength on every text field, at and just past the limit."""

    def _candidate(self, path, text):
        data = {"reason": "family", "familyDetails": "引っ越し"}
        data[path] = text
        return data

    def _assert_boundary(self, path, limit):
        schema = ValidationSchema()

        at_limit = schema.validate(self._candidate(path, "a" * limit))
        assert at_limit.is_valid is True

        over_limit = schema.validate(self._candidate(path, "a" * (limit + 1)))
        assert over_limit.is_valid is False
        error = over_limit.error_for(path)
        assert error.code == FieldErrorCode.TOO_LONG
        assert error.message == f"{limit}文字以内で入力してください"
        assert error.received == f"{limit + 1} characters"

    def test_family_details_limit(self):
        """Should allow 50 characters in familyDetails and reject 51."""
        self._assert_boundary("familyDetails", 50)

    def test_other_details_limit(self):
        """Should allow 200 characters in otherDetails and reject 201."""
        self._assert_boundary("otherDetails", 200)

    def test_improvement_limit(self):
        """Should allow 200 characters in improvement and reject 201."""
        self._assert_boundary("improvement", 200)

    def test_comments_limit(self):
        """Should allow 200 characters in comments and reject 201."""
        self._assert_boundary("comments", 200)

    def test_limit_counts_characters_not_bytes(self):
        """Should count each Japanese character once."""
        schema = ValidationSchema()

        assert schema.validate({"reason": "family", "familyDetails": "あ" * 50}).is_valid is True
        assert schema.validate({"reason": "family", "familyDetails": "あ" * 51}).is_valid is False

    def test_optional_fields_may_be_empty(self):
        """Should accept empty improvement and comments."""
        result = ValidationSchema().validate(
            {"reason": "other", "otherDetails": "x", "improvement": "", "comments": ""}
        )

        assert result.is_valid is True


class TestTieBreak:
    """Test that one error per field is surfaced, type/length before requiredness."""

    def test_type_violation_reported_before_requiredness(self):
        """Should surface INVALID_TYPE when a falsy non-string also trips the required rule."""
        result = ValidationSchema().validate({"reason": "family", "familyDetails": 0})

        codes = [e.code for e in result.errors if e.path == "familyDetails"]
        assert codes == [FieldErrorCode.INVALID_TYPE, FieldErrorCode.REQUIRED]
        assert result.error_for("familyDetails").code == FieldErrorCode.INVALID_TYPE
        assert result.messages()["familyDetails"] == "文字列で入力してください"

    def test_field_level_errors_precede_cross_field_errors(self):
        """Should list field-level errors before cross-field errors."""
        result = ValidationSchema().validate(
            {"reason": "other", "otherDetails": "", "comments": "a" * 201}
        )

        assert [e.path for e in result.errors] == ["comments", "otherDetails"]

    def test_first_errors_has_one_entry_per_field(self):
        """Should collapse multiple errors on a field into the first."""
        result = ValidationSchema().validate({"reason": "family", "familyDetails": 0})

        first = result.first_errors()
        assert list(first) == ["familyDetails"]
        assert isinstance(first["familyDetails"], FieldError)


class TestValidationResult:
    """Test ValidationResult structure and helpers."""

    def test_valid_result(self):
        """Should return is_valid with no errors and the normalized data."""
        result = ValidationSchema().validate(
            FormValues(reason=ReasonCategory.FAMILY, family_details="転居のため")
        )

        assert result.is_valid is True
        assert result.errors == []
        assert result.data["reason"] == "family"
        assert result.messages() == {}

    def test_to_dict(self):
        """Should serialize with camelCase keys."""
        result = ValidationSchema().validate({"reason": "other"})

        data = result.to_dict()
        assert data["isValid"] is False
        assert data["errors"][0]["path"] == "otherDetails"
        assert data["errors"][0]["code"] == "required"

    def test_result_is_immutable(self):
        """Should be a frozen dataclass."""
        result = ValidationResult(is_valid=True, errors=[])

        with pytest.raises(Exception):
            result.is_valid = False

    def test_validate_does_not_raise_for_bad_data(self):
        """Should return a result for any mapping of bad values."""
        result = ValidationSchema().validate(
            {"reason": [], "familyDetails": {}, "otherDetails": 3.5, "comments": b"x"}
        )

        assert result.is_valid is False


class TestSchemaConfiguration:
    """Test configurable limits."""

    def test_default_limits(self):
        """Should expose the default limits."""
        schema = ValidationSchema()

        assert schema.max_lengths == DEFAULT_MAX_LENGTHS
        assert schema.max_length_for("familyDetails") == 50
        assert schema.max_length_for("comments") == 200
        assert schema.max_length_for("reason") is None

    def test_override_limit(self):
        """Should apply an overridden limit."""
        schema = ValidationSchema(max_lengths={"comments": 10})

        assert schema.validate({"reason": "other", "otherDetails": "x", "comments": "a" * 10}).is_valid
        result = schema.validate({"reason": "other", "otherDetails": "x", "comments": "a" * 11})
        assert result.messages() == {"comments": "10文字以内で入力してください"}

    def test_unknown_field_override(self):
        """Should reject limits for fields that are not text fields."""
        with pytest.raises(ValueError):
            ValidationSchema(max_lengths={"reason": 10})
