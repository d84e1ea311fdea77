"""
Rubric Validator Tests - Ngage Judging Engine
tests/test_rubric_validator.py

Required fields, type checks, bounds and unknown keys.
"""

import math
import pytest
from unittest.mock import MagicMock

from ngage_judging.core.exceptions import (
    InvalidValueTypeException,
    MissingRequiredFieldException,
    OutOfRangeException,
    RubricValidationException,
    UnknownCriterionException,
)
from ngage_judging.scoring.rubric_validator import RubricValidator, normalize_boolean_input


@pytest.fixture
def validator():
    return RubricValidator()


@pytest.fixture
def valid_input():
    return {"design": 80, "impact": 4, "demo": True}


class TestValidInput:

    def test_normalizes_values(self, validator, sample_rubric, valid_input):
        """Test that numbers become floats and booleans stay booleans."""
        result = validator.validate(valid_input, sample_rubric)
        assert result.values == {"design": 80.0, "impact": 4.0, "demo": True}
        assert isinstance(result.values["design"], float)

    def test_optional_criterion_may_be_omitted(self, validator, sample_rubric, valid_input):
        result = validator.validate(valid_input, sample_rubric)
        assert "notes" not in result.values

    def test_optional_criterion_kept_when_given(self, validator, sample_rubric, valid_input):
        result = validator.validate({**valid_input, "notes": 7}, sample_rubric)
        assert result.values["notes"] == 7.0

    @pytest.mark.parametrize("value", [0, 100, 0.0, 100.0])
    def test_numeric_bounds_inclusive(self, validator, sample_rubric, valid_input, value):
        result = validator.validate({**valid_input, "design": value}, sample_rubric)
        assert result.values["design"] == value

    @pytest.mark.parametrize("value", [1, 5])
    def test_scale_bounds_inclusive(self, validator, sample_rubric, valid_input, value):
        result = validator.validate({**valid_input, "impact": value}, sample_rubric)
        assert result.values["impact"] == value

    @pytest.mark.parametrize("raw,expected", [(0, False), (1, True), (False, False)])
    def test_boolean_accepts_zero_and_one(self, validator, sample_rubric, valid_input, raw, expected):
        result = validator.validate({**valid_input, "demo": raw}, sample_rubric)
        assert result.values["demo"] is expected


class TestRequiredFields:

    @pytest.mark.parametrize("missing", [None, "", "   "])
    def test_empty_required_value(self, validator, sample_rubric, valid_input, missing):
        with pytest.raises(MissingRequiredFieldException) as exc_info:
            validator.validate({**valid_input, "design": missing}, sample_rubric)
        assert exc_info.value.criterion_key == "design"
        assert exc_info.value.constraint == "required"

    def test_absent_required_key(self, validator, sample_rubric):
        with pytest.raises(MissingRequiredFieldException) as exc_info:
            validator.validate({"design": 50, "impact": 3}, sample_rubric)
        assert exc_info.value.criterion_key == "demo"


class TestRange:

    @pytest.mark.parametrize("value", [-0.01, 100.01, 1000])
    def test_numeric_out_of_range(self, validator, sample_rubric, valid_input, value):
        with pytest.raises(OutOfRangeException) as exc_info:
            validator.validate({**valid_input, "design": value}, sample_rubric)
        assert exc_info.value.criterion_key == "design"
        assert exc_info.value.bounds == (0.0, 100.0)

    @pytest.mark.parametrize("value", [0, 6, 0.99])
    def test_scale_out_of_range(self, validator, sample_rubric, valid_input, value):
        with pytest.raises(OutOfRangeException) as exc_info:
            validator.validate({**valid_input, "impact": value}, sample_rubric)
        assert exc_info.value.bounds == (1.0, 5.0)

    def test_infinity_out_of_range(self, validator, sample_rubric, valid_input):
        with pytest.raises(OutOfRangeException):
            validator.validate({**valid_input, "design": math.inf}, sample_rubric)

    def test_error_dict(self, validator, sample_rubric, valid_input):
        with pytest.raises(OutOfRangeException) as exc_info:
            validator.validate({**valid_input, "design": 120}, sample_rubric)
        detail = exc_info.value.to_dict()
        assert detail["criterion_key"] == "design"
        assert detail["constraint"] == "range"


class TestTypes:

    @pytest.mark.parametrize("value", ["80", True, [80], float("nan")])
    def test_numeric_rejects_non_numbers(self, validator, sample_rubric, valid_input, value):
        with pytest.raises(InvalidValueTypeException):
            validator.validate({**valid_input, "design": value}, sample_rubric)

    @pytest.mark.parametrize("value", ["true", 2, 0.5])
    def test_boolean_rejects_other_values(self, validator, sample_rubric, valid_input, value):
        with pytest.raises(InvalidValueTypeException) as exc_info:
            validator.validate({**valid_input, "demo": value}, sample_rubric)
        assert exc_info.value.constraint == "type"


class TestUnknownCriteria:

    def test_unknown_key_rejected(self, validator, sample_rubric, valid_input):
        with pytest.raises(UnknownCriterionException) as exc_info:
            validator.validate({**valid_input, "bonus": 10}, sample_rubric)
        assert exc_info.value.criterion_key == "bonus"

    def test_rubric_violations_reported_before_unknown(self, validator, sample_rubric):
        with pytest.raises(MissingRequiredFieldException):
            validator.validate({"bonus": 10}, sample_rubric)


class TestCheck:

    def test_collects_every_violation(self, validator, sample_rubric):
        errors = validator.check({"design": 200, "impact": "high", "bonus": 1}, sample_rubric)
        constraints = [(e.criterion_key, e.constraint) for e in errors]
        assert constraints == [
            ("design", "range"),
            ("impact", "type"),
            ("demo", "required"),
            ("bonus", "unknown"),
        ]
        assert all(isinstance(e, RubricValidationException) for e in errors)

    def test_no_violations(self, validator, sample_rubric, valid_input):
        assert validator.check(valid_input, sample_rubric) == []


class TestLogging:

    def test_failure_is_logged(self, sample_rubric):
        logger = MagicMock()
        validator = RubricValidator(logger=logger)
        with pytest.raises(UnknownCriterionException):
            validator.validate({"design": 1, "impact": 1, "demo": True, "x": 1}, sample_rubric)
        logger.info.assert_called_once()
        assert logger.info.call_args.args[0] == "score_validation_failed"
        assert logger.info.call_args.kwargs["constraint"] == "unknown"


class TestNormalizeBooleanInput:

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("TRUE", True), ("1", True), ("yes", True),
        ("false", False), (" 0 ", False), ("no", False),
    ])
    def test_recognized_strings(self, raw, expected):
        assert normalize_boolean_input(raw) is expected

    @pytest.mark.parametrize("raw", ["maybe", 3, None])
    def test_other_values_unchanged(self, raw):
        assert normalize_boolean_input(raw) == raw
