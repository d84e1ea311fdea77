# ngage_judging/scoring/rubric_validator.py
"""
Rubric Validator
----------------
Gatekeeper between a judge's raw input and a persisted Score.

Checks, in rubric order, then for keys the rubric does not define:
    required  - a required criterion is absent, None or ""
    type      - numeric/scale needs a real number, boolean needs a bool (or 0/1)
    range     - numeric in [0, max_score], scale in [options.min, options.max]
    unknown   - a key that is not a criterion of the rubric

Usage:
    result = RubricValidator().validate({"design": 80, "demo": True}, rubric)
    result.values  # {"design": 80.0, "demo": True}
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog

from ngage_judging.core.exceptions import (
    InvalidValueTypeException,
    MissingRequiredFieldException,
    OutOfRangeException,
    RubricValidationException,
    UnknownCriterionException,
)
from ngage_judging.models.enumerations import ScoringType
from ngage_judging.models.rubric import ScoringCriterion, ScoringRubric

NormalizedValue = Union[bool, float]

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


@dataclass
class ValidationResult:
    """Normalized criterion values, ready to embed in a Score."""
    values: Dict[str, NormalizedValue] = field(default_factory=dict)


def normalize_boolean_input(value: Any) -> Any:
    """
    Turn form-style boolean strings ("true", "1", "false", "0") into bools.

    For the presentation layer to call before validation; anything it does
    not recognize is returned unchanged so the validator can reject it.
    """
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RubricValidator:
    """Validate raw scoring input against a ScoringRubric."""

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger(__name__)

    def validate(self, raw_scores: Mapping[str, Any], rubric: ScoringRubric) -> ValidationResult:
        """
        Validate and normalize raw criterion values.

        Raises:
            RubricValidationException: the first violation found
        """
        values: Dict[str, NormalizedValue] = {}
        for key, outcome in self._evaluate(raw_scores, rubric):
            if isinstance(outcome, RubricValidationException):
                self._logger.info(
                    "score_validation_failed",
                    rubric_id=rubric.id,
                    criterion_key=outcome.criterion_key,
                    constraint=outcome.constraint,
                )
                raise outcome
            if outcome is not None:
                values[key] = outcome
        return ValidationResult(values=values)

    def check(self, raw_scores: Mapping[str, Any], rubric: ScoringRubric) -> List[RubricValidationException]:
        """Every violation in the input, without raising."""
        return [
            outcome
            for _, outcome in self._evaluate(raw_scores, rubric)
            if isinstance(outcome, RubricValidationException)
        ]

    def _evaluate(self, raw_scores: Mapping[str, Any], rubric: ScoringRubric):
        """Yield (key, normalized value | None | violation) for every key involved."""
        for criterion in rubric.criteria:
            raw = raw_scores.get(criterion.key)
            if _is_empty(raw):
                if criterion.required:
                    yield criterion.key, MissingRequiredFieldException(criterion.key)
                else:
                    yield criterion.key, None
                continue
            try:
                yield criterion.key, self._normalize(criterion, raw)
            except RubricValidationException as e:
                yield criterion.key, e

        known = set(rubric.criterion_keys)
        for key in raw_scores:
            if key not in known:
                yield key, UnknownCriterionException(key)

    @staticmethod
    def _normalize(criterion: ScoringCriterion, raw: Any) -> NormalizedValue:
        if criterion.type == ScoringType.BOOLEAN:
            if isinstance(raw, bool):
                return raw
            if isinstance(raw, int) and raw in (0, 1):
                return bool(raw)
            raise InvalidValueTypeException(criterion.key, raw, "true or false")

        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise InvalidValueTypeException(criterion.key, raw, "a number")
        value = float(raw)
        if math.isnan(value):
            raise InvalidValueTypeException(criterion.key, raw, "a number")

        low, high = criterion.bounds
        if not low <= value <= high:
            raise OutOfRangeException(criterion.key, value, (low, high))
        return value
