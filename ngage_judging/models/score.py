from typing import Any, Dict, Optional, Union

import structlog
from pydantic import Field, StrictBool, ValidationInfo, field_validator, model_validator

from ngage_judging.models.common import DocumentModel, UTCTimestamp, is_stored_document, utc_now
from ngage_judging.models.rubric import ScoringRubric

# Booleans stay booleans, every other accepted value is a float
CriterionValue = Union[StrictBool, float]

logger = structlog.get_logger(__name__)


def _is_criterion_value(value: Any) -> bool:
    return isinstance(value, (bool, int, float))


class Score(DocumentModel):
    """
    One judge's evaluation of one submission.
    """

    id: str = Field(..., min_length=1, description="Unique score identifier")
    submission_id: str = Field(..., min_length=1, description="Scored submission")
    judge_id: str = Field(..., min_length=1, description="Member ID of the judge")
    event_id: str = Field(..., min_length=1, description="Event the submission belongs to")

    scores: Dict[str, CriterionValue] = Field(
        default_factory=dict,
        description="Criterion key -> value"
    )

    comments: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Judge comments"
    )

    total_score: Optional[float] = Field(
        default=None,
        description="This judge's combined total, computed from the rubric"
    )

    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)

    @field_validator("scores", mode="before")
    @classmethod
    def drop_malformed_stored_values(cls, v: Any, info: ValidationInfo) -> Any:
        """
        Skip values a stored document should never have held.

        New records stay strict; only reads from the store are lenient, so
        one bad historical record cannot break aggregation.
        """
        if not is_stored_document(info):
            return v
        score_id = info.data.get("id")
        if not isinstance(v, dict):
            logger.warning("malformed_score_value", score_id=score_id, criterion_key=None,
                           value_type=type(v).__name__)
            return {}
        kept = {}
        for key, value in v.items():
            if _is_criterion_value(value):
                kept[key] = value
            else:
                logger.warning("malformed_score_value", score_id=score_id, criterion_key=key,
                               value_type=type(value).__name__)
        return kept

    @field_validator("total_score", mode="before")
    @classmethod
    def drop_malformed_stored_total(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or not is_stored_document(info):
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            logger.warning("malformed_score_value", score_id=info.data.get("id"),
                           criterion_key="totalScore", value_type=type(v).__name__)
            return None
        return v

    @model_validator(mode="after")
    def validate_timestamps(self):
        """Ensure updated_at >= created_at."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must be >= created_at")
        return self

    @staticmethod
    def compound_id(submission_id: str, judge_id: str) -> str:
        """Document id that makes (submission, judge) unique in the store."""
        return f"{submission_id}:{judge_id}"

    def numeric_value(self, key: str) -> Optional[float]:
        """Numeric value for a criterion, or None if absent, boolean or NaN."""
        value = self.scores.get(key)
        if value is None or isinstance(value, bool):
            return None
        if value != value:
            return None
        return float(value)

    def is_complete(self, rubric: ScoringRubric) -> bool:
        """Check that every required criterion has a value."""
        return all(
            c.key in self.scores for c in rubric.criteria if c.required
        )

    def completion_percentage(self, rubric: ScoringRubric) -> float:
        if not rubric.criteria:
            return 100.0
        scored = sum(1 for c in rubric.criteria if c.key in self.scores)
        return scored / len(rubric.criteria) * 100
