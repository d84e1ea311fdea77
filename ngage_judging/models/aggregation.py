from typing import Dict, List
from pydantic import BaseModel, Field, model_validator

from ngage_judging.models.score import Score


class ScoreRange(BaseModel):
    """Lowest and highest judge total for a submission."""

    min: float = 0.0
    max: float = 0.0

    @property
    def spread(self) -> float:
        return self.max - self.min


class AggregatedScore(BaseModel):
    """
    Summary over every Score recorded for one submission.

    Derived data: recomputed from the score records whenever it is needed.
    """

    submission_id: str = Field(default="")
    judge_count: int = Field(default=0, ge=0)
    average_score: float = Field(default=0.0, description="Mean of judge totals, unrounded")
    total_score: float = Field(default=0.0, description="Sum of judge totals")
    score_range: ScoreRange = Field(default_factory=ScoreRange)
    criteria_averages: Dict[str, float] = Field(default_factory=dict)
    individual_scores: List[Score] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_judge_count(self):
        """Ensure judge_count matches the records it summarizes."""
        if self.judge_count != len(self.individual_scores):
            raise ValueError(
                f"judge_count ({self.judge_count}) must equal the number of "
                f"individual scores ({len(self.individual_scores)})"
            )
        return self

    @property
    def has_scores(self) -> bool:
        return self.judge_count > 0
