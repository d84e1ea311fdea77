# ngage_judging/scoring/trend.py
"""
Team score history and trend.

    direction  = upward if more rising steps than falling ones,
                 downward if the reverse, else stable
    change_pct = (last - first) / first * 100   (0 when first == 0 or < 2 points)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ngage_judging.models.common import UTCTimestamp, utc_now
from ngage_judging.models.enumerations import TrendDirection
from ngage_judging.scoring.utils import mean


class ScoreHistoryEntry(BaseModel):
    submission_id: str
    score: float
    judge_count: int = Field(ge=0)
    submitted_at: Optional[UTCTimestamp] = None


class ScoreHistory(BaseModel):
    """A team's scored submissions in chronological order."""

    team_id: str
    event_id: Optional[str] = None
    entries: List[ScoreHistoryEntry] = Field(default_factory=list)
    calculated_at: UTCTimestamp = Field(default_factory=utc_now)

    @property
    def average_score(self) -> float:
        return mean([e.score for e in self.entries])

    @property
    def highest_score(self) -> float:
        return max((e.score for e in self.entries), default=0.0)

    @property
    def lowest_score(self) -> float:
        return min((e.score for e in self.entries), default=0.0)


class ScoreTrend(BaseModel):
    team_id: str
    direction: TrendDirection
    percentage_change: float
    average_score: float
    data_points: int


def trend_direction(scores: List[float]) -> TrendDirection:
    if len(scores) < 2:
        return TrendDirection.STABLE

    upward = sum(1 for prev, cur in zip(scores, scores[1:]) if cur > prev)
    downward = sum(1 for prev, cur in zip(scores, scores[1:]) if cur < prev)

    if upward > downward:
        return TrendDirection.UPWARD
    if downward > upward:
        return TrendDirection.DOWNWARD
    return TrendDirection.STABLE


def percentage_change(scores: List[float]) -> float:
    if len(scores) < 2 or scores[0] == 0:
        return 0.0
    return (scores[-1] - scores[0]) / scores[0] * 100


def calculate_trend(history: ScoreHistory) -> ScoreTrend:
    scores = [e.score for e in history.entries]
    return ScoreTrend(
        team_id=history.team_id,
        direction=trend_direction(scores),
        percentage_change=percentage_change(scores),
        average_score=mean(scores),
        data_points=len(scores),
    )


def history_sort_key(entry: ScoreHistoryEntry) -> tuple:
    # Entries without a timestamp go first, in insertion order
    return (entry.submitted_at is not None, entry.submitted_at or datetime.min)
