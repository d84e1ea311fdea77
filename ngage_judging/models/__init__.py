"""
Models Package - Ngage Judging Engine
ngage_judging/models/__init__.py

Pydantic models for rubrics, scores, submissions and derived rankings.
"""

from ngage_judging.models.aggregation import AggregatedScore, ScoreRange
from ngage_judging.models.enumerations import (
    JudgeRole,
    LeaderboardSortField,
    RankingMode,
    ScoringType,
    SubmissionStatus,
    TotalScoreRule,
    TrendDirection,
)
from ngage_judging.models.judge_assignment import JudgeAssignment
from ngage_judging.models.leaderboard import Leaderboard, LeaderboardEntry, LeaderboardMetadata
from ngage_judging.models.rubric import ScoringCriterion, ScoringRubric
from ngage_judging.models.score import Score
from ngage_judging.models.submission import Submission

__all__ = [
    "AggregatedScore",
    "ScoreRange",
    "JudgeRole",
    "LeaderboardSortField",
    "RankingMode",
    "ScoringType",
    "SubmissionStatus",
    "TotalScoreRule",
    "TrendDirection",
    "JudgeAssignment",
    "Leaderboard",
    "LeaderboardEntry",
    "LeaderboardMetadata",
    "ScoringCriterion",
    "ScoringRubric",
    "Score",
    "Submission",
]
