"""
Leaderboard filtering and display sorting.

Filtering never re-ranks: an entry keeps the position it earned on the full
leaderboard.
"""

from typing import List, Optional, Set

from pydantic import BaseModel, Field, model_validator

from ngage_judging.models.enumerations import LeaderboardSortField
from ngage_judging.models.leaderboard import Leaderboard, LeaderboardEntry


class LeaderboardFilter(BaseModel):
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    min_submissions: Optional[int] = Field(default=None, ge=0)
    team_ids: Optional[Set[str]] = None
    top_n: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_score_window(self):
        """Ensure max_score >= min_score when both are set."""
        if self.min_score is not None and self.max_score is not None:
            if self.max_score < self.min_score:
                raise ValueError("max_score must be >= min_score")
        return self


class LeaderboardSort(BaseModel):
    field: LeaderboardSortField = LeaderboardSortField.AVERAGE_SCORE
    ascending: bool = False


def filter_entries(entries: List[LeaderboardEntry], criteria: LeaderboardFilter) -> List[LeaderboardEntry]:
    filtered = list(entries)
    if criteria.min_score is not None:
        filtered = [e for e in filtered if e.average_score >= criteria.min_score]
    if criteria.max_score is not None:
        filtered = [e for e in filtered if e.average_score <= criteria.max_score]
    if criteria.min_submissions is not None:
        filtered = [e for e in filtered if e.submission_count >= criteria.min_submissions]
    if criteria.team_ids:
        filtered = [e for e in filtered if e.team_id in criteria.team_ids]
    if criteria.top_n is not None:
        filtered = filtered[:criteria.top_n]
    return filtered


def sort_entries(entries: List[LeaderboardEntry], sort: LeaderboardSort) -> List[LeaderboardEntry]:
    # Stable sort: position breaks ties between equal keys
    by_position = sorted(entries, key=lambda e: e.position)
    return sorted(
        by_position,
        key=lambda e: getattr(e, sort.field.value),
        reverse=not sort.ascending,
    )


def apply_filter(
    leaderboard: Leaderboard,
    criteria: Optional[LeaderboardFilter] = None,
    sort: Optional[LeaderboardSort] = None,
) -> Leaderboard:
    """Return a filtered and/or re-sorted copy of the leaderboard."""
    entries = list(leaderboard.entries)
    if criteria is not None:
        entries = filter_entries(entries, criteria)
    if sort is not None:
        entries = sort_entries(entries, sort)

    metadata = leaderboard.metadata.model_copy(
        update={"filtered": criteria is not None, "sorted": sort is not None}
    )
    return leaderboard.model_copy(update={"entries": entries, "metadata": metadata})
