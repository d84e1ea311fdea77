from uuid import uuid4
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from ngage_judging.models.common import UTCTimestamp, utc_now


class LeaderboardEntry(BaseModel):
    """
    One team's ranked standing within an event.
    """

    team_id: str
    team_name: str
    position: int = Field(..., ge=1, description="1-based rank")
    average_score: float = Field(..., description="Mean of the team's submission averages")
    total_score: float = Field(default=0.0, description="Sum of the team's submission averages")
    submission_count: int = Field(..., ge=1)
    criteria_scores: Dict[str, float] = Field(default_factory=dict)
    submitted_by: List[str] = Field(default_factory=list, description="Distinct submitters, first seen first")

    @property
    def is_first_place(self) -> bool:
        return self.position == 1

    @property
    def is_winning_position(self) -> bool:
        return self.position <= 3


class LeaderboardMetadata(BaseModel):
    total_submissions: int = Field(default=0, ge=0, description="Submissions considered, scored or not")
    total_scores: int = Field(default=0, ge=0, description="Sum of judge counts")
    teams_with_scores: int = Field(default=0, ge=0)
    filtered: bool = False
    sorted: bool = False


class Leaderboard(BaseModel):
    """
    Ranked view of every scored team in one event.

    calculated_at is advisory; a leaderboard may be served from cache.
    """

    id: str = Field(default_factory=lambda: f"leaderboard_{uuid4().hex}")
    event_id: str
    entries: List[LeaderboardEntry] = Field(default_factory=list)
    metadata: LeaderboardMetadata = Field(default_factory=LeaderboardMetadata)
    calculated_at: UTCTimestamp = Field(default_factory=utc_now)

    @property
    def team_count(self) -> int:
        return len(self.entries)

    @property
    def has_entries(self) -> bool:
        return bool(self.entries)

    @property
    def winners(self) -> List[LeaderboardEntry]:
        return self.get_top_entries(3)

    @property
    def first_place(self) -> Optional[LeaderboardEntry]:
        return self.get_entry_by_position(1)

    def get_top_entries(self, count: int) -> List[LeaderboardEntry]:
        """First min(count, len(entries)) entries in ranked order."""
        if count <= 0:
            return []
        return list(self.entries[:count])

    def get_entry_by_team(self, team_id: str) -> Optional[LeaderboardEntry]:
        return next((e for e in self.entries if e.team_id == team_id), None)

    def get_entry_by_position(self, position: int) -> Optional[LeaderboardEntry]:
        return next((e for e in self.entries if e.position == position), None)
