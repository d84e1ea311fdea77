"""
Leaderboard Service - Ngage Judging Engine
ngage_judging/services/leaderboard_service.py

Loads submissions and scores from the repositories and hands them to the
LeaderboardBuilder. Event leaderboards are cached until the next score write.
"""

import logging
from typing import List, Mapping, Optional, Sequence

from ngage_judging.models.leaderboard import Leaderboard
from ngage_judging.models.submission import Submission
from ngage_judging.repositories.score_repository import ScoreRepository
from ngage_judging.repositories.submission_repository import SubmissionRepository
from ngage_judging.scoring.leaderboard_builder import LeaderboardBuilder
from ngage_judging.scoring.leaderboard_filters import LeaderboardFilter, LeaderboardSort, apply_filter
from ngage_judging.scoring.trend import (
    ScoreHistory,
    ScoreHistoryEntry,
    ScoreTrend,
    calculate_trend,
    history_sort_key,
)
from ngage_judging.services.cache import LeaderboardCache

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Event leaderboards, filtered views and per-team score history."""

    def __init__(
        self,
        score_repo: ScoreRepository,
        submission_repo: SubmissionRepository,
        builder: Optional[LeaderboardBuilder] = None,
        leaderboard_cache: Optional[LeaderboardCache] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.score_repo = score_repo
        self.submission_repo = submission_repo
        self.builder = builder or LeaderboardBuilder()
        self.leaderboard_cache = leaderboard_cache
        self.logger = log or logger

    def build_leaderboard(
        self,
        event_id: str,
        submissions: Sequence[Submission],
        team_names: Optional[Mapping[str, str]] = None,
    ) -> Leaderboard:
        """Rank the given submissions; scores are read in batches."""
        scores = self.score_repo.get_by_submission_ids(s.id for s in submissions)
        return self.builder.build(event_id, submissions, scores, team_names)

    def calculate_event_leaderboard(
        self,
        event_id: str,
        team_names: Optional[Mapping[str, str]] = None,
        use_cache: bool = True,
    ) -> Leaderboard:
        """
        Leaderboard over the event's submitted and approved submissions.

        A cached leaderboard is returned when present; its calculated_at
        tells the caller how fresh it is.
        """
        if use_cache and self.leaderboard_cache is not None:
            cached = self.leaderboard_cache.get(event_id, team_names)
            if cached is not None:
                self.logger.debug(f"Leaderboard cache hit for {event_id}")
                return cached

        submissions = self._scorable_submissions(self.submission_repo.get_by_event_id(event_id))
        leaderboard = self.build_leaderboard(event_id, submissions, team_names)

        if self.leaderboard_cache is not None:
            self.leaderboard_cache.set(leaderboard, team_names)
        self.logger.info(
            f"Leaderboard for {event_id}: {leaderboard.team_count} teams "
            f"from {len(submissions)} submissions"
        )
        return leaderboard

    def get_filtered_leaderboard(
        self,
        event_id: str,
        team_names: Optional[Mapping[str, str]] = None,
        criteria: Optional[LeaderboardFilter] = None,
        sort: Optional[LeaderboardSort] = None,
    ) -> Leaderboard:
        leaderboard = self.calculate_event_leaderboard(event_id, team_names)
        return apply_filter(leaderboard, criteria, sort)

    def get_team_score_history(self, event_id: str, team_id: str) -> ScoreHistory:
        """The team's scored submissions in the event, oldest first."""
        submissions = self._scorable_submissions(
            self.submission_repo.get_by_team_id(team_id, event_id)
        )
        scores = self.score_repo.get_by_submission_ids(s.id for s in submissions)

        entries: List[ScoreHistoryEntry] = []
        for submission in submissions:
            aggregated = self.builder.aggregator.aggregate(scores[submission.id], submission.id)
            if not aggregated.has_scores:
                continue
            entries.append(ScoreHistoryEntry(
                submission_id=submission.id,
                score=aggregated.average_score,
                judge_count=aggregated.judge_count,
                submitted_at=submission.submitted_at or submission.created_at,
            ))
        entries.sort(key=history_sort_key)

        return ScoreHistory(team_id=team_id, event_id=event_id, entries=entries)

    def get_team_score_trend(self, event_id: str, team_id: str) -> ScoreTrend:
        return calculate_trend(self.get_team_score_history(event_id, team_id))

    @staticmethod
    def _scorable_submissions(submissions: Sequence[Submission]) -> List[Submission]:
        return [s for s in submissions if s.is_scorable]
