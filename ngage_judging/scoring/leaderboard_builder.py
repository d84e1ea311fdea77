# ngage_judging/scoring/leaderboard_builder.py
"""
Leaderboard Builder
-------------------
Ranks the teams of one event by their aggregated submission scores.

    team_average = mean(submission.average_score) over the team's scored submissions
    order        = average group desc, submission_count desc,
                   team_name asc, team_id asc

Averages form one group when each is within epsilon of the next lower one.

Submissions without any judge score do not produce entries but are still
counted in metadata.total_submissions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from ngage_judging.models.aggregation import AggregatedScore
from ngage_judging.models.enumerations import RankingMode
from ngage_judging.models.leaderboard import Leaderboard, LeaderboardEntry, LeaderboardMetadata
from ngage_judging.models.score import Score
from ngage_judging.models.submission import Submission
from ngage_judging.scoring.aggregator import ScoreAggregator
from ngage_judging.scoring.utils import criteria_means, mean, scores_tied

UNKNOWN_TEAM_NAME = "Unknown Team"


@dataclass
class _Standing:
    """A team's combined result before it is ranked."""
    team_id: str
    team_name: str
    submission_averages: List[float] = field(default_factory=list)
    criteria_samples: Dict[str, List[float]] = field(default_factory=dict)
    submitted_by: List[str] = field(default_factory=list)

    @property
    def average_score(self) -> float:
        return mean(self.submission_averages)

    @property
    def total_score(self) -> float:
        return sum(self.submission_averages)

    @property
    def submission_count(self) -> int:
        return len(self.submission_averages)


class LeaderboardBuilder:
    """Build a ranked Leaderboard from submissions and their scores."""

    def __init__(
        self,
        aggregator: Optional[ScoreAggregator] = None,
        epsilon: float = 1e-9,
        ranking_mode: RankingMode = RankingMode.SEQUENTIAL,
        allow_multiple_submissions: bool = True,
        logger: Optional[Any] = None,
    ):
        if epsilon < 0:
            raise ValueError(f"epsilon must be >= 0, got {epsilon}")
        self.aggregator = aggregator or ScoreAggregator()
        self.epsilon = epsilon
        self.ranking_mode = ranking_mode
        self.allow_multiple_submissions = allow_multiple_submissions
        self._logger = logger or structlog.get_logger(__name__)

    def build(
        self,
        event_id: str,
        submissions: Sequence[Submission],
        scores_by_submission: Mapping[str, Sequence[Score]],
        team_names: Optional[Mapping[str, str]] = None,
    ) -> Leaderboard:
        """
        Args:
            event_id: Event being ranked.
            submissions: Every submission to consider, scored or not.
            scores_by_submission: Submission id -> its Score records.
            team_names: Team id -> display name.

        Returns:
            Leaderboard with 1-based positions; empty when nothing is scored.
        """
        team_names = team_names or {}
        aggregated = [
            (submission, self.aggregator.aggregate(
                scores_by_submission.get(submission.id, []), submission.id
            ))
            for submission in submissions
        ]
        scored = [(s, agg) for s, agg in aggregated if agg.has_scores]

        if not self.allow_multiple_submissions:
            scored = self._latest_per_team(event_id, scored)

        standings: Dict[str, _Standing] = {}
        for submission, agg in scored:
            standing = standings.get(submission.team_id)
            if standing is None:
                standing = _Standing(
                    team_id=submission.team_id,
                    team_name=team_names.get(submission.team_id, UNKNOWN_TEAM_NAME),
                )
                standings[submission.team_id] = standing
            standing.submission_averages.append(agg.average_score)
            if submission.submitted_by and submission.submitted_by not in standing.submitted_by:
                standing.submitted_by.append(submission.submitted_by)
            for key, value in agg.criteria_averages.items():
                standing.criteria_samples.setdefault(key, []).append(value)

        entries = self.rank(list(standings.values()))

        leaderboard = Leaderboard(
            event_id=event_id,
            entries=entries,
            metadata=LeaderboardMetadata(
                total_submissions=len(submissions),
                total_scores=sum(agg.judge_count for _, agg in aggregated),
                teams_with_scores=len(standings),
            ),
        )

        self._logger.info(
            "leaderboard_built",
            event_id=event_id,
            team_count=leaderboard.team_count,
            total_submissions=leaderboard.metadata.total_submissions,
            total_scores=leaderboard.metadata.total_scores,
            ranking_mode=self.ranking_mode.value,
        )
        return leaderboard

    def rank(self, standings: List[_Standing]) -> List[LeaderboardEntry]:
        """Sort standings and assign positions."""
        groups = self._tie_groups(standings)
        ordered = sorted(
            standings,
            key=lambda s: (groups[s.team_id], -s.submission_count, s.team_name, s.team_id),
        )

        entries: List[LeaderboardEntry] = []
        for index, standing in enumerate(ordered):
            position = index + 1
            if (
                self.ranking_mode == RankingMode.COMPETITION
                and index > 0
                and self._fully_tied(ordered[index - 1], standing, groups)
            ):
                position = entries[-1].position
            entries.append(LeaderboardEntry(
                team_id=standing.team_id,
                team_name=standing.team_name,
                position=position,
                average_score=standing.average_score,
                total_score=standing.total_score,
                submission_count=standing.submission_count,
                criteria_scores=criteria_means(standing.criteria_samples),
                submitted_by=list(standing.submitted_by),
            ))
        return entries

    def _tie_groups(self, standings: List[_Standing]) -> Dict[str, int]:
        """
        Team id -> score group, 0 for the highest averages.

        Averages are walked in descending order and a gap of at most epsilon
        to the previous average keeps a team in the previous group, so
        80, 80.6, 81.2 with epsilon 1 form one group.
        """
        by_average = sorted(standings, key=lambda s: (-s.average_score, s.team_id))
        groups: Dict[str, int] = {}
        group = 0
        previous: Optional[float] = None
        for standing in by_average:
            average = standing.average_score
            if previous is not None and not scores_tied(previous, average, self.epsilon):
                group += 1
            groups[standing.team_id] = group
            previous = average
        return groups

    def _fully_tied(self, a: _Standing, b: _Standing, groups: Mapping[str, int]) -> bool:
        """Equal on every ranking key except team_id."""
        return (
            groups[a.team_id] == groups[b.team_id]
            and a.submission_count == b.submission_count
            and a.team_name == b.team_name
        )

    def _latest_per_team(
        self,
        event_id: str,
        scored: List[Tuple[Submission, AggregatedScore]],
    ) -> List[Tuple[Submission, AggregatedScore]]:
        """Keep only each team's most recent scored submission."""
        latest: Dict[str, Tuple[Submission, AggregatedScore]] = {}
        for submission, agg in scored:
            current = latest.get(submission.team_id)
            if current is None or _recency(submission) > _recency(current[0]):
                latest[submission.team_id] = (submission, agg)

        dropped = len(scored) - len(latest)
        if dropped:
            self._logger.warning(
                "extra_team_submissions_ignored",
                event_id=event_id,
                ignored_submissions=dropped,
            )
        return list(latest.values())


def _recency(submission: Submission) -> tuple:
    return (
        submission.submitted_at or submission.created_at,
        submission.created_at,
        submission.id,
    )
