"""
Judging Service - Ngage Judging Engine
ngage_judging/services/judging_service.py

Orchestrates a judge scoring a submission:

  1. Check the submission exists and belongs to the given event
  2. Check the judge is actively assigned to the event (when assignments are enforced)
  3. Validate the raw input against the rubric (nothing invalid is persisted)
  4. Upsert the judge's Score, keyed by (submission_id, judge_id)
  5. Invalidate the event's cached leaderboard

Also exposes per-submission aggregation, event statistics and rubric
management.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ngage_judging.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    EventMismatchException,
    JudgeNotAssignedException,
    RubricValidationException,
)
from ngage_judging.models.aggregation import AggregatedScore
from ngage_judging.models.common import utc_now
from ngage_judging.models.enumerations import TotalScoreRule
from ngage_judging.models.rubric import ScoringCriterion, ScoringRubric
from ngage_judging.models.score import Score
from ngage_judging.repositories.judge_assignment_repository import JudgeAssignmentRepository
from ngage_judging.repositories.rubric_repository import RubricRepository
from ngage_judging.repositories.score_repository import ScoreRepository
from ngage_judging.repositories.submission_repository import SubmissionRepository
from ngage_judging.scoring.aggregator import ScoreAggregator
from ngage_judging.scoring.rubric_validator import RubricValidator
from ngage_judging.scoring.utils import compute_total, mean
from ngage_judging.services.cache import LeaderboardCache

logger = logging.getLogger(__name__)


class EventScoringStats(BaseModel):
    """Scoring progress of one event."""

    total_scores: int = Field(default=0, ge=0)
    average_score: float = 0.0
    completed_submissions: int = Field(default=0, ge=0, description="Submissions with at least one score")
    judge_participation: Dict[str, int] = Field(
        default_factory=dict,
        description="Judge id -> number of scores given"
    )

    @property
    def participating_judges(self) -> int:
        return len(self.judge_participation)


class JudgingService:
    """
    Records judge scores and manages scoring rubrics.

    Reads from / writes to:
      - submissions (existence and event check only)
      - judge_assignments (read only, when an assignment_repo is given)
      - scores
      - scoring_rubrics
    """

    def __init__(
        self,
        score_repo: ScoreRepository,
        rubric_repo: RubricRepository,
        submission_repo: SubmissionRepository,
        validator: Optional[RubricValidator] = None,
        rule: TotalScoreRule = TotalScoreRule.WEIGHTED_MEAN,
        max_comment_length: int = 2000,
        leaderboard_cache: Optional[LeaderboardCache] = None,
        assignment_repo: Optional[JudgeAssignmentRepository] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.score_repo = score_repo
        self.rubric_repo = rubric_repo
        self.submission_repo = submission_repo
        self.validator = validator or RubricValidator()
        self.rule = rule
        self.max_comment_length = max_comment_length
        self.leaderboard_cache = leaderboard_cache
        self.assignment_repo = assignment_repo
        self.logger = log or logger

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_submission(
        self,
        submission_id: str,
        judge_id: str,
        event_id: str,
        raw_scores: Mapping[str, Any],
        rubric: ScoringRubric,
        comments: Optional[str] = None,
    ) -> Score:
        """
        Record (or replace) a judge's score for a submission.

        Raises:
            EntityNotFoundException: the submission does not exist
            EventMismatchException: the submission belongs to another event
            JudgeNotAssignedException: assignments are enforced and the judge
                has no active assignment to the event
            RubricValidationException: raw_scores violate the rubric
        """
        submission = self.submission_repo.get_by_id(submission_id)
        if submission is None:
            raise EntityNotFoundException("Submission", submission_id)
        if submission.event_id != event_id:
            raise EventMismatchException(submission_id, submission.event_id, event_id)

        if self.assignment_repo is not None and not self.is_judge_assigned(event_id, judge_id):
            raise JudgeNotAssignedException(event_id, judge_id)

        if comments is not None and len(comments) > self.max_comment_length:
            raise RubricValidationException(
                "comments", f"Comments must be at most {self.max_comment_length} characters"
            )

        result = self.validator.validate(raw_scores, rubric)
        total = compute_total(result.values, rubric, self.rule)

        existing = self.score_repo.get_by_submission_and_judge(submission_id, judge_id)
        if existing is not None:
            score = self._update(existing, result.values, total, comments)
        else:
            score = Score(
                id=Score.compound_id(submission_id, judge_id),
                submission_id=submission_id,
                judge_id=judge_id,
                event_id=event_id,
                scores=result.values,
                comments=comments,
                total_score=total,
            )
            try:
                score = self.score_repo.create(score)
            except DuplicateEntityException:
                # Another write for the same judge landed first; overwrite it
                winner = self.score_repo.get_by_id(score.id)
                if winner is None:
                    raise
                score = self._update(winner, result.values, total, comments)

        self._invalidate(event_id)
        self.logger.info(
            f"Score {score.id} recorded: submission={submission_id} judge={judge_id} total={total}"
        )
        return score

    def _update(
        self,
        existing: Score,
        values: Dict[str, Any],
        total: Optional[float],
        comments: Optional[str],
    ) -> Score:
        updated = existing.model_copy(update={
            "scores": values,
            "total_score": total,
            "comments": comments,
            "updated_at": max(utc_now(), existing.created_at),
        })
        return self.score_repo.update(updated)

    def is_judge_assigned(self, event_id: str, judge_id: str) -> bool:
        """
        True when the judge holds an active assignment to the event.

        Without an assignment repository every judge may score.
        """
        if self.assignment_repo is None:
            return True
        return self.assignment_repo.is_judge_actively_assigned(event_id, judge_id)

    def _invalidate(self, event_id: str) -> None:
        if self.leaderboard_cache is not None:
            self.leaderboard_cache.invalidate(event_id)

    def get_submission_scores(self, submission_id: str) -> List[Score]:
        return self.score_repo.get_by_submission_id(submission_id)

    def get_judge_score(self, submission_id: str, judge_id: str) -> Optional[Score]:
        return self.score_repo.get_by_submission_and_judge(submission_id, judge_id)

    def has_judge_scored(self, submission_id: str, judge_id: str) -> bool:
        return self.get_judge_score(submission_id, judge_id) is not None

    def calculate_submission_aggregation(
        self,
        submission_id: str,
        rubric: Optional[ScoringRubric] = None,
    ) -> AggregatedScore:
        """Aggregate every judge's score for a submission."""
        scores = self.score_repo.get_by_submission_id(submission_id)
        aggregator = ScoreAggregator(rubric=rubric, rule=self.rule)
        return aggregator.aggregate(scores, submission_id)

    def get_event_scoring_stats(self, event_id: str) -> EventScoringStats:
        scores = self.score_repo.get_by_event_id(event_id)
        if not scores:
            return EventScoringStats()

        aggregator = ScoreAggregator(rule=self.rule)
        totals = [t for t in (aggregator.judge_total(s) for s in scores) if t is not None]

        participation: Dict[str, int] = {}
        for score in scores:
            participation[score.judge_id] = participation.get(score.judge_id, 0) + 1

        return EventScoringStats(
            total_scores=len(scores),
            average_score=mean(totals),
            completed_submissions=len({s.submission_id for s in scores}),
            judge_participation=participation,
        )

    # ------------------------------------------------------------------
    # Rubrics
    # ------------------------------------------------------------------

    def create_scoring_rubric(
        self,
        name: str,
        criteria: List[ScoringCriterion],
        created_by: str,
        description: str = "",
        event_id: Optional[str] = None,
        group_id: Optional[str] = None,
        is_template: bool = False,
    ) -> ScoringRubric:
        rubric = ScoringRubric(
            name=name,
            description=description,
            criteria=criteria,
            event_id=event_id,
            group_id=group_id,
            is_template=is_template,
            created_by=created_by,
        )
        created = self.rubric_repo.create(rubric)
        self.logger.info(f"Rubric {created.id} created with {len(criteria)} criteria")
        return created

    def get_scoring_rubric(self, rubric_id: str) -> Optional[ScoringRubric]:
        return self.rubric_repo.get_by_id(rubric_id)

    def get_event_rubrics(self, event_id: str) -> List[ScoringRubric]:
        return self.rubric_repo.get_by_event_id(event_id)

    def get_rubric_templates(self) -> List[ScoringRubric]:
        return self.rubric_repo.get_templates()

    def clone_rubric(
        self,
        rubric_id: str,
        created_by: str,
        name: Optional[str] = None,
        event_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> ScoringRubric:
        """
        Raises:
            EntityNotFoundException: the source rubric does not exist
        """
        return self.rubric_repo.clone(
            rubric_id,
            created_by=created_by,
            name=name,
            event_id=event_id,
            group_id=group_id,
        )
