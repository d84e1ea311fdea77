"""
Judging Service Tests - Ngage Judging Engine
tests/test_judging_service.py

Scoring a submission end to end over the in-memory store.
"""

import pytest
from unittest.mock import MagicMock

from ngage_judging.core.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    EventMismatchException,
    JudgeNotAssignedException,
    MissingRequiredFieldException,
    OutOfRangeException,
    RubricValidationException,
)
from ngage_judging.models.enumerations import TotalScoreRule
from ngage_judging.models.judge_assignment import JudgeAssignment
from ngage_judging.models.rubric import ScoringCriterion
from ngage_judging.models.score import Score
from ngage_judging.repositories.judge_assignment_repository import JudgeAssignmentRepository
from ngage_judging.services.judging_service import EventScoringStats, JudgingService

EVENT_ID = "evt_hackathon"


@pytest.fixture
def leaderboard_cache():
    return MagicMock()


@pytest.fixture
def service(score_repo, rubric_repo, submission_repo, leaderboard_cache):
    return JudgingService(
        score_repo=score_repo,
        rubric_repo=rubric_repo,
        submission_repo=submission_repo,
        leaderboard_cache=leaderboard_cache,
    )


@pytest.fixture
def submission(submission_repo, make_submission):
    return submission_repo.create(make_submission("sub_1", "team_1"))


class TestScoreSubmission:

    def test_creates_score(self, service, submission, simple_rubric, score_repo):
        score = service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 6, "b": 8}, simple_rubric)
        assert score.id == Score.compound_id("sub_1", "judge_a")
        assert score.scores == {"a": 6.0, "b": 8.0}
        assert score.total_score == pytest.approx(7.0)
        assert score_repo.get_by_id(score.id) == score

    def test_rescoring_updates_in_place(self, service, submission, simple_rubric, score_repo):
        """Test that a judge scoring twice leaves exactly one record."""
        first = service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        second = service.score_submission(
            "sub_1", "judge_a", EVENT_ID, {"a": 9, "b": 9}, simple_rubric, comments="Better"
        )
        records = score_repo.get_by_submission_id("sub_1")
        assert len(records) == 1
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert records[0].total_score == 9
        assert records[0].comments == "Better"

    def test_missing_submission(self, service, simple_rubric):
        with pytest.raises(EntityNotFoundException) as exc_info:
            service.score_submission("nope", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        assert exc_info.value.entity_type == "Submission"

    def test_invalid_input_not_persisted(self, service, submission, simple_rubric, score_repo):
        with pytest.raises(OutOfRangeException):
            service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 11, "b": 1}, simple_rubric)
        with pytest.raises(MissingRequiredFieldException):
            service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1}, simple_rubric)
        assert score_repo.get_by_submission_id("sub_1") == []

    def test_comment_limit(self, score_repo, rubric_repo, submission_repo, submission, simple_rubric):
        service = JudgingService(score_repo, rubric_repo, submission_repo, max_comment_length=5)
        with pytest.raises(RubricValidationException) as exc_info:
            service.score_submission(
                "sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric, comments="too long"
            )
        assert exc_info.value.criterion_key == "comments"

    def test_invalidates_leaderboard_cache(self, service, submission, simple_rubric, leaderboard_cache):
        service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        leaderboard_cache.invalidate.assert_called_once_with(EVENT_ID)

    def test_configured_total_rule(self, score_repo, rubric_repo, submission_repo, submission, simple_rubric):
        service = JudgingService(score_repo, rubric_repo, submission_repo, rule=TotalScoreRule.SIMPLE_SUM)
        score = service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 6, "b": 8}, simple_rubric)
        assert score.total_score == 14

    def test_concurrent_create_resolved_by_update(self, service, submission, simple_rubric, score_repo):
        """Test that losing a create race overwrites the winner's record."""
        winner = score_repo.create(Score(
            id=Score.compound_id("sub_1", "judge_a"),
            submission_id="sub_1",
            judge_id="judge_a",
            event_id=EVENT_ID,
            scores={"a": 1.0, "b": 1.0},
            total_score=1.0,
        ))
        # Simulate the read happening before the winner's write
        score_repo.get_by_submission_and_judge = MagicMock(return_value=None)

        score = service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 3, "b": 5}, simple_rubric)
        assert score.id == winner.id
        assert score_repo.get_by_id(winner.id).total_score == pytest.approx(4.0)

    def test_conflict_without_record_propagates(self, service, submission, simple_rubric, score_repo):
        score_repo.create = MagicMock(side_effect=DuplicateEntityException("race"))
        with pytest.raises(DuplicateEntityException):
            service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)

    def test_event_mismatch_rejected(self, service, submission, simple_rubric, score_repo, leaderboard_cache):
        """Test that a score cannot be filed under another event's leaderboard."""
        with pytest.raises(EventMismatchException) as exc_info:
            service.score_submission("sub_1", "judge_a", "evt_other", {"a": 1, "b": 1}, simple_rubric)
        assert exc_info.value.expected_event_id == EVENT_ID
        assert exc_info.value.event_id == "evt_other"
        assert score_repo.get_by_submission_id("sub_1") == []
        leaderboard_cache.invalidate.assert_not_called()

    def test_stored_event_matches_submission(self, service, submission, simple_rubric, score_repo):
        service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        assert score_repo.get_by_event_id(EVENT_ID)[0].event_id == submission.event_id


class TestJudgeAssignment:
    """Tests for the active-assignment check on scoring."""

    @pytest.fixture
    def assignment_repo(self, store):
        return JudgeAssignmentRepository(store)

    @pytest.fixture
    def enforcing_service(self, score_repo, rubric_repo, submission_repo, assignment_repo):
        return JudgingService(score_repo, rubric_repo, submission_repo, assignment_repo=assignment_repo)

    @staticmethod
    def assign(repo, judge_id, event_id=EVENT_ID, is_active=True):
        return repo.create(JudgeAssignment(
            id=f"assign_{event_id}_{judge_id}",
            event_id=event_id,
            judge_id=judge_id,
            assigned_by="organizer_1",
            is_active=is_active,
        ))

    def test_assigned_judge_may_score(self, enforcing_service, assignment_repo, submission, simple_rubric):
        self.assign(assignment_repo, "judge_a")
        score = enforcing_service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 2, "b": 4}, simple_rubric)
        assert score.total_score == pytest.approx(3.0)

    def test_unassigned_judge_rejected(self, enforcing_service, assignment_repo, submission, simple_rubric, score_repo):
        self.assign(assignment_repo, "judge_a", event_id="evt_other")
        with pytest.raises(JudgeNotAssignedException) as exc_info:
            enforcing_service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        assert exc_info.value.judge_id == "judge_a"
        assert "not assigned" in str(exc_info.value)
        assert score_repo.get_by_submission_id("sub_1") == []

    def test_revoked_assignment_rejected(self, enforcing_service, assignment_repo, submission, simple_rubric):
        self.assign(assignment_repo, "judge_a", is_active=False)
        with pytest.raises(JudgeNotAssignedException):
            enforcing_service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)

    def test_is_judge_assigned(self, enforcing_service, assignment_repo):
        self.assign(assignment_repo, "judge_a")
        assert enforcing_service.is_judge_assigned(EVENT_ID, "judge_a") is True
        assert enforcing_service.is_judge_assigned(EVENT_ID, "judge_b") is False

    def test_everyone_assigned_without_repository(self, service, submission, simple_rubric):
        assert service.is_judge_assigned(EVENT_ID, "anyone") is True
        service.score_submission("sub_1", "anyone", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)


class TestScoreQueries:

    def test_judge_lookups(self, service, submission, simple_rubric):
        assert not service.has_judge_scored("sub_1", "judge_a")
        service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 1, "b": 1}, simple_rubric)
        assert service.has_judge_scored("sub_1", "judge_a")
        assert service.get_judge_score("sub_1", "judge_a").judge_id == "judge_a"
        assert len(service.get_submission_scores("sub_1")) == 1

    def test_submission_aggregation(self, service, submission, simple_rubric):
        service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 4, "b": 6}, simple_rubric)
        service.score_submission("sub_1", "judge_b", EVENT_ID, {"a": 8, "b": 10}, simple_rubric)
        result = service.calculate_submission_aggregation("sub_1", simple_rubric)
        assert result.judge_count == 2
        assert result.average_score == pytest.approx(7.0)
        assert result.criteria_averages == {"a": 6.0, "b": 8.0}

    def test_aggregation_of_unscored_submission(self, service, submission):
        result = service.calculate_submission_aggregation("sub_1")
        assert result.judge_count == 0
        assert result.submission_id == "sub_1"


class TestEventScoringStats:

    def test_empty_event(self, service):
        assert service.get_event_scoring_stats("evt_empty") == EventScoringStats()

    def test_stats(self, service, submission_repo, make_submission, simple_rubric):
        submission_repo.create(make_submission("sub_1", "team_1"))
        submission_repo.create(make_submission("sub_2", "team_2"))
        service.score_submission("sub_1", "judge_a", EVENT_ID, {"a": 10, "b": 10}, simple_rubric)
        service.score_submission("sub_1", "judge_b", EVENT_ID, {"a": 6, "b": 6}, simple_rubric)
        service.score_submission("sub_2", "judge_a", EVENT_ID, {"a": 2, "b": 2}, simple_rubric)

        stats = service.get_event_scoring_stats(EVENT_ID)
        assert stats.total_scores == 3
        assert stats.average_score == pytest.approx(6.0)
        assert stats.completed_submissions == 2
        assert stats.judge_participation == {"judge_a": 2, "judge_b": 1}
        assert stats.participating_judges == 2


class TestRubricManagement:

    def test_create_and_get(self, service):
        rubric = service.create_scoring_rubric(
            name="Finals",
            criteria=[ScoringCriterion(key="a", name="A")],
            created_by="organizer_1",
            event_id=EVENT_ID,
        )
        assert service.get_scoring_rubric(rubric.id) == rubric
        assert service.get_event_rubrics(EVENT_ID) == [rubric]

    def test_clone(self, service):
        template = service.create_scoring_rubric(
            name="Template",
            criteria=[ScoringCriterion(key="a", name="A")],
            created_by="organizer_1",
            is_template=True,
        )
        clone = service.clone_rubric(template.id, created_by="organizer_2", event_id=EVENT_ID)
        assert clone.name == "Template (Copy)"
        assert clone.is_template is False
        assert service.get_rubric_templates() == [template]

    def test_clone_missing(self, service):
        with pytest.raises(EntityNotFoundException):
            service.clone_rubric("rubric_missing", created_by="organizer_1")
