# tests/conftest.py

"""
Pytest Fixtures - Shared stores, repositories and sample data for all tests

SAMPLE DATA REFERENCE:
- Event:       evt_hackathon
- Rubric:      design (numeric 0-100, weight 2), impact (scale 1-5),
               demo (boolean), notes (numeric, optional)
- Judges:      judge_a, judge_b, judge_c
"""

import fnmatch
import itertools
import re
from datetime import datetime, timedelta, timezone

import pytest

from ngage_judging.models.enumerations import ScoringType, SubmissionStatus
from ngage_judging.models.rubric import ScoringCriterion, ScoringRubric
from ngage_judging.models.score import Score
from ngage_judging.models.submission import Submission
from ngage_judging.repositories.base import InMemoryDocumentStore
from ngage_judging.repositories.rubric_repository import RubricRepository
from ngage_judging.repositories.score_repository import ScoreRepository
from ngage_judging.repositories.submission_repository import SubmissionRepository

EVENT_ID = "evt_hackathon"
BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# STORE AND REPOSITORY FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory document store with the default 'in' limit of 10."""
    return InMemoryDocumentStore(in_query_limit=10)


@pytest.fixture
def score_repo(store):
    return ScoreRepository(store)


@pytest.fixture
def rubric_repo(store):
    return RubricRepository(store)


@pytest.fixture
def submission_repo(store):
    return SubmissionRepository(store)


# =============================================================================
# RUBRIC FIXTURES
# =============================================================================

@pytest.fixture
def sample_criteria():
    return [
        ScoringCriterion(key="design", name="Design", max_score=100, weight=2.0),
        ScoringCriterion(
            key="impact",
            name="Impact",
            type=ScoringType.SCALE,
            options={"min": 1, "max": 5},
        ),
        ScoringCriterion(key="demo", name="Working demo", type=ScoringType.BOOLEAN),
        ScoringCriterion(key="notes", name="Documentation", max_score=10, required=False),
    ]


@pytest.fixture
def sample_rubric(sample_criteria):
    """Event rubric mixing numeric, scale, boolean and optional criteria."""
    return ScoringRubric(
        id="rubric_main",
        name="Hackathon Rubric",
        criteria=sample_criteria,
        event_id=EVENT_ID,
        created_by="organizer_1",
    )


@pytest.fixture
def simple_rubric():
    """Two equally weighted numeric criteria, both out of 10."""
    return ScoringRubric(
        id="rubric_simple",
        name="Simple Rubric",
        criteria=[
            ScoringCriterion(key="a", name="A", max_score=10),
            ScoringCriterion(key="b", name="B", max_score=10),
        ],
        event_id=EVENT_ID,
        created_by="organizer_1",
    )


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_score():
    """Build Score records with increasing created_at timestamps."""
    counter = itertools.count()

    def _make(submission_id="sub_1", judge_id="judge_a", total=None, scores=None, event_id=EVENT_ID):
        n = next(counter)
        created = BASE_TIME + timedelta(minutes=n)
        return Score(
            id=f"score_{n}",
            submission_id=submission_id,
            judge_id=judge_id,
            event_id=event_id,
            scores=scores or {},
            total_score=total,
            created_at=created,
            updated_at=created,
        )

    return _make


@pytest.fixture
def make_submission():
    """Build submitted Submission records with increasing timestamps."""
    counter = itertools.count()

    def _make(submission_id, team_id, status=SubmissionStatus.SUBMITTED, event_id=EVENT_ID):
        n = next(counter)
        created = BASE_TIME + timedelta(hours=n)
        return Submission(
            id=submission_id,
            event_id=event_id,
            team_id=team_id,
            submitted_by=f"member_{team_id}",
            status=status,
            submitted_at=created,
            created_at=created,
            updated_at=created,
        )

    return _make


# =============================================================================
# REDIS FAKE
# =============================================================================

class FakeRedisClient:
    """Dict-backed stand-in for the get/setex/delete/scan_iter subset of redis.Redis."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value

    def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    def scan_iter(self, match="*"):
        # Redis escapes with a backslash, fnmatch with a one-character class
        pattern = re.sub(r"\\(.)", r"[\1]", match)
        return [key for key in list(self.data) if fnmatch.fnmatchcase(key, pattern)]


@pytest.fixture
def fake_redis():
    return FakeRedisClient()
