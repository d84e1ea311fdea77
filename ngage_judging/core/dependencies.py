"""
Dependencies - Ngage Judging Engine
ngage_judging/core/dependencies.py

Cached construction of the store, repositories and services.
"""

from functools import lru_cache

from ngage_judging.config import get_settings
from ngage_judging.repositories.base import DocumentStore, InMemoryDocumentStore
from ngage_judging.repositories.judge_assignment_repository import JudgeAssignmentRepository
from ngage_judging.repositories.redis_store import RedisDocumentStore
from ngage_judging.repositories.rubric_repository import RubricRepository
from ngage_judging.repositories.score_repository import ScoreRepository
from ngage_judging.repositories.submission_repository import SubmissionRepository
from ngage_judging.scoring.aggregator import ScoreAggregator
from ngage_judging.scoring.leaderboard_builder import LeaderboardBuilder
from ngage_judging.scoring.rubric_validator import RubricValidator
from ngage_judging.services.cache import LeaderboardCache, get_cache
from ngage_judging.services.judging_service import JudgingService
from ngage_judging.services.leaderboard_service import LeaderboardService


@lru_cache()
def get_document_store() -> DocumentStore:
    """Get cached DocumentStore for the configured backend."""
    settings = get_settings()
    if settings.STORE_BACKEND == "redis":
        return RedisDocumentStore(
            url=settings.REDIS_URL,
            prefix=settings.REDIS_KEY_PREFIX,
            in_query_limit=settings.STORE_IN_QUERY_LIMIT,
        )
    return InMemoryDocumentStore(in_query_limit=settings.STORE_IN_QUERY_LIMIT)


@lru_cache()
def get_score_repository() -> ScoreRepository:
    """Get cached ScoreRepository instance."""
    return ScoreRepository(get_document_store())


@lru_cache()
def get_rubric_repository() -> RubricRepository:
    """Get cached RubricRepository instance."""
    return RubricRepository(get_document_store())


@lru_cache()
def get_submission_repository() -> SubmissionRepository:
    """Get cached SubmissionRepository instance."""
    return SubmissionRepository(get_document_store())


@lru_cache()
def get_judge_assignment_repository() -> JudgeAssignmentRepository:
    """Get cached JudgeAssignmentRepository instance."""
    return JudgeAssignmentRepository(get_document_store())


@lru_cache()
def get_rubric_validator() -> RubricValidator:
    return RubricValidator()


@lru_cache()
def get_leaderboard_cache() -> LeaderboardCache:
    """Leaderboard cache; a no-op wrapper when Redis is unreachable."""
    return LeaderboardCache(get_cache(), ttl_seconds=get_settings().CACHE_TTL_LEADERBOARD)


@lru_cache()
def get_leaderboard_builder() -> LeaderboardBuilder:
    settings = get_settings()
    return LeaderboardBuilder(
        aggregator=ScoreAggregator(rule=settings.TOTAL_SCORE_RULE),
        epsilon=settings.TIE_EPSILON,
        ranking_mode=settings.RANKING_MODE,
        allow_multiple_submissions=settings.ALLOW_MULTIPLE_SUBMISSIONS_PER_TEAM,
    )


@lru_cache()
def get_judging_service() -> JudgingService:
    settings = get_settings()
    return JudgingService(
        score_repo=get_score_repository(),
        rubric_repo=get_rubric_repository(),
        submission_repo=get_submission_repository(),
        validator=get_rubric_validator(),
        rule=settings.TOTAL_SCORE_RULE,
        max_comment_length=settings.MAX_COMMENT_LENGTH,
        leaderboard_cache=get_leaderboard_cache(),
        assignment_repo=(
            get_judge_assignment_repository() if settings.REQUIRE_JUDGE_ASSIGNMENT else None
        ),
    )


@lru_cache()
def get_leaderboard_service() -> LeaderboardService:
    return LeaderboardService(
        score_repo=get_score_repository(),
        submission_repo=get_submission_repository(),
        builder=get_leaderboard_builder(),
        leaderboard_cache=get_leaderboard_cache(),
    )


def clear_dependency_caches() -> None:
    """Drop every cached instance, e.g. after settings change in tests."""
    for factory in (
        get_document_store,
        get_score_repository,
        get_rubric_repository,
        get_submission_repository,
        get_judge_assignment_repository,
        get_rubric_validator,
        get_leaderboard_cache,
        get_leaderboard_builder,
        get_judging_service,
        get_leaderboard_service,
    ):
        factory.cache_clear()
