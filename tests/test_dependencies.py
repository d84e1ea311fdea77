"""
Dependency Wiring Tests - Ngage Judging Engine
tests/test_dependencies.py
"""

import pytest
from unittest.mock import patch

from ngage_judging.core import dependencies
from ngage_judging.config import Settings
from ngage_judging.models.enumerations import RankingMode
from ngage_judging.repositories.judge_assignment_repository import JudgeAssignmentRepository
from ngage_judging.repositories.base import InMemoryDocumentStore
from ngage_judging.repositories.redis_store import RedisDocumentStore


@pytest.fixture(autouse=True)
def clear_caches():
    dependencies.clear_dependency_caches()
    yield
    dependencies.clear_dependency_caches()


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestDependencies:

    def test_memory_store_by_default(self):
        with patch.object(dependencies, "get_settings", return_value=_settings()):
            store = dependencies.get_document_store()
        assert isinstance(store, InMemoryDocumentStore)
        assert store.in_query_limit == 10

    def test_redis_store_when_configured(self):
        settings = _settings(STORE_BACKEND="redis", REDIS_KEY_PREFIX="judging", STORE_IN_QUERY_LIMIT=30)
        with patch.object(dependencies, "get_settings", return_value=settings), \
                patch("ngage_judging.repositories.redis_store.redis.from_url"):
            store = dependencies.get_document_store()
        assert isinstance(store, RedisDocumentStore)
        assert store.prefix == "judging"
        assert store.in_query_limit == 30

    def test_repositories_share_store(self):
        with patch.object(dependencies, "get_settings", return_value=_settings()):
            scores = dependencies.get_score_repository()
            rubrics = dependencies.get_rubric_repository()
        assert scores.store is rubrics.store
        assert dependencies.get_score_repository() is scores

    def test_builder_follows_settings(self):
        settings = _settings(RANKING_MODE="competition", TIE_EPSILON=0.5,
                             ALLOW_MULTIPLE_SUBMISSIONS_PER_TEAM=False)
        with patch.object(dependencies, "get_settings", return_value=settings):
            builder = dependencies.get_leaderboard_builder()
        assert builder.ranking_mode == RankingMode.COMPETITION
        assert builder.epsilon == 0.5
        assert builder.allow_multiple_submissions is False

    def test_services_without_redis(self):
        """Test that services are built with a disabled cache when Redis is down."""
        with patch.object(dependencies, "get_settings", return_value=_settings()), \
                patch.object(dependencies, "get_cache", return_value=None):
            judging = dependencies.get_judging_service()
            leaderboards = dependencies.get_leaderboard_service()
        assert judging.leaderboard_cache.cache is None
        assert leaderboards.leaderboard_cache is judging.leaderboard_cache
        assert judging.score_repo is leaderboards.score_repo

    def test_assignments_not_enforced_by_default(self):
        with patch.object(dependencies, "get_settings", return_value=_settings()), \
                patch.object(dependencies, "get_cache", return_value=None):
            judging = dependencies.get_judging_service()
        assert judging.assignment_repo is None

    def test_assignments_enforced_when_configured(self):
        settings = _settings(REQUIRE_JUDGE_ASSIGNMENT=True)
        with patch.object(dependencies, "get_settings", return_value=settings), \
                patch.object(dependencies, "get_cache", return_value=None):
            judging = dependencies.get_judging_service()
        assert isinstance(judging.assignment_repo, JudgeAssignmentRepository)
        assert judging.assignment_repo.store is judging.score_repo.store
