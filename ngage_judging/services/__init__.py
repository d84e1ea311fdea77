"""
Services Package - Ngage Judging Engine
ngage_judging/services/__init__.py

Orchestration over repositories and scoring: judging, leaderboards, caching.
"""

from ngage_judging.services.cache import LeaderboardCache, get_cache, reset_cache
from ngage_judging.services.judging_service import EventScoringStats, JudgingService
from ngage_judging.services.leaderboard_service import LeaderboardService
from ngage_judging.services.redis_cache import RedisCache

__all__ = [
    "LeaderboardCache",
    "get_cache",
    "reset_cache",
    "EventScoringStats",
    "JudgingService",
    "LeaderboardService",
    "RedisCache",
]
