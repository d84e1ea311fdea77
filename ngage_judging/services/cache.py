"""
Cache Service - Ngage Judging Engine
ngage_judging/services/cache.py

Shared Redis cache instance and the leaderboard cache built on it.
Gracefully handles Redis unavailability: every cache failure is a miss.
"""
import hashlib
import json
import logging
import re
import redis
from typing import Mapping, Optional
from pydantic import ValidationError
from ngage_judging.models.leaderboard import Leaderboard
from ngage_judging.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

TTL_LEADERBOARD = 300  # 5 minutes

# Shared instance
_cache: Optional[RedisCache] = None


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if Redis is available, None otherwise.

    Note:
        Returns None if Redis is unavailable, allowing the engine to keep
        computing leaderboards without caching.
    """
    global _cache
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError):
            _cache = None
    return _cache


def reset_cache() -> None:
    """
    Reset the shared cache.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache
    _cache = None


def _escape_glob(value: str) -> str:
    """Escape Redis MATCH wildcards so ids are matched literally."""
    return re.sub(r"([\\*?\[\]])", r"\\\1", value)


class LeaderboardCache:
    """
    Per-event leaderboard cache.

    Keys carry the event id and a digest of the team names the leaderboard
    was built with, so a call with different names is a miss. Score writes
    invalidate every entry of the event.
    """

    KEY_PREFIX = "leaderboard"

    def __init__(self, cache: Optional[RedisCache], ttl_seconds: int = TTL_LEADERBOARD):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def names_digest(team_names: Optional[Mapping[str, str]] = None) -> str:
        payload = json.dumps(sorted((team_names or {}).items()))
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()

    def key(self, event_id: str, team_names: Optional[Mapping[str, str]] = None) -> str:
        return f"{self.KEY_PREFIX}:{event_id}:{self.names_digest(team_names)}"

    def event_pattern(self, event_id: str) -> str:
        return f"{self.KEY_PREFIX}:{_escape_glob(event_id)}:*"

    def get(
        self, event_id: str, team_names: Optional[Mapping[str, str]] = None
    ) -> Optional[Leaderboard]:
        if self.cache is None:
            return None
        try:
            return self.cache.get(self.key(event_id, team_names), Leaderboard)
        except redis.RedisError as e:
            logger.warning(f"Leaderboard cache read failed for {event_id}: {e}")
            return None
        except ValidationError as e:
            # Entry written by an older schema
            logger.warning(f"Discarding unreadable cached leaderboard for {event_id}: {e.error_count()} errors")
            return None

    def set(self, leaderboard: Leaderboard, team_names: Optional[Mapping[str, str]] = None) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(self.key(leaderboard.event_id, team_names), leaderboard, self.ttl_seconds)
        except redis.RedisError as e:
            logger.warning(f"Leaderboard cache write failed for {leaderboard.event_id}: {e}")

    def invalidate(self, event_id: str) -> None:
        if self.cache is None:
            return
        try:
            self.cache.delete_pattern(self.event_pattern(event_id))
        except redis.RedisError as e:
            logger.warning(f"Leaderboard cache invalidation failed for {event_id}: {e}")
