"""Application configuration with validation."""
from typing import Literal
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ngage_judging.models.enumerations import RankingMode, TotalScoreRule


class Settings(BaseSettings):
    """Judging engine settings, read from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Ngage Judging Engine"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Document store
    STORE_BACKEND: Literal["memory", "redis"] = "memory"
    STORE_IN_QUERY_LIMIT: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Max values per 'in' filter; larger id sets are queried in chunks",
    )

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "ngage"
    CACHE_TTL_LEADERBOARD: int = Field(default=300, ge=1)  # 5 minutes

    # Scoring
    TOTAL_SCORE_RULE: TotalScoreRule = TotalScoreRule.WEIGHTED_MEAN
    RANKING_MODE: RankingMode = RankingMode.SEQUENTIAL
    TIE_EPSILON: float = Field(
        default=1e-9,
        description="Two average scores closer than this are treated as tied",
    )
    ALLOW_MULTIPLE_SUBMISSIONS_PER_TEAM: bool = True
    MAX_COMMENT_LENGTH: int = Field(default=2000, ge=1, le=2000)
    REQUIRE_JUDGE_ASSIGNMENT: bool = Field(
        default=False,
        description="Only judges with an active assignment to the event may score",
    )

    @field_validator("TIE_EPSILON")
    @classmethod
    def validate_tie_epsilon(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"TIE_EPSILON must be >= 0, got {v}")
        return v

    @field_validator("REDIS_KEY_PREFIX")
    @classmethod
    def validate_key_prefix(cls, v: str) -> str:
        v = v.strip().strip(":")
        if not v:
            raise ValueError("REDIS_KEY_PREFIX must not be empty")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
