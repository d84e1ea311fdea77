"""
Repositories Package - Ngage Judging Engine
ngage_judging/repositories/__init__.py

Data access layer over a generic document store.
"""

from ngage_judging.repositories.base import (
    BaseRepository,
    DocumentStore,
    InMemoryDocumentStore,
    WriteOperation,
)
from ngage_judging.repositories.judge_assignment_repository import JudgeAssignmentRepository
from ngage_judging.repositories.redis_store import RedisDocumentStore
from ngage_judging.repositories.rubric_repository import RubricRepository
from ngage_judging.repositories.score_repository import ScoreRepository
from ngage_judging.repositories.submission_repository import SubmissionRepository

__all__ = [
    "BaseRepository",
    "DocumentStore",
    "InMemoryDocumentStore",
    "WriteOperation",
    "JudgeAssignmentRepository",
    "RedisDocumentStore",
    "RubricRepository",
    "ScoreRepository",
    "SubmissionRepository",
]
