"""
Submission Repository - Ngage Judging Engine
ngage_judging/repositories/submission_repository.py

Read access to submissions for ranking. Submission authoring lives elsewhere.
"""

from typing import List, Optional

from ngage_judging.models.submission import Submission
from ngage_judging.repositories.base import BaseRepository


class SubmissionRepository(BaseRepository[Submission]):
    """Repository for Submission lookups."""

    COLLECTION = "submissions"
    ENTITY_TYPE = "Submission"
    MODEL = Submission

    def create(self, submission: Submission) -> Submission:
        return self._create(submission)

    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        return self._get(submission_id)

    def get_by_event_id(self, event_id: str) -> List[Submission]:
        return self._find([("eventId", "==", event_id)])

    def get_by_team_id(self, team_id: str, event_id: Optional[str] = None) -> List[Submission]:
        filters = [("teamId", "==", team_id)]
        if event_id is not None:
            filters.append(("eventId", "==", event_id))
        return self._find(filters)
