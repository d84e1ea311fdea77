"""
Judge Assignment Repository - Ngage Judging Engine
ngage_judging/repositories/judge_assignment_repository.py

Which judges may score which events.
"""

from typing import List, Optional

from ngage_judging.models.judge_assignment import JudgeAssignment
from ngage_judging.repositories.base import BaseRepository


class JudgeAssignmentRepository(BaseRepository[JudgeAssignment]):
    """Repository for JudgeAssignment records."""

    COLLECTION = "judge_assignments"
    ENTITY_TYPE = "JudgeAssignment"
    MODEL = JudgeAssignment

    def create(self, assignment: JudgeAssignment) -> JudgeAssignment:
        return self._create(assignment)

    def get_by_id(self, assignment_id: str) -> Optional[JudgeAssignment]:
        return self._get(assignment_id)

    def get_by_event_id(self, event_id: str, active_only: bool = False) -> List[JudgeAssignment]:
        filters = [("eventId", "==", event_id)]
        if active_only:
            filters.append(("isActive", "==", True))
        return self._find(filters)

    def get_active_assignment(self, event_id: str, judge_id: str) -> Optional[JudgeAssignment]:
        """The judge's active assignment to the event, if any."""
        found = self._find(
            [
                ("eventId", "==", event_id),
                ("judgeId", "==", judge_id),
                ("isActive", "==", True),
            ],
            limit=1,
        )
        return found[0] if found else None

    def is_judge_actively_assigned(self, event_id: str, judge_id: str) -> bool:
        return self.get_active_assignment(event_id, judge_id) is not None
