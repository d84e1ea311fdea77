"""
Scoring Rubric Repository - Ngage Judging Engine
ngage_judging/repositories/rubric_repository.py

Data access layer for ScoringRubric documents, including template cloning.
"""

from typing import List, Optional

from ngage_judging.core.exceptions import EntityNotFoundException
from ngage_judging.models.common import utc_now
from ngage_judging.models.rubric import ScoringRubric
from ngage_judging.repositories.base import BaseRepository, Filter


class RubricRepository(BaseRepository[ScoringRubric]):
    """Repository for ScoringRubric CRUD operations."""

    COLLECTION = "scoring_rubrics"
    ENTITY_TYPE = "ScoringRubric"
    MODEL = ScoringRubric

    def create(self, rubric: ScoringRubric) -> ScoringRubric:
        return self._create(rubric)

    def get_by_id(self, rubric_id: str) -> Optional[ScoringRubric]:
        return self._get(rubric_id)

    def update(self, rubric: ScoringRubric) -> ScoringRubric:
        """Replace an existing rubric, stamping updated_at."""
        updated = rubric.model_copy(update={"updated_at": utc_now()})
        return self._replace(updated)

    def get_by_event_id(self, event_id: str) -> List[ScoringRubric]:
        return self._find([("eventId", "==", event_id)])

    def get_by_group_id(self, group_id: str) -> List[ScoringRubric]:
        return self._find([("groupId", "==", group_id)])

    def get_templates(self) -> List[ScoringRubric]:
        return self._find([("isTemplate", "==", True)])

    def get_paginated(
        self,
        event_id: Optional[str] = None,
        group_id: Optional[str] = None,
        is_template: Optional[bool] = None,
        limit: int = 50,
        start_after: Optional[str] = None,
    ) -> List[ScoringRubric]:
        """
        One page of rubrics, newest first.

        Args:
            event_id: Only rubrics of this event
            group_id: Only rubrics of this group
            is_template: Only templates (True) or only non-templates (False)
            limit: Page size
            start_after: Id of the last rubric on the previous page
        """
        filters: List[Filter] = []
        if event_id is not None:
            filters.append(("eventId", "==", event_id))
        if group_id is not None:
            filters.append(("groupId", "==", group_id))
        if is_template is not None:
            filters.append(("isTemplate", "==", is_template))
        return self._find(filters, limit=limit, start_after=start_after)

    def clone(
        self,
        rubric_id: str,
        created_by: str,
        name: Optional[str] = None,
        event_id: Optional[str] = None,
        group_id: Optional[str] = None,
        is_template: bool = False,
    ) -> ScoringRubric:
        """
        Persist a copy of an existing rubric under a new id.

        Raises:
            EntityNotFoundException: the source rubric does not exist
        """
        original = self.get_by_id(rubric_id)
        if original is None:
            raise EntityNotFoundException(self.ENTITY_TYPE, rubric_id)

        cloned = original.clone(
            created_by=created_by,
            name=name,
            event_id=event_id,
            group_id=group_id,
            is_template=is_template,
        )
        return self.create(cloned)

    def create_from_template(self, template_id: str, event_id: str, created_by: str) -> ScoringRubric:
        """Event-scoped, non-template copy of a template."""
        template = self.get_by_id(template_id)
        if template is None:
            raise EntityNotFoundException(self.ENTITY_TYPE, template_id)
        return self.clone(
            template_id,
            created_by=created_by,
            name=template.name,
            event_id=event_id,
        )
