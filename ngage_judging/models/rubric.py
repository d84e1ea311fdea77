from uuid import uuid4
from typing import Any, Dict, List, Optional, Tuple
from pydantic import Field, field_validator, model_validator

from ngage_judging.models.common import DocumentModel, UTCTimestamp, utc_now
from ngage_judging.models.enumerations import ScoringType


class ScoringCriterion(DocumentModel):
    """
    One evaluable dimension of a rubric.
    """

    key: str = Field(
        ...,
        min_length=1,
        description="Identifier unique within the rubric"
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Display name (e.g., Creativity)"
    )

    description: str = Field(
        default="",
        description="Guidance shown to judges"
    )

    type: ScoringType = Field(
        default=ScoringType.NUMERIC,
        description="numeric, scale or boolean"
    )

    max_score: float = Field(
        default=100.0,
        gt=0,
        description="Upper bound for numeric values"
    )

    weight: float = Field(
        default=1.0,
        gt=0,
        description="Multiplier used when combining criteria into a total"
    )

    required: bool = Field(
        default=True,
        description="A score without this criterion is rejected"
    )

    options: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Type-specific options; 'min'/'max' declare scale bounds"
    )

    @model_validator(mode="after")
    def validate_scale_bounds(self):
        """Ensure declared scale bounds are ordered."""
        if self.type == ScoringType.SCALE:
            low, high = self.bounds
            if low > high:
                raise ValueError(
                    f"Scale bounds for '{self.key}' are inverted: min={low}, max={high}"
                )
        return self

    @property
    def bounds(self) -> Tuple[float, float]:
        """Inclusive (low, high) range a numeric value must fall in."""
        if self.type == ScoringType.SCALE and self.options:
            low = self.options.get("min", 0)
            high = self.options.get("max", self.max_score)
            return float(low), float(high)
        return 0.0, float(self.max_score)

    @property
    def lower_bound(self) -> float:
        return self.bounds[0]

    @property
    def upper_bound(self) -> float:
        return self.bounds[1]

    @property
    def is_numeric(self) -> bool:
        return self.type in (ScoringType.NUMERIC, ScoringType.SCALE)

    def accepts(self, value: Any) -> bool:
        """Check a single already-normalized value against this criterion."""
        if self.type == ScoringType.BOOLEAN:
            return isinstance(value, bool)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if value != value:  # NaN
            return False
        low, high = self.bounds
        return low <= value <= high


class ScoringRubric(DocumentModel):
    """
    Named, ordered collection of criteria.

    Either scoped to one event/group or marked as a reusable template.
    """

    id: str = Field(
        default_factory=lambda: f"rubric_{uuid4().hex}",
        description="Unique rubric identifier"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Rubric name"
    )

    description: str = Field(
        default="",
        max_length=500,
        description="Rubric description"
    )

    criteria: List[ScoringCriterion] = Field(
        ...,
        min_length=1,
        description="Ordered criteria"
    )

    event_id: Optional[str] = Field(default=None, description="Owning event, if any")
    group_id: Optional[str] = Field(default=None, description="Owning group, if any")

    is_template: bool = Field(
        default=False,
        description="Reusable template that is cloned into event rubrics"
    )

    created_by: str = Field(..., min_length=1, description="Member ID of the author")

    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)

    @field_validator("criteria")
    @classmethod
    def validate_unique_keys(cls, v: List[ScoringCriterion]) -> List[ScoringCriterion]:
        keys = [c.key for c in v]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"Criterion keys must be unique, duplicated: {duplicates}")
        return v

    @property
    def criterion_keys(self) -> List[str]:
        return [c.key for c in self.criteria]

    @property
    def has_criteria(self) -> bool:
        return bool(self.criteria)

    @property
    def max_possible_score(self) -> float:
        """Sum of max_score over all criteria."""
        return sum(c.max_score for c in self.criteria)

    @property
    def weighted_max_score(self) -> float:
        """Sum of max_score x weight over all criteria."""
        return sum(c.max_score * c.weight for c in self.criteria)

    def get_criterion(self, key: str) -> Optional[ScoringCriterion]:
        for criterion in self.criteria:
            if criterion.key == key:
                return criterion
        return None

    def add_criterion(self, criterion: ScoringCriterion) -> "ScoringRubric":
        return self._with_criteria([*self.criteria, criterion])

    def remove_criterion(self, key: str) -> "ScoringRubric":
        return self._with_criteria([c for c in self.criteria if c.key != key])

    def update_criterion(self, key: str, criterion: ScoringCriterion) -> "ScoringRubric":
        return self._with_criteria([criterion if c.key == key else c for c in self.criteria])

    def clone(
        self,
        created_by: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        event_id: Optional[str] = None,
        group_id: Optional[str] = None,
        is_template: bool = False,
    ) -> "ScoringRubric":
        """
        Copy this rubric under a new id.

        Cloning a template yields an event-scoped, non-template rubric unless
        is_template is set explicitly.
        """
        now = utc_now()
        return ScoringRubric(
            name=name or f"{self.name} (Copy)",
            description=self.description if description is None else description,
            criteria=[c.model_copy(deep=True) for c in self.criteria],
            event_id=event_id,
            group_id=group_id if group_id is not None else self.group_id,
            is_template=is_template,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    def _with_criteria(self, criteria: List[ScoringCriterion]) -> "ScoringRubric":
        # Re-validate so key uniqueness and min_length hold on the copy
        data = self.model_dump()
        data["criteria"] = [c.model_dump() for c in criteria]
        data["updated_at"] = utc_now()
        return ScoringRubric.model_validate(data)
