from typing import List, Optional
from pydantic import Field, model_validator

from ngage_judging.models.common import DocumentModel, UTCTimestamp, utc_now
from ngage_judging.models.enumerations import JudgeRole


class JudgeAssignment(DocumentModel):
    """
    A judge's assignment to an event. Revoked assignments are kept with
    is_active False so the history survives.
    """

    id: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1)
    judge_id: str = Field(..., min_length=1, description="Member ID of the judge")
    assigned_by: str = Field(..., min_length=1, description="Member ID of the organizer")

    role: JudgeRole = Field(default=JudgeRole.JUDGE)
    permissions: List[str] = Field(default_factory=list)
    is_active: bool = Field(default=True)

    assigned_at: UTCTimestamp = Field(default_factory=utc_now)
    revoked_at: Optional[UTCTimestamp] = Field(default=None)
    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def validate_revocation(self):
        if self.revoked_at is not None and self.revoked_at < self.assigned_at:
            raise ValueError("revoked_at must be >= assigned_at")
        return self
