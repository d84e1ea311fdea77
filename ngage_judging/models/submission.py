from typing import Optional
from pydantic import Field

from ngage_judging.models.common import DocumentModel, UTCTimestamp, utc_now
from ngage_judging.models.enumerations import SubmissionStatus

SCORABLE_STATUSES = frozenset({SubmissionStatus.SUBMITTED, SubmissionStatus.APPROVED})


class Submission(DocumentModel):
    """
    A team's entry to an event. Only the fields ranking needs are modelled.
    """

    id: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1)
    team_id: str = Field(..., min_length=1)
    submitted_by: str = Field(..., min_length=1, description="Member ID of the submitter")

    status: SubmissionStatus = Field(default=SubmissionStatus.DRAFT)

    submitted_at: Optional[UTCTimestamp] = Field(default=None)
    created_at: UTCTimestamp = Field(default_factory=utc_now)
    updated_at: UTCTimestamp = Field(default_factory=utc_now)

    @property
    def is_scorable(self) -> bool:
        """Submitted and approved entries are ranked; drafts and rejects are not."""
        return self.status in SCORABLE_STATUSES
