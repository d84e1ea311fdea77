"""
Shared model plumbing - Ngage Judging Engine
ngage_judging/models/common.py

Base class for persisted documents and the UTC timestamp type.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer, ValidationInfo
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_timestamp(dt: datetime) -> datetime:
    """Ensure timestamp is UTC-aware (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _format_timestamp(dt: datetime) -> str:
    # Fixed width so stored strings sort in chronological order
    return normalize_timestamp(dt).isoformat(timespec="microseconds")


UTCTimestamp = Annotated[
    datetime,
    AfterValidator(normalize_timestamp),
    PlainSerializer(_format_timestamp, return_type=str, when_used="json"),
]


STORED_DOCUMENT = "stored_document"


def is_stored_document(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get(STORED_DOCUMENT))


class DocumentModel(BaseModel):
    """
    Base for models stored in the document store.

    Attributes are snake_case in Python and camelCase in stored documents.
    Validators can check info.context for STORED_DOCUMENT to tell a read
    from the store apart from construction of a new record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict:
        """Serialize to a JSON-compatible document with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict):
        return cls.model_validate(document, context={STORED_DOCUMENT: True})
