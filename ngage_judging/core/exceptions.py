"""
Custom Exceptions - Ngage Judging Engine
ngage_judging/core/exceptions.py

Repository errors, rubric validation errors and judging workflow errors.
"""

from typing import Any, Optional, Tuple


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in the document store."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """An entity with the same id already exists."""

    def __init__(self, message: str = "Entity already exists", entity_id: Optional[str] = None):
        self.message = message
        self.entity_id = entity_id
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Document store connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Rubric validation
# ---------------------------------------------------------------------------

class RubricValidationException(Exception):
    """
    Raw scoring input does not satisfy the rubric.

    criterion_key and constraint identify the offending field so the caller
    can point at it.
    """

    constraint = "invalid"

    def __init__(self, criterion_key: str, message: str):
        self.criterion_key = criterion_key
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "criterion_key": self.criterion_key,
            "constraint": self.constraint,
            "message": self.message,
        }


class MissingRequiredFieldException(RubricValidationException):
    """A required criterion has no value."""

    constraint = "required"

    def __init__(self, criterion_key: str):
        super().__init__(criterion_key, f"Criterion '{criterion_key}' is required")


class OutOfRangeException(RubricValidationException):
    """A numeric value falls outside the criterion bounds."""

    constraint = "range"

    def __init__(self, criterion_key: str, value: float, bounds: Tuple[float, float]):
        self.value = value
        self.bounds = bounds
        super().__init__(
            criterion_key,
            f"Score for '{criterion_key}' must be between {bounds[0]:g} and "
            f"{bounds[1]:g}, got {value:g}",
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(value=self.value, bounds=list(self.bounds))
        return data


class UnknownCriterionException(RubricValidationException):
    """A value was supplied for a key the rubric does not define."""

    constraint = "unknown"

    def __init__(self, criterion_key: str):
        super().__init__(criterion_key, f"Criterion '{criterion_key}' is not part of the rubric")


class InvalidValueTypeException(RubricValidationException):
    """A value has the wrong type for its criterion."""

    constraint = "type"

    def __init__(self, criterion_key: str, value: Any, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(
            criterion_key,
            f"Score for '{criterion_key}' must be {expected}, got {type(value).__name__}",
        )


# ---------------------------------------------------------------------------
# Judging workflow
# ---------------------------------------------------------------------------

class JudgingException(Exception):
    """A scoring request is not allowed for this judge or submission."""

    pass


class JudgeNotAssignedException(JudgingException):
    """The judge has no active assignment for the event."""

    def __init__(self, event_id: str, judge_id: str):
        self.event_id = event_id
        self.judge_id = judge_id
        super().__init__(f"Judge {judge_id} is not assigned to event {event_id}")


class EventMismatchException(JudgingException):
    """The submission belongs to a different event than the one given."""

    def __init__(self, submission_id: str, expected_event_id: str, event_id: str):
        self.submission_id = submission_id
        self.expected_event_id = expected_event_id
        self.event_id = event_id
        super().__init__(
            f"Submission {submission_id} belongs to event {expected_event_id}, not {event_id}"
        )
