"""
Task rules: status types, date containment and overlap.

The containment invariant every persisted task satisfies:

    subscription.start_date <= task.start_date <= task.due_date <= subscription.end_date

with subscription dates anchored at midnight (see ``coaching.domain.dates``).
"""
from datetime import date, datetime
from enum import Enum

from coaching.domain.dates import end_boundary, start_of_day
from coaching.domain.errors import CoachingValidationError, InvalidOrderError, OutOfRangeError


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw) -> "TaskStatus":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise CoachingValidationError(f"Unknown task status '{raw}'. Expected one of: {allowed}")


class SubmissionStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


def intervals_overlap(a: datetime, b: datetime, c: datetime, d: datetime) -> bool:
    """[a, b] and [c, d] overlap iff a <= d and c <= b (touching endpoints overlap)."""
    return a <= d and c <= b


def check_containment(
    start: datetime,
    due: datetime,
    subscription_start: date,
    subscription_end: date,
) -> None:
    """Raise OutOfRangeError naming which boundary the task crosses."""
    if start < start_of_day(subscription_start):
        raise OutOfRangeError(
            f"Task start date ({start.isoformat()}) must be on or after the "
            f"subscription start date ({subscription_start.isoformat()})",
            OutOfRangeError.START_BEFORE_SUBSCRIPTION_START,
        )
    if start >= end_boundary(subscription_end):
        raise OutOfRangeError(
            f"Task start date ({start.isoformat()}) must be on or before the "
            f"subscription end date ({subscription_end.isoformat()})",
            OutOfRangeError.START_AFTER_SUBSCRIPTION_END,
        )
    if due >= end_boundary(subscription_end):
        raise OutOfRangeError(
            f"Task due date ({due.isoformat()}) must be on or before the "
            f"subscription end date ({subscription_end.isoformat()})",
            OutOfRangeError.DUE_AFTER_SUBSCRIPTION_END,
        )


def check_order(start: datetime, due: datetime) -> None:
    if start >= due:
        raise InvalidOrderError("Task start date must be before the due date")


def fits_in_range(start: datetime, due: datetime, range_start: date, range_end: date) -> bool:
    return start_of_day(range_start) <= start and due < end_boundary(range_end)


def is_overdue(status: TaskStatus, due: datetime, now: datetime) -> bool:
    return status == TaskStatus.PENDING and due < now


def check_submission(raw: dict | None) -> dict | None:
    """
    Shape check for the player-owned submission record. The record is
    returned exactly as given; the engine stores it and never changes it.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise CoachingValidationError("Submission must be an object")
    status = raw.get("status")
    if status is not None:
        try:
            SubmissionStatus(str(status))
        except ValueError:
            allowed = ", ".join(s.value for s in SubmissionStatus)
            raise CoachingValidationError(f"Unknown submission status '{status}'. Expected one of: {allowed}")
    media = raw.get("media_urls")
    if media is not None and (not isinstance(media, list) or not all(isinstance(m, str) for m in media)):
        raise CoachingValidationError("Submission media_urls must be a list of strings")
    return raw
