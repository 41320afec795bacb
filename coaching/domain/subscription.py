"""
Subscription status and the transition table.

    pending --> active --> stopped
       |          ^          |
       v          +----------+
    rejected (terminal)

Self-transitions are not edges: asking for the current status fails the
same way as any other illegal move.
"""
from datetime import date
from enum import Enum

from coaching.domain.errors import CoachingValidationError, InvalidTransitionError


class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw) -> "SubscriptionStatus":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise CoachingValidationError(f"Unknown subscription status '{raw}'. Expected one of: {allowed}")


TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING: frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.REJECTED}),
    SubscriptionStatus.ACTIVE: frozenset({SubscriptionStatus.STOPPED}),
    SubscriptionStatus.STOPPED: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.REJECTED: frozenset(),
}


def can_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> bool:
    return target in TRANSITIONS[current]


def next_status(current: SubscriptionStatus, target: SubscriptionStatus) -> SubscriptionStatus:
    """Return ``target`` if ``current -> target`` is a legal edge, else raise InvalidTransitionError."""
    if current == SubscriptionStatus.REJECTED:
        raise InvalidTransitionError(
            "This subscription was rejected. A rejected subscription cannot be changed; "
            "the player has to send a new subscription request."
        )
    if current == target:
        raise InvalidTransitionError(f"Subscription is already {current.value}.")
    if not can_transition(current, target):
        allowed = ", ".join(sorted(s.value for s in TRANSITIONS[current]))
        raise InvalidTransitionError(
            f"Cannot change a {current.value} subscription to {target.value}. "
            f"Allowed: {allowed}."
        )
    return target


def is_expired(end_date: date, today: date) -> bool:
    """Day granularity, end date inclusive: a subscription ending today is not expired yet."""
    return end_date < today
