"""Chat-send gate: messaging is open only while the pair has an active subscription."""
from dataclasses import dataclass

from sqlalchemy.orm import Session

from coaching.domain.subscription import SubscriptionStatus
from coaching.infrastructure.db.repositories import SubscriptionStore


@dataclass(frozen=True)
class ChatGateDecision:
    allowed: bool
    reason: str
    subscription_id: str | None = None
    status: str | None = None


def check_chat_allowed(db: Session, coach_id: str, player_id: str) -> ChatGateDecision:
    subs = SubscriptionStore(db).find_by(coach_id=coach_id, player_id=player_id, order_by="updated_at")
    if not subs:
        return ChatGateDecision(False, "No subscription found between coach and player")

    for sub in subs:
        if sub.status == SubscriptionStatus.ACTIVE:
            return ChatGateDecision(True, "Subscription is active", sub.id, SubscriptionStatus.ACTIVE.value)

    latest = subs[-1]
    status = SubscriptionStatus.parse(latest.status).value
    return ChatGateDecision(
        False,
        f"Cannot send message. Subscription status is {status}. Only active subscriptions can chat.",
        latest.id,
        status,
    )
