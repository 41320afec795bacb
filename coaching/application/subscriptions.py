"""
Subscription use cases - creation, lifecycle transitions, expiration sweep,
date edits and enriched read models.

Works directly with the ORM through the stores; every use case commits
its own unit of work.
"""
import logging
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from coaching.config import get_settings
from coaching.domain.clock import Clock, SystemClock
from coaching.domain.dates import parse_date
from coaching.domain.errors import (
    CoachingValidationError, ImmutableFieldError, InvalidOrderError,
    InvalidTransitionError, NotFoundError, OutOfRangeError,
)
from coaching.domain.subscription import SubscriptionStatus, is_expired, next_status
from coaching.domain.task import TaskStatus, fits_in_range
from coaching.infrastructure.db.models import SubscriptionModel
from coaching.infrastructure.db.repositories import PeopleDirectory, SubscriptionStore, TaskStore

logger = logging.getLogger(__name__)


def default_clock() -> Clock:
    return SystemClock(get_settings().TIMEZONE)


def load_subscription(store: SubscriptionStore, subscription_id: str) -> SubscriptionModel:
    sub = store.get(subscription_id)
    if sub is None:
        raise NotFoundError("Subscription not found")
    return sub


# ============================================================================
# Lifecycle
# ============================================================================


class SubscriptionLifecycle:
    """
    Enforces the status transition table and runs the expiration sweep.

    The sweep is never scheduled here: callers invoke it on demand (before
    listings, from the expire-check endpoint or from the optional scheduler
    job). It is idempotent and safe to run redundantly.
    """

    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()
        self.subscriptions = SubscriptionStore(db)

    def transition(self, subscription: SubscriptionModel, target, actor_id: str | None = None) -> SubscriptionModel:
        current = SubscriptionStatus.parse(subscription.status)
        target = SubscriptionStatus.parse(target)
        next_status(current, target)

        if target == SubscriptionStatus.ACTIVE and is_expired(subscription.end_date, self.clock.today()):
            raise InvalidTransitionError(
                f"Cannot activate a subscription that ended on {subscription.end_date.isoformat()}. "
                f"Extend the end date first."
            )

        subscription.status = target
        subscription.updated_at = self.clock.now()
        self.db.commit()
        logger.info(
            "Subscription %s: %s -> %s (actor=%s)",
            subscription.id, current.value, target.value, actor_id,
        )
        return subscription

    def sweep_expirations(self, now: datetime | date | None = None) -> int:
        """
        Stop every active subscription whose end date is before ``now``'s day.

        Returns the number of subscriptions stopped; a repeated call with the
        same ``now`` returns 0.
        """
        if now is None:
            today = self.clock.today()
        elif isinstance(now, datetime):
            today = now.date()
        else:
            today = now

        stopped = 0
        stamp = self.clock.now()
        for sub in self.subscriptions.find_by(status=SubscriptionStatus.ACTIVE):
            if not is_expired(sub.end_date, today):
                continue
            sub.status = next_status(SubscriptionStatus.ACTIVE, SubscriptionStatus.STOPPED)
            sub.updated_at = stamp
            stopped += 1

        if stopped:
            self.db.commit()
            logger.info("Expiration sweep (today=%s): stopped %d subscription(s)", today.isoformat(), stopped)
        return stopped


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    """Player-initiated subscribe action; always starts in ``pending``."""

    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()

    def execute(
        self,
        player_id: str,
        coach_id: str,
        start_date: date | str,
        end_date: date | str,
        actor_id: str | None = None,
    ) -> SubscriptionModel:
        player_id = (player_id or "").strip()
        coach_id = (coach_id or "").strip()
        if not player_id:
            raise CoachingValidationError("Player is required")
        if not coach_id:
            raise CoachingValidationError("Coach is required")

        start = parse_date(start_date, "Subscription start date")
        end = parse_date(end_date, "Subscription end date")
        if start > end:
            raise InvalidOrderError("Subscription start date must be on or before the end date")

        now = self.clock.now()
        sub = SubscriptionStore(self.db).add(SubscriptionModel(
            player_id=player_id,
            coach_id=coach_id,
            status=SubscriptionStatus.PENDING,
            start_date=start,
            end_date=end,
            created_at=now,
            updated_at=now,
        ))
        self.db.commit()
        logger.info(
            "Subscription %s created: player=%s coach=%s %s..%s (actor=%s)",
            sub.id, player_id, coach_id, start.isoformat(), end.isoformat(), actor_id,
        )
        return sub


class TransitionSubscriptionUseCase:
    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.lifecycle = SubscriptionLifecycle(db, clock)

    def execute(self, subscription_id: str, target_status, actor_id: str | None = None) -> SubscriptionModel:
        sub = load_subscription(self.lifecycle.subscriptions, subscription_id)
        return self.lifecycle.transition(sub, target_status, actor_id=actor_id)


class UpdateSubscriptionDatesUseCase:
    """
    Edit start/end dates of a subscription.

    Existing tasks are re-validated against the new range: the edit is
    rejected if any non-cancelled task would fall outside it.
    """

    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()

    def execute(self, subscription_id: str, actor_id: str | None = None, **changes) -> SubscriptionModel:
        store = SubscriptionStore(self.db)
        sub = load_subscription(store, subscription_id)

        for field in ("player_id", "coach_id"):
            if field in changes and changes[field] is not None and changes[field] != getattr(sub, field):
                raise ImmutableFieldError(f"{field} of a subscription cannot be changed")
        if changes.get("status") is not None:
            raise ImmutableFieldError("Use the transition operation to change the subscription status")

        start = parse_date(changes["start_date"], "Subscription start date") \
            if changes.get("start_date") is not None else sub.start_date
        end = parse_date(changes["end_date"], "Subscription end date") \
            if changes.get("end_date") is not None else sub.end_date
        if start > end:
            raise InvalidOrderError("Subscription start date must be on or before the end date")

        if (start, end) != (sub.start_date, sub.end_date):
            orphans = [
                t for t in TaskStore(self.db).find_by(subscription_id=sub.id)
                if t.status != TaskStatus.CANCELLED and not fits_in_range(t.start_date, t.due_date, start, end)
            ]
            if orphans:
                raise OutOfRangeError(
                    f"{len(orphans)} task(s) of this subscription would fall outside "
                    f"{start.isoformat()} - {end.isoformat()}. Reschedule or cancel them first.",
                    OutOfRangeError.TASK_OUTSIDE_NEW_RANGE,
                )

        sub.start_date = start
        sub.end_date = end
        sub.updated_at = self.clock.now()
        self.db.commit()
        logger.info("Subscription %s dates set to %s..%s (actor=%s)", sub.id, start, end, actor_id)
        return sub


# ============================================================================
# Read models
# ============================================================================


def enrich_subscriptions(db: Session, subs: list[SubscriptionModel]) -> list[dict]:
    """Read-time join with player/coach display data; names fall back to the id."""
    directory = PeopleDirectory(db)
    players = directory.players({s.player_id for s in subs})
    coaches = directory.coaches({s.coach_id for s in subs})

    rows = []
    for s in subs:
        player = players.get(s.player_id)
        coach = coaches.get(s.coach_id)
        rows.append({
            "id": s.id,
            "player_id": s.player_id,
            "coach_id": s.coach_id,
            "status": SubscriptionStatus.parse(s.status).value,
            "start_date": s.start_date,
            "end_date": s.end_date,
            "created_at": s.created_at,
            "updated_at": s.updated_at,
            "player_name": (player.name if player else None) or s.player_id,
            "player_email": (player.email if player else None) or "",
            "coach_name": (coach.name if coach else None) or s.coach_id,
            "coach_email": (coach.email if coach else None) or "",
        })
    return rows


class GetSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, subscription_id: str) -> dict:
        sub = load_subscription(SubscriptionStore(self.db), subscription_id)
        return enrich_subscriptions(self.db, [sub])[0]


class ListSubscriptionsUseCase:
    """
    Filtered, enriched subscription list. Runs the expiration sweep first
    unless ``expire_first`` is off.
    """

    SEARCH_FIELDS = ("player_id", "coach_id", "player_name", "coach_name", "player_email", "coach_email")

    def __init__(self, db: Session, clock: Clock | None = None, expire_first: bool | None = None):
        self.db = db
        self.clock = clock or default_clock()
        self.expire_first = get_settings().EXPIRE_ON_LIST if expire_first is None else expire_first

    def execute(
        self,
        coach_id: str | None = None,
        player_id: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[dict]:
        if self.expire_first:
            SubscriptionLifecycle(self.db, self.clock).sweep_expirations()

        status_value = SubscriptionStatus.parse(status) if status else None
        subs = SubscriptionStore(self.db).find_by(
            order_by="start_date", coach_id=coach_id, player_id=player_id, status=status_value,
        )
        rows = enrich_subscriptions(self.db, subs)

        if search and search.strip():
            needle = search.strip().lower()
            rows = [
                r for r in rows
                if any(needle in (r[f] or "").lower() for f in self.SEARCH_FIELDS)
            ]
        return rows


def compute_status_breakdown(db: Session, coach_id: str | None = None) -> dict[str, int]:
    """Subscription count per status; every status is always present."""
    breakdown = {s.value: 0 for s in SubscriptionStatus}
    stmt = select(SubscriptionModel.status, func.count()).group_by(SubscriptionModel.status)
    if coach_id:
        stmt = stmt.where(SubscriptionModel.coach_id == coach_id)
    for status, count in db.execute(stmt).all():
        breakdown[SubscriptionStatus.parse(status).value] = count
    return breakdown


def get_coach_players(db: Session, coach_id: str) -> list[dict]:
    """Distinct players with an active subscription to the coach, sorted by name."""
    subs = SubscriptionStore(db).find_by(coach_id=coach_id, status=SubscriptionStatus.ACTIVE)
    player_ids = {s.player_id for s in subs}
    players = PeopleDirectory(db).players(player_ids)

    result = [
        {
            "id": pid,
            "name": players[pid].name if pid in players else "Unknown",
            "email": (players[pid].email or "") if pid in players else "",
        }
        for pid in player_ids
    ]
    result.sort(key=lambda p: (p["name"].lower(), p["id"]))
    return result
