"""
Task use cases - validated creation/update and enriched read models.

Validation order (each step is a hard failure):
  1. subscription exists
  2. subscription is active (creation only)
  3. task dates lie inside the subscription
  4. start is before due
  5. player/coach match the subscription
  6. no overlapping task for the same coach + player
  7. persist
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from coaching.application.subscriptions import default_clock, load_subscription
from coaching.domain.clock import Clock
from coaching.domain.dates import parse_datetime
from coaching.domain.errors import (
    CoachingValidationError, IdentityMismatchError, ImmutableFieldError, NotFoundError,
    SubscriptionNotActiveError, TaskConflictError,
)
from coaching.domain.subscription import SubscriptionStatus
from coaching.domain.task import (
    TaskStatus, check_containment, check_order, intervals_overlap,
    is_overdue, check_submission,
)
from coaching.infrastructure.db.models import TaskModel
from coaching.infrastructure.db.repositories import PeopleDirectory, SubscriptionStore, TaskStore

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("subscription_id", "coach_id", "player_id")


@dataclass
class TaskInput:
    coach_id: str
    player_id: str
    subscription_id: str
    title: str
    start_date: datetime | str
    due_date: datetime | str
    description: str = ""
    status: TaskStatus | str = TaskStatus.PENDING
    submission: dict | None = None


class TaskValidator:
    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()
        self.subscriptions = SubscriptionStore(db)
        self.tasks = TaskStore(db)

    def create_or_update(self, dto: TaskInput, existing: TaskModel | None = None) -> TaskModel:
        start = parse_datetime(dto.start_date, "Task start date")
        due = parse_datetime(dto.due_date, "Task due date")
        status = TaskStatus.parse(dto.status)
        submission = check_submission(dto.submission)
        title = (dto.title or "").strip()
        if not title:
            raise CoachingValidationError("Task title is required")

        creating = existing is None
        dates_changed = creating or (start, due) != (existing.start_date, existing.due_date)

        if dates_changed:
            sub = load_subscription(self.subscriptions, dto.subscription_id)

            if creating and sub.status != SubscriptionStatus.ACTIVE:
                actual = SubscriptionStatus.parse(sub.status).value
                raise SubscriptionNotActiveError(
                    f"Cannot create task for a {actual} subscription. The subscription must be active.",
                    actual,
                )

            check_containment(start, due, sub.start_date, sub.end_date)
            check_order(start, due)

            if dto.player_id != sub.player_id:
                raise IdentityMismatchError("Player ID does not match the subscription", "player_id")
            if dto.coach_id != sub.coach_id:
                raise IdentityMismatchError("Coach ID does not match the subscription", "coach_id")

            self._check_conflicts(dto.coach_id, dto.player_id, start, due, existing)

        now = self.clock.now()
        task = existing or TaskModel(
            coach_id=dto.coach_id,
            player_id=dto.player_id,
            subscription_id=dto.subscription_id,
            created_at=now,
        )
        task.title = title
        task.description = dto.description or ""
        task.status = status
        task.start_date = start
        task.due_date = due
        task.submission = submission
        task.updated_at = now
        if creating:
            self.tasks.add(task)
        self.db.commit()
        return task

    def _check_conflicts(
        self,
        coach_id: str,
        player_id: str,
        start: datetime,
        due: datetime,
        existing: TaskModel | None,
    ) -> None:
        # Serializes writers for this pair until commit (no-op on SQLite)
        self.subscriptions.lock_pair(coach_id, player_id)

        exclude_id = existing.id if existing is not None else None
        for other in self.tasks.for_pair(coach_id, player_id, exclude_id=exclude_id):
            if intervals_overlap(start, due, other.start_date, other.due_date):
                logger.warning(
                    "Task conflict: coach=%s player=%s [%s, %s] overlaps task %s",
                    coach_id, player_id, start.isoformat(), due.isoformat(), other.id,
                )
                # release the pair lock; nothing was written
                self.db.rollback()
                raise TaskConflictError(
                    f"This player already has a task with overlapping dates "
                    f"(\"{other.title}\", {other.start_date.isoformat()} - {other.due_date.isoformat()}). "
                    f"Please choose different dates.",
                    other.id,
                )


class CreateTaskUseCase:
    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.validator = TaskValidator(db, clock)

    def execute(
        self,
        coach_id: str,
        player_id: str,
        subscription_id: str,
        title: str,
        start_date: datetime | str,
        due_date: datetime | str,
        description: str = "",
        status: str = TaskStatus.PENDING.value,
        submission: dict | None = None,
        actor_id: str | None = None,
    ) -> TaskModel:
        task = self.validator.create_or_update(TaskInput(
            coach_id=coach_id,
            player_id=player_id,
            subscription_id=subscription_id,
            title=title,
            description=description,
            start_date=start_date,
            due_date=due_date,
            status=status,
            submission=submission,
        ))
        logger.info(
            "Task %s created: coach=%s player=%s subscription=%s (actor=%s)",
            task.id, coach_id, player_id, subscription_id, actor_id,
        )
        return task


class UpdateTaskUseCase:
    """
    Partial update: only the keys passed are changed, so an explicit empty
    description clears it. Foreign references are immutable; changing start
    or due re-runs containment, ordering, identity and conflict checks.
    """

    UPDATABLE = ("title", "description", "status", "start_date", "due_date", "submission")

    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.validator = TaskValidator(db, clock)

    def execute(self, task_id: str, actor_id: str | None = None, **changes) -> TaskModel:
        task = TaskStore(self.db).get(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")

        for field in IMMUTABLE_FIELDS:
            if changes.get(field) is not None and changes[field] != getattr(task, field):
                raise ImmutableFieldError(f"{field} of a task cannot be changed")

        merged = {f: getattr(task, f) for f in self.UPDATABLE}
        merged.update({k: v for k, v in changes.items() if k in self.UPDATABLE})

        task = self.validator.create_or_update(
            TaskInput(
                coach_id=task.coach_id,
                player_id=task.player_id,
                subscription_id=task.subscription_id,
                **merged,
            ),
            existing=task,
        )
        logger.info("Task %s updated: %s (actor=%s)", task.id, sorted(k for k in changes if k in self.UPDATABLE), actor_id)
        return task


# ============================================================================
# Read models
# ============================================================================


def enrich_tasks(db: Session, tasks: list[TaskModel], now: datetime) -> list[dict]:
    """Read-time join with display names; names fall back to the id, then 'Unknown'."""
    directory = PeopleDirectory(db)
    players = directory.players({t.player_id for t in tasks})
    coaches = directory.coaches({t.coach_id for t in tasks})

    rows = []
    for t in tasks:
        player = players.get(t.player_id)
        coach = coaches.get(t.coach_id)
        status = TaskStatus.parse(t.status)
        rows.append({
            "id": t.id,
            "coach_id": t.coach_id,
            "player_id": t.player_id,
            "subscription_id": t.subscription_id,
            "title": t.title,
            "description": t.description,
            "status": status.value,
            "start_date": t.start_date,
            "due_date": t.due_date,
            "submission": t.submission,
            "created_at": t.created_at,
            "updated_at": t.updated_at,
            "player_name": (player.name if player else None) or t.player_id or "Unknown",
            "coach_name": (coach.name if coach else None) or t.coach_id or "Unknown",
            "is_overdue": is_overdue(status, t.due_date, now),
        })
    return rows


class GetTaskUseCase:
    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()

    def execute(self, task_id: str) -> dict:
        task = TaskStore(self.db).get(task_id)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return enrich_tasks(self.db, [task], self.clock.now())[0]


class ListTasksUseCase:
    def __init__(self, db: Session, clock: Clock | None = None):
        self.db = db
        self.clock = clock or default_clock()

    def execute(
        self,
        coach_id: str | None = None,
        player_id: str | None = None,
        status: str | None = None,
    ) -> list[dict]:
        status_value = TaskStatus.parse(status) if status else None
        tasks = TaskStore(self.db).find_by(
            order_by="start_date", coach_id=coach_id, player_id=player_id, status=status_value,
        )
        return enrich_tasks(self.db, tasks, self.clock.now())
