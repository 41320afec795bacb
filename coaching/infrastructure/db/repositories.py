"""
Stores - persistence interface the engine works against.

Each store wraps a Session and offers document-style access: read by id,
add, and query by field equality. Transactions stay with the caller
(use cases commit).
"""
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from coaching.infrastructure.db.models import (
    CoachModel, PlayerModel, SubscriptionModel, TaskModel,
)

ModelT = TypeVar("ModelT")


class _Store(Generic[ModelT]):
    model: type

    def __init__(self, db: Session):
        self.db = db

    def get(self, obj_id: str) -> ModelT | None:
        if not obj_id:
            return None
        return self.db.get(self.model, obj_id)

    def add(self, obj: ModelT) -> ModelT:
        self.db.add(obj)
        self.db.flush()  # assign defaults (id) without commit
        return obj

    def find_by(self, order_by: str | None = None, **equals: Any) -> list[ModelT]:
        """
        Query by field equality; ``None`` values are ignored so optional
        filters can be passed straight through.

        Example:
            >>> TaskStore(db).find_by(coach_id="c1", player_id="p1", order_by="start_date")
        """
        stmt = select(self.model)
        for field, value in equals.items():
            if value is None:
                continue
            stmt = stmt.where(getattr(self.model, field) == value)
        if order_by:
            stmt = stmt.order_by(getattr(self.model, order_by))
        return list(self.db.scalars(stmt).all())


class SubscriptionStore(_Store[SubscriptionModel]):
    model = SubscriptionModel

    def lock_pair(self, coach_id: str, player_id: str) -> list[SubscriptionModel]:
        """
        SELECT ... FOR UPDATE over every subscription of the coach+player pair.

        Held until the caller commits, so two writers validating tasks for
        the same pair run one after another on PostgreSQL. SQLite has no
        row locks and silently drops the clause.
        """
        stmt = (
            select(SubscriptionModel)
            .where(
                SubscriptionModel.coach_id == coach_id,
                SubscriptionModel.player_id == player_id,
            )
            .order_by(SubscriptionModel.id)
            .with_for_update()
        )
        return list(self.db.scalars(stmt).all())


class TaskStore(_Store[TaskModel]):
    model = TaskModel

    def for_pair(self, coach_id: str, player_id: str, exclude_id: str | None = None) -> list[TaskModel]:
        stmt = select(TaskModel).where(
            TaskModel.coach_id == coach_id,
            TaskModel.player_id == player_id,
        )
        if exclude_id:
            stmt = stmt.where(TaskModel.id != exclude_id)
        return list(self.db.scalars(stmt.order_by(TaskModel.start_date)).all())


class PeopleDirectory:
    """Read-only lookups of player/coach display data for denormalized views."""

    def __init__(self, db: Session):
        self.db = db

    def players(self, ids: set[str] | list[str]) -> dict[str, PlayerModel]:
        ids = {i for i in ids if i}
        if not ids:
            return {}
        rows = self.db.scalars(select(PlayerModel).where(PlayerModel.id.in_(ids))).all()
        return {p.id: p for p in rows}

    def coaches(self, ids: set[str] | list[str]) -> dict[str, CoachModel]:
        ids = {i for i in ids if i}
        if not ids:
            return {}
        rows = self.db.scalars(select(CoachModel).where(CoachModel.id.in_(ids))).all()
        return {c.id: c for c in rows}

    def coach(self, coach_id: str) -> CoachModel | None:
        return self.db.get(CoachModel, coach_id)
