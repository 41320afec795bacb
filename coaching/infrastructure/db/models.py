"""
SQLAlchemy ORM models (people, subscriptions, tasks)
"""
import uuid
from datetime import date as date_type, datetime
from sqlalchemy import String, Text, Date, DateTime, Enum as SAEnum, Index, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB

from coaching.domain.subscription import SubscriptionStatus
from coaching.domain.task import TaskStatus
from coaching.infrastructure.db.session import Base


def new_id() -> str:
    """Opaque identifier assigned at creation"""
    return uuid.uuid4().hex


def _status_column(enum_cls):
    # Stored as plain VARCHAR holding the enum value ("active", "pending", ...)
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


# ============================================================================
# People (owned by the profile services; read here for display names)
# ============================================================================


class PlayerModel(Base):
    """Player profile - only the fields the engine needs for denormalized views"""
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)


class CoachModel(Base):
    """Coach profile with weekly availability"""
    __tablename__ = "coaches"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # ["monday", "wednesday"]
    available_days: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    # {"monday": [{"start": "09:00", "end": "12:00"}, ...], ...}
    availability: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)


# ============================================================================
# Engagements
# ============================================================================


class SubscriptionModel(Base):
    """Time-bounded engagement between one player and one coach"""
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    coach_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    status: Mapped[SubscriptionStatus] = mapped_column(
        _status_column(SubscriptionStatus), nullable=False, default=SubscriptionStatus.PENDING, index=True,
    )
    start_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    end_date: Mapped[date_type] = mapped_column(Date, nullable=False)  # inclusive

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_subscriptions_pair", "coach_id", "player_id"),
        CheckConstraint("start_date <= end_date", name="ck_subscriptions_date_order"),
    )


class TaskModel(Base):
    """Coach-assigned unit of work, nested inside one subscription"""
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    coach_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    subscription_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[TaskStatus] = mapped_column(
        _status_column(TaskStatus), nullable=False, default=TaskStatus.PENDING, index=True,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # naive UTC
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)    # naive UTC

    # Written by the player submission flow; opaque to the engine
    submission: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_tasks_pair", "coach_id", "player_id"),
        CheckConstraint("start_date < due_date", name="ck_tasks_date_order"),
    )
