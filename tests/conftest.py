"""
Pytest fixtures for testing
"""
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine, JSON
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.pool import StaticPool

from coaching.domain.clock import FixedClock
from coaching.domain.subscription import SubscriptionStatus
from coaching.infrastructure.db.session import Base
from coaching.infrastructure.db.models import CoachModel, PlayerModel, SubscriptionModel

COACH = "coach-1"
PLAYER = "player-1"
_NOW = datetime(2024, 1, 3, 8, 0, 0)


@pytest.fixture
def db_engine():
    """Create in-memory SQLite engine for tests, with JSONB→JSON mapping."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # SQLite has no JSONB: remap to JSON
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, JSONB):
                col.type = JSON()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock():
    """Frozen at 2024-01-03 08:00 UTC"""
    return FixedClock(_NOW)


@pytest.fixture
def people(db_session):
    db_session.add_all([
        CoachModel(id=COACH, name="Anna Coach", email="anna@example.com",
                   available_days=["monday", "friday"],
                   availability={"monday": [{"start": "14:00", "end": "18:00"}, {"start": "09:00", "end": "12:00"}]}),
        CoachModel(id="coach-2", name="Mark Coach", email="mark@example.com"),
        PlayerModel(id=PLAYER, name="Lee Player", email="lee@example.com"),
        PlayerModel(id="player-2", name="Sam Player", email="sam@example.com"),
    ])
    db_session.commit()


def make_subscription(
    db_session,
    status=SubscriptionStatus.ACTIVE,
    start=date(2024, 1, 1),
    end=date(2024, 1, 31),
    coach_id=COACH,
    player_id=PLAYER,
) -> SubscriptionModel:
    sub = SubscriptionModel(
        coach_id=coach_id, player_id=player_id, status=status,
        start_date=start, end_date=end, created_at=_NOW, updated_at=_NOW,
    )
    db_session.add(sub)
    db_session.commit()
    return sub


@pytest.fixture
def active_subscription(db_session, people):
    """S1: 2024-01-01 .. 2024-01-31, active"""
    return make_subscription(db_session)


@pytest.fixture
def subscription_factory(db_session, people):
    def factory(**kwargs):
        return make_subscription(db_session, **kwargs)
    return factory
