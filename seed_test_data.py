"""
Seed development data: two coaches, three players, subscriptions in every
status and a few tasks.
Run:  python seed_test_data.py
"""
import sys
from datetime import date, datetime, timedelta

# ── bootstrap ────────────────────────────────────────────────────
from coaching.infrastructure.db.session import get_session_factory
from coaching.infrastructure.db.models import CoachModel, PlayerModel, SubscriptionModel

db = get_session_factory()()

if db.query(SubscriptionModel).count() > 0:
    print("Subscriptions already exist, nothing to seed"); sys.exit(0)

# ── use cases ────────────────────────────────────────────────────
from coaching.application.subscriptions import CreateSubscriptionUseCase, TransitionSubscriptionUseCase
from coaching.application.tasks import CreateTaskUseCase

today = date.today()


def at(d: date, hour: int) -> datetime:
    return datetime(d.year, d.month, d.day, hour, 0, 0)


# ═══════════════════════════════════════════════════════════════
# People
# ═══════════════════════════════════════════════════════════════
coach_anna = CoachModel(
    id="coach-anna", name="Anna Petrova", email="anna@coaching.local",
    available_days=["monday", "wednesday", "friday"],
    availability={
        "monday": [{"start": "09:00", "end": "12:00"}, {"start": "14:00", "end": "18:00"}],
        "wednesday": [{"start": "10:00", "end": "16:00"}],
    },
)
coach_mark = CoachModel(
    id="coach-mark", name="Mark Stone", email="mark@coaching.local",
    available_days=["tuesday", "thursday"],
)
players = [
    PlayerModel(id="player-lee", name="Lee Park", email="lee@coaching.local"),
    PlayerModel(id="player-sam", name="Sam Ortiz", email="sam@coaching.local"),
    PlayerModel(id="player-kim", name="Kim Novak", email="kim@coaching.local"),
]
db.add_all([coach_anna, coach_mark, *players])
db.commit()
print("People: 2 coaches, 3 players")

# ═══════════════════════════════════════════════════════════════
# Subscriptions
# ═══════════════════════════════════════════════════════════════
create_sub = CreateSubscriptionUseCase(db)
transition = TransitionSubscriptionUseCase(db)

lee_anna = create_sub.execute("player-lee", "coach-anna", today - timedelta(days=10), today + timedelta(days=20))
transition.execute(lee_anna.id, "active")

sam_anna = create_sub.execute("player-sam", "coach-anna", today, today + timedelta(days=30))
transition.execute(sam_anna.id, "active")

lee_mark = create_sub.execute("player-lee", "coach-mark", today, today + timedelta(days=30))
transition.execute(lee_mark.id, "active")

kim_anna = create_sub.execute("player-kim", "coach-anna", today, today + timedelta(days=30))  # stays pending

kim_mark = create_sub.execute("player-kim", "coach-mark", today, today + timedelta(days=30))
transition.execute(kim_mark.id, "rejected")

sam_mark = create_sub.execute("player-sam", "coach-mark", today - timedelta(days=40), today - timedelta(days=1))
print("Subscriptions: 3 active, 2 pending, 1 rejected")

# ═══════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════
create_task = CreateTaskUseCase(db)
for offset, title in [(0, "Warm-up routine"), (2, "Footwork drills"), (5, "Match video review")]:
    day = today + timedelta(days=offset)
    create_task.execute(
        coach_id="coach-anna", player_id="player-lee", subscription_id=lee_anna.id,
        title=title, description=f"{title} - 45 minutes",
        start_date=at(day, 9), due_date=at(day, 10),
    )

# Same hour for the same player is fine with a different coach
create_task.execute(
    coach_id="coach-mark", player_id="player-lee", subscription_id=lee_mark.id,
    title="Strength session", start_date=at(today, 9), due_date=at(today, 10),
)
create_task.execute(
    coach_id="coach-anna", player_id="player-sam", subscription_id=sam_anna.id,
    title="Serve practice", start_date=at(today + timedelta(days=1), 16), due_date=at(today + timedelta(days=1), 17),
)
print("Tasks: 5")

db.close()
print("Done.")
