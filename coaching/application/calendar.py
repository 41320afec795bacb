"""
Calendar read model - boundary markers for subscriptions and tasks.

A subscription contributes a "start" marker on the day its start date
falls in the requested month and an "end" marker on its end date; a
subscription spanning the whole month without a boundary inside it
contributes nothing. Tasks contribute "start" and "due" markers the same
way. Never writes.
"""
from dataclasses import asdict, dataclass
from datetime import date, datetime

from sqlalchemy.orm import Session

from coaching.domain.availability import schedule_for
from coaching.domain.errors import CoachingValidationError, NotFoundError
from coaching.domain.subscription import SubscriptionStatus
from coaching.domain.task import TaskStatus
from coaching.infrastructure.db.repositories import PeopleDirectory, SubscriptionStore, TaskStore

FILTER_ALL = "all"
FILTER_SUBSCRIPTIONS = "subscriptions"
FILTER_TASKS = "tasks"
FILTERS = (FILTER_ALL, FILTER_SUBSCRIPTIONS, FILTER_TASKS)

UNKNOWN_PLAYER = "Unknown Player"
UNKNOWN_COACH = "Unknown Coach"


@dataclass
class CalendarEvent:
    id: str
    title: str
    date: str          # ISO date (subscriptions) or date-time (tasks)
    type: str          # "subscription" | "task"
    kind: str          # "start" | "end" | "due"
    description: str
    player_id: str
    player_name: str
    coach_id: str
    coach_name: str
    status: str
    start_date: str | None = None  # subscription range, for the renderer
    end_date: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def _in_month(value: date | datetime, month: int, year: int) -> bool:
    return value.year == year and value.month == month


class CalendarAggregator:
    def __init__(self, db: Session):
        self.db = db
        self.subscriptions = SubscriptionStore(db)
        self.tasks = TaskStore(db)
        self.people = PeopleDirectory(db)

    def build_view(
        self,
        scope_coach_id: str | None,
        month: int,
        year: int,
        filter: str = FILTER_ALL,
        player_filter: str | None = None,
        player_id: str | None = None,
    ) -> list[CalendarEvent]:
        """
        Events of one month (``month`` is 1-12).

        ``scope_coach_id=None`` spans every coach. ``player_id`` filters by
        identity; ``player_filter`` is an exact match on the player's display
        name ("all" or None disables it).
        """
        if not 1 <= month <= 12:
            raise CoachingValidationError(f"Month must be between 1 and 12, got {month}")
        if filter not in FILTERS:
            raise CoachingValidationError(f"Unknown calendar filter '{filter}'. Expected one of: {', '.join(FILTERS)}")
        if player_filter == FILTER_ALL:
            player_filter = None

        subs = self.subscriptions.find_by(coach_id=scope_coach_id, player_id=player_id) \
            if filter in (FILTER_ALL, FILTER_SUBSCRIPTIONS) else []
        tasks = self.tasks.find_by(coach_id=scope_coach_id, player_id=player_id) \
            if filter in (FILTER_ALL, FILTER_TASKS) else []

        players = self.people.players({s.player_id for s in subs} | {t.player_id for t in tasks})
        coaches = self.people.coaches({s.coach_id for s in subs} | {t.coach_id for t in tasks})

        def name_of(pid: str) -> str:
            player = players.get(pid)
            return (player.name if player else None) or UNKNOWN_PLAYER

        def coach_name_of(cid: str) -> str:
            coach = coaches.get(cid)
            return (coach.name if coach else None) or UNKNOWN_COACH

        events: list[CalendarEvent] = []

        for sub in subs:
            player_name = name_of(sub.player_id)
            if player_filter is not None and player_name != player_filter:
                continue
            status = SubscriptionStatus.parse(sub.status).value
            common = dict(
                type="subscription",
                player_id=sub.player_id,
                player_name=player_name,
                coach_id=sub.coach_id,
                coach_name=coach_name_of(sub.coach_id),
                status=status,
                start_date=sub.start_date.isoformat(),
                end_date=sub.end_date.isoformat(),
            )
            if _in_month(sub.start_date, month, year):
                events.append(CalendarEvent(
                    id=f"sub-start-{sub.id}",
                    title=f"{player_name} - Start",
                    date=sub.start_date.isoformat(),
                    kind="start",
                    description="Subscription starts",
                    **common,
                ))
            if _in_month(sub.end_date, month, year):
                events.append(CalendarEvent(
                    id=f"sub-end-{sub.id}",
                    title=f"{player_name} - End",
                    date=sub.end_date.isoformat(),
                    kind="end",
                    description="Subscription ends",
                    **common,
                ))

        for task in tasks:
            player_name = name_of(task.player_id)
            if player_filter is not None and player_name != player_filter:
                continue
            status = TaskStatus.parse(task.status).value
            if _in_month(task.start_date, month, year):
                events.append(CalendarEvent(
                    id=f"task-start-{task.id}",
                    title=f"{task.title} (Start)",
                    date=task.start_date.isoformat(),
                    type="task",
                    kind="start",
                    description=task.description or "Task assigned",
                    player_id=task.player_id,
                    player_name=player_name,
                    coach_id=task.coach_id,
                    coach_name=coach_name_of(task.coach_id),
                    status=status,
                ))
            if _in_month(task.due_date, month, year):
                events.append(CalendarEvent(
                    id=f"task-due-{task.id}",
                    title=f"{task.title} (Due)",
                    date=task.due_date.isoformat(),
                    type="task",
                    kind="due",
                    description=task.description or "Task due",
                    player_id=task.player_id,
                    player_name=player_name,
                    coach_id=task.coach_id,
                    coach_name=coach_name_of(task.coach_id),
                    status=status,
                ))

        events.sort(key=lambda e: (e.date, e.id))
        return events

    def player_names(self, coach_id: str) -> list[str]:
        """Display names offered by the calendar's player filter."""
        subs = self.subscriptions.find_by(coach_id=coach_id)
        players = self.people.players({s.player_id for s in subs})
        return sorted({players[s.player_id].name for s in subs if s.player_id in players and players[s.player_id].name})

    def coach_schedule(self, coach_id: str) -> dict[str, list[dict[str, str]]]:
        coach = self.people.coach(coach_id)
        if coach is None:
            raise NotFoundError("Coach not found")
        return schedule_for(coach.available_days, coach.availability)
