"""
Calendar API endpoints
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coaching.api.deps import get_db
from coaching.application.calendar import FILTER_ALL, CalendarAggregator


router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])


class CalendarEventResponse(BaseModel):
    id: str
    title: str
    date: str
    type: str
    kind: str
    description: str
    player_id: str
    player_name: str
    coach_id: str
    coach_name: str
    status: str
    start_date: str | None = None
    end_date: str | None = None


class TimeSlot(BaseModel):
    start: str
    end: str


@router.get("/", response_model=list[CalendarEventResponse])
def calendar_view(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    coach_id: str | None = None,
    filter: str = FILTER_ALL,
    player: str | None = None,
    player_id: str | None = None,
    db: Session = Depends(get_db),
):
    """Month view; without coach_id spans every coach"""
    events = CalendarAggregator(db).build_view(
        coach_id, month, year, filter=filter, player_filter=player, player_id=player_id,
    )
    return [e.to_dict() for e in events]


@router.get("/coaches/{coach_id}/players", response_model=list[str])
def calendar_player_names(coach_id: str, db: Session = Depends(get_db)):
    """Player names for the calendar filter"""
    return CalendarAggregator(db).player_names(coach_id)


@router.get("/coaches/{coach_id}/availability", response_model=dict[str, list[TimeSlot]])
def coach_availability(coach_id: str, db: Session = Depends(get_db)):
    return CalendarAggregator(db).coach_schedule(coach_id)
