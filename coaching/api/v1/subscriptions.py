"""
Subscription API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coaching.api.deps import Actor, actor_id, get_actor, get_clock, get_db
from coaching.application.subscriptions import (
    CreateSubscriptionUseCase, GetSubscriptionUseCase, ListSubscriptionsUseCase,
    SubscriptionLifecycle, TransitionSubscriptionUseCase, UpdateSubscriptionDatesUseCase,
    compute_status_breakdown, get_coach_players,
)
from coaching.domain.clock import Clock
from coaching.domain.subscription import SubscriptionStatus


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class CreateSubscriptionRequest(BaseModel):
    player_id: str
    coach_id: str
    start_date: date
    end_date: date


class UpdateSubscriptionRequest(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    player_id: str | None = None
    coach_id: str | None = None


class TransitionRequest(BaseModel):
    status: SubscriptionStatus


class SubscriptionResponse(BaseModel):
    id: str
    player_id: str
    coach_id: str
    status: str
    start_date: date
    end_date: date
    created_at: datetime | None = None
    updated_at: datetime | None = None
    player_name: str | None = None
    player_email: str | None = None
    coach_name: str | None = None
    coach_email: str | None = None


class CoachPlayerResponse(BaseModel):
    id: str
    name: str
    email: str


# === Endpoints ===

@router.post("/", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    req: CreateSubscriptionRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor: Actor | None = Depends(get_actor),
):
    """Player-initiated subscribe request (created as pending)"""
    sub = CreateSubscriptionUseCase(db, clock).execute(
        player_id=req.player_id,
        coach_id=req.coach_id,
        start_date=req.start_date,
        end_date=req.end_date,
        actor_id=actor_id(actor),
    )
    return GetSubscriptionUseCase(db).execute(sub.id)


@router.get("/", response_model=list[SubscriptionResponse])
def list_subscriptions(
    coach_id: str | None = None,
    player_id: str | None = None,
    status: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Subscriptions list (expired ones are stopped first)"""
    return ListSubscriptionsUseCase(db, clock).execute(
        coach_id=coach_id, player_id=player_id, status=status, search=search,
    )


@router.post("/expire-check")
def expire_check(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Run the expiration sweep on demand"""
    expired = SubscriptionLifecycle(db, clock).sweep_expirations()
    return {
        "success": True,
        "message": "Subscription expiration check completed",
        "expired": expired,
    }


@router.get("/stats")
def subscription_stats(coach_id: str | None = None, db: Session = Depends(get_db)):
    """Subscription count per status"""
    return compute_status_breakdown(db, coach_id=coach_id)


@router.get("/coaches/{coach_id}/players", response_model=list[CoachPlayerResponse])
def coach_players(coach_id: str, db: Session = Depends(get_db)):
    """Players with an active subscription to the coach"""
    return get_coach_players(db, coach_id)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(subscription_id: str, db: Session = Depends(get_db)):
    return GetSubscriptionUseCase(db).execute(subscription_id)


@router.patch("/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    req: UpdateSubscriptionRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor: Actor | None = Depends(get_actor),
):
    """Edit subscription dates (tasks must still fit)"""
    UpdateSubscriptionDatesUseCase(db, clock).execute(
        subscription_id, actor_id=actor_id(actor), **req.model_dump(exclude_none=True),
    )
    return GetSubscriptionUseCase(db).execute(subscription_id)


@router.post("/{subscription_id}/transition", response_model=SubscriptionResponse)
def transition_subscription(
    subscription_id: str,
    req: TransitionRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor: Actor | None = Depends(get_actor),
):
    """Approve / reject / stop / reactivate"""
    TransitionSubscriptionUseCase(db, clock).execute(
        subscription_id, req.status, actor_id=actor_id(actor),
    )
    return GetSubscriptionUseCase(db).execute(subscription_id)
