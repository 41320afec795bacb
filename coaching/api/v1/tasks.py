"""
Task API endpoints
"""
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from coaching.api.deps import Actor, actor_id, get_actor, get_clock, get_db
from coaching.application.tasks import (
    CreateTaskUseCase, GetTaskUseCase, ListTasksUseCase, UpdateTaskUseCase,
)
from coaching.domain.clock import Clock
from coaching.domain.task import SubmissionStatus, TaskStatus


router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


# === Request/Response models ===

class SubmissionPayload(BaseModel):
    status: SubmissionStatus = SubmissionStatus.NOT_SUBMITTED
    text_response: str | None = None
    media_urls: list[str] = Field(default_factory=list)
    submitted_at: datetime | None = None


class CreateTaskRequest(BaseModel):
    coach_id: str
    player_id: str
    subscription_id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    # ISO-8601 strings; parsed by the engine (date-only means midnight)
    start_date: str
    due_date: str
    submission: SubmissionPayload | None = None


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    start_date: str | None = None
    due_date: str | None = None
    submission: SubmissionPayload | None = None
    # immutable; accepted only to reject changes explicitly
    coach_id: str | None = None
    player_id: str | None = None
    subscription_id: str | None = None


class TaskResponse(BaseModel):
    id: str
    coach_id: str
    player_id: str
    subscription_id: str
    title: str
    description: str
    status: str
    start_date: datetime
    due_date: datetime
    submission: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    player_name: str
    coach_name: str
    is_overdue: bool


def _submission(payload: SubmissionPayload | None) -> dict | None:
    if payload is None:
        return None
    return payload.model_dump(mode="json", exclude_unset=True)


# === Endpoints ===

@router.post("/", response_model=TaskResponse, status_code=201)
def create_task(
    req: CreateTaskRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor: Actor | None = Depends(get_actor),
):
    """Create a task inside an active subscription"""
    task = CreateTaskUseCase(db, clock).execute(
        coach_id=req.coach_id,
        player_id=req.player_id,
        subscription_id=req.subscription_id,
        title=req.title,
        description=req.description,
        start_date=req.start_date,
        due_date=req.due_date,
        status=req.status.value,
        submission=_submission(req.submission),
        actor_id=actor_id(actor),
    )
    return GetTaskUseCase(db, clock).execute(task.id)


@router.get("/", response_model=list[TaskResponse])
def list_tasks(
    coach_id: str | None = None,
    player_id: str | None = None,
    status: str | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return ListTasksUseCase(db, clock).execute(coach_id=coach_id, player_id=player_id, status=status)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return GetTaskUseCase(db, clock).execute(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    req: UpdateTaskRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    actor: Actor | None = Depends(get_actor),
):
    """Partial update; date changes are re-validated"""
    changes = req.model_dump(exclude_unset=True, exclude={"submission", "status"})
    if "status" in req.model_fields_set:
        changes["status"] = req.status.value if req.status is not None else None
    if "submission" in req.model_fields_set:
        changes["submission"] = _submission(req.submission)
    UpdateTaskUseCase(db, clock).execute(task_id, actor_id=actor_id(actor), **changes)
    return GetTaskUseCase(db, clock).execute(task_id)
