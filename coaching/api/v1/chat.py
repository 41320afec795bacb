"""
Chat gate endpoint (consumed by the chat service before sending a message)
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coaching.api.deps import get_db
from coaching.application.chat_gate import check_chat_allowed


router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.get("/gate")
def chat_gate(coach_id: str, player_id: str, db: Session = Depends(get_db)):
    return asdict(check_chat_allowed(db, coach_id, player_id))
