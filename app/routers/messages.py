# app/routers/messages.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.core.clock import Clock, get_clock
from app.database import get_session
from app.models.user import User
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.schemas.message import MessageCreate, MessageRead
from app.services.message_service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])

service = MessageService(MessageRepository(), CoachClientRepository())


@router.post("", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: MessageCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    clock: Clock = Depends(get_clock),
):
    return service.send(session, current_user, payload, clock)


@router.get("/{client_id}/{week_start_date}", response_model=list[MessageRead])
def list_thread(
    client_id: uuid.UUID,
    week_start_date: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Messages of one client week, oldest first."""
    return service.list_thread(session, current_user, client_id, week_start_date)
