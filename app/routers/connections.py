# app/routers/connections.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_client
from app.database import get_session
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.coach_client import ConnectionRead, ConnectRequest
from app.services.check_in_service import CheckInService
from app.services.coach_client_service import CoachClientService
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/connections", tags=["Connections"])

check_in_repo = CheckInRepository()
link_repo = CoachClientRepository()
schedule_service = ScheduleService(link_repo, check_in_repo)
service = CoachClientService(
    link_repo,
    UserRepository(),
    schedule_service,
    CheckInService(check_in_repo, link_repo, schedule_service),
    MessageRepository(),
)


@router.post("", response_model=ConnectionRead, status_code=status.HTTP_201_CREATED)
def connect_to_coach(
    payload: ConnectRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
):
    """Redeem a coach code (case-insensitive)."""
    return service.connect(session, current_user, payload)


@router.get("", response_model=list[ConnectionRead])
def list_my_coaches(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
):
    return service.list_my_coaches(session, current_user)


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def leave_coach(
    link_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
):
    """Disconnect from a coach. Check-ins and messages are kept."""
    service.leave(session, current_user, link_id)
