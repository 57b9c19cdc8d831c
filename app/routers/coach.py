# app/routers/coach.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_coach
from app.core.clock import Clock, get_clock
from app.database import get_session
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.check_in import CheckInRead, PeriodStatusRead
from app.schemas.coach_client import (
    ClientProfileRead,
    ClientScheduleUpdate,
    CoachNotesUpdate,
    LinkRead,
)
from app.schemas.inbox import InboxRead, WeekReviewRead
from app.services.check_in_service import CheckInService
from app.services.coach_client_service import CoachClientService
from app.services.inbox_service import InboxService
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/coach", tags=["Coach"])

check_in_repo = CheckInRepository()
link_repo = CoachClientRepository()
message_repo = MessageRepository()
user_repo = UserRepository()
schedule_service = ScheduleService(link_repo, check_in_repo)
check_in_service = CheckInService(check_in_repo, link_repo, schedule_service)
inbox_service = InboxService(
    link_repo, check_in_repo, message_repo, schedule_service, check_in_service
)
link_service = CoachClientService(
    link_repo, user_repo, schedule_service, check_in_service, message_repo
)


@router.get("/inbox", response_model=InboxRead)
def get_inbox(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
    clock: Clock = Depends(get_clock),
):
    """
    Roster status for the active period of each client.

    status:
      - new      : check-in in the period awaiting review
      - reviewed : check-in in the period already reviewed
      - missing  : nothing submitted in the period yet
    """
    return inbox_service.get_inbox(session, current_user, clock.now())


@router.get("/clients/{client_id}", response_model=ClientProfileRead)
def get_client_profile(
    client_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Link settings plus the latest check-ins, weight change and last message time."""
    return link_service.get_profile(session, current_user, client_id)


@router.get("/clients/{client_id}/check-ins", response_model=list[CheckInRead])
def list_client_check_ins(
    client_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Full check-in history of a roster client, newest first."""
    return check_in_service.list_for_client(session, current_user, client_id)


@router.delete("/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_client(
    client_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Drop a client from the roster. Their history is kept."""
    link_service.remove_client(session, current_user, client_id)


@router.put("/clients/{client_id}/schedule", response_model=LinkRead)
def set_client_schedule(
    client_id: uuid.UUID,
    payload: ClientScheduleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Per-client check-in days; an empty list resets to the coach default."""
    return link_service.set_schedule_override(session, current_user, client_id, payload)


@router.put("/clients/{client_id}/notes", response_model=LinkRead)
def save_client_notes(
    client_id: uuid.UUID,
    payload: CoachNotesUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    return link_service.save_notes(session, current_user, client_id, payload)


@router.get("/clients/{client_id}/period", response_model=PeriodStatusRead)
def get_client_period(
    client_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
    clock: Clock = Depends(get_clock),
):
    return link_service.client_period_status(session, current_user, client_id, clock.now())


@router.get("/clients/{client_id}/weeks/{week_start_date}", response_model=WeekReviewRead)
def get_week_review(
    client_id: uuid.UUID,
    week_start_date: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Check-ins and messages of the week containing `week_start_date`."""
    return inbox_service.get_week_review(session, current_user, client_id, week_start_date)
