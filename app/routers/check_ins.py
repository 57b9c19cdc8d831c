# app/routers/check_ins.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth, require_client, require_coach
from app.core.clock import Clock, get_clock
from app.database import get_session
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.schemas.check_in import (
    CheckInCreate,
    CheckInDetailRead,
    CheckInRead,
    CheckInSubmitResult,
    PeriodStatusRead,
    TodayStatusRead,
    WeightPointRead,
    WeightRange,
)
from app.services.check_in_service import CheckInService
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/check-ins", tags=["Check-ins"])

check_in_repo = CheckInRepository()
link_repo = CoachClientRepository()
schedule_service = ScheduleService(link_repo, check_in_repo)
service = CheckInService(check_in_repo, link_repo, schedule_service)


# -------- Client endpoints --------


@router.post("", response_model=CheckInSubmitResult)
def submit_check_in(
    payload: CheckInCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
    clock: Clock = Depends(get_clock),
):
    """
    Submit a check-in for today (client's local date).

    If today already has a check-in and no `resolution` is given, the
    response carries `conflict` and nothing is written. Resubmit with
    `resolution="overwrite"` to replace it or `"add_new"` to keep both.
    """
    return service.submit(session, current_user, payload, clock)


@router.get("/me", response_model=list[CheckInRead])
def list_my_check_ins(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
):
    """Own check-in history, newest first (soft-deleted rows hidden)."""
    return service.list_mine(session, current_user)


@router.get("/today", response_model=TodayStatusRead)
def today_status(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
    clock: Clock = Depends(get_clock),
):
    """Whether the client already checked in on their current local date."""
    return service.today_status(session, current_user, clock)


@router.get("/period", response_model=PeriodStatusRead)
def my_period_status(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
    clock: Clock = Depends(get_clock),
):
    """Current check-in period with due / overdue flags."""
    return service.my_period_status(session, current_user, clock)


@router.delete("/{check_in_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_check_in(
    check_in_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_client),
    clock: Clock = Depends(get_clock),
):
    """Soft delete; a later submission on the same day revives the row."""
    service.delete(session, current_user, check_in_id, clock)


# -------- Shared / coach endpoints --------


@router.get("/weight-history/{client_id}", response_model=list[WeightPointRead])
def weight_history(
    client_id: uuid.UUID,
    weight_range: WeightRange = Query(default="all", alias="range"),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    clock: Clock = Depends(get_clock),
):
    """Weight series, oldest first. `range` is one of 30d, 90d, all."""
    return service.weight_history(session, current_user, client_id, weight_range, clock)


@router.get("/{check_in_id}", response_model=CheckInDetailRead)
def get_check_in(
    check_in_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Check-in detail with short-lived photo URLs (owner or linked coach)."""
    return service.get_detail(session, current_user, check_in_id)


@router.post("/{check_in_id}/review", response_model=CheckInRead)
def mark_reviewed(
    check_in_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_coach),
):
    """Mark a client's check-in as reviewed (one-way)."""
    return service.mark_reviewed(session, current_user, check_in_id)
