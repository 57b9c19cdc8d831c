# app/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    BecomeCoachRequest,
    CoachCodeRead,
    NotificationPreferencesUpdate,
    RoleSwitch,
    ScheduleUpdate,
    UserRead,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    The profile row is auto-created on the first authenticated request.
    """
    return service.get_me(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update name and/or timezone (IANA name, e.g. "America/New_York").
    """
    return service.update_me(session, current_user, payload)


@router.post("/me/role", response_model=UserRead)
def switch_role(
    payload: RoleSwitch,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Switch the active mode between COACH and CLIENT."""
    return service.switch_role(session, current_user, payload)


@router.post("/me/become-coach", response_model=UserRead)
def become_coach(
    payload: BecomeCoachRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Unlock coach capability with the access code."""
    return service.become_coach(session, current_user, payload)


@router.get("/me/coach-code", response_model=CoachCodeRead)
def get_coach_code(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """Return (creating if needed) the code clients use to connect."""
    return CoachCodeRead(coach_code=service.ensure_coach_code(session, current_user))


@router.put("/me/schedule", response_model=UserRead)
def update_schedule(
    payload: ScheduleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the coach's default check-in days (0=Sun..6=Sat).

    Per-client overrides are managed under /coach/clients/{client_id}/schedule.
    """
    return service.update_schedule(session, current_user, payload)


@router.patch("/me/notifications", response_model=UserRead)
def update_notifications(
    payload: NotificationPreferencesUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.update_notifications(session, current_user, payload)
