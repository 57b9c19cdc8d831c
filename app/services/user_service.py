# app/services/user_service.py
import secrets

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.auth import generate_coach_code
from app.core.config import get_settings
from app.models.user import COACH, User
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    BecomeCoachRequest,
    NotificationPreferencesUpdate,
    RoleSwitch,
    ScheduleUpdate,
    UserUpdate,
)

settings = get_settings()

MAX_CODE_ATTEMPTS = 10


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile edits (name, timezone)
      - role switching between held capabilities
      - coach onboarding (access code, coach code)
      - coach default schedule and email preferences
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        if payload.name is not None:
            current_user.name = payload.name
        if payload.timezone is not None:
            current_user.timezone = payload.timezone

        return self.repo.update(session, current_user)

    def switch_role(
        self,
        session: Session,
        current_user: User,
        payload: RoleSwitch,
    ) -> User:
        """
        Change the active mode.

        Raises:
            HTTPException(403): if the user lacks that capability.
        """
        if not current_user.can_act_as(payload.role):
            label = "coach" if payload.role == COACH else "client"
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You don't have {label} access",
            )
        current_user.active_role = payload.role
        return self.repo.update(session, current_user)

    def become_coach(
        self,
        session: Session,
        current_user: User,
        payload: BecomeCoachRequest,
    ) -> User:
        """
        Grant coach capability with the shared access code.

        The user keeps client capability and switches to acting as coach.
        """
        valid_code = settings.COACH_ACCESS_CODE
        if not valid_code:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coach registration is not available at this time.",
            )
        if not secrets.compare_digest(payload.access_code.strip(), valid_code.strip()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid access code. Please check with your administrator.",
            )
        if current_user.is_coach:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You already have coach access.",
            )

        current_user.is_coach = True
        current_user.is_client = True
        current_user.active_role = COACH
        if not current_user.coach_code:
            current_user.coach_code = self._unique_coach_code(session)
        return self.repo.update(session, current_user)

    def ensure_coach_code(self, session: Session, current_user: User) -> str:
        self._require_coach_capability(current_user)
        if current_user.coach_code:
            return current_user.coach_code
        current_user.coach_code = self._unique_coach_code(session)
        self.repo.update(session, current_user)
        return current_user.coach_code

    def update_schedule(
        self,
        session: Session,
        current_user: User,
        payload: ScheduleUpdate,
    ) -> User:
        """Set the coach's default check-in weekdays."""
        self._require_coach_capability(current_user)
        current_user.check_in_days_of_week = list(payload.check_in_days_of_week)
        return self.repo.update(session, current_user)

    def update_notifications(
        self,
        session: Session,
        current_user: User,
        payload: NotificationPreferencesUpdate,
    ) -> User:
        if payload.email_check_in_reminders is not None:
            current_user.email_check_in_reminders = payload.email_check_in_reminders
        if payload.email_meal_plan_updates is not None:
            current_user.email_meal_plan_updates = payload.email_meal_plan_updates
        return self.repo.update(session, current_user)

    # ----- helpers -----

    def _require_coach_capability(self, user: User) -> None:
        if not user.is_coach:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Coach access required",
            )

    def _unique_coach_code(self, session: Session) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_coach_code()
            if self.repo.get_by_coach_code(session, code) is None:
                return code
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not allocate a coach code, please retry",
        )
