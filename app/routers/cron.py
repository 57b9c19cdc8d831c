# app/routers/cron.py
import secrets

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_settings
from app.database import get_session
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.notification_repo import NotificationLogRepository
from app.services.notification_service import NotificationService
from app.services.reminder_service import ReminderService
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/cron", tags=["Cron"])

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)

link_repo = CoachClientRepository()
service = ReminderService(
    link_repo,
    ScheduleService(link_repo, CheckInRepository()),
    NotificationService(NotificationLogRepository()),
)


def require_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Only the external scheduler, holding CRON_SECRET, may trigger batches."""
    expected = settings.CRON_SECRET
    if (
        not expected
        or credentials is None
        or not secrets.compare_digest(credentials.credentials, expected)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.post("/checkin-reminders", dependencies=[Depends(require_cron_secret)])
def send_checkin_reminders(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Email clients whose current period has no check-in yet.

    Safe to rerun: each client gets at most one reminder per period.
    """
    return service.send_overdue_reminders(session, clock.now())
