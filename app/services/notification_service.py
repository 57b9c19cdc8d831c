# app/services/notification_service.py
import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core import email_client
from app.core.config import get_settings
from app.core.email_templates import checkin_reminder_email, meal_plan_updated_email
from app.models.notification_log import (
    CHECKIN_REMINDER,
    MEAL_PLAN_UPDATE,
    OVERDUE,
    NotificationLog,
)
from app.models.user import User
from app.repositories.notification_repo import NotificationLogRepository

logger = logging.getLogger(__name__)

settings = get_settings()


class NotificationService:
    """
    Fire-and-forget email notifications.

    Every public method returns True when an email went out and False
    otherwise. Failures are logged and never raised, so the action that
    triggered the notification always completes.
    """

    def __init__(self, repo: NotificationLogRepository):
        self.repo = repo

    def notify_checkin_reminder(
        self,
        session: Session,
        client: User,
        window_start_date: date,
        period_label: str,
        stage: str = OVERDUE,
    ) -> bool:
        if not client.email_check_in_reminders:
            return False

        try:
            if self.repo.reminder_exists(session, client.id, window_start_date, stage):
                return False

            self.repo.reserve(
                session,
                NotificationLog(
                    type=CHECKIN_REMINDER,
                    client_id=client.id,
                    window_start_date=window_start_date,
                    stage=stage,
                ),
            )

            due_label = "overdue" if stage == OVERDUE else "due soon"
            email = checkin_reminder_email(
                client_name=client.name or "there",
                period_label=period_label,
                due_label=due_label,
                submit_url=f"{settings.APP_BASE_URL}/client/check-in",
            )
            email_client.send_email(client.email, email.subject, email.text, email.html)
            session.commit()
            return True
        except IntegrityError:
            # Another run recorded this reminder first
            session.rollback()
            return False
        except Exception:
            session.rollback()
            logger.exception("Failed to send check-in reminder email to client %s", client.id)
            return False

    def notify_meal_plan_update(
        self,
        session: Session,
        client: User,
        week_label: str,
    ) -> bool:
        if not client.email_meal_plan_updates:
            return False

        try:
            email = meal_plan_updated_email(
                client_name=client.name or "there",
                week_label=week_label,
                view_url=f"{settings.APP_BASE_URL}/client",
            )
            email_client.send_email(client.email, email.subject, email.text, email.html)
            self.repo.create(
                session,
                NotificationLog(type=MEAL_PLAN_UPDATE, client_id=client.id),
            )
            return True
        except Exception:
            session.rollback()
            logger.exception("Failed to send meal plan update email to client %s", client.id)
            return False
