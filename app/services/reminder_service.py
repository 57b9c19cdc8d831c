# app/services/reminder_service.py
import logging
import uuid
from datetime import datetime

from sqlmodel import Session

from app.models.notification_log import OVERDUE
from app.repositories.coach_client_repo import CoachClientRepository
from app.services.notification_service import NotificationService
from app.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


class ReminderService:
    """
    Batch job behind the cron endpoint.

    Every client is considered once, on the cadence of their oldest coach
    link (the one their own dashboard shows). A client whose current
    period started before today without a check-in gets one OVERDUE
    reminder per period.
    """

    def __init__(
        self,
        link_repo: CoachClientRepository,
        schedule_service: ScheduleService,
        notification_service: NotificationService,
    ):
        self.link_repo = link_repo
        self.schedule_service = schedule_service
        self.notification_service = notification_service

    def send_overdue_reminders(self, session: Session, now: datetime) -> dict[str, int]:
        sent = 0
        skipped = 0
        seen: set[uuid.UUID] = set()

        # Links come oldest first
        for link, client, coach in self.link_repo.list_all_with_users(session):
            if client.id in seen:
                continue
            seen.add(client.id)

            if not client.email_check_in_reminders:
                skipped += 1
                continue

            days = self.schedule_service.days_for_link(coach, link)
            period_status = self.schedule_service.period_status(session, client, days, now)
            if not period_status.overdue:
                skipped += 1
                continue

            delivered = self.notification_service.notify_checkin_reminder(
                session,
                client,
                window_start_date=period_status.period.period_start,
                period_label=period_status.period.label,
                stage=OVERDUE,
            )
            if delivered:
                sent += 1
            else:
                skipped += 1

        logger.info("Check-in reminders: sent=%d skipped=%d", sent, skipped)
        return {"sent": sent, "skipped": skipped}
