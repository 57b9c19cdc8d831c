import uuid
from datetime import date

from sqlmodel import Session, select

from app.models.notification_log import NotificationLog


class NotificationLogRepository:
    """
    Data access layer for sent-notification records.
    """

    def reminder_exists(
        self,
        session: Session,
        client_id: uuid.UUID,
        window_start_date: date,
        stage: str,
    ) -> bool:
        stmt = select(NotificationLog.id).where(
            NotificationLog.client_id == client_id,
            NotificationLog.window_start_date == window_start_date,
            NotificationLog.stage == stage,
        )
        return session.exec(stmt).first() is not None

    def reserve(self, session: Session, log: NotificationLog) -> NotificationLog:
        """
        Insert without committing. A duplicate reminder fails here, on the
        unique key, before any email goes out; the caller commits after sending.
        """
        session.add(log)
        session.flush()
        return log

    def create(self, session: Session, log: NotificationLog) -> NotificationLog:
        session.add(log)
        session.commit()
        session.refresh(log)
        return log
