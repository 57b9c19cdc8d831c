import uuid
from datetime import datetime

from sqlmodel import Session, select

from app.models.message import Message


class MessageRepository:
    """
    Data access layer for weekly message threads.
    """

    def list_thread(
        self,
        session: Session,
        client_id: uuid.UUID,
        week_of: datetime,
    ) -> list[Message]:
        stmt = (
            select(Message)
            .where(Message.client_id == client_id, Message.week_of == week_of)
            .order_by(Message.created_at.asc())
        )
        return list(session.exec(stmt).all())

    def has_message_not_from(
        self,
        session: Session,
        client_id: uuid.UUID,
        sender_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> bool:
        """
        True if any message on the client's threads created in [start, end)
        was sent by someone other than `sender_id`.
        """
        stmt = select(Message.id).where(
            Message.client_id == client_id,
            Message.sender_id != sender_id,
            Message.created_at >= start,
            Message.created_at < end,
        )
        return session.exec(stmt).first() is not None

    def last_created_at(self, session: Session, client_id: uuid.UUID) -> datetime | None:
        """Time of the newest message on any of the client's threads."""
        stmt = (
            select(Message.created_at)
            .where(Message.client_id == client_id)
            .order_by(Message.created_at.desc())
        )
        return session.exec(stmt).first()

    def create(self, session: Session, message: Message) -> Message:
        session.add(message)
        session.commit()
        session.refresh(message)
        return message
