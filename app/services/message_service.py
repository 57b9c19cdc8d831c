# app/services/message_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.calendar import ensure_utc, parse_week_start_string
from app.core.clock import Clock
from app.core.errors import FieldValidationError, InvalidDateError
from app.models.message import Message
from app.models.user import CLIENT, COACH, User
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.schemas.message import MessageCreate, MessageRead


class MessageService:
    """
    Weekly coach/client message threads.

    Rules:
      - a client posts only on their own thread and needs a coach
      - a coach posts only on threads of linked clients
    """

    def __init__(self, repo: MessageRepository, link_repo: CoachClientRepository):
        self.repo = repo
        self.link_repo = link_repo

    def send(
        self,
        session: Session,
        user: User,
        payload: MessageCreate,
        clock: Clock,
    ) -> MessageRead:
        week_of = self._parse_week(payload.week_start_date)

        if user.active_role == CLIENT:
            if user.id != payload.client_id:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not authorized",
                )
            if not self.link_repo.has_any_coach(session, user.id):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Connect to a coach before sending messages",
                )
        elif user.active_role == COACH:
            self._require_link(session, user, payload.client_id)

        message = Message(
            client_id=payload.client_id,
            sender_id=user.id,
            week_of=week_of,
            body=payload.body,
            created_at=clock.now(),
        )
        return self._to_read(self.repo.create(session, message))

    def list_thread(
        self,
        session: Session,
        user: User,
        client_id: uuid.UUID,
        week_start_date: str,
    ) -> list[MessageRead]:
        week_of = self._parse_week(week_start_date)
        if user.id != client_id:
            self._require_link(session, user, client_id)
        return [self._to_read(m) for m in self.repo.list_thread(session, client_id, week_of)]

    def _parse_week(self, value: str):
        try:
            return parse_week_start_string(value)
        except InvalidDateError:
            raise FieldValidationError.single("week_start_date", "Invalid date")

    def _require_link(self, session: Session, coach: User, client_id: uuid.UUID) -> None:
        if not coach.is_coach or self.link_repo.get_pair(session, coach.id, client_id) is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not assigned to this client",
            )

    def _to_read(self, message: Message) -> MessageRead:
        return MessageRead(
            id=message.id,
            client_id=message.client_id,
            sender_id=message.sender_id,
            week_of=ensure_utc(message.week_of),
            body=message.body,
            created_at=ensure_utc(message.created_at),
        )
