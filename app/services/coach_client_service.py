# app/services/coach_client_service.py
import uuid
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.calendar import ensure_utc
from app.models.coach_client import CoachClient
from app.models.user import User
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.repositories.user_repo import UserRepository
from app.schemas.check_in import PeriodStatusRead
from app.schemas.coach_client import (
    ClientProfileRead,
    ClientScheduleUpdate,
    CoachNotesUpdate,
    ConnectionRead,
    ConnectRequest,
    LinkRead,
)
from app.services.check_in_service import CheckInService
from app.services.schedule_service import ScheduleService

RECENT_CHECK_INS = 4


class CoachClientService:
    """
    Business logic for coach/client links.

    Responsibilities:
      - clients redeem coach codes, list and leave their coaches
      - coaches manage their roster (remove, schedule override, notes)
        and open a client's profile
    """

    def __init__(
        self,
        repo: CoachClientRepository,
        user_repo: UserRepository,
        schedule_service: ScheduleService,
        check_in_service: CheckInService,
        message_repo: MessageRepository,
    ):
        self.repo = repo
        self.user_repo = user_repo
        self.schedule_service = schedule_service
        self.check_in_service = check_in_service
        self.message_repo = message_repo

    # ----- Client side -----

    def connect(
        self,
        session: Session,
        client: User,
        payload: ConnectRequest,
    ) -> ConnectionRead:
        coach = self.user_repo.get_by_coach_code(session, payload.coach_code)
        if not coach or not coach.is_coach:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Coach code not found. Please check and try again.",
            )
        if coach.id == client.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot connect to yourself.",
            )
        if self.repo.get_pair(session, coach.id, client.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You're already connected to this coach.",
            )

        try:
            link = self.repo.create(session, CoachClient(coach_id=coach.id, client_id=client.id))
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You're already connected to this coach.",
            )
        return self._connection_read(link, coach)

    def list_my_coaches(self, session: Session, client: User) -> list[ConnectionRead]:
        return [
            self._connection_read(link, coach)
            for link, coach in self.repo.list_for_client(session, client.id)
        ]

    def leave(self, session: Session, client: User, link_id: uuid.UUID) -> None:
        link = self.repo.get_by_id(session, link_id)
        if not link or link.client_id != client.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Coach relationship not found",
            )
        self.repo.delete(session, link)

    # ----- Coach side -----

    def get_profile(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
    ) -> ClientProfileRead:
        link = self._require_link(session, coach, client_id)
        recent = self.check_in_service.list_for_client(
            session, coach, client_id, limit=RECENT_CHECK_INS
        )

        weight_change = None
        if len(recent) > 1 and recent[0].weight is not None and recent[1].weight is not None:
            weight_change = round(recent[0].weight - recent[1].weight, 1)

        last_message_at = self.message_repo.last_created_at(session, client_id)
        return ClientProfileRead(
            **self._link_read(coach, link).model_dump(),
            recent_check_ins=recent,
            weight_change=weight_change,
            last_message_at=ensure_utc(last_message_at) if last_message_at else None,
        )

    def remove_client(self, session: Session, coach: User, client_id: uuid.UUID) -> None:
        link = self.repo.get_pair(session, coach.id, client_id)
        if not link:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found in your roster",
            )
        self.repo.delete(session, link)

    def set_schedule_override(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
        payload: ClientScheduleUpdate,
    ) -> LinkRead:
        link = self._require_link(session, coach, client_id)
        link.check_in_days_of_week_override = list(payload.check_in_days_of_week)
        return self._link_read(coach, self.repo.update(session, link))

    def save_notes(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
        payload: CoachNotesUpdate,
    ) -> LinkRead:
        link = self._require_link(session, coach, client_id)
        link.coach_notes = payload.notes
        return self._link_read(coach, self.repo.update(session, link))

    def client_period_status(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
        now: datetime,
    ) -> PeriodStatusRead:
        link = self._require_link(session, coach, client_id)
        client = self.user_repo.get_by_id(session, client_id)
        if client is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client not found",
            )
        days = self.schedule_service.days_for_link(coach, link)
        return self.schedule_service.period_status(session, client, days, now)

    # ----- helpers -----

    def _require_link(self, session: Session, coach: User, client_id: uuid.UUID) -> CoachClient:
        link = self.repo.get_pair(session, coach.id, client_id)
        if not link:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not assigned to this client",
            )
        return link

    def _connection_read(self, link: CoachClient, coach: User) -> ConnectionRead:
        return ConnectionRead(
            id=link.id,
            coach_id=coach.id,
            coach_name=coach.name,
            coach_email=coach.email,
            created_at=ensure_utc(link.created_at),
        )

    def _link_read(self, coach: User, link: CoachClient) -> LinkRead:
        return LinkRead(
            id=link.id,
            coach_id=link.coach_id,
            client_id=link.client_id,
            check_in_days_of_week_override=list(link.check_in_days_of_week_override or []),
            effective_check_in_days=sorted(self.schedule_service.days_for_link(coach, link)),
            coach_notes=link.coach_notes,
            created_at=ensure_utc(link.created_at),
        )
