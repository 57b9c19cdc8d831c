# app/services/inbox_service.py
import uuid
from datetime import datetime

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.calendar import (
    ensure_utc,
    parse_local_date,
    parse_week_start_string,
    resolve_timezone,
    week_end,
)
from app.core.errors import FieldValidationError, InvalidDateError
from app.core.periods import Period, compute_current_period
from app.models.check_in import CheckIn, REVIEWED
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.repositories.message_repo import MessageRepository
from app.schemas.inbox import InboxClientRead, InboxCounts, InboxRead, WeekReviewRead
from app.schemas.message import MessageRead
from app.services.check_in_service import CheckInService
from app.services.schedule_service import ScheduleService, to_period_read


def classify(latest: CheckIn | None, period: Period) -> str:
    """
    Inbox status for a client:

      - "missing"  : no check-in inside the current period
      - "reviewed" : latest check-in is in the period and reviewed
      - "new"      : latest check-in is in the period, awaiting review
    """
    if latest is None or not period.contains(parse_local_date(latest.local_date)):
        return "missing"
    if latest.status == REVIEWED:
        return "reviewed"
    return "new"


def weight_delta(latest: CheckIn | None, previous: CheckIn | None) -> float | None:
    if latest is None or previous is None:
        return None
    if latest.weight is None or previous.weight is None:
        return None
    return round(latest.weight - previous.weight, 1)


class InboxService:
    """
    Coach inbox aggregation.

    For every client on the roster:
      - resolve the client's active period (coach default or override,
        in the client's timezone)
      - look at the two most recent non-deleted check-ins
      - flag client messages during the period the coach has not sent
    """

    def __init__(
        self,
        link_repo: CoachClientRepository,
        check_in_repo: CheckInRepository,
        message_repo: MessageRepository,
        schedule_service: ScheduleService,
        check_in_service: CheckInService,
    ):
        self.link_repo = link_repo
        self.check_in_repo = check_in_repo
        self.message_repo = message_repo
        self.schedule_service = schedule_service
        self.check_in_service = check_in_service

    def get_inbox(self, session: Session, coach: User, now: datetime) -> InboxRead:
        rows: list[InboxClientRead] = []
        counts = InboxCounts()

        for link, client in self.link_repo.list_for_coach(session, coach.id):
            days = self.schedule_service.days_for_link(coach, link)
            tz = resolve_timezone(client.timezone)
            period = compute_current_period(days, now, tz)

            recent = self.check_in_repo.list_active_for_client(session, client.id, limit=2)
            latest = recent[0] if recent else None
            previous = recent[1] if len(recent) > 1 else None

            inbox_status = classify(latest, period)
            setattr(counts, inbox_status, getattr(counts, inbox_status) + 1)

            start, end = period.utc_bounds(tz)
            has_client_message = self.message_repo.has_message_not_from(
                session, client.id, coach.id, start, end
            )

            rows.append(
                InboxClientRead(
                    id=client.id,
                    name=client.name,
                    email=client.email,
                    status=inbox_status,
                    period=to_period_read(period),
                    has_client_message=has_client_message,
                    check_in_id=latest.id if latest else None,
                    weight=latest.weight if latest else None,
                    weight_change=weight_delta(latest, previous),
                    diet_compliance=latest.diet_compliance if latest else None,
                    energy_level=latest.energy_level if latest else None,
                    submitted_at=ensure_utc(latest.submitted_at) if latest else None,
                )
            )

        return InboxRead(clients=rows, counts=counts)

    def get_week_review(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
        week_start_date: str,
    ) -> WeekReviewRead:
        """
        All check-ins and messages of one client week (legacy week_of grouping).
        """
        if self.link_repo.get_pair(session, coach.id, client_id) is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not assigned to this client",
            )

        try:
            monday = parse_week_start_string(week_start_date)
        except InvalidDateError:
            raise FieldValidationError.single("week_start_date", "Invalid date")

        check_ins = self.check_in_repo.list_for_week(session, client_id, monday)
        messages = self.message_repo.list_thread(session, client_id, monday)

        return WeekReviewRead(
            client_id=client_id,
            week_of=monday.date(),
            week_end=week_end(monday),
            check_ins=[self.check_in_service.build_detail(session, c) for c in check_ins],
            messages=[
                MessageRead(
                    id=m.id,
                    client_id=m.client_id,
                    sender_id=m.sender_id,
                    week_of=ensure_utc(m.week_of),
                    body=m.body,
                    created_at=ensure_utc(m.created_at),
                )
                for m in messages
            ],
        )
