# app/services/schedule_service.py
from datetime import datetime

from sqlmodel import Session

from app.core.calendar import local_date, parse_local_date, resolve_timezone
from app.core.periods import (
    Period,
    check_in_window_status,
    compute_current_period,
    effective_schedule_days,
)
from app.models.coach_client import CoachClient
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.schemas.check_in import PeriodRead, PeriodStatusRead


def to_period_read(period: Period) -> PeriodRead:
    return PeriodRead(
        period_start=period.period_start,
        period_end=period.period_end,
        scheduled_weekdays=sorted(period.scheduled_weekdays),
        label=period.label,
    )


class ScheduleService:
    """
    Resolves check-in cadences and period status.

    Responsibilities:
      - pick the effective weekdays for a coach/client pair
      - compute the client's current period in the client's timezone
      - derive due / overdue flags from the client's check-in dates
    """

    def __init__(
        self,
        link_repo: CoachClientRepository,
        check_in_repo: CheckInRepository,
    ):
        self.link_repo = link_repo
        self.check_in_repo = check_in_repo

    def days_for_link(self, coach: User, link: CoachClient) -> set[int]:
        return effective_schedule_days(
            coach.check_in_days_of_week,
            link.check_in_days_of_week_override,
        )

    def days_for_client(self, session: Session, client: User) -> set[int]:
        """
        Cadence a client sees on their own dashboard.

        With several coaches the first connection decides; with none the
        Monday fallback applies.
        """
        links = self.link_repo.list_for_client(session, client.id)
        if not links:
            return effective_schedule_days([], [])
        link, coach = links[0]
        return self.days_for_link(coach, link)

    def period_status(
        self,
        session: Session,
        client: User,
        days: set[int],
        now: datetime,
    ) -> PeriodStatusRead:
        tz = resolve_timezone(client.timezone)
        period = compute_current_period(days, now, tz)
        today = local_date(now, tz)

        since = min(period.period_start, today).isoformat()
        dates = [
            parse_local_date(value)
            for value in self.check_in_repo.list_local_dates_since(session, client.id, since)
        ]
        window = check_in_window_status(period, today, dates)

        return PeriodStatusRead(
            client_id=client.id,
            timezone=tz.key,
            today=today,
            period=to_period_read(period),
            checked_in_today=window.checked_in_today,
            has_check_in_in_period=window.has_check_in_in_period,
            due_today=window.due_today,
            overdue=window.overdue,
        )
