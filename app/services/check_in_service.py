# app/services/check_in_service.py
import logging
import uuid
from datetime import datetime, time, timedelta, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core import storage_utils
from app.core.calendar import (
    ensure_utc,
    local_date,
    normalize_to_monday,
    parse_local_date,
    parse_week_start_string,
    resolve_timezone,
)
from app.core.clock import Clock
from app.core.errors import FieldValidationError
from app.models.check_in import CheckIn, CheckInPhoto, REVIEWED, SUBMITTED
from app.models.user import User
from app.repositories.check_in_repo import CheckInRepository
from app.repositories.coach_client_repo import CoachClientRepository
from app.schemas.check_in import (
    CheckInCreate,
    CheckInDetailRead,
    CheckInPhotoRead,
    CheckInRead,
    CheckInSubmitResult,
    ConflictRead,
    PeriodStatusRead,
    TodayStatusRead,
    WeightPointRead,
    WeightRange,
)
from app.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

WEIGHT_RANGE_DAYS = {"30d": 30, "90d": 90}

NO_COACH_MESSAGE = (
    "You need to connect to a coach before submitting check-ins. "
    "Go to your dashboard to enter a coach code."
)


class CheckInService:
    """
    Business logic for check-in submission and review.

    Dedup rule: one active check-in per client and local calendar day.

      - empty day                     -> create
      - day taken, no resolution      -> Conflict result, nothing written
      - day taken, "overwrite"        -> update the existing row in place
      - day taken, "add_new"          -> second row for the day
      - only a soft-deleted row       -> revive it (same id)

    Photo replacement and field updates are committed together.
    """

    def __init__(
        self,
        check_in_repo: CheckInRepository,
        link_repo: CoachClientRepository,
        schedule_service: ScheduleService,
    ):
        self.check_in_repo = check_in_repo
        self.link_repo = link_repo
        self.schedule_service = schedule_service

    # -------- Client operations --------

    def submit(
        self,
        session: Session,
        client: User,
        payload: CheckInCreate,
        clock: Clock,
    ) -> CheckInSubmitResult:
        """
        Submit a check-in for the client's current local day.

        Raises:
            FieldValidationError: no coach link (on week_of) or photo paths
                outside the client's storage prefix (on photo_paths).
        """
        # Business rule, reported inline on the form rather than as a 403
        if not self.link_repo.has_any_coach(session, client.id):
            raise FieldValidationError.single("week_of", NO_COACH_MESSAGE)

        foreign = [p for p in payload.photo_paths if not storage_utils.path_belongs_to(client.id, p)]
        if foreign:
            raise FieldValidationError.single(
                "photo_paths", "Photos must be uploaded through your own upload URLs."
            )

        now = clock.now()
        tz = resolve_timezone(client.timezone)
        day = local_date(now, tz)
        day_str = day.isoformat()

        if payload.week_of:
            week_of = parse_week_start_string(payload.week_of)
        else:
            week_of = normalize_to_monday(datetime.combine(day, time.min, tzinfo=timezone.utc))

        existing = self.check_in_repo.find_active_for_local_date(session, client.id, day_str)

        if existing is not None:
            if payload.resolution is None:
                logger.info(
                    "Check-in conflict for client %s on %s (existing %s)",
                    client.id,
                    day_str,
                    existing.id,
                )
                return self._conflict(existing)

            if payload.resolution == "overwrite":
                self._apply_submission(existing, payload, now, day_str, tz.key, week_of)
                self.check_in_repo.update(session, existing)
                self.check_in_repo.replace_photos(session, existing.id, payload.photo_paths)
                session.commit()
                return CheckInSubmitResult(check_in_id=existing.id, overwritten=True)

            # "add_new": caller explicitly wants a second entry for the day
            check_in = CheckIn(client_id=client.id, added_as_new=True)
            self._apply_submission(check_in, payload, now, day_str, tz.key, week_of)
            check_in = self.check_in_repo.create(session, check_in)
            self.check_in_repo.replace_photos(session, check_in.id, payload.photo_paths)
            session.commit()
            return CheckInSubmitResult(check_in_id=check_in.id, added_as_new=True)

        deleted = self.check_in_repo.find_deleted_for_local_date(session, client.id, day_str)
        try:
            if deleted is not None:
                self._apply_submission(deleted, payload, now, day_str, tz.key, week_of)
                deleted.deleted_at = None
                deleted.added_as_new = False
                self.check_in_repo.update(session, deleted)
                self.check_in_repo.replace_photos(session, deleted.id, payload.photo_paths)
                session.commit()
                logger.info("Revived check-in %s for client %s", deleted.id, client.id)
                return CheckInSubmitResult(check_in_id=deleted.id, revived=True)

            check_in = CheckIn(client_id=client.id)
            self._apply_submission(check_in, payload, now, day_str, tz.key, week_of)
            check_in = self.check_in_repo.create(session, check_in)
            self.check_in_repo.replace_photos(session, check_in.id, payload.photo_paths)
            session.commit()
            return CheckInSubmitResult(check_in_id=check_in.id)
        except IntegrityError:
            # Lost a race with a concurrent submission for the same day:
            # report what won instead of writing a duplicate.
            session.rollback()
            winner = self.check_in_repo.find_active_for_local_date(session, client.id, day_str)
            if winner is None:
                raise
            logger.info("Concurrent check-in for client %s on %s", client.id, day_str)
            return self._conflict(winner)

    def delete(
        self,
        session: Session,
        client: User,
        check_in_id: uuid.UUID,
        clock: Clock,
    ) -> None:
        """Soft delete one of the client's own check-ins."""
        check_in = self.check_in_repo.get_by_id(session, check_in_id)
        if not check_in:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Check-in not found",
            )
        if check_in.client_id != client.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not your check-in",
            )
        if check_in.deleted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Check-in already deleted",
            )

        check_in.deleted_at = clock.now()
        self.check_in_repo.update(session, check_in)
        session.commit()

    def list_mine(self, session: Session, client: User) -> list[CheckInRead]:
        check_ins = self.check_in_repo.list_active_for_client(session, client.id)
        return [self._to_read(session, c) for c in check_ins]

    def today_status(self, session: Session, client: User, clock: Clock) -> TodayStatusRead:
        day_str = local_date(clock.now(), resolve_timezone(client.timezone)).isoformat()
        latest = self.check_in_repo.find_active_for_local_date(session, client.id, day_str)
        return TodayStatusRead(
            local_date=day_str,
            exists_today=latest is not None,
            count_today=self.check_in_repo.count_active_for_local_date(session, client.id, day_str),
            latest_id=latest.id if latest else None,
            latest_submitted_at=ensure_utc(latest.submitted_at) if latest else None,
        )

    def my_period_status(self, session: Session, client: User, clock: Clock) -> PeriodStatusRead:
        days = self.schedule_service.days_for_client(session, client)
        return self.schedule_service.period_status(session, client, days, clock.now())

    # -------- Shared reads --------

    def weight_history(
        self,
        session: Session,
        user: User,
        client_id: uuid.UUID,
        weight_range: WeightRange,
        clock: Clock,
    ) -> list[WeightPointRead]:
        """
        Weight series for the progress chart.

        Visible to the client and to their linked coaches. Only the regular
        entry of each day counts; "add as new" extras are left out.
        """
        if user.id != client_id:
            if not user.is_coach or self.link_repo.get_pair(session, user.id, client_id) is None:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not assigned to this client",
                )

        since = None
        if weight_range != "all":
            # Cutoff counted on the client's calendar
            client = user if user.id == client_id else session.get(User, client_id)
            today = local_date(clock.now(), resolve_timezone(client.timezone if client else None))
            since = (today - timedelta(days=WEIGHT_RANGE_DAYS[weight_range])).isoformat()

        points = []
        for check_in in self.check_in_repo.list_weights_since(session, client_id, since):
            day = parse_local_date(check_in.local_date)
            points.append(
                WeightPointRead(
                    local_date=day,
                    label=f"{day:%b} {day.day}",
                    weight=check_in.weight,
                )
            )
        return points

    def get_detail(
        self,
        session: Session,
        user: User,
        check_in_id: uuid.UUID,
    ) -> CheckInDetailRead:
        """
        Check-in with signed photo URLs.

        Visible to its owner and to coaches linked to the owner.
        """
        check_in = self.check_in_repo.get_by_id(session, check_in_id)
        if not check_in or check_in.deleted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Check-in not found",
            )

        if check_in.client_id != user.id:
            link = self.link_repo.get_pair(session, user.id, check_in.client_id)
            if not user.is_coach or link is None:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Not assigned to this client",
                )

        return self.build_detail(session, check_in)

    def build_detail(self, session: Session, check_in: CheckIn) -> CheckInDetailRead:
        photos = self.check_in_repo.list_photos(session, check_in.id)
        base = self._to_read(session, check_in, photos)
        return CheckInDetailRead(
            **base.model_dump(),
            photos=[self._photo_read(p) for p in photos],
        )

    # -------- Coach operations --------

    def list_for_client(
        self,
        session: Session,
        coach: User,
        client_id: uuid.UUID,
        limit: int | None = None,
    ) -> list[CheckInRead]:
        """A roster client's non-deleted check-ins, newest first."""
        if self.link_repo.get_pair(session, coach.id, client_id) is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not assigned to this client",
            )
        check_ins = self.check_in_repo.list_active_for_client(session, client_id, limit)
        return [self._to_read(session, c) for c in check_ins]

    def mark_reviewed(
        self,
        session: Session,
        coach: User,
        check_in_id: uuid.UUID,
    ) -> CheckInRead:
        """
        One-way SUBMITTED -> REVIEWED.

        Only a coach linked to the check-in's client may do this; an
        already reviewed check-in is returned unchanged.
        """
        if not coach.is_coach:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not a coach",
            )

        check_in = self.check_in_repo.get_by_id(session, check_in_id)
        if not check_in or check_in.deleted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Check-in not found",
            )

        if self.link_repo.get_pair(session, coach.id, check_in.client_id) is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not assigned to this client",
            )

        if check_in.status != REVIEWED:
            check_in.status = REVIEWED
            self.check_in_repo.update(session, check_in)
            session.commit()

        return self._to_read(session, check_in)

    # -------- Helpers --------

    def _apply_submission(
        self,
        check_in: CheckIn,
        payload: CheckInCreate,
        now: datetime,
        day_str: str,
        tz_name: str,
        week_of: datetime,
    ) -> None:
        check_in.weight = payload.weight
        check_in.diet_compliance = payload.diet_compliance
        check_in.energy_level = payload.energy_level
        check_in.notes = payload.notes
        check_in.submitted_at = now
        check_in.local_date = day_str
        check_in.timezone = tz_name
        check_in.week_of = week_of
        check_in.status = SUBMITTED

    def _conflict(self, existing: CheckIn) -> CheckInSubmitResult:
        return CheckInSubmitResult(
            conflict=ConflictRead(
                existing_id=existing.id,
                existing_submitted_at=ensure_utc(existing.submitted_at),
                local_date=existing.local_date,
            )
        )

    def _to_read(
        self,
        session: Session,
        check_in: CheckIn,
        photos: list[CheckInPhoto] | None = None,
    ) -> CheckInRead:
        if photos is None:
            photos = self.check_in_repo.list_photos(session, check_in.id)
        return CheckInRead(
            id=check_in.id,
            client_id=check_in.client_id,
            week_of=ensure_utc(check_in.week_of),
            submitted_at=ensure_utc(check_in.submitted_at),
            local_date=check_in.local_date,
            timezone=check_in.timezone,
            weight=check_in.weight,
            diet_compliance=check_in.diet_compliance,
            energy_level=check_in.energy_level,
            notes=check_in.notes,
            status=check_in.status,
            added_as_new=check_in.added_as_new,
            photo_count=len(photos),
        )

    def _photo_read(self, photo: CheckInPhoto) -> CheckInPhotoRead:
        return CheckInPhotoRead(
            id=photo.id,
            storage_path=photo.storage_path,
            sort_order=photo.sort_order,
            url=storage_utils.issue_signed_download_url(photo.storage_path),
        )
