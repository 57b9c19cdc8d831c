import uuid
from datetime import datetime

from sqlmodel import Session, select

from app.models.check_in import CheckIn, CheckInPhoto


class CheckInRepository:
    """
    Data access layer for check_ins and check_in_photos.

    NOTE:
      - No commits here; submission, overwrite and revive are multi-step
        transactions. The service is responsible for session.commit().
    """

    # ---- Check-ins ----

    def get_by_id(self, session: Session, check_in_id: uuid.UUID) -> CheckIn | None:
        return session.get(CheckIn, check_in_id)

    def find_active_for_local_date(
        self,
        session: Session,
        client_id: uuid.UUID,
        local_date: str,
    ) -> CheckIn | None:
        """Most recent non-deleted check-in of the client on that local day."""
        stmt = (
            select(CheckIn)
            .where(
                CheckIn.client_id == client_id,
                CheckIn.local_date == local_date,
                CheckIn.deleted_at.is_(None),
            )
            .order_by(CheckIn.submitted_at.desc())
        )
        return session.exec(stmt).first()

    def find_deleted_for_local_date(
        self,
        session: Session,
        client_id: uuid.UUID,
        local_date: str,
    ) -> CheckIn | None:
        """Most recently submitted soft-deleted row for that day (revive candidate)."""
        stmt = (
            select(CheckIn)
            .where(
                CheckIn.client_id == client_id,
                CheckIn.local_date == local_date,
                CheckIn.deleted_at.is_not(None),
            )
            .order_by(CheckIn.submitted_at.desc())
        )
        return session.exec(stmt).first()

    def count_active_for_local_date(
        self,
        session: Session,
        client_id: uuid.UUID,
        local_date: str,
    ) -> int:
        stmt = select(CheckIn.id).where(
            CheckIn.client_id == client_id,
            CheckIn.local_date == local_date,
            CheckIn.deleted_at.is_(None),
        )
        return len(session.exec(stmt).all())

    def list_active_for_client(
        self,
        session: Session,
        client_id: uuid.UUID,
        limit: int | None = None,
    ) -> list[CheckIn]:
        """Non-deleted check-ins, newest submission first."""
        stmt = (
            select(CheckIn)
            .where(CheckIn.client_id == client_id, CheckIn.deleted_at.is_(None))
            .order_by(CheckIn.submitted_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.exec(stmt).all())

    def list_local_dates_since(
        self,
        session: Session,
        client_id: uuid.UUID,
        since_local_date: str,
    ) -> list[str]:
        """Distinct local dates with an active check-in on or after a day."""
        stmt = (
            select(CheckIn.local_date)
            .where(
                CheckIn.client_id == client_id,
                CheckIn.deleted_at.is_(None),
                CheckIn.local_date >= since_local_date,
            )
            .distinct()
        )
        return list(session.exec(stmt).all())

    def list_weights_since(
        self,
        session: Session,
        client_id: uuid.UUID,
        since_local_date: str | None = None,
    ) -> list[CheckIn]:
        """Regular (not added-as-new) active check-ins with a weight, oldest first."""
        stmt = select(CheckIn).where(
            CheckIn.client_id == client_id,
            CheckIn.deleted_at.is_(None),
            CheckIn.added_as_new.is_(False),
            CheckIn.weight.is_not(None),
        )
        if since_local_date is not None:
            stmt = stmt.where(CheckIn.local_date >= since_local_date)
        return list(session.exec(stmt.order_by(CheckIn.submitted_at.asc())).all())

    def list_for_week(
        self,
        session: Session,
        client_id: uuid.UUID,
        week_of: datetime,
    ) -> list[CheckIn]:
        stmt = (
            select(CheckIn)
            .where(
                CheckIn.client_id == client_id,
                CheckIn.week_of == week_of,
                CheckIn.deleted_at.is_(None),
            )
            .order_by(CheckIn.submitted_at.asc())
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, check_in: CheckIn) -> CheckIn:
        """
        Insert a CheckIn without committing, but ensure id is populated.
        """
        session.add(check_in)
        session.flush()  # Assign PK, surface unique-index violations
        session.refresh(check_in)
        return check_in

    def update(self, session: Session, check_in: CheckIn) -> CheckIn:
        session.add(check_in)
        session.flush()
        session.refresh(check_in)
        return check_in

    # ---- Photos ----

    def list_photos(
        self,
        session: Session,
        check_in_id: uuid.UUID,
    ) -> list[CheckInPhoto]:
        stmt = (
            select(CheckInPhoto)
            .where(CheckInPhoto.check_in_id == check_in_id)
            .order_by(CheckInPhoto.sort_order.asc())
        )
        return list(session.exec(stmt).all())

    def replace_photos(
        self,
        session: Session,
        check_in_id: uuid.UUID,
        storage_paths: list[str],
    ) -> list[CheckInPhoto]:
        """
        Delete every photo row of the check-in and create new ones in order.

        Runs inside the caller's transaction.
        """
        for photo in self.list_photos(session, check_in_id):
            session.delete(photo)
        session.flush()

        photos = [
            CheckInPhoto(check_in_id=check_in_id, storage_path=path, sort_order=i)
            for i, path in enumerate(storage_paths)
        ]
        session.add_all(photos)
        session.flush()
        return photos
