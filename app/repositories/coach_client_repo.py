import uuid

from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from app.models.coach_client import CoachClient
from app.models.user import User


class CoachClientRepository:
    """
    Data access layer for coach/client links.
    """

    def get_by_id(self, session: Session, link_id: uuid.UUID) -> CoachClient | None:
        return session.get(CoachClient, link_id)

    def get_pair(
        self,
        session: Session,
        coach_id: uuid.UUID,
        client_id: uuid.UUID,
    ) -> CoachClient | None:
        stmt = select(CoachClient).where(
            CoachClient.coach_id == coach_id,
            CoachClient.client_id == client_id,
        )
        return session.exec(stmt).first()

    def has_any_coach(self, session: Session, client_id: uuid.UUID) -> bool:
        stmt = select(CoachClient.id).where(CoachClient.client_id == client_id)
        return session.exec(stmt).first() is not None

    def list_for_coach(
        self,
        session: Session,
        coach_id: uuid.UUID,
    ) -> list[tuple[CoachClient, User]]:
        """Links of a coach joined with the client's user row."""
        stmt = (
            select(CoachClient, User)
            .join(User, User.id == CoachClient.client_id)
            .where(CoachClient.coach_id == coach_id)
            .order_by(User.name)
        )
        return list(session.exec(stmt).all())

    def list_for_client(
        self,
        session: Session,
        client_id: uuid.UUID,
    ) -> list[tuple[CoachClient, User]]:
        """Links of a client joined with the coach's user row."""
        stmt = (
            select(CoachClient, User)
            .join(User, User.id == CoachClient.coach_id)
            .where(CoachClient.client_id == client_id)
            .order_by(CoachClient.created_at)
        )
        return list(session.exec(stmt).all())

    def list_all_with_users(
        self,
        session: Session,
    ) -> list[tuple[CoachClient, User, User]]:
        """Every link as (link, client, coach); used by the reminder batch."""
        client = aliased(User)
        coach = aliased(User)
        stmt = (
            select(CoachClient, client, coach)
            .join(client, client.id == CoachClient.client_id)
            .join(coach, coach.id == CoachClient.coach_id)
            .order_by(CoachClient.created_at)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, link: CoachClient) -> CoachClient:
        session.add(link)
        session.commit()
        session.refresh(link)
        return link

    def update(self, session: Session, link: CoachClient) -> CoachClient:
        session.add(link)
        session.commit()
        session.refresh(link)
        return link

    def delete(self, session: Session, link: CoachClient) -> None:
        session.delete(link)
        session.commit()
