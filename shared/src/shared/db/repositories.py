"""Data access repositories with constructor-injected sessions."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.db.models import EmailLog, User


class EmailLogRepository:
    """Data access for the email_logs table.

    Rows are only ever added; there is no update or delete.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, email_log: EmailLog) -> EmailLog:
        """Add a new audit row and flush to populate server defaults."""
        self._session.add(email_log)
        self._session.flush()
        return email_log


class UserRepository:
    """Data access for the users directory."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user: User) -> User:
        self._session.add(user)
        self._session.flush()
        return user

    def list_by_role(self, role: str) -> list[User]:
        """Users holding *role*, oldest first."""
        stmt = (
            select(User)
            .where(User.role == role)
            .order_by(User.created_at.asc(), User.name)
        )
        return list(self._session.scalars(stmt).all())
