"""Audit store and user directory collaborators.

Both are synchronous; the delivery service calls them from worker threads.
"""

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from shared.db.models import EmailLog
from shared.db.repositories import EmailLogRepository, UserRepository

from mail_delivery.models import AuditRecord


class DirectoryUser(Protocol):
    role: str
    email: str | None


class AuditStore(Protocol):
    def append(self, record: AuditRecord) -> None: ...


class Directory(Protocol):
    def list_by_role(self, role: str) -> Sequence[DirectoryUser]: ...


class SqlAuditStore:
    """Appends audit records to the ``email_logs`` table, one session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def append(self, record: AuditRecord) -> None:
        with self._session_factory() as session:
            EmailLogRepository(session).append(
                EmailLog(
                    recipient_email=record.recipient,
                    recipient_name=record.recipient_name,
                    subject=record.subject,
                    template_type=str(record.template_type),
                    status=str(record.status),
                    details=dict(record.metadata),
                    error_message=record.error_message,
                )
            )
            session.commit()


class SqlDirectory:
    """Reads users from the ``users`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def list_by_role(self, role: str) -> Sequence[DirectoryUser]:
        with self._session_factory() as session:
            return UserRepository(session).list_by_role(role)


class InMemoryAuditStore:
    """Keeps audit records in a list; for the memory backend and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[AuditRecord] = []

    @property
    def records(self) -> list[AuditRecord]:
        with self._lock:
            return list(self._records)

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self._records.append(record)


@dataclass(frozen=True)
class StaticUser:
    email: str | None
    role: str
    name: str = ""


class InMemoryDirectory:
    def __init__(self, users: Sequence[DirectoryUser] = ()) -> None:
        self._users = list(users)

    def list_by_role(self, role: str) -> Sequence[DirectoryUser]:
        return [user for user in self._users if user.role == role]
