"""Polling utilities and fake transports for integration tests."""

import asyncio
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from shared.db.models import EmailLog

# Starts a gateway server and returns its base URL.
GatewayFactory = Callable[..., str]


@dataclass
class SentMail:
    sender: str
    recipient: str
    subject: str
    html: str


@dataclass
class RecordingTransport:
    """Accepts every message and remembers it.

    *failures* are raised, in order, before any message is accepted.
    """

    failures: list[BaseException] = field(default_factory=list)
    sent: list[SentMail] = field(default_factory=list)
    attempts: int = 0
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    async def send_mail(self, sender: str, recipient: str, subject: str, html: str) -> str:
        self.attempts += 1
        await asyncio.sleep(0)
        if self.failures:
            raise self.failures.pop(0)
        self.sent.append(SentMail(sender, recipient, subject, html))
        return f"<{next(self._ids)}@smtp.test>"


def poll_email_logs(
    session_factory: sessionmaker[Session],
    recipient_email: str,
    expected: int,
    timeout: float = 10.0,
    interval: float = 0.2,
) -> list[EmailLog]:
    """Poll DB until *expected* audit rows exist for *recipient_email*.

    Returns whatever was found when the deadline is reached (the calling
    test will fail on its own assertion if the count is wrong).
    """
    deadline = time.monotonic() + timeout

    while True:
        with session_factory() as session:
            stmt = select(EmailLog).where(EmailLog.recipient_email == recipient_email)
            logs = list(session.scalars(stmt).all())
        if len(logs) >= expected or time.monotonic() >= deadline:
            return logs
        time.sleep(interval)


def wait_for(
    predicate: Callable[[], bool], timeout: float = 10.0, interval: float = 0.1
) -> bool:
    """Poll *predicate* until it holds or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)
    return True
