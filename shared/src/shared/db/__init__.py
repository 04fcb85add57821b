"""Database layer: models, repositories, engine/session utilities."""

from shared.db.base import Base, create_db_engine, create_session_factory
from shared.db.models import EmailLog, User
from shared.db.repositories import EmailLogRepository, UserRepository

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "EmailLog",
    "User",
    "EmailLogRepository",
    "UserRepository",
]
