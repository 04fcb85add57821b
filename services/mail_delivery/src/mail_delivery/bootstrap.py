"""Wiring of configuration, database and gateway into a DeliveryService."""

import logging

from sqlalchemy.orm import Session, sessionmaker

from shared.config import PostgresConfig
from shared.db.base import create_db_engine, create_session_factory
from shared.enums import UserRole

from mail_delivery.config import DeliveryConfig, SmtpConfig
from mail_delivery.providers import MailTransport, create_gateway
from mail_delivery.service import DeliveryService
from mail_delivery.stores import (
    AuditStore,
    Directory,
    InMemoryAuditStore,
    InMemoryDirectory,
    SqlAuditStore,
    SqlDirectory,
    StaticUser,
)

logger = logging.getLogger(__name__)


def build_stores(
    delivery_config: DeliveryConfig,
    session_factory: sessionmaker[Session] | None = None,
    postgres_config: PostgresConfig | None = None,
) -> tuple[AuditStore, Directory]:
    """Pick the audit store and directory for ``delivery_config.audit_backend``.

    The ``memory`` backend needs no database: audit records live for the
    process lifetime and the directory holds at most the configured
    ``oversight_email`` user.
    """
    if delivery_config.audit_backend == "memory":
        users: list[StaticUser] = []
        if delivery_config.oversight_email:
            users.append(
                StaticUser(email=delivery_config.oversight_email, role=UserRole.SUPER_ADMIN)
            )
        logger.warning(
            "Using in-memory audit store; records are lost on restart",
            extra={"overseer": delivery_config.oversight_email},
        )
        return InMemoryAuditStore(), InMemoryDirectory(users)

    if session_factory is None:
        postgres_config = postgres_config or PostgresConfig()
        engine = create_db_engine(postgres_config.dsn, pool_pre_ping=True)
        session_factory = create_session_factory(engine)
    return SqlAuditStore(session_factory), SqlDirectory(session_factory)


def build_service(
    delivery_config: DeliveryConfig | None = None,
    smtp_config: SmtpConfig | None = None,
    session_factory: sessionmaker[Session] | None = None,
    postgres_config: PostgresConfig | None = None,
    transport: MailTransport | None = None,
) -> DeliveryService:
    """Build a DeliveryService for the configured transport and audit backend.

    With the default ``sql`` backend and no *session_factory*, an engine is
    created from *postgres_config* (or the ``POSTGRES_*`` environment).
    """
    delivery_config = delivery_config or DeliveryConfig()
    smtp_config = smtp_config or SmtpConfig()

    audit_store, directory = build_stores(delivery_config, session_factory, postgres_config)
    gateway = create_gateway(smtp_config, transport)

    return DeliveryService(
        gateway,
        audit_store,
        directory,
        config=delivery_config,
        smtp_config=smtp_config,
    )
