"""Integration test fixtures using testcontainers.

Session-scoped PostgreSQL container with Alembic migrations applied.
Function-scoped DB cleanup and gateway servers (werkzeug in a thread).
"""

import os
import threading
from collections.abc import Generator
from pathlib import Path

import httpx
import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker
from testcontainers.postgres import PostgresContainer
from werkzeug.serving import BaseWSGIServer, make_server

from shared.db.base import create_db_engine, create_session_factory

from mail_delivery.app import create_app
from mail_delivery.bootstrap import build_service
from mail_delivery.config import DeliveryConfig, SmtpConfig
from mail_delivery.providers import MailTransport
from mail_delivery.runtime import LoopThread
from mail_delivery.service import DeliveryService

from tests.integration.helpers import GatewayFactory, RecordingTransport

pytestmark = pytest.mark.integration

# ---------------------------------------------------------------------------
# Containers (session-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    with PostgresContainer("postgres:16-alpine", driver="psycopg2") as pg:
        yield pg


@pytest.fixture(scope="session")
def pg_dsn(postgres_container: PostgresContainer) -> str:
    return postgres_container.get_connection_url()


# ---------------------------------------------------------------------------
# Environment variables (session-scoped, autouse)
# Pydantic-settings configs read these automatically.
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _set_env_vars(pg_dsn: str) -> Generator[None, None, None]:
    from urllib.parse import urlparse

    parsed = urlparse(pg_dsn)
    overrides = {
        "POSTGRES_HOST": parsed.hostname or "localhost",
        "POSTGRES_PORT": str(parsed.port or 5432),
        "POSTGRES_DATABASE": (parsed.path or "/test").lstrip("/"),
        "POSTGRES_USER": parsed.username or "test",
        "POSTGRES_PASSWORD": parsed.password or "test",
    }
    cleared = ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "SMTP_FROM")

    saved: dict[str, str | None] = {}
    for key in (*overrides, *cleared):
        saved[key] = os.environ.get(key)
    for key, value in overrides.items():
        os.environ[key] = value
    for key in cleared:
        os.environ.pop(key, None)

    yield

    for key, old in saved.items():
        if old is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = old


# ---------------------------------------------------------------------------
# Database (session-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def db_engine(pg_dsn: str, _set_env_vars: None):  # noqa: ANN201
    """Create engine and run Alembic migrations against testcontainer PG."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    engine = create_db_engine(pg_dsn, pool_pre_ping=True)

    shared_dir = Path(__file__).resolve().parents[2] / "shared"
    alembic_cfg = AlembicConfig(str(shared_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(shared_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", pg_dsn)
    command.upgrade(alembic_cfg, "head")

    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(db_engine) -> sessionmaker[Session]:  # noqa: ANN001
    return create_session_factory(db_engine)


@pytest.fixture(autouse=True)
def _cleanup_db(session_factory: sessionmaker[Session]) -> Generator[None, None, None]:
    """Truncate mail tables after each test."""
    yield
    with session_factory() as session:
        session.execute(text("TRUNCATE email_logs, users"))
        session.commit()


# ---------------------------------------------------------------------------
# Mail gateway (function-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture()
def start_gateway(
    session_factory: sessionmaker[Session],
) -> Generator[GatewayFactory, None, None]:
    """Start the Flask mail gateway in a background thread; returns its base URL.

    Without a transport the service runs in logged mode.  Passing one
    switches to live mode with dummy SMTP credentials.
    """
    running: list[tuple[BaseWSGIServer, LoopThread, DeliveryService]] = []

    def _start(
        transport: MailTransport | None = None,
        delivery_config: DeliveryConfig | None = None,
    ) -> str:
        if transport is None:
            smtp_config = SmtpConfig(host=None, user=None, password=None)
        else:
            smtp_config = SmtpConfig(
                host="smtp.test", port=587, user="mailer@test", password="secret"
            )
        service = build_service(
            delivery_config or DeliveryConfig(backoff_base_seconds=0.01),
            smtp_config,
            session_factory=session_factory,
            transport=transport,
        )
        loop = LoopThread(name="integration-loop").start()
        app = create_app(service, loop, smtp_config=smtp_config)
        app.config["TESTING"] = True

        server = make_server("127.0.0.1", 0, app, threaded=True)
        port = server.server_address[1]
        threading.Thread(target=server.serve_forever, daemon=True).start()

        running.append((server, loop, service))
        return f"http://127.0.0.1:{port}"

    yield _start

    for server, loop, service in running:
        server.shutdown()
        loop.stop(service.drain)


@pytest.fixture()
def gateway_url(start_gateway: GatewayFactory) -> str:
    """Logged-mode gateway backed by PostgreSQL."""
    return start_gateway()


@pytest.fixture()
def http_client(gateway_url: str) -> Generator[httpx.Client, None, None]:
    with httpx.Client(base_url=gateway_url, timeout=10.0) as client:
        yield client


@pytest.fixture()
def recording_transport() -> RecordingTransport:
    return RecordingTransport()
