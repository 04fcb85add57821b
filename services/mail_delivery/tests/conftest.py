"""Test fixtures for mail_delivery tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from shared.enums import TransportMode, UserRole

from mail_delivery import messages
from mail_delivery.app import create_app
from mail_delivery.config import DeliveryConfig, SmtpConfig
from mail_delivery.models import Message
from mail_delivery.providers import LiveGateway, LoggedGateway, TransportGateway
from mail_delivery.retry import RetryScheduler
from mail_delivery.runtime import LoopThread
from mail_delivery.service import DeliveryService
from mail_delivery.stores import InMemoryAuditStore, InMemoryDirectory, StaticUser


@pytest.fixture()
def smtp_config() -> SmtpConfig:
    return SmtpConfig(
        host="smtp.example.com",
        port=587,
        user="mailer@example.com",
        password="secret",
    )


@pytest.fixture()
def delivery_config() -> DeliveryConfig:
    return DeliveryConfig(oversight_enabled=False)


@pytest.fixture()
def fake_sleep() -> AsyncMock:
    """Stands in for asyncio.sleep; records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture()
def mock_gateway() -> MagicMock:
    """Live-mode gateway whose ``send`` outcomes are set per test."""
    gateway = MagicMock(spec=TransportGateway)
    gateway.mode = TransportMode.LIVE
    return gateway


@pytest.fixture()
def mock_transport() -> AsyncMock:
    transport = AsyncMock()
    transport.send_mail.return_value = "<abc123@bootfeet.com>"
    return transport


@pytest.fixture()
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture()
def overseer() -> StaticUser:
    return StaticUser(email="root@example.com", role=UserRole.SUPER_ADMIN, name="Root")


@pytest.fixture()
def directory(overseer: StaticUser) -> InMemoryDirectory:
    return InMemoryDirectory([
        StaticUser(email="pat@example.com", role=UserRole.PARTICIPANT, name="Pat"),
        overseer,
    ])


@pytest.fixture()
def sample_message() -> Message:
    return messages.registration_approved(
        "alice@example.com", "Alice", "Hackathon", "alice01", "pw-123"
    )


@pytest.fixture()
def scheduler(
    mock_gateway: MagicMock, smtp_config: SmtpConfig, fake_sleep: AsyncMock
) -> RetryScheduler:
    return RetryScheduler(mock_gateway, smtp_config, sleep=fake_sleep)


@pytest.fixture()
def logged_service(
    audit_store: InMemoryAuditStore,
    directory: InMemoryDirectory,
    delivery_config: DeliveryConfig,
) -> DeliveryService:
    return DeliveryService(
        LoggedGateway(),
        audit_store,
        directory,
        config=delivery_config,
        smtp_config=SmtpConfig(host=None, user=None, password=None),
    )


@pytest.fixture()
def loop_thread() -> Generator[LoopThread, None, None]:
    loop = LoopThread(name="test-loop").start()
    yield loop
    loop.stop()


@pytest.fixture()
def live_service(
    mock_transport: AsyncMock,
    audit_store: InMemoryAuditStore,
    directory: InMemoryDirectory,
    delivery_config: DeliveryConfig,
    smtp_config: SmtpConfig,
) -> DeliveryService:
    return DeliveryService(
        LiveGateway(mock_transport),
        audit_store,
        directory,
        config=delivery_config,
        smtp_config=smtp_config,
    )


@pytest.fixture()
def app(
    live_service: DeliveryService, loop_thread: LoopThread, smtp_config: SmtpConfig
) -> Generator[Flask, None, None]:
    app = create_app(live_service, loop_thread, smtp_config=smtp_config)
    app.config["TESTING"] = True
    yield app
    loop_thread.stop(live_service.drain)


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()
