"""Delivery orchestration: the public entry point of the mail core."""

import asyncio
import datetime
import logging

from shared.enums import TransportMode

from mail_delivery import messages
from mail_delivery.background import BackgroundTasks
from mail_delivery.config import DEFAULT_FROM_ADDRESS, DeliveryConfig, SmtpConfig
from mail_delivery.models import AuditRecord, DeliveryAttemptResult, Message, SendResult
from mail_delivery.oversight import OversightNotifier
from mail_delivery.providers.base import TransportGateway
from mail_delivery.retry import RetryScheduler
from mail_delivery.stores import AuditStore, Directory

logger = logging.getLogger(__name__)


class DeliveryService:
    """Sends transactional emails and records what happened.

    ``deliver`` returns as soon as the attempt sequence finishes.  The audit
    write and the oversight notification run afterwards as detached
    background tasks; their failures are logged and never reach the caller.
    """

    def __init__(
        self,
        gateway: TransportGateway,
        audit_store: AuditStore,
        directory: Directory,
        *,
        config: DeliveryConfig | None = None,
        smtp_config: SmtpConfig | None = None,
        scheduler: RetryScheduler | None = None,
        notifier: OversightNotifier | None = None,
        background: BackgroundTasks | None = None,
    ) -> None:
        self._config = config or DeliveryConfig()
        self._gateway = gateway
        self._audit_store = audit_store
        self._sender = self._config.from_address or DEFAULT_FROM_ADDRESS
        self._scheduler = scheduler or RetryScheduler(
            gateway,
            smtp_config or SmtpConfig(),
            max_attempts=self._config.max_attempts,
            base_delay=self._config.backoff_base_seconds,
        )
        if notifier is None and self._config.oversight_enabled:
            notifier = OversightNotifier(gateway, directory, self._sender)
        self._notifier = notifier if self._config.oversight_enabled else None
        self._background = background or BackgroundTasks(
            self._config.background_concurrency
        )

    @property
    def transport_mode(self) -> TransportMode:
        return self._gateway.mode

    @property
    def sender(self) -> str:
        return self._sender

    async def deliver(
        self, message: Message, recipient_name: str | None = None
    ) -> DeliveryAttemptResult:
        """Deliver *message* and return the outcome; never raises."""
        result = await self._scheduler.attempt(message, self._sender)

        log_ctx = {
            "recipient": message.recipient,
            "template_type": str(message.template_type),
            "retry_count": result.retry_count,
            "mode": str(self._gateway.mode),
        }
        if result.success:
            logger.info(
                "Email delivered",
                extra={**log_ctx, "message_id": result.message_id},
            )
        else:
            logger.error("Email delivery failed", extra={**log_ctx, "reason": result.error})

        record = AuditRecord.from_result(message, result, recipient_name)
        self._background.spawn(
            self._append_audit(record),
            name=f"audit:{message.template_type}:{message.recipient}",
        )

        if self._notifier is not None:
            details = {**message.metadata, "status": str(record.status)}
            self._background.spawn(
                self._notifier.notify(
                    message.template_type,
                    message.recipient,
                    recipient_name or "Unknown",
                    str(message.metadata.get("event_name", "N/A")),
                    details,
                ),
                name=f"oversight:{message.template_type}:{message.recipient}",
            )

        return result

    async def drain(self) -> None:
        """Wait for outstanding audit and notification tasks (shutdown, tests)."""
        await self._background.drain()

    async def send_registration_approved(
        self, to: str, name: str, event_name: str, username: str, password: str
    ) -> SendResult:
        message = messages.registration_approved(to, name, event_name, username, password)
        return (await self.deliver(message, name)).to_send_result()

    async def send_credentials(
        self, to: str, name: str, event_name: str, username: str, password: str
    ) -> SendResult:
        message = messages.credentials(to, name, event_name, username, password)
        return (await self.deliver(message, name)).to_send_result()

    async def send_test_start_reminder(
        self,
        to: str,
        name: str,
        event_name: str,
        round_name: str,
        start_time: datetime.datetime,
    ) -> SendResult:
        message = messages.test_start_reminder(to, name, event_name, round_name, start_time)
        return (await self.deliver(message, name)).to_send_result()

    async def send_result_published(
        self, to: str, name: str, event_name: str, score: float, rank: int
    ) -> SendResult:
        message = messages.result_published(to, name, event_name, score, rank)
        return (await self.deliver(message, name)).to_send_result()

    async def _append_audit(self, record: AuditRecord) -> None:
        try:
            await asyncio.to_thread(self._audit_store.append, record)
        except Exception:
            logger.warning(
                "Failed to log email to audit store",
                exc_info=True,
                extra={
                    "recipient": record.recipient,
                    "template_type": str(record.template_type),
                    "status": str(record.status),
                },
            )
