"""Bounded retry loop with exponential backoff around a transport gateway."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from mail_delivery.classifier import classify, describe, error_detail, is_retryable
from mail_delivery.config import SmtpConfig
from mail_delivery.exceptions import TransportError
from mail_delivery.models import DeliveryAttemptResult, Message
from mail_delivery.providers.base import TransportGateway

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

Sleep = Callable[[float], Awaitable[object]]


def backoff_delay(attempt: int, base: float = 1.0) -> float:
    """Seconds to wait after failed attempt number *attempt* (1-based).

    1s, 2s, 4s, ... for the default base.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return base * 2 ** (attempt - 1)


class RetryScheduler:
    """Drives up to ``max_attempts`` sends for a single message.

    Each call keeps its own attempt counter and waits only on its own
    backoff timer, so concurrent deliveries never throttle each other.
    """

    def __init__(
        self,
        gateway: TransportGateway,
        smtp_config: SmtpConfig,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._gateway = gateway
        self._smtp_config = smtp_config
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    async def attempt(
        self,
        message: Message,
        sender: str,
        max_attempts: int | None = None,
    ) -> DeliveryAttemptResult:
        limit = self._max_attempts if max_attempts is None else max_attempts
        if limit < 1:
            raise ValueError(f"max_attempts must be >= 1, got {limit}")

        log_ctx = {
            "recipient": message.recipient,
            "template_type": str(message.template_type),
        }
        attempt = 1
        while True:
            try:
                receipt = await self._gateway.send(message, sender)
            except Exception as exc:
                if not isinstance(exc, TransportError):
                    logger.warning(
                        "Gateway raised %s outside the transport error contract",
                        type(exc).__name__,
                        exc_info=True,
                        extra=log_ctx,
                    )
                classification = classify(exc)
                if is_retryable(exc) and attempt < limit:
                    delay = backoff_delay(attempt, self._base_delay)
                    logger.warning(
                        "Email send failed (attempt %d/%d), retrying in %.1fs",
                        attempt,
                        limit,
                        delay,
                        extra={**log_ctx, "error_category": str(classification)},
                    )
                    await self._sleep(delay)
                    attempt += 1
                    continue

                diagnostic = describe(
                    classification,
                    host=self._smtp_config.host,
                    port=self._smtp_config.port,
                    user=self._smtp_config.user,
                    detail=error_detail(exc),
                )
                logger.error(
                    "Email send failed permanently",
                    extra={
                        **log_ctx,
                        "attempts": attempt,
                        "error_category": str(classification),
                        "reason": diagnostic,
                    },
                )
                return DeliveryAttemptResult.failed(
                    classification, diagnostic, retry_count=attempt - 1
                )

            return DeliveryAttemptResult.succeeded(
                receipt.message_id, retry_count=attempt - 1
            )
