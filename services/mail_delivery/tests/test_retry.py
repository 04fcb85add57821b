"""Tests for the bounded retry loop."""

from unittest.mock import AsyncMock, MagicMock, call

import aiosmtplib
import pytest

from mail_delivery.classifier import Classification, ErrorCategory
from mail_delivery.config import SmtpConfig
from mail_delivery.exceptions import TransportError
from mail_delivery.models import DeliveryOutcome, Message, SendReceipt
from mail_delivery.retry import RetryScheduler, backoff_delay

SENDER = "noreply@bootfeet.com"


def _smtp_error(code: int, text: str) -> TransportError:
    return TransportError(aiosmtplib.SMTPResponseException(code, text))


class TestBackoffDelay:
    def test_doubles_each_attempt(self) -> None:
        assert [backoff_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_custom_base(self) -> None:
        assert backoff_delay(3, base=0.5) == 2.0

    def test_rejects_attempt_zero(self) -> None:
        with pytest.raises(ValueError):
            backoff_delay(0)


class TestRetryScheduler:
    async def test_first_attempt_succeeds(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.return_value = SendReceipt("<id-1@bootfeet.com>")

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.outcome is DeliveryOutcome.SUCCESS
        assert result.message_id == "<id-1@bootfeet.com>"
        assert result.retry_count == 0
        fake_sleep.assert_not_awaited()
        mock_gateway.send.assert_awaited_once_with(sample_message, SENDER)

    async def test_permanent_error_is_not_retried(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = _smtp_error(550, "5.1.1 User unknown")

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.success is False
        assert result.retry_count == 0
        assert result.classification == Classification(ErrorCategory.PROTOCOL_ERROR, 550)
        assert result.error is not None
        assert result.error.startswith("protocol_error(550): ")
        assert "5.1.1 User unknown" in result.error
        assert mock_gateway.send.await_count == 1
        fake_sleep.assert_not_awaited()

    async def test_authentication_error_is_not_retried(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = TransportError(
            aiosmtplib.SMTPAuthenticationError(535, "5.7.8 Bad credentials")
        )

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.classification is not None
        assert result.classification.category is ErrorCategory.AUTHENTICATION_FAILED
        assert "mailer@example.com" in (result.error or "")
        assert mock_gateway.send.await_count == 1
        fake_sleep.assert_not_awaited()

    async def test_transient_then_success(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = [
            _smtp_error(421, "Service not available"),
            _smtp_error(421, "Service not available"),
            SendReceipt("<id-3@bootfeet.com>"),
        ]

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.success is True
        assert result.message_id == "<id-3@bootfeet.com>"
        assert result.retry_count == 2
        assert fake_sleep.await_args_list == [call(1.0), call(2.0)]

    async def test_transient_exhausts_attempts(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = _smtp_error(421, "Service not available")

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.success is False
        assert result.retry_count == 2
        assert str(result.classification) == "protocol_error(421)"
        assert mock_gateway.send.await_count == 3
        assert fake_sleep.await_args_list == [call(1.0), call(2.0)]

    async def test_network_errors_are_retried(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = [
            TransportError(ConnectionRefusedError(111, "Connection refused")),
            SendReceipt("<id-2@bootfeet.com>"),
        ]

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.success is True
        assert result.retry_count == 1
        fake_sleep.assert_awaited_once_with(1.0)

    async def test_per_call_max_attempts(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = _smtp_error(451, "Try later")

        result = await scheduler.attempt(sample_message, SENDER, max_attempts=1)

        assert result.success is False
        assert result.retry_count == 0
        fake_sleep.assert_not_awaited()

    async def test_backoff_base_is_configurable(
        self,
        mock_gateway: MagicMock,
        smtp_config: SmtpConfig,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        scheduler = RetryScheduler(
            mock_gateway, smtp_config, max_attempts=4, base_delay=0.25, sleep=fake_sleep
        )
        mock_gateway.send.side_effect = TransportError(TimeoutError("timed out"))

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.retry_count == 3
        assert fake_sleep.await_args_list == [call(0.25), call(0.5), call(1.0)]

    async def test_unexpected_gateway_exception_becomes_failure(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        mock_gateway.send.side_effect = RuntimeError("relay client bug")

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.outcome is DeliveryOutcome.FAILURE
        assert result.retry_count == 0
        assert result.classification == Classification(ErrorCategory.UNKNOWN)
        assert result.error is not None
        assert "relay client bug" in result.error
        fake_sleep.assert_not_awaited()

    async def test_connect_timeout_on_default_port_is_retried(
        self,
        scheduler: RetryScheduler,
        mock_gateway: MagicMock,
        fake_sleep: AsyncMock,
        sample_message: Message,
    ) -> None:
        timeout = aiosmtplib.SMTPConnectTimeoutError(
            "Timed out connecting to smtp.example.com on port 587"
        )
        timeout.__cause__ = TimeoutError()
        mock_gateway.send.side_effect = [
            TransportError(timeout),
            TransportError(timeout),
            SendReceipt("<late.com>"),
        ]

        result = await scheduler.attempt(sample_message, SENDER)

        assert result.outcome is DeliveryOutcome.SUCCESS
        assert result.retry_count == 2
        assert fake_sleep.await_args_list == [call(1.0), call(2.0)]

    def test_rejects_zero_max_attempts(
        self, mock_gateway: MagicMock, smtp_config: SmtpConfig
    ) -> None:
        with pytest.raises(ValueError):
            RetryScheduler(mock_gateway, smtp_config, max_attempts=0)

    async def test_rejects_zero_per_call_attempts(
        self, scheduler: RetryScheduler, sample_message: Message
    ) -> None:
        with pytest.raises(ValueError):
            await scheduler.attempt(sample_message, SENDER, max_attempts=0)
