"""Live SMTP delivery via aiosmtplib."""

import asyncio
import email.policy
import logging
from email.message import EmailMessage
from email.utils import make_msgid, parseaddr

import aiosmtplib

from shared.enums import TransportMode

from mail_delivery.config import SmtpConfig
from mail_delivery.exceptions import TransportError
from mail_delivery.models import Message, SendReceipt
from mail_delivery.providers.base import MailTransport, TransportGateway

logger = logging.getLogger(__name__)


class SmtpTransport:
    """Sends one message per connection to the configured relay.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS when
    the server offers it.  Connect, greeting and per-command socket
    timeouts come from :class:`SmtpConfig`.
    """

    def __init__(self, config: SmtpConfig) -> None:
        if not (config.host and config.user and config.password):
            raise ValueError("SmtpTransport requires SMTP host, user and password")
        self._config = config

    async def send_mail(
        self, sender: str, recipient: str, subject: str, html: str
    ) -> str:
        config = self._config
        message = _build_message(sender, recipient, subject, html)

        smtp = aiosmtplib.SMTP(
            hostname=config.host,
            port=config.port,
            use_tls=config.implicit_tls,
            start_tls=False if config.implicit_tls else None,
            validate_certs=config.validate_certs,
            timeout=config.socket_timeout,
        )
        try:
            await asyncio.wait_for(
                smtp.connect(timeout=config.connection_timeout),
                timeout=config.connection_timeout + config.greeting_timeout,
            )
            await smtp.login(config.user, config.password)
            await smtp.send_message(message, timeout=config.socket_timeout)
            await smtp.quit()
        finally:
            if smtp.is_connected:
                smtp.close()

        return str(message["Message-ID"])


class LiveGateway(TransportGateway):
    """Delegates to a real transport; failures surface as TransportError."""

    mode = TransportMode.LIVE

    def __init__(self, transport: MailTransport) -> None:
        self._transport = transport

    async def send(self, message: Message, sender: str) -> SendReceipt:
        try:
            message_id = await self._transport.send_mail(
                sender, message.recipient, message.subject, message.body
            )
        except Exception as exc:
            raise TransportError(exc) from exc

        logger.info(
            "Email accepted by relay",
            extra={
                "recipient": message.recipient,
                "template_type": str(message.template_type),
                "message_id": message_id,
            },
        )
        return SendReceipt(message_id=message_id)


def _build_message(sender: str, recipient: str, subject: str, html: str) -> EmailMessage:
    domain = parseaddr(sender)[1].rpartition("@")[2] or None
    message = EmailMessage(policy=email.policy.SMTP)
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    message["Message-ID"] = make_msgid(domain=domain)
    message.set_content(html, subtype="html", charset="utf-8")
    return message
