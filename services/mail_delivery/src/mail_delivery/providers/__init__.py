"""Transport gateways and mode resolution."""

import logging

from shared.enums import TransportMode

from mail_delivery.config import SmtpConfig
from mail_delivery.providers.base import MailTransport, TransportGateway
from mail_delivery.providers.logged import LoggedGateway
from mail_delivery.providers.smtp import LiveGateway, SmtpTransport

logger = logging.getLogger(__name__)

__all__ = [
    "LiveGateway",
    "LoggedGateway",
    "MailTransport",
    "SmtpTransport",
    "TransportGateway",
    "create_gateway",
]


def create_gateway(
    config: SmtpConfig, transport: MailTransport | None = None
) -> TransportGateway:
    """Resolve the transport mode once and build the matching gateway.

    *transport* replaces the aiosmtplib client in live mode (tests, other
    relays); it is ignored when credentials are missing.
    """
    if config.transport_mode is TransportMode.LIVE:
        logger.info(
            "Email service initialized with SMTP configuration",
            extra={
                "host": config.host,
                "port": config.port,
                "implicit_tls": config.implicit_tls,
            },
        )
        return LiveGateway(transport or SmtpTransport(config))

    logger.warning(
        "Email service running in logged mode: emails will be logged, not sent. "
        "Set SMTP_HOST, SMTP_USER and SMTP_PASS to enable sending."
    )
    return LoggedGateway()
