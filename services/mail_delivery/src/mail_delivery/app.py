import atexit
import logging

from flask import Flask

from mail_delivery.config import GatewayConfig, SmtpConfig
from mail_delivery.log import setup_logging
from mail_delivery.routes import bp
from mail_delivery.runtime import LoopThread
from mail_delivery.service import DeliveryService

logger = logging.getLogger(__name__)


def create_app(
    service: DeliveryService,
    loop: LoopThread,
    smtp_config: SmtpConfig | None = None,
    gateway_config: GatewayConfig | None = None,
    log_level: str = "INFO",
) -> Flask:
    """Flask application factory.

    Args:
        service: Delivery service (real or built on fakes for tests).
        loop: Started event loop thread the views submit coroutines to.
        smtp_config: Settings reported by ``GET /transport``.
        gateway_config: HTTP settings; only the request timeout is used here.
        log_level: Root log level.
    """
    setup_logging(log_level)

    gateway_config = gateway_config or GatewayConfig()

    app = Flask(__name__)
    app.config["DELIVERY_REQUEST_TIMEOUT"] = gateway_config.request_timeout_seconds
    app.extensions["delivery_service"] = service
    app.extensions["delivery_loop"] = loop
    app.extensions["smtp_config"] = smtp_config or SmtpConfig()

    app.register_blueprint(bp)

    atexit.register(loop.stop, service.drain)

    logger.info(
        "Mail gateway initialized",
        extra={"mode": str(service.transport_mode)},
    )
    return app
