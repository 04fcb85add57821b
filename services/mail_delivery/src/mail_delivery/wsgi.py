"""WSGI entry point for gunicorn.

Usage:
    gunicorn mail_delivery.wsgi:app --bind 0.0.0.0:8000

Each worker process owns its own event loop thread and delivery service.
"""
from mail_delivery.app import create_app
from mail_delivery.bootstrap import build_service
from mail_delivery.config import DeliveryConfig, SmtpConfig
from mail_delivery.runtime import LoopThread

_delivery_config = DeliveryConfig()
_smtp_config = SmtpConfig()

app = create_app(
    build_service(_delivery_config, _smtp_config),
    LoopThread().start(),
    smtp_config=_smtp_config,
    log_level=_delivery_config.log_level,
)
