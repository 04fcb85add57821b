import logging
from collections.abc import Callable, Coroutine
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import BaseModel, ValidationError

from mail_delivery.config import SmtpConfig
from mail_delivery.models import SendResult
from mail_delivery.runtime import LoopThread
from mail_delivery.schemas import (
    CredentialsRequest,
    ResultPublishedRequest,
    TestStartReminderRequest,
)
from mail_delivery.service import DeliveryService

logger = logging.getLogger(__name__)

bp = Blueprint("mail", __name__)


def _error(message: str, status: int, **extra: Any) -> tuple[Response, int]:
    body: dict[str, Any] = {"error": message}
    body.update(extra)
    return jsonify(body), status


def _service() -> DeliveryService:
    return current_app.extensions["delivery_service"]


def _send(
    model: type[BaseModel],
    operation: Callable[[DeliveryService, Any], Coroutine[Any, Any, SendResult]],
) -> tuple[Response, int]:
    body = request.get_json(silent=True)
    if body is None:
        return _error("Request body must be valid JSON", 400)
    if not isinstance(body, dict):
        return _error("Request body must be a JSON object", 400)

    try:
        payload = model.model_validate(body)
    except ValidationError as exc:
        return _error(
            "Payload validation failed",
            400,
            details=exc.errors(include_url=False, include_context=False),
        )

    loop: LoopThread = current_app.extensions["delivery_loop"]
    timeout = current_app.config.get("DELIVERY_REQUEST_TIMEOUT")
    result = loop.run(operation(_service(), payload), timeout=timeout)

    return jsonify(result.to_dict()), 200 if result.success else 502


@bp.post("/emails/registration-approved")
def registration_approved() -> tuple[Response, int]:
    return _send(
        CredentialsRequest,
        lambda service, p: service.send_registration_approved(
            str(p.to), p.name, p.event_name, p.username, p.password
        ),
    )


@bp.post("/emails/credentials")
def credentials() -> tuple[Response, int]:
    return _send(
        CredentialsRequest,
        lambda service, p: service.send_credentials(
            str(p.to), p.name, p.event_name, p.username, p.password
        ),
    )


@bp.post("/emails/test-start-reminder")
def test_start_reminder() -> tuple[Response, int]:
    return _send(
        TestStartReminderRequest,
        lambda service, p: service.send_test_start_reminder(
            str(p.to), p.name, p.event_name, p.round_name, p.start_time
        ),
    )


@bp.post("/emails/result-published")
def result_published() -> tuple[Response, int]:
    return _send(
        ResultPublishedRequest,
        lambda service, p: service.send_result_published(
            str(p.to), p.name, p.event_name, p.score, p.rank
        ),
    )


@bp.get("/transport")
def transport() -> tuple[Response, int]:
    """Read-only view of the resolved transport settings. Never exposes the password."""
    smtp_config: SmtpConfig = current_app.extensions["smtp_config"]
    return jsonify({
        "mode": str(_service().transport_mode),
        "host": smtp_config.host,
        "port": smtp_config.port,
        "implicit_tls": smtp_config.implicit_tls,
        "from": _service().sender,
    }), 200


@bp.get("/health")
def health() -> tuple[Response, int]:
    return jsonify({
        "status": "healthy",
        "checks": {"transport": str(_service().transport_mode)},
    }), 200
