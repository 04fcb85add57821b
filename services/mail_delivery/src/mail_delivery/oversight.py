"""Single-shot activity notifications to the oversight recipient."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from shared.enums import UserRole

from mail_delivery import messages
from mail_delivery.providers.base import TransportGateway
from mail_delivery.stores import Directory, DirectoryUser

logger = logging.getLogger(__name__)


class OversightNotifier:
    """Tells the user holding the oversight role about delivery activity.

    Sends through the gateway directly, never through RetryScheduler, so a
    failing relay cannot produce retries of notifications about
    notifications.  Nothing here is audited and nothing propagates.
    """

    def __init__(
        self,
        gateway: TransportGateway,
        directory: Directory,
        sender: str,
        *,
        role: str = UserRole.SUPER_ADMIN,
    ) -> None:
        self._gateway = gateway
        self._directory = directory
        self._sender = sender
        self._role = role

    async def notify(
        self,
        template_type: str,
        recipient_address: str,
        recipient_name: str,
        event_name: str,
        details: Mapping[str, Any],
    ) -> None:
        log_ctx = {"template_type": str(template_type), "recipient": recipient_address}
        try:
            overseer = await self._find_overseer()
            if overseer is None:
                logger.warning(
                    "No %s found to notify about email activity",
                    self._role,
                    extra=log_ctx,
                )
                return

            message = messages.admin_notification(
                to=overseer.email,  # type: ignore[arg-type]
                email_type=str(template_type),
                recipient_email=recipient_address,
                recipient_name=recipient_name,
                event_name=event_name,
                details=details,
            )
            receipt = await self._gateway.send(message, self._sender)
            logger.info(
                "Admin notification sent",
                extra={
                    **log_ctx,
                    "overseer": overseer.email,
                    "mode": str(self._gateway.mode),
                    "message_id": receipt.message_id,
                },
            )
        except Exception:
            logger.exception("Failed to send admin notification", extra=log_ctx)

    async def _find_overseer(self) -> DirectoryUser | None:
        users = await asyncio.to_thread(self._directory.list_by_role, self._role)
        for user in users:
            if user.email:
                return user
        return None
