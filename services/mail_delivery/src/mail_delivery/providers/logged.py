"""Gateway used when no SMTP credentials are configured."""

import itertools
import logging
import time
from collections.abc import Callable

from shared.enums import TransportMode

from mail_delivery.models import Message, SendReceipt
from mail_delivery.providers.base import TransportGateway

logger = logging.getLogger(__name__)

MESSAGE_ID_PREFIX = "dev-mode-"


class LoggedGateway(TransportGateway):
    """Logs messages instead of sending them.

    Performs no network I/O and always succeeds, so the rest of the
    application keeps working in environments without a mail relay.
    """

    mode = TransportMode.LOGGED

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._sequence = itertools.count(1)

    async def send(self, message: Message, sender: str) -> SendReceipt:
        millis = int(self._clock() * 1000)
        message_id = f"{MESSAGE_ID_PREFIX}{millis}-{next(self._sequence)}"
        logger.info(
            "Email logged, not sent (no SMTP credentials configured)",
            extra={
                "recipient": message.recipient,
                "sender": sender,
                "subject": message.subject,
                "template_type": str(message.template_type),
                "message_id": message_id,
            },
        )
        return SendReceipt(message_id=message_id)
