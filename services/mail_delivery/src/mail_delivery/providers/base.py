"""Abstract transport gateway interface."""

from abc import ABC, abstractmethod
from typing import Protocol

from shared.enums import TransportMode

from mail_delivery.models import Message, SendReceipt


class MailTransport(Protocol):
    """The network client that hands a message to a mail relay."""

    async def send_mail(
        self, sender: str, recipient: str, subject: str, html: str
    ) -> str:
        """Send one HTML message and return the transport's message id."""
        ...


class TransportGateway(ABC):
    """Base class for the live and logged delivery modes."""

    mode: TransportMode

    @abstractmethod
    async def send(self, message: Message, sender: str) -> SendReceipt:
        """Attempt a single send.

        Raises TransportError when the transport rejects the message.
        Implementations never retry; that is RetryScheduler's job.
        """
