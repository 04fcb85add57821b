"""Value objects passed between the delivery components."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from shared.enums import AuditStatus, TemplateType

from mail_delivery.classifier import Classification


class DeliveryOutcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class Message:
    """A rendered message ready to hand to a transport.

    ``metadata`` is copied into a read-only mapping, so the message cannot
    change after construction even if the caller mutates its dict.
    """

    recipient: str
    subject: str
    body: str
    template_type: TemplateType
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """What a gateway returns for an accepted message."""

    message_id: str


@dataclass(frozen=True, slots=True)
class SendResult:
    """Caller-visible outcome of one of the public send operations."""

    success: bool
    message_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.message_id is not None:
            body["message_id"] = self.message_id
        if self.error is not None:
            body["error"] = self.error
        return body


@dataclass(frozen=True, slots=True)
class DeliveryAttemptResult:
    """Final outcome of a bounded attempt sequence for one message."""

    outcome: DeliveryOutcome
    retry_count: int = 0
    message_id: str | None = None
    classification: Classification | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must not be negative")
        if self.outcome is DeliveryOutcome.SUCCESS:
            if not self.message_id or self.classification is not None:
                raise ValueError(
                    "a successful result needs a message_id and no error category"
                )
        elif self.message_id is not None or self.classification is None:
            raise ValueError(
                "a failed result needs an error category and no message_id"
            )

    @classmethod
    def succeeded(cls, message_id: str, retry_count: int) -> DeliveryAttemptResult:
        return cls(
            outcome=DeliveryOutcome.SUCCESS,
            message_id=message_id,
            retry_count=retry_count,
        )

    @classmethod
    def failed(
        cls,
        classification: Classification,
        error: str,
        retry_count: int,
    ) -> DeliveryAttemptResult:
        return cls(
            outcome=DeliveryOutcome.FAILURE,
            classification=classification,
            error=error,
            retry_count=retry_count,
        )

    @property
    def success(self) -> bool:
        return self.outcome is DeliveryOutcome.SUCCESS

    def to_send_result(self) -> SendResult:
        return SendResult(
            success=self.success,
            message_id=self.message_id,
            error=self.error,
        )


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """Immutable audit entry; exactly one is written per delivery."""

    recipient: str
    subject: str
    template_type: TemplateType
    status: AuditStatus
    metadata: Mapping[str, Any]
    recipient_name: str | None = None
    error_message: str | None = None

    @classmethod
    def from_result(
        cls,
        message: Message,
        result: DeliveryAttemptResult,
        recipient_name: str | None = None,
    ) -> AuditRecord:
        metadata = {**message.metadata, "retry_count": result.retry_count}
        if result.classification is not None:
            metadata["error_category"] = str(result.classification)
        return cls(
            recipient=message.recipient,
            recipient_name=recipient_name,
            subject=message.subject,
            template_type=message.template_type,
            status=AuditStatus.SENT if result.success else AuditStatus.FAILED,
            metadata=MappingProxyType(metadata),
            error_message=result.error,
        )
