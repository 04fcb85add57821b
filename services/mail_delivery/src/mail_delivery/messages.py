"""Builders turning domain events into rendered messages."""

import datetime
from collections.abc import Mapping
from typing import Any

from shared.enums import AuditStatus, TemplateType

from mail_delivery import templates
from mail_delivery.models import Message


def registration_approved(
    to: str, name: str, event_name: str, username: str, password: str
) -> Message:
    return Message(
        recipient=to,
        subject=f"Registration Approved - {event_name}",
        body=templates.render(
            TemplateType.REGISTRATION_APPROVED,
            name=name,
            event_name=event_name,
            username=username,
            password=password,
        ),
        template_type=TemplateType.REGISTRATION_APPROVED,
        metadata={"event_name": event_name, "username": username},
    )


def credentials(
    to: str, name: str, event_name: str, username: str, password: str
) -> Message:
    return Message(
        recipient=to,
        subject=f"Your Credentials for {event_name}",
        body=templates.render(
            TemplateType.CREDENTIALS_DISTRIBUTION,
            name=name,
            event_name=event_name,
            username=username,
            password=password,
        ),
        template_type=TemplateType.CREDENTIALS_DISTRIBUTION,
        metadata={"event_name": event_name, "username": username},
    )


def test_start_reminder(
    to: str,
    name: str,
    event_name: str,
    round_name: str,
    start_time: datetime.datetime,
) -> Message:
    return Message(
        recipient=to,
        subject=f"Test Starting Soon - {round_name}",
        body=templates.render(
            TemplateType.TEST_START_REMINDER,
            name=name,
            event_name=event_name,
            round_name=round_name,
            start_time=start_time.strftime("%d %b %Y, %H:%M %Z").strip(),
        ),
        template_type=TemplateType.TEST_START_REMINDER,
        metadata={
            "event_name": event_name,
            "round_name": round_name,
            "start_time": start_time.isoformat(),
        },
    )


def result_published(
    to: str, name: str, event_name: str, score: float, rank: int
) -> Message:
    return Message(
        recipient=to,
        subject=f"Results Published - {event_name}",
        body=templates.render(
            TemplateType.RESULT_PUBLISHED,
            name=name,
            event_name=event_name,
            score=score,
            rank=rank,
        ),
        template_type=TemplateType.RESULT_PUBLISHED,
        metadata={"event_name": event_name, "score": score, "rank": rank},
    )


def admin_notification(
    to: str,
    email_type: str,
    recipient_email: str,
    recipient_name: str,
    event_name: str,
    details: Mapping[str, Any],
) -> Message:
    status = details.get("status", AuditStatus.SENT)
    return Message(
        recipient=to,
        subject=f"Email Activity: {email_type} to {recipient_name} ({status})",
        body=templates.render(
            TemplateType.ADMIN_NOTIFICATION,
            email_type=email_type,
            recipient_email=recipient_email,
            recipient_name=recipient_name,
            event_name=event_name,
            details=sorted((str(k), str(v)) for k, v in details.items()),
        ),
        template_type=TemplateType.ADMIN_NOTIFICATION,
        metadata={"email_type": email_type, "recipient_email": recipient_email},
    )
