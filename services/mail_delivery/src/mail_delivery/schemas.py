"""Request bodies accepted by the HTTP gateway."""

import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

# Names and labels are trimmed; passwords are taken exactly as sent.
Label = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")

    to: EmailStr
    name: Label
    event_name: Label


class CredentialsRequest(_Request):
    """Body for registration-approved and credentials emails."""

    username: Label
    password: str = Field(min_length=1)


class TestStartReminderRequest(_Request):
    round_name: Label
    start_time: datetime.datetime


class ResultPublishedRequest(_Request):
    score: float
    rank: int = Field(ge=1)
