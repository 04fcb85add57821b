"""Structured JSON logging setup for all services."""

import json
import logging
import sys
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else was passed via `extra`.
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    | {"message", "asctime", "taskName"}
)

REDACTED = "[redacted]"
DEFAULT_REDACT = frozenset({"password", "smtp_pass", "pass"})


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with `extra` fields inlined.

    The timestamp is when the record was created, in UTC.  Extra fields
    whose name is in *redact* are replaced by a placeholder so credentials
    passed as log context never reach the sink.
    """

    def __init__(
        self,
        service: str | None = None,
        redact: Iterable[str] = DEFAULT_REDACT,
    ) -> None:
        super().__init__()
        self._service = service
        self._redact = frozenset(key.lower() for key in redact)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service:
            entry["service"] = self._service

        entry.update(
            (key, REDACTED if key.lower() in self._redact else value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED
        )

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    suppress: Sequence[str] = (),
    service: str | None = None,
) -> None:
    """Send JSON lines for every logger to stdout.

    Args:
        level: Root log level (e.g. "INFO", "DEBUG").
        suppress: Logger names held at WARNING, for chatty libraries such
                  as "aiosmtplib" and "werkzeug".
        service: Name stamped on every line.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service=service))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in suppress:
        logging.getLogger(name).setLevel(logging.WARNING)
