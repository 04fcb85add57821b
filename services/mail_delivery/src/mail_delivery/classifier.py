"""Transport error taxonomy and retry policy.

Raw exceptions from the mail transport are reduced to a small, fixed set of
categories.  Matching runs against a lowercased rendering of the error chain
(class names, messages and errno symbols) plus any structured SMTP reply code
the exception carries.

Retry policy follows SMTP semantics: 4xx replies and transient network
conditions are worth another attempt, 5xx replies and credential problems
are not.
"""

from __future__ import annotations

import errno
import re
from dataclasses import dataclass
from enum import StrEnum

from mail_delivery.exceptions import TransportError

_CODE_ATTRS = ("code", "smtp_code", "response_code", "responseCode")
_MAX_CHAIN_DEPTH = 5

# An SMTP reply code at the start of a message, after "(" as in aiosmtplib's
# "(421, '...')" args, or after whitespace.  Ports ("host:587", "on port
# 587") and dotted enhanced status codes ("5.7.8") are not matched.
_TEXT_CODE_RE = re.compile(r"(?:^|[\s(])(?<!port )([45]\d\d)(?=[\s,\-]|$)")


class ErrorCategory(StrEnum):
    AUTHENTICATION_FAILED = "authentication_failed"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_RESET = "connection_reset"
    SOCKET_CLOSED = "socket_closed"
    TIMEOUT = "timeout"
    TLS_ERROR = "tls_error"
    DNS_FAILURE = "dns_failure"
    NETWORK_ERROR = "network_error"
    PROTOCOL_ERROR = "protocol_error"
    UNKNOWN = "unknown"


_TRANSIENT_CATEGORIES = frozenset({
    ErrorCategory.CONNECTION_REFUSED,
    ErrorCategory.CONNECTION_RESET,
    ErrorCategory.TIMEOUT,
    ErrorCategory.NETWORK_ERROR,
})

_AUTH_PATTERNS = (
    "invalid login",
    "smtpauthenticationerror",
    "authentication failed",
    "authentication unsuccessful",
    "authentication credentials invalid",
    "username and password not accepted",
    "bad credentials",
    "auth failed",
)
_REFUSED_PATTERNS = ("connection refused", "econnrefused", "connect call failed")
_RESET_PATTERNS = ("connection reset", "econnreset", "reset by peer")
_CLOSED_PATTERNS = (
    "socket hang up",
    "smtpserverdisconnected",
    "server disconnected",
    "connection lost",
    "connection closed",
    "unexpectedly closed",
    "unexpected eof",
    "broken pipe",
    "epipe",
)
_TIMEOUT_PATTERNS = ("timed out", "timeout", "etimedout")
_TLS_PATTERNS = ("ssl", "tls", "certificate", "wrong_version_number")
_DNS_PATTERNS = (
    "gaierror",
    "getaddrinfo",
    "enotfound",
    "name or service not known",
    "nodename nor servname",
    "name resolution",
    "no address associated",
)
_NETWORK_PATTERNS = ("network", "enetunreach", "ehostunreach", "no route to host")
_PROTOCOL_PATTERNS = (
    "protocol",
    "smtpresponseexception",
    "smtpdataerror",
    "smtpheloerror",
    "smtpsenderrefused",
    "smtprecipientrefused",
    "smtprecipientsrefused",
    "smtpnotsupported",
)

_TRANSIENT_PATTERNS = (
    "network",
    "timeout",
    "econnrefused",
    "connection refused",
    "econnreset",
    "connection reset",
    "etimedout",
    "timed out",
    "temporary failure",
    "connection timeout",
    "socket hang up",
)

_PATTERN_TABLE: tuple[tuple[ErrorCategory, tuple[str, ...]], ...] = (
    (ErrorCategory.CONNECTION_REFUSED, _REFUSED_PATTERNS),
    (ErrorCategory.CONNECTION_RESET, _RESET_PATTERNS),
    (ErrorCategory.SOCKET_CLOSED, _CLOSED_PATTERNS),
    (ErrorCategory.TIMEOUT, _TIMEOUT_PATTERNS),
    (ErrorCategory.TLS_ERROR, _TLS_PATTERNS),
    (ErrorCategory.DNS_FAILURE, _DNS_PATTERNS),
    (ErrorCategory.NETWORK_ERROR, _NETWORK_PATTERNS),
)


@dataclass(frozen=True, slots=True)
class Classification:
    """An error category plus the SMTP reply code, when one was seen."""

    category: ErrorCategory
    code: int | None = None

    def __str__(self) -> str:
        if self.category is ErrorCategory.PROTOCOL_ERROR and self.code is not None:
            return f"{self.category.value}({self.code})"
        return self.category.value

    @property
    def retryable(self) -> bool:
        if self.category is ErrorCategory.PROTOCOL_ERROR:
            return self.code is not None and 400 <= self.code <= 499
        return self.category in _TRANSIENT_CATEGORIES


ErrorLike = BaseException | str


def classify(error: ErrorLike) -> Classification:
    """Map any transport failure to a :class:`Classification`.

    Never raises; anything unrecognised becomes ``UNKNOWN``.
    """
    text = _error_text(error)
    code = extract_code(error)

    if code == 535 or _matches(text, _AUTH_PATTERNS):
        return Classification(ErrorCategory.AUTHENTICATION_FAILED, code)

    for category, patterns in _PATTERN_TABLE:
        if _matches(text, patterns):
            return Classification(category, code)

    if code is not None and 400 <= code <= 599:
        return Classification(ErrorCategory.PROTOCOL_ERROR, code)
    if _matches(text, _PROTOCOL_PATTERNS):
        return Classification(ErrorCategory.PROTOCOL_ERROR, code)

    return Classification(ErrorCategory.UNKNOWN, code)


def is_retryable(error: ErrorLike | Classification) -> bool:
    """Decide whether another attempt could succeed.

    5xx replies and authentication failures are permanent even when the
    message also mentions something transient.
    """
    if isinstance(error, Classification):
        return error.retryable

    code = extract_code(error)
    text = _error_text(error)

    if code is not None and 500 <= code <= 599:
        return False
    if code == 535 or _matches(text, _AUTH_PATTERNS):
        return False
    if code is not None and 400 <= code <= 499:
        return True
    return _matches(text, _TRANSIENT_PATTERNS)


def extract_code(error: ErrorLike) -> int | None:
    """Return the SMTP reply code attached to *error*, if any.

    Structured attributes win over codes found in the message text.
    """
    if isinstance(error, BaseException):
        for exc in _chain(error):
            for attr in _CODE_ATTRS:
                code = _as_code(getattr(exc, attr, None))
                if code is not None:
                    return code

    match = _TEXT_CODE_RE.search(_error_text(error))
    if match:
        return int(match.group(1))
    return None


def describe(
    classification: Classification,
    *,
    host: str | None = None,
    port: int | None = None,
    user: str | None = None,
    detail: str | None = None,
) -> str:
    """Build an operator-facing diagnostic for a failed delivery."""
    endpoint = f"{host or '<unset host>'}:{port if port is not None else '<unset port>'}"
    category = classification.category

    if category is ErrorCategory.AUTHENTICATION_FAILED:
        text = (
            f"authentication failed for SMTP user '{user or '<unset>'}'; "
            "check SMTP_USER and SMTP_PASS"
        )
    elif category is ErrorCategory.CONNECTION_REFUSED:
        text = f"connection refused by {endpoint}; check SMTP_HOST and SMTP_PORT"
    elif category is ErrorCategory.CONNECTION_RESET:
        text = f"connection to {endpoint} was reset by the server"
    elif category is ErrorCategory.SOCKET_CLOSED:
        text = f"connection to {endpoint} closed unexpectedly"
    elif category is ErrorCategory.TIMEOUT:
        text = f"timed out talking to {endpoint}"
    elif category is ErrorCategory.TLS_ERROR:
        text = (
            f"TLS negotiation with {endpoint} failed; check SMTP_PORT "
            "(465 uses implicit TLS) and SMTP_VALIDATE_CERTS"
        )
    elif category is ErrorCategory.DNS_FAILURE:
        text = f"could not resolve SMTP host '{host or '<unset>'}'; check SMTP_HOST"
    elif category is ErrorCategory.NETWORK_ERROR:
        text = f"network error reaching {endpoint}"
    elif category is ErrorCategory.PROTOCOL_ERROR:
        code = classification.code if classification.code is not None else "?"
        text = f"SMTP server {endpoint} rejected the message with code {code}"
    else:
        text = "unexpected transport error"

    message = f"{classification}: {text}"
    if detail:
        message = f"{message} ({detail})"
    return message


def error_detail(error: ErrorLike, limit: int = 200) -> str:
    """First line of the innermost error message, for diagnostics."""
    if isinstance(error, TransportError):
        error = error.cause
    raw = str(error).strip() or type(error).__name__
    first_line = raw.splitlines()[0]
    return first_line[:limit]


def _chain(error: BaseException) -> list[BaseException]:
    """The error, its causes and contexts, without TransportError wrappers."""
    seen: list[BaseException] = []
    current: BaseException | None = error
    while current is not None and len(seen) < _MAX_CHAIN_DEPTH:
        if current in seen:
            break
        if isinstance(current, TransportError):
            current = current.cause
            continue
        seen.append(current)
        current = current.__cause__ or current.__context__
    return seen


def _error_text(error: ErrorLike) -> str:
    if isinstance(error, str):
        return error.lower()

    parts: list[str] = []
    for exc in _chain(error):
        part = f"{type(exc).__name__}: {exc}"
        err_no = getattr(exc, "errno", None)
        if isinstance(err_no, int) and err_no in errno.errorcode:
            part = f"{part} [{errno.errorcode[err_no]}]"
        parts.append(part)
    return " | ".join(parts).lower()


def _as_code(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        code = value
    elif isinstance(value, str) and value.strip().isdigit():
        code = int(value.strip())
    else:
        return None
    return code if 100 <= code <= 599 else None


def _matches(text: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern in text for pattern in patterns)
