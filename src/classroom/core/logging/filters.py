"""
Logging filters

Request ID filter and helpers for logging.

A per-request identifier lives in a `contextvars.ContextVar`, so it survives
`await` boundaries and stays isolated between concurrent requests. The
RequestIDMiddleware sets it; RequestIdFilter copies it onto every LogRecord so
formatters can reference `%(request_id)s` without a KeyError.

Records emitted outside a request carry the sentinel "-".
"""

import contextvars
import logging
from logging import LogRecord

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)

REDACTED = "***REDACTED***"


def set_request_id(request_id: str | None) -> contextvars.Token:
    """
    Set the request id in the current context and return the token to allow reset.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantees every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}`, then the contextvar,
    then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Masks `extra` attributes whose name looks like a credential."""

    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization", "database_url"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
        return True
