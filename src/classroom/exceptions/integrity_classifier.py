"""
Tell which `class_sections` constraint an IntegrityError came from.

The table can only be violated three ways:
  - UNIQUE on `name_key`: two names equal ignoring case
  - NOT NULL on a required column
  - CHECK `term_range`: term outside 1..10

Postgres identifies the kind by SQLSTATE (plus the constraint name in `diag`); SQLite
only says it in the message text. The classes below are internal labels; `mapper.py`
turns them into the public exceptions from `base.py`.
"""
import logging
from typing import Type

from sqlalchemy.exc import IntegrityError

from .base import RepositoryError

logger = logging.getLogger(__name__)


class ConstraintViolationError(RepositoryError):
    """Base label for a violated table constraint."""


class UniqueConstraintError(ConstraintViolationError):
    """The name is already taken (ignoring case)."""


class NotNullConstraintError(ConstraintViolationError):
    """A required column was written as NULL."""


class CheckConstraintError(ConstraintViolationError):
    """The term_range check failed."""


class UnknownIntegrityError(ConstraintViolationError):
    """Anything the class_sections schema does not declare."""


# https://www.postgresql.org/docs/current/errcodes-appendix.html
SQLSTATE_KINDS: dict[str, Type[ConstraintViolationError]] = {
    "23505": UniqueConstraintError,
    "23502": NotNullConstraintError,
    "23514": CheckConstraintError,
}

# e.g. "UNIQUE constraint failed: class_sections.name_key"
SQLITE_MESSAGE_KINDS: tuple[tuple[str, Type[ConstraintViolationError]], ...] = (
    ("unique constraint failed", UniqueConstraintError),
    ("not null constraint failed", NotNullConstraintError),
    ("check constraint failed", CheckConstraintError),
)


def _sqlstate_of(orig) -> str | None:
    # psycopg 3 exposes `sqlstate`, psycopg2 exposes `pgcode`
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Returns:
        (constraint kind, constraint name). The name is only known on Postgres.
    """
    orig = exc.orig

    sqlstate = _sqlstate_of(orig)
    if sqlstate:
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", None)
        kind = SQLSTATE_KINDS.get(sqlstate, UnknownIntegrityError)
        logger.debug(
            "integrity.classified",
            extra={"sqlstate": sqlstate, "constraint_name": constraint_name, "kind": kind.__name__},
        )
        return kind, constraint_name

    message = str(orig).strip().lower()
    for prefix, kind in SQLITE_MESSAGE_KINDS:
        if message.startswith(prefix):
            return kind, None

    logger.warning("integrity.unclassified", extra={"message_snippet": str(orig)[:200]})
    return UnknownIntegrityError, None
