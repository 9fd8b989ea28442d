r"""
Map low-level database failures to the application's public exceptions.

Two levels of exception handling:

1. Constraint-specific errors (`integrity_classifier.py`): internal labels that say
   *what* failed in the database (unique index, NOT NULL, CHECK). Never raised to callers.
2. App-level errors (`base.py`): what the rest of the application understands
   (`DuplicateError`, `InvalidArgumentError`, `RepositoryError`).

| Constraint-level (internal) | → | App-level (external)     |
| --------------------------- | - | ------------------------ |
| `UniqueConstraintError`     | → | `DuplicateError`         |
| `NotNullConstraintError`    | → | `InvalidArgumentError`   |
| `CheckConstraintError`      | → | `InvalidArgumentError`   |
| anything else               | → | `RepositoryError`        |
"""
import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    CheckConstraintError,
)
from .base import (
    ClassroomError,
    DuplicateError,
    FieldViolation,
    InvalidArgumentError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

def _clean_column(token: str) -> str | None:
    """
    Reduce a raw column token to a bare column name.
      - '"name_key"'              -> 'name_key'
      - 'class_sections.name_key' -> 'name_key'   (SQLite qualified name)
    """
    token = token.split(".")[-1].strip().strip('"')
    return token if re.fullmatch(r"\w+", token) else None


def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Try to extract involved column names from common Postgres messages:
      - 'null value in column "name" violates not-null constraint'
      - 'DETAIL:  Key (name_key)=(cs101-a) already exists.'
    """
    if not msg:
        return None

    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>.+?)\)=\(', msg, flags=re.IGNORECASE)
    if m:
        cols = [_clean_column(c) for c in m.group("cols").split(",")]
        return [c for c in cols if c] or None

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # SQLite: 'UNIQUE constraint failed: class_sections.name_key' / 'NOT NULL constraint failed: class_sections.course'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        cols = [_clean_column(c) for c in re.split(r',\s*', m.group("cols"))]
        return [c for c in cols if c] or None
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    return _extract_columns_postgres(msg) or _extract_columns_sqlite(msg)


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    Populates `.fields` and `.constraint` where possible.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)

    model_part = model_name or "Record"

    if exc_cls is UniqueConstraintError:
        # Duplicates are expected client-level scenarios (409), INFO is enough
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(
                f"{model_part} already exists for field(s): {', '.join(columns)}",
                fields=columns, constraint=constraint_name,
            ) from exc
        raise DuplicateError(f"{model_part} already exists", constraint=constraint_name) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        violations = [FieldViolation(col, f"{col} is required") for col in (columns or [])]
        raise InvalidArgumentError(
            f"Missing required field(s) for {model_part}", violations=violations, constraint=constraint_name
        ) from exc

    if exc_cls is CheckConstraintError:
        raw = str(exc.orig) if exc.orig is not None else str(exc)
        # raw DB text stays at DEBUG and never reaches the client
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": raw, "constraint": constraint_name},
        )
        raise InvalidArgumentError(
            f"{model_part} business rule violated (check constraint).", constraint=constraint_name
        ) from exc

    raw = str(exc.orig) if exc.orig is not None else str(exc)
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})

    raise RepositoryError(f"{model_part} database integrity error.") from exc


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, self.model.__name__):
            ... DB ops that may raise IntegrityError ...
    This will rollback on error and raise a mapped app-level exception.
    Application errors raised inside the block are re-raised unchanged after the rollback.
    """
    try:
        yield
    except IntegrityError as exc:
        await _safe_rollback(db, model_name, "IntegrityError")
        raise_mapped_integrity_error(exc, model_name)
    except ClassroomError:
        await _safe_rollback(db, model_name, "application error")
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name, "unexpected error")
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise RepositoryError(f"Failed to operate on {model_name or 'database'}") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None, reason: str) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("Failed to rollback session after %s", reason, extra={"model": model_name})
