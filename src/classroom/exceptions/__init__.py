# classroom/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # App-level errors (NotFound, DuplicateName, InvalidArgument, ...)
# │   ├── integrity_classifier.py    # SQL-level / DB-specific errors
# │   └── mapper.py                  # Map SQL-level / DB-specific errors to app-level errors

from .base import (
    ClassroomError,
    RepositoryError,
    NotFoundError,
    SectionNotFoundError,
    DuplicateError,
    DuplicateNameError,
    FieldViolation,
    InvalidArgumentError,
)

__all__ = [
    "ClassroomError",
    "RepositoryError",
    "NotFoundError",
    "SectionNotFoundError",
    "DuplicateError",
    "DuplicateNameError",
    "FieldViolation",
    "InvalidArgumentError",
]
