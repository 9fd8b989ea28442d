"""
Application-level exceptions shared by the model, repository, service and API layers.
"""

from typing import Any, Iterable


class ClassroomError(Exception):
    """
    Base exception for every error the application raises on purpose.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['name'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate_name', 'invalid_argument') used by clients
    """

    # Map canonical error_code -> HTTP status.
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "duplicate_name": 409,
        "not_found": 404,
        "section_not_found": 404,
        "invalid_argument": 400,
        "repository_error": 500,
        # fallback: 400 for anything else raised on purpose
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict[str, Any]:
        """
        Return the JSON-serializable part of an error response that the exception owns.

        Standard shape:
            {
                "error": "duplicate_name",     # canonical code
                "message": "A human-friendly message",
                "fields": ["name"],            # optional
            }
        The API layer adds timestamp, status and path. `constraint` is never included.
        """
        payload: dict[str, Any] = {
            "error": self.error_code or "bad_request",
            "message": self.message,
        }
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        """
        Return the HTTP status code that should accompany this error.
        Unknown or missing codes map to 400 (Bad Request).
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class RepositoryError(ClassroomError):
    """
    Infrastructure failure while talking to the database (connectivity, unexpected driver error).
    Never used for business rules; "not found" is an absent result, not a RepositoryError.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str = "repository_error"):
        super().__init__(message, fields=fields, constraint=constraint, error_code=error_code)


class NotFoundError(ClassroomError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None,
                 error_code: str = "not_found"):
        super().__init__(message, fields=fields, error_code=error_code)


class SectionNotFoundError(NotFoundError):
    """No class section matched a lookup by id or a targeted search."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="section_not_found")


class DuplicateError(ClassroomError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str = "duplicate"):
        super().__init__(message, fields=fields, constraint=constraint, error_code=error_code)


class DuplicateNameError(DuplicateError):
    """A class section with the same (case-insensitive) name already exists."""

    def __init__(self, name: str, *, constraint: str | None = None):
        super().__init__(
            f"A class section named '{name}' already exists",
            fields=["name"],
            constraint=constraint,
            error_code="duplicate_name",
        )
        self.name = name


class FieldViolation:
    """One rejected field: its name, why it was rejected and the offending value."""

    __slots__ = ("field", "message", "rejected_value")

    def __init__(self, field: str, message: str, rejected_value: Any = None):
        self.field = field
        self.message = message
        self.rejected_value = None if rejected_value is None else str(rejected_value)

    def to_dict(self) -> dict[str, str | None]:
        return {"field": self.field, "message": self.message, "rejected_value": self.rejected_value}

    def __repr__(self) -> str:
        return f"FieldViolation(field={self.field!r}, message={self.message!r})"


class InvalidArgumentError(ClassroomError):
    """
    Raised when a value breaks a field rule (blank name, term outside 1..10, ...).

    Every invalid field is reported at once through `violations`.
    """

    def __init__(self, message: str, *, violations: Iterable[FieldViolation] | None = None,
                 constraint: str | None = None):
        self.violations = list(violations) if violations else []
        super().__init__(
            message,
            fields=[v.field for v in self.violations] or None,
            constraint=constraint,
            error_code="invalid_argument",
        )

    @classmethod
    def from_violations(cls, violations: list[FieldViolation]) -> "InvalidArgumentError":
        return cls("; ".join(v.message for v in violations), violations=violations)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.violations:
            payload["field_errors"] = [v.to_dict() for v in self.violations]
        return payload


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
