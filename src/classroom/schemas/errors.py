from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """
    Body of every error response.

        {
            "timestamp": "2026-10-19T12:00:00Z",
            "status": 404,
            "error": "section_not_found",
            "message": "Class section not found with id: 7",
            "path": "/api/v1/sections/7"
        }
    """

    timestamp: datetime = Field(default_factory=_utcnow)
    status: int
    error: str
    message: str
    path: str


class FieldErrorDetail(BaseModel):
    field: str
    message: str
    rejected_value: str | None = None


class ValidationErrorResponse(ErrorResponse):
    """Error body for field-level failures: lists every rejected field."""

    field_errors: list[FieldErrorDetail] = Field(default_factory=list)
