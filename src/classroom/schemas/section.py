"""
Request/response shapes for the class section API.

Input is normalised here, once, where user data enters the system: name and course are
trimmed and a blank description becomes None. The same rules are enforced again by the
ClassSection model, so the service cannot build an invalid entity even without this layer.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from classroom.models.section import (
    COURSE_MAX_LENGTH,
    COURSE_MIN_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    TERM_MAX,
    TERM_MIN,
)
from classroom.validators.field_validators import strip_or_none


class ClassSectionCreate(BaseModel):
    """Body of POST /sections."""

    name: str = Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH, examples=["CS101-A"])
    course: str = Field(min_length=COURSE_MIN_LENGTH, max_length=COURSE_MAX_LENGTH, examples=["Computer Science"])
    term: int = Field(ge=TERM_MIN, le=TERM_MAX, examples=[1])
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("name", "course", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_to_none(cls, value: Any) -> Any:
        return strip_or_none(value) if isinstance(value, str) else value


class ClassSectionUpdate(ClassSectionCreate):
    """
    Body of PUT /sections/{id}: a full replacement, every field is required again
    (description may be omitted or null to clear it).
    """


class ClassSectionRead(BaseModel):
    """Response shape for a single section."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    course: str
    term: int
    description: str | None = None
