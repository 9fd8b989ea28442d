from typing import Any

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from classroom.database.base import Base
from classroom.exceptions.base import FieldViolation, InvalidArgumentError
from classroom.validators.field_validators import fold_case, strip_or_none

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
COURSE_MIN_LENGTH = 2
COURSE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TERM_MIN = 1
TERM_MAX = 10


# -----------------------
# Field rules
# -----------------------
# Each rule returns the normalised value or a FieldViolation, never both.

def _check_required_text(field: str, value: Any, min_length: int, max_length: int) -> tuple[str | None, FieldViolation | None]:
    label = field.capitalize()
    if value is not None and not isinstance(value, str):
        return None, FieldViolation(field, f"{label} must be a string", value)
    cleaned = strip_or_none(value)
    if cleaned is None:
        return None, FieldViolation(field, f"{label} must not be null or blank", value)
    if not (min_length <= len(cleaned) <= max_length):
        return None, FieldViolation(
            field, f"{label} must be between {min_length} and {max_length} characters", value
        )
    return cleaned, None


def _check_term(value: Any) -> tuple[int | None, FieldViolation | None]:
    # bool is an int subclass; True must not silently become term 1
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        return None, FieldViolation("term", f"Term must be an integer between {TERM_MIN} and {TERM_MAX}", value)
    if not (TERM_MIN <= value <= TERM_MAX):
        return None, FieldViolation("term", f"Term must be between {TERM_MIN} and {TERM_MAX}", value)
    return value, None


def _check_description(value: Any) -> tuple[str | None, FieldViolation | None]:
    if value is not None and not isinstance(value, str):
        return None, FieldViolation("description", "Description must be a string", value)
    cleaned = strip_or_none(value)
    if cleaned is not None and len(cleaned) > DESCRIPTION_MAX_LENGTH:
        return None, FieldViolation(
            "description", f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters", value
        )
    return cleaned, None


def validate_section_fields(name: Any, course: Any, term: Any, description: Any = None) -> dict[str, Any]:
    """
    Validate and normalise all four mutable fields at once.

    Returns a dict ready to assign onto a ClassSection. Raises InvalidArgumentError
    listing every invalid field (not just the first one).
    """
    results = {
        "name": _check_required_text("name", name, NAME_MIN_LENGTH, NAME_MAX_LENGTH),
        "course": _check_required_text("course", course, COURSE_MIN_LENGTH, COURSE_MAX_LENGTH),
        "term": _check_term(term),
        "description": _check_description(description),
    }
    violations = [violation for _, violation in results.values() if violation is not None]
    if violations:
        raise InvalidArgumentError.from_violations(violations)
    return {field: value for field, (value, _) in results.items()}


def _raise_if_invalid(value: Any, violation: FieldViolation | None) -> Any:
    if violation is not None:
        raise InvalidArgumentError.from_violations([violation])
    return value


class ClassSection(Base):
    """
    SQLAlchemy model for a class section: a scheduled offering of a course in a given term.

    Invariants hold for every instance, not only at the API boundary:
      - name and course are trimmed, non-blank and 2..100 characters long
      - term is an integer in 1..10
      - description is either None or a trimmed, non-blank string of at most 500 characters

    Use `ClassSection.create(...)` to build new sections and `section.update(...)` to
    replace their data; both validate every field before touching the instance. The
    `@validates` hooks re-check any direct attribute assignment as well, and keep
    `name_key` / `course_key` in step with the values they fold.

    Equality is identifier-based: two sections are equal iff both have an id and the ids
    match. Unsaved sections are only equal to themselves.
    """
    __tablename__ = "class_sections"
    __table_args__ = (
        CheckConstraint(f"term BETWEEN {TERM_MIN} AND {TERM_MAX}", name="term_range"),
    )

    # Identity primary key, assigned by the database on first flush
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    course: Mapped[str] = mapped_column(String(COURSE_MAX_LENGTH), nullable=False)

    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)

    # Case-folded copies of name and course, kept in sync by the @validates hooks below.
    # Case-insensitive lookups and name uniqueness go through these columns, never through
    # the database's own LOWER(), which is ASCII-only on SQLite.
    # Twice as wide: lower-casing can lengthen a string ("İ" becomes two code points).
    name_key: Mapped[str] = mapped_column(String(2 * NAME_MAX_LENGTH), nullable=False, unique=True)

    course_key: Mapped[str] = mapped_column(String(2 * COURSE_MAX_LENGTH), nullable=False, index=True)

    # --- Factory / mutation ---

    @classmethod
    def create(cls, name: str, course: str, term: int, description: str | None = None) -> "ClassSection":
        """
        Build a new, unsaved section after validating every field.

        Raises:
            InvalidArgumentError: if any field breaks its rule (all violations are reported).
        """
        return cls(**validate_section_fields(name, course, term, description))

    def update(self, name: str, course: str, term: int, description: str | None = None) -> "ClassSection":
        """
        Replace all mutable fields in place.

        Every field is validated before any attribute is assigned, so a failing update
        leaves the instance exactly as it was. Partial updates are not supported: pass
        description=None to clear it.
        """
        values = validate_section_fields(name, course, term, description)
        for field, value in values.items():
            setattr(self, field, value)
        return self

    # --- Attribute-level guards ---

    @validates("name")
    def _validate_name(self, key: str, value: Any) -> str:
        name = _raise_if_invalid(*_check_required_text(key, value, NAME_MIN_LENGTH, NAME_MAX_LENGTH))
        self.name_key = fold_case(name)
        return name

    @validates("course")
    def _validate_course(self, key: str, value: Any) -> str:
        course = _raise_if_invalid(*_check_required_text(key, value, COURSE_MIN_LENGTH, COURSE_MAX_LENGTH))
        self.course_key = fold_case(course)
        return course

    @validates("term")
    def _validate_term(self, key: str, value: Any) -> int:
        return _raise_if_invalid(*_check_term(value))

    @validates("description")
    def _validate_description(self, key: str, value: Any) -> str | None:
        return _raise_if_invalid(*_check_description(value))

    # --- Predicates ---

    def has_description(self) -> bool:
        return self.description is not None and bool(self.description.strip())

    def has_name(self, name: str | None) -> bool:
        return name is not None and fold_case(self.name) == fold_case(name)

    def belongs_to_course(self, course: str | None) -> bool:
        return course is not None and fold_case(self.course) == fold_case(course)

    def is_term(self, term: int | None) -> bool:
        return self.term == term

    # --- Identity ---

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, ClassSection):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else object.__hash__(self)

    def __repr__(self) -> str:
        return (
            f"<ClassSection(id={self.id!r}, name={self.name!r}, "
            f"course={self.course!r}, term={self.term!r})>"
        )
