"""
Class section repository: every query the service layer needs against `class_sections`.

Pure data access, no business rules. "Not found" is an empty list / None / False, never
an exception; only infrastructure failures raise (RepositoryError and friends).

Case-insensitive matching compares the case-folded `name_key` / `course_key` columns with an
argument folded the same way in Python (`fold_case`), so every backend agrees with the
in-memory predicates on ClassSection. The database LOWER() is never used.
"""

from sqlalchemy import select, func, and_, ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from classroom.models.section import ClassSection
from classroom.validators.field_validators import LIKE_ESCAPE_CHAR, escape_like, fold_case
from .base_repository import BaseRepository, RepositoryError

logger = logging.getLogger(__name__)


def _contains_ignore_case(key_column, fragment: str) -> ColumnElement[bool]:
    pattern = f"%{escape_like(fragment.lower())}%"
    return key_column.like(pattern, escape=LIKE_ESCAPE_CHAR)


def _equals_ignore_case(key_column, value: str) -> ColumnElement[bool]:
    return key_column == fold_case(value)


class ClassSectionRepository(BaseRepository[ClassSection]):
    """
    Repository for ClassSection entity operations.

    Inherits save / get_by_id / get_all / exists / delete / count from `BaseRepository`
    and adds the section-specific lookups.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(ClassSection, db)

    # =================================================================================================================
    # Single entity lookups
    # =================================================================================================================

    async def find_by_id(self, section_id: int) -> ClassSection | None:
        return await self.get_by_id(section_id)

    async def find_by_name_exact(self, name: str) -> ClassSection | None:
        """
        Case-insensitive exact match on name. Names are unique, so at most one row matches.
        """
        query = select(ClassSection).where(_equals_ignore_case(ClassSection.name_key, name))
        return await self._one_or_none(query, "find_by_name_exact", name=name)

    # =================================================================================================================
    # Multi entity lookups
    # =================================================================================================================

    async def find_all(self) -> list[ClassSection]:
        return await self.get_all()

    async def find_by_name_containing(self, fragment: str) -> list[ClassSection]:
        """Case-insensitive substring match on name."""
        query = (
            select(ClassSection)
            .where(_contains_ignore_case(ClassSection.name_key, fragment))
            .order_by(ClassSection.name)
        )
        return await self._list(query, "find_by_name_containing", name=fragment)

    async def find_by_course_containing(self, fragment: str) -> list[ClassSection]:
        """Case-insensitive substring match on course."""
        query = (
            select(ClassSection)
            .where(_contains_ignore_case(ClassSection.course_key, fragment))
            .order_by(ClassSection.name)
        )
        return await self._list(query, "find_by_course_containing", course=fragment)

    async def find_by_term(self, term: int) -> list[ClassSection]:
        query = select(ClassSection).where(ClassSection.term == term).order_by(ClassSection.name)
        return await self._list(query, "find_by_term", term=term)

    async def find_by_course_and_term(self, course: str, term: int) -> list[ClassSection]:
        """Case-insensitive exact course match AND exact term match."""
        query = (
            select(ClassSection)
            .where(
                _equals_ignore_case(ClassSection.course_key, course),
                ClassSection.term == term,
            )
            .order_by(ClassSection.name)
        )
        return await self._list(query, "find_by_course_and_term", course=course, term=term)

    async def find_with_filters(
        self,
        name: str | None = None,
        course: str | None = None,
        term: int | None = None,
    ) -> list[ClassSection]:
        """
        Dynamic search: only the filters that are supplied become predicates.

        - name / course: case-insensitive substring match
        - term: exact match
        - supplied predicates are combined with AND; no filters at all returns every section
        - results are ordered by name ascending

        A None filter means "no constraint on this field" (the predicate is not added),
        which is different from matching NULL.
        """
        conditions: list[ColumnElement[bool]] = []
        if name is not None:
            conditions.append(_contains_ignore_case(ClassSection.name_key, name))
        if course is not None:
            conditions.append(_contains_ignore_case(ClassSection.course_key, course))
        if term is not None:
            conditions.append(ClassSection.term == term)

        query = select(ClassSection)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(ClassSection.name.asc(), ClassSection.id.asc())

        return await self._list(query, "find_with_filters", name=name, course=course, term=term)

    # =================================================================================================================
    # Counting / existence
    # =================================================================================================================

    async def count_by_course(self, course: str) -> int:
        query = select(func.count(ClassSection.id)).where(_equals_ignore_case(ClassSection.course_key, course))
        return await self._scalar_count(query, "count_by_course", course=course)

    async def count_by_term(self, term: int) -> int:
        return await self.count(term=term)

    async def exists_by_name(self, name: str) -> bool:
        query = select(ClassSection.id).where(_equals_ignore_case(ClassSection.name_key, name)).limit(1)
        return await self._exists(query, "exists_by_name", name=name)

    async def exists_by_id(self, section_id: int) -> bool:
        return await self.exists(section_id)

    async def exists_by_course_and_term(self, course: str, term: int) -> bool:
        query = (
            select(ClassSection.id)
            .where(_equals_ignore_case(ClassSection.course_key, course), ClassSection.term == term)
            .limit(1)
        )
        return await self._exists(query, "exists_by_course_and_term", course=course, term=term)

    # =================================================================================================================
    # Query execution helpers
    # =================================================================================================================

    async def _list(self, query, operation: str, **params) -> list[ClassSection]:
        try:
            result = await self.db.execute(query)
            sections = list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error running {operation} on ClassSection with {params}: {e}")
            raise RepositoryError("Failed to retrieve ClassSection entities") from e

        logger.debug(
            "repo.query",
            extra={"model": "ClassSection", "operation": operation, "params": params, "rows": len(sections)},
        )
        return sections

    async def _one_or_none(self, query, operation: str, **params) -> ClassSection | None:
        try:
            result = await self.db.execute(query)
            section = result.scalars().first()
        except Exception as e:
            logger.error(f"Error running {operation} on ClassSection with {params}: {e}")
            raise RepositoryError("Failed to retrieve ClassSection") from e

        logger.debug(
            "repo.query",
            extra={"model": "ClassSection", "operation": operation, "params": params, "found": section is not None},
        )
        return section

    async def _scalar_count(self, query, operation: str, **params) -> int:
        try:
            result = await self.db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Error running {operation} on ClassSection with {params}: {e}")
            raise RepositoryError("Failed to count ClassSection entities") from e

    async def _exists(self, query, operation: str, **params) -> bool:
        try:
            result = await self.db.execute(query)
            return result.scalar() is not None
        except Exception as e:
            logger.error(f"Error running {operation} on ClassSection with {params}: {e}")
            raise RepositoryError("Failed to check ClassSection existence") from e
