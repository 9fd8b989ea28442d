"""
Business rules for class sections.

The service sits between the HTTP layer and the repository:
  - it owns the transaction (repositories only flush; the service commits or rolls back)
  - it enforces the one cross-record rule: no two sections may share a name (case-insensitive)
  - it turns "nothing found" into SectionNotFoundError for lookups that target a specific
    record or filter, while plain listings (find_all / find_with_filters) may be empty
  - it maps entities to `ClassSectionRead` response objects
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from classroom.exceptions.base import DuplicateError, DuplicateNameError, SectionNotFoundError
from classroom.exceptions.mapper import db_error_handler
from classroom.models.section import ClassSection
from classroom.repositories.section_repository import ClassSectionRepository
from classroom.schemas.section import ClassSectionCreate, ClassSectionRead, ClassSectionUpdate
from classroom.validators.field_validators import strip_or_none

logger = logging.getLogger(__name__)


def _to_read(section: ClassSection) -> ClassSectionRead:
    return ClassSectionRead.model_validate(section)


class ClassSectionService:

    def __init__(self, db: AsyncSession, repository: ClassSectionRepository | None = None):
        self.db = db
        self.repository = repository or ClassSectionRepository(db)

    # =================================================================================================================
    # Writes
    # =================================================================================================================

    async def create_section(self, data: ClassSectionCreate) -> ClassSectionRead:
        """
        Create a section.

        Raises:
            DuplicateNameError: a section with the same name (ignoring case) already exists.
            InvalidArgumentError: a field breaks the entity rules.
        """
        logger.info("service.section.create", extra={"section_name": data.name})

        # Fast path only: the unique constraint on name_key is what actually guarantees
        # that two concurrent creates cannot both succeed.
        if await self.repository.exists_by_name(data.name):
            logger.info("service.section.duplicate_name", extra={"section_name": data.name})
            raise DuplicateNameError(data.name)

        section = ClassSection.create(data.name, data.course, data.term, data.description)

        async with self._transaction():
            await self._save(section, data.name)

        logger.info("service.section.created", extra={"section_id": section.id, "section_name": section.name})
        return _to_read(section)

    async def update_section(self, section_id: int, data: ClassSectionUpdate) -> ClassSectionRead:
        """
        Replace name, course, term and description of an existing section.

        All-or-nothing: if any field is invalid, nothing is changed.

        Raises:
            SectionNotFoundError: no section with that id.
            InvalidArgumentError: a field breaks the entity rules.
            DuplicateNameError: the new name belongs to another section.
        """
        logger.info("service.section.update", extra={"section_id": section_id})

        section = await self.repository.find_by_id(section_id)
        if section is None:
            raise self._not_found_by_id(section_id)

        async with self._transaction():
            holder = await self.repository.find_by_name_exact(data.name) if data.name else None
            if holder is not None and holder.id != section.id:
                raise DuplicateNameError(data.name)

            section.update(data.name, data.course, data.term, data.description)
            await self._save(section, data.name)

        logger.info("service.section.updated", extra={"section_id": section_id})
        return _to_read(section)

    async def delete_by_id(self, section_id: int) -> None:
        """
        Raises:
            SectionNotFoundError: no section with that id.
        """
        logger.info("service.section.delete", extra={"section_id": section_id})

        section = await self.repository.find_by_id(section_id)
        if section is None:
            raise self._not_found_by_id(section_id)

        async with self._transaction():
            await self.repository.delete(section)

        logger.info("service.section.deleted", extra={"section_id": section_id})

    # =================================================================================================================
    # Reads
    # =================================================================================================================

    async def find_by_id(self, section_id: int) -> ClassSectionRead:
        logger.debug(f"Looking up class section by id: {section_id}")
        section = await self.repository.find_by_id(section_id)
        if section is None:
            raise self._not_found_by_id(section_id)
        return _to_read(section)

    async def find_all(self) -> list[ClassSectionRead]:
        logger.debug("Listing all class sections")
        return [_to_read(s) for s in await self.repository.find_all()]

    async def find_by_name_containing(self, name: str) -> list[ClassSectionRead]:
        return await self._find_or_fail(
            lambda: self.repository.find_by_name_containing(name),
            f"No class section found with name containing: {name}",
        )

    async def find_by_course_containing(self, course: str) -> list[ClassSectionRead]:
        return await self._find_or_fail(
            lambda: self.repository.find_by_course_containing(course),
            f"No class section found for course: {course}",
        )

    async def find_by_term(self, term: int) -> list[ClassSectionRead]:
        return await self._find_or_fail(
            lambda: self.repository.find_by_term(term),
            f"No class section found for term: {term}",
        )

    async def find_by_course_and_term(self, course: str, term: int) -> list[ClassSectionRead]:
        return await self._find_or_fail(
            lambda: self.repository.find_by_course_and_term(course, term),
            f"No class section found for course '{course}' and term {term}",
        )

    async def find_with_filters(
        self,
        name: str | None = None,
        course: str | None = None,
        term: int | None = None,
    ) -> list[ClassSectionRead]:
        """
        Browse with optional filters. Blank name/course filters count as absent.
        An empty result is a normal outcome here, not an error.
        """
        name = strip_or_none(name)
        course = strip_or_none(course)
        logger.debug(
            "service.section.filter",
            extra={"filter_name": name, "filter_course": course, "filter_term": term},
        )
        sections = await self.repository.find_with_filters(name=name, course=course, term=term)
        return [_to_read(s) for s in sections]

    async def count_by_course(self, course: str) -> int:
        return await self.repository.count_by_course(course)

    async def count_by_term(self, term: int) -> int:
        return await self.repository.count_by_term(term)

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """
        Run the enclosed writes as one unit: commit on success, roll back on any error.
        """
        try:
            yield
            async with db_error_handler(self.db, ClassSection.__name__):
                await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _save(self, section: ClassSection, name: str) -> None:
        try:
            await self.repository.save(section)
        except DuplicateError as exc:
            # lost a race against a concurrent create/rename: the unique index said no
            raise DuplicateNameError(name, constraint=exc.constraint) from exc

    async def _find_or_fail(
        self,
        finder: Callable[[], Awaitable[list[ClassSection]]],
        message: str,
    ) -> list[ClassSectionRead]:
        sections = await finder()
        if not sections:
            logger.info("service.section.search_empty", extra={"reason": message})
            raise SectionNotFoundError(message)
        return [_to_read(s) for s in sections]

    @staticmethod
    def _not_found_by_id(section_id: int) -> SectionNotFoundError:
        return SectionNotFoundError(f"Class section not found with id: {section_id}")
