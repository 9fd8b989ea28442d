import pytest

from classroom.exceptions.base import DuplicateError, RepositoryError
from classroom.models.section import ClassSection
from classroom.repositories.base_repository import BaseRepository

pytestmark = pytest.mark.repository


@pytest.fixture
async def base_repo(db_session) -> BaseRepository[ClassSection]:
    return BaseRepository(ClassSection, db_session)


class TestBaseRepositorySave:

    async def test_save_assigns_identifier(self, base_repo, sample_section_data):
        """
        Behavior:
            - save() a new entity built through the validating factory.

        Importance:
            - the database assigns the id on flush; the service relies on it being
              populated before the transaction is committed.
        """
        # Arrange
        section = ClassSection.create(**sample_section_data)

        # Act
        saved = await base_repo.save(section)

        # Assert
        assert saved is section
        assert isinstance(saved.id, int)
        assert saved.id > 0
        assert saved.name == sample_section_data["name"]

    async def test_save_existing_entity_flushes_changes(self, base_repo, create_section):
        section = await create_section(term=2)

        section.update(section.name, section.course, 5, None)
        await base_repo.save(section)

        reloaded = await base_repo.get_by_id(section.id)
        assert reloaded.term == 5
        assert reloaded.description is None

    async def test_save_duplicate_name_ignoring_case_raises_duplicate(self, base_repo, create_section):
        """
        Behavior:
            - two names differing only by case hit the unique constraint on name_key.

        Importance:
            - this is the database-level guarantee behind the "names are unique" rule;
              the IntegrityError must surface as DuplicateError, never as a raw driver error.
        """
        await create_section(name="Physics-1")

        with pytest.raises(DuplicateError) as exc_info:
            await base_repo.save(ClassSection.create("PHYSICS-1", "Physics", 1))

        assert exc_info.value.http_status() == 409

    async def test_save_duplicate_accented_name_raises_duplicate(self, base_repo, create_section):
        await create_section(name="Álgebra Linear")

        with pytest.raises(DuplicateError) as exc_info:
            await base_repo.save(ClassSection.create("ÁLGEBRA LINEAR", "Matemática", 1))

        assert exc_info.value.fields == ["name_key"]


class TestBaseRepositoryRead:

    async def test_get_by_id_missing_returns_none(self, base_repo):
        assert await base_repo.get_by_id(999_999) is None

    async def test_get_all_orders_by_id(self, base_repo, many_sections):
        result = await base_repo.get_all()

        assert [s.id for s in result] == sorted(s.id for s in many_sections)

    async def test_exists(self, base_repo, create_section):
        section = await create_section()

        assert await base_repo.exists(section.id) is True
        assert await base_repo.exists(section.id + 1000) is False

    async def test_count_with_and_without_filters(self, base_repo, many_sections):
        assert await base_repo.count() == 5
        assert await base_repo.count(term=2) == 3
        # None filters and unknown fields are ignored
        assert await base_repo.count(term=None, colour="red") == 5

    async def test_read_failure_is_wrapped_in_repository_error(self, base_repo, monkeypatch):
        async def broken_get(*args, **kwargs):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(base_repo.db, "get", broken_get)

        with pytest.raises(RepositoryError) as exc_info:
            await base_repo.get_by_id(1)

        assert exc_info.value.http_status() == 500
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestBaseRepositoryDelete:

    async def test_delete_entity(self, base_repo, create_section):
        section = await create_section()
        section_id = section.id

        await base_repo.delete(section)

        assert await base_repo.exists(section_id) is False

    async def test_delete_by_id(self, base_repo, create_section):
        section = await create_section()

        assert await base_repo.delete_by_id(section.id) is True
        assert await base_repo.delete_by_id(section.id) is False
