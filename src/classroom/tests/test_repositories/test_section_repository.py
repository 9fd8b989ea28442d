import pytest

pytestmark = pytest.mark.repository


def names(sections):
    return [s.name for s in sections]


class TestSingleLookups:

    async def test_find_by_id(self, section_repository, create_section):
        section = await create_section()

        assert await section_repository.find_by_id(section.id) is section
        assert await section_repository.find_by_id(section.id + 1000) is None

    async def test_find_by_name_exact_ignores_case_and_padding(self, section_repository, create_section):
        section = await create_section(name="CS101-A")

        assert await section_repository.find_by_name_exact("cs101-a") is section
        assert await section_repository.find_by_name_exact("  CS101-A ") is section
        assert await section_repository.find_by_name_exact("CS101") is None


class TestContainsSearches:

    async def test_find_by_name_containing_is_case_insensitive(self, section_repository, many_sections):
        result = await section_repository.find_by_name_containing("ALGEBRA")

        assert sorted(names(result), key=str.lower) == ["Algebra I", "algebra II"]

    async def test_find_by_name_containing_treats_wildcards_literally(self, section_repository, create_section):
        await create_section(name="100% Python")
        await create_section(name="Python_3")
        await create_section(name="Python 2")

        assert names(await section_repository.find_by_name_containing("%")) == ["100% Python"]
        assert names(await section_repository.find_by_name_containing("_")) == ["Python_3"]

    async def test_find_by_course_containing(self, section_repository, many_sections):
        result = await section_repository.find_by_course_containing("science")

        assert names(result) == ["Databases", "Networks"]

    async def test_no_match_returns_empty_list(self, section_repository, many_sections):
        assert await section_repository.find_by_name_containing("zzz") == []
        assert await section_repository.find_by_course_containing("zzz") == []


class TestTermSearches:

    async def test_find_by_term_orders_by_name(self, section_repository, create_section):
        await create_section(name="Zoology", term=4)
        await create_section(name="Botany", term=4)
        await create_section(name="Chemistry", term=5)

        assert names(await section_repository.find_by_term(4)) == ["Botany", "Zoology"]
        assert await section_repository.find_by_term(9) == []

    async def test_find_by_course_and_term_is_exact_on_course(self, section_repository, many_sections):
        result = await section_repository.find_by_course_and_term("MATHEMATICS", 2)

        assert sorted(names(result), key=str.lower) == ["algebra II", "Calculus"]
        # exact course match, not substring
        assert await section_repository.find_by_course_and_term("Math", 2) == []


class TestFindWithFilters:

    async def test_no_filters_returns_everything(self, section_repository, many_sections):
        result = await section_repository.find_with_filters()

        assert len(result) == len(many_sections)

    async def test_single_filters(self, section_repository, many_sections):
        assert len(await section_repository.find_with_filters(name="a")) == 4
        assert len(await section_repository.find_with_filters(course="MATH")) == 3
        assert len(await section_repository.find_with_filters(term=2)) == 3

    async def test_filters_are_combined_with_and(self, section_repository, many_sections):
        """
        Behavior:
            - name, course and term filters are all supplied.

        Importance:
            - every supplied filter narrows the result; an absent filter never matches NULL.
        """
        result = await section_repository.find_with_filters(name="al", course="math", term=2)

        assert sorted(names(result), key=str.lower) == ["algebra II", "Calculus"]

        assert await section_repository.find_with_filters(name="Networks", term=1) == []

    async def test_results_are_ordered_by_name(self, section_repository, create_section):
        await create_section(name="Gamma", course="Greek")
        await create_section(name="Alpha", course="Greek")
        await create_section(name="Beta", course="Greek")

        result = await section_repository.find_with_filters(course="greek")

        assert names(result) == ["Alpha", "Beta", "Gamma"]


class TestCountsAndExistence:

    async def test_count_by_course_ignores_case(self, section_repository, many_sections):
        assert await section_repository.count_by_course("mathematics") == 3
        assert await section_repository.count_by_course("Computer Science") == 2
        assert await section_repository.count_by_course("History") == 0

    async def test_count_by_term(self, section_repository, many_sections):
        assert await section_repository.count_by_term(2) == 3
        assert await section_repository.count_by_term(7) == 0

    async def test_exists_by_name(self, section_repository, create_section):
        await create_section(name="CS101-A")

        assert await section_repository.exists_by_name("cs101-A") is True
        assert await section_repository.exists_by_name("CS101-B") is False

    async def test_exists_by_id(self, section_repository, create_section):
        section = await create_section()

        assert await section_repository.exists_by_id(section.id) is True
        assert await section_repository.exists_by_id(section.id + 1000) is False

    async def test_exists_by_course_and_term(self, section_repository, many_sections):
        assert await section_repository.exists_by_course_and_term("computer science", 3) is True
        assert await section_repository.exists_by_course_and_term("computer science", 1) is False


class TestAccentedText:
    """
    Behavior:
        - names and courses with accented capitals, matched in another case.

    Importance:
        - case folding must not stop at ASCII; "ÁLGEBRA" and "álgebra" are the same name
          for the uniqueness rule and for every search.
    """

    async def test_exact_lookups_fold_accented_capitals(self, section_repository, create_section):
        section = await create_section(name="Álgebra Linear", course="ENGENHARIA ÉLETRICA", term=2)

        assert await section_repository.exists_by_name("ÁLGEBRA LINEAR") is True
        assert await section_repository.exists_by_name("álgebra linear") is True
        assert await section_repository.find_by_name_exact("álgebra LINEAR") is section
        assert await section_repository.count_by_course("engenharia életrica") == 1
        assert await section_repository.exists_by_course_and_term("Engenharia Életrica", 2) is True

    async def test_contains_searches_fold_accented_capitals(self, section_repository, create_section):
        await create_section(name="ÓPTICA Avançada", course="ENGENHARIA ÉLETRICA")
        await create_section(name="Mecânica", course="Física")

        assert names(await section_repository.find_with_filters(course="életrica")) == ["ÓPTICA Avançada"]
        assert names(await section_repository.find_by_name_containing("óptica")) == ["ÓPTICA Avançada"]
        assert names(await section_repository.find_by_course_containing("FÍSICA")) == ["Mecânica"]
