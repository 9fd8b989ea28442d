import pytest

from classroom.exceptions.base import InvalidArgumentError
from classroom.models.section import ClassSection, validate_section_fields


class TestClassSectionCreate:

    def test_create_normalises_fields(self):
        section = ClassSection.create("  CS101-A ", " Computer Science ", 1, "   ")

        assert section.name == "CS101-A"
        assert section.course == "Computer Science"
        assert section.term == 1
        # blank description is stored as absent, never as ""
        assert section.description is None
        assert section.id is None

    def test_create_keeps_trimmed_description(self):
        section = ClassSection.create("CS101-A", "CS", 10, "  Intro  ")

        assert section.description == "Intro"
        assert section.has_description()

    @pytest.mark.parametrize("term", [0, 11, -1, None, "3", 2.0, True])
    def test_create_rejects_invalid_term(self, term):
        with pytest.raises(InvalidArgumentError) as exc_info:
            ClassSection.create("CS101-A", "CS", term)

        assert exc_info.value.fields == ["term"]
        assert exc_info.value.http_status() == 400

    @pytest.mark.parametrize("name", [None, "", "   ", "A", "x" * 101])
    def test_create_rejects_invalid_name(self, name):
        with pytest.raises(InvalidArgumentError) as exc_info:
            ClassSection.create(name, "CS", 1)

        assert exc_info.value.fields == ["name"]

    def test_length_bounds_are_inclusive(self):
        section = ClassSection.create("ab", "x" * 100, 1, "d" * 500)

        assert section.name == "ab"
        assert len(section.course) == 100
        assert len(section.description) == 500

    def test_description_over_limit_is_rejected(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            ClassSection.create("CS101-A", "CS", 1, "d" * 501)

        assert exc_info.value.fields == ["description"]

    def test_all_violations_are_reported_at_once(self):
        """
        Behavior:
            - name, course and term are all invalid in the same call.

        Importance:
            - clients get every problem in one round-trip instead of fixing fields one by one.
        """
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_section_fields(" ", None, 42, None)

        err = exc_info.value
        assert [v.field for v in err.violations] == ["name", "course", "term"]
        assert err.violations[2].rejected_value == "42"
        assert err.violations[1].rejected_value is None
        assert "; " in err.message


class TestClassSectionUpdate:

    def test_update_replaces_every_field(self):
        section = ClassSection.create("CS101-A", "CS", 1, "old")

        section.update("CS102-B", "Maths", 4, None)

        assert (section.name, section.course, section.term, section.description) == ("CS102-B", "Maths", 4, None)

    def test_failed_update_leaves_section_unchanged(self):
        section = ClassSection.create("CS101-A", "CS", 1, "keep me")

        with pytest.raises(InvalidArgumentError):
            # name is valid, term is not: nothing may change
            section.update("Renamed", "Other", 11, "new")

        assert section.name == "CS101-A"
        assert section.course == "CS"
        assert section.term == 1
        assert section.description == "keep me"

    def test_direct_assignment_is_validated(self):
        section = ClassSection.create("CS101-A", "CS", 1)

        with pytest.raises(InvalidArgumentError):
            section.term = 0

        section.name = "  Trimmed  "
        assert section.name == "Trimmed"

    def test_case_folded_keys_follow_name_and_course(self):
        section = ClassSection.create("  ÁLGEBRA Linear ", "ENGENHARIA ÉLETRICA", 1)

        assert section.name_key == "álgebra linear"
        assert section.course_key == "engenharia életrica"

        section.update("Cálculo I", "Matemática", 2)
        assert (section.name_key, section.course_key) == ("cálculo i", "matemática")

        section.name = "ÓPTICA"
        assert section.name_key == "óptica"


class TestClassSectionPredicates:

    def test_has_name_and_course_are_case_insensitive(self):
        section = ClassSection.create("CS101-A", "Computer Science", 3)

        assert section.has_name("cs101-a")
        assert not section.has_name("CS101")
        assert not section.has_name(None)
        assert section.belongs_to_course("COMPUTER SCIENCE")
        assert ClassSection.create("Álgebra Linear", "Física", 1).has_name("ÁLGEBRA LINEAR")
        assert not section.belongs_to_course(None)
        assert section.is_term(3)
        assert not section.is_term(4)

    def test_has_description(self):
        assert not ClassSection.create("CS101-A", "CS", 1).has_description()
        assert ClassSection.create("CS101-A", "CS", 1, "text").has_description()


class TestClassSectionIdentity:

    def test_unsaved_sections_are_only_equal_to_themselves(self):
        a = ClassSection.create("CS101-A", "CS", 1)
        b = ClassSection.create("CS101-A", "CS", 1)

        assert a == a
        assert a != b
        assert len({a, b}) == 2

    def test_equality_uses_identifier(self):
        a = ClassSection.create("CS101-A", "CS", 1)
        b = ClassSection.create("Other", "Maths", 2)
        a.id = b.id = 7

        assert a == b
        assert hash(a) == hash(b)

    def test_repr_mentions_key_fields(self):
        section = ClassSection.create("CS101-A", "CS", 1)

        assert "CS101-A" in repr(section)
        assert "term=1" in repr(section)
