r"""
Centralized access to the database models.

Importing this package registers every ORM class on `Base.metadata`, which is what
`create_all()` and the test fixtures rely on:

    from classroom.models import ClassSection
"""

from .section import ClassSection

__all__ = [
    "ClassSection",
]
