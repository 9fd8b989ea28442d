"""
Declarative base shared by every ORM model (currently only ClassSection).

The naming convention gives constraints stable names, which the integrity mapper
reports back to the logs (e.g. "ck_class_sections_term_range").
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Naming convention for constraints and indexes
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s"
}
