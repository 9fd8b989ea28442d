"""
Repository layer initialization module.

Usage:
    from classroom.repositories import ClassSectionRepository
"""

from .base_repository import BaseRepository
from .section_repository import ClassSectionRepository

__all__ = [
    "BaseRepository",
    "ClassSectionRepository",
]
