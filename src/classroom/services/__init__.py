from .section_service import ClassSectionService

__all__ = ["ClassSectionService"]
