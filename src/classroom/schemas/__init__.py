from .section import ClassSectionCreate, ClassSectionUpdate, ClassSectionRead
from .errors import ErrorResponse, FieldErrorDetail, ValidationErrorResponse

__all__ = [
    "ClassSectionCreate",
    "ClassSectionUpdate",
    "ClassSectionRead",
    "ErrorResponse",
    "FieldErrorDetail",
    "ValidationErrorResponse",
]
