from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.database.session import get_async_session
from classroom.services.section_service import ClassSectionService


def get_section_service(db: AsyncSession = Depends(get_async_session)) -> ClassSectionService:
    # One service (and one session) per request
    return ClassSectionService(db)
