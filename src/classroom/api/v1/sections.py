"""
HTTP endpoints for class sections.

Controllers stay thin: decode the request, call ClassSectionService, encode the result.
Every failure is an exception handled in `error_handlers.py`.

    POST   /sections                          -> 201 + Location, 400, 409
    GET    /sections/{id}                     -> 200, 404
    GET    /sections?name=&course=&term=      -> 200, or 204 when empty
    GET    /sections/stats/course/{course}    -> 200 + count
    GET    /sections/stats/term/{term}        -> 200 + count
    PUT    /sections/{id}                     -> 200, 400, 404, 409
    DELETE /sections/{id}                     -> 204, 404
"""

import logging

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status

from classroom.core.dependencies import get_section_service
from classroom.schemas.errors import ErrorResponse, ValidationErrorResponse
from classroom.schemas.section import ClassSectionCreate, ClassSectionRead, ClassSectionUpdate
from classroom.services.section_service import ClassSectionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sections", tags=["sections"])

_NOT_BLANK = r".*\S.*"
# INTEGER column maximum (Postgres int4)
INT_MAX = 2**31 - 1

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Class section not found"}}
_INVALID = {status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse, "description": "Invalid input"}}
_DUPLICATE = {status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Name already in use"}}


@router.post(
    "",
    response_model=ClassSectionRead,
    status_code=status.HTTP_201_CREATED,
    responses={**_INVALID, **_DUPLICATE},
)
async def create_section(
    payload: ClassSectionCreate,
    request: Request,
    response: Response,
    service: ClassSectionService = Depends(get_section_service),
):
    logger.info("api.sections.create", extra={"section_name": payload.name})
    section = await service.create_section(payload)
    response.headers["Location"] = str(request.url_for("get_section", section_id=section.id))
    return section


@router.get(
    "",
    response_model=list[ClassSectionRead],
    responses={status.HTTP_204_NO_CONTENT: {"description": "No section matched"}, **_INVALID},
)
async def list_sections(
    name: str | None = Query(None, description="Case-insensitive substring of the name"),
    course: str | None = Query(None, description="Case-insensitive substring of the course"),
    term: int | None = Query(None, ge=1, le=INT_MAX, description="Exact term"),
    service: ClassSectionService = Depends(get_section_service),
):
    logger.debug("api.sections.list", extra={"filter_name": name, "filter_course": course, "filter_term": term})

    if name is None and course is None and term is None:
        sections = await service.find_all()
    else:
        sections = await service.find_with_filters(name=name, course=course, term=term)

    if not sections:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return sections


@router.get("/stats/course/{course}", response_model=int, responses=_INVALID)
async def count_by_course(
    course: str = Path(..., pattern=_NOT_BLANK, description="Course name (case-insensitive)"),
    service: ClassSectionService = Depends(get_section_service),
):
    return await service.count_by_course(course)


@router.get("/stats/term/{term}", response_model=int, responses=_INVALID)
async def count_by_term(
    term: int = Path(..., ge=1, le=INT_MAX),
    service: ClassSectionService = Depends(get_section_service),
):
    return await service.count_by_term(term)


@router.get("/{section_id}", name="get_section", response_model=ClassSectionRead, responses={**_NOT_FOUND, **_INVALID})
async def get_section(
    section_id: int = Path(..., ge=1, le=INT_MAX),
    service: ClassSectionService = Depends(get_section_service),
):
    return await service.find_by_id(section_id)


@router.put(
    "/{section_id}",
    response_model=ClassSectionRead,
    responses={**_NOT_FOUND, **_INVALID, **_DUPLICATE},
)
async def update_section(
    payload: ClassSectionUpdate,
    section_id: int = Path(..., ge=1, le=INT_MAX),
    service: ClassSectionService = Depends(get_section_service),
):
    logger.info("api.sections.update", extra={"section_id": section_id, "section_name": payload.name})
    return await service.update_section(section_id, payload)


@router.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT, responses={**_NOT_FOUND, **_INVALID})
async def delete_section(
    section_id: int = Path(..., ge=1, le=INT_MAX),
    service: ClassSectionService = Depends(get_section_service),
):
    logger.info("api.sections.delete", extra={"section_id": section_id})
    await service.delete_by_id(section_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
