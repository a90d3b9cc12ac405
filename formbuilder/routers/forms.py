"""
Form Router - Form Builder API
formbuilder/routers/forms.py

Handles form CRUD, publishing and public lookup with Snowflake storage and
Redis caching. Also hosts the shared error envelope helpers and exception
handlers registered in main.py.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from formbuilder.config import settings
from formbuilder.core.dependencies import get_form_repository
from formbuilder.core.exceptions import RepositoryException
from formbuilder.models.enumerations import ErrorCode
from formbuilder.models.form import (
    ErrorResponse,
    FormCreate,
    FormResponse,
    FormSummary,
    FormUpdate,
    PaginatedFormResponse,
    PublishUpdate,
)
from formbuilder.repositories.form_repository import FormRepository
from formbuilder.services.cache import (
    TTL_FORM,
    TTL_SHARED_FORM,
    form_key,
    get_cache,
    invalidate_form,
    shared_form_key,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/forms", tags=["Forms"])



#  Custom Exception Handlers
# Registered in main.py

FIELD_MESSAGES = {
    "form_id": {
        "uuid_parsing": "Form ID must be a valid UUID format",
        "uuid_type": "Form ID must be a valid UUID",
        "missing": "Form ID is required",
    },
    "response_id": {
        "uuid_parsing": "Response ID must be a valid UUID format",
        "uuid_type": "Response ID must be a valid UUID",
    },
    "title": {
        "missing": "Title is required",
        "string_too_short": "Title must not be empty",
        "string_too_long": "Title must not exceed 255 characters",
    },
    "is_published": {
        "missing": "is_published is required",
        "bool_parsing": "is_published must be true or false",
    },
    "page": {
        "greater_than_equal": "Page must be greater than or equal to 1",
        "int_parsing": "Page must be a valid integer",
    },
    "page_size": {
        "greater_than_equal": "Page size must be greater than or equal to 1",
        "less_than_equal": f"Page size must not exceed {settings.MAX_PAGE_SIZE}",
        "int_parsing": "Page size must be a valid integer",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "uuid_parsing": "Field '{field}' must be a valid UUID",
    "string_type": "Field '{field}' must be a string",
    "int_parsing": "Field '{field}' must be a valid integer",
    "value_error": "Field '{field}' is invalid",
}


def get_validation_message(field: str, error_type: str, fallback: Optional[str] = None) -> str:
    if field in FIELD_MESSAGES:
        for key, message in FIELD_MESSAGES[field].items():
            if key in error_type:
                return message

    # Model validators carry their own message
    if error_type == "value_error" and fallback:
        return fallback.removeprefix("Value error, ")

    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)

    return f"Invalid value for field '{field}'"


def _envelope(status_code: int, error_code: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    if not errors:
        return _envelope(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorCode.VALIDATION_ERROR.value,
            "Request validation failed",
        )

    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])

    if "json_invalid" in error_type:
        return _envelope(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_REQUEST.value,
            "Malformed JSON request body",
        )

    field = ".".join(str(l) for l in loc if l not in ("body", "path", "query"))
    message = get_validation_message(field, error_type, err.get("msg"))

    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR.value,
        message,
        {"field": field, "type": error_type} if field else None,
    )


async def repository_exception_handler(request: Request, exc: RepositoryException):
    logger.error("repository_error path=%s: %s", request.url.path, exc)
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_SERVER_ERROR.value,
        "Unexpected server error",
    )



#  Exception Helpers

def raise_error(status_code: int, error_code: str, message: str):
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error_code=error_code,
            message=message,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode="json")
    )


def raise_form_not_found(message: str = "Form not found"):
    raise_error(status.HTTP_404_NOT_FOUND, ErrorCode.FORM_NOT_FOUND.value, message)


_NOT_FOUND = {
    404: {
        "model": ErrorResponse,
        "description": "Form not found",
        "content": {
            "application/json": {
                "example": {
                    "error_code": "FORM_NOT_FOUND",
                    "message": "Form not found",
                    "details": None,
                    "timestamp": "2026-01-28T12:00:00Z"
                }
            }
        }
    },
}

_VALIDATION = {
    422: {
        "model": ErrorResponse,
        "description": "Validation error",
        "content": {
            "application/json": {
                "example": {
                    "error_code": "VALIDATION_ERROR",
                    "message": "Question 'q3' has unsupported type 'essay'",
                    "details": {"field": "questions", "type": "value_error"},
                    "timestamp": "2026-01-28T12:00:00Z"
                }
            }
        }
    },
}


def _cached_form(key: str, loader, ttl: int) -> Optional[FormResponse]:
    """Read-through cache for a single form."""
    cache = get_cache()

    if cache:
        try:
            cached = cache.get(key, FormResponse)
            if cached:
                return cached
        except Exception as e:
            logger.warning("cache_read_failed key=%s: %s", key, e)

    form_data = loader()
    if not form_data:
        return None

    form = FormResponse(**form_data)
    if cache:
        try:
            cache.set(key, form, ttl)
        except Exception as e:
            logger.warning("cache_write_failed key=%s: %s", key, e)
    return form



#  Routes

@router.post(
    "",
    response_model=FormResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_VALIDATION,
    summary="Create a new form",
    description="Creates an unpublished form and assigns it a share id.",
)
async def create_form(
    payload: FormCreate,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    form_data = form_repo.create(
        title=payload.title,
        description=payload.description,
        header_image=payload.header_image,
        questions=[q.model_dump(mode="json") for q in payload.questions],
        created_by=payload.created_by,
    )
    return FormResponse(**form_data)


@router.get(
    "",
    response_model=PaginatedFormResponse,
    summary="List forms",
    description="Returns a paginated list of forms, newest first, optionally filtered by publish state.",
)
async def list_forms(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    is_published: Optional[bool] = Query(default=None),
    form_repo: FormRepository = Depends(get_form_repository),
) -> PaginatedFormResponse:
    forms, total = form_repo.get_all(page=page, page_size=page_size, is_published=is_published)
    total_pages = (total + page_size - 1) // page_size if total > 0 else 0

    return PaginatedFormResponse(
        items=[FormSummary(**f) for f in forms],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


@router.get(
    "/share/{share_id}",
    response_model=FormResponse,
    responses=_NOT_FOUND,
    summary="Get a published form by share id",
    description="Public lookup used by shareable links. Unpublished forms are reported as not found.",
)
async def get_shared_form(
    share_id: str,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    form = _cached_form(
        shared_form_key(share_id),
        lambda: form_repo.get_by_share_id(share_id),
        TTL_SHARED_FORM,
    )
    if not form or not form.is_published:
        raise_form_not_found("Form not found or not published")
    return form


@router.get(
    "/public/{form_id}",
    response_model=FormResponse,
    responses=_NOT_FOUND,
    summary="Get a published form by ID",
    description="Public lookup by form id. Unpublished forms are reported as not found.",
)
async def get_public_form(
    form_id: UUID,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    form = _cached_form(form_key(form_id), lambda: form_repo.get_by_id(form_id), TTL_FORM)
    if not form:
        raise_form_not_found()
    if not form.is_published:
        raise_form_not_found("Form not found or not published")
    return form


@router.get(
    "/{form_id}",
    response_model=FormResponse,
    responses=_NOT_FOUND,
    summary="Get form by ID",
    description="Retrieves a form with all of its questions and scoring settings.",
)
async def get_form(
    form_id: UUID,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    form = _cached_form(form_key(form_id), lambda: form_repo.get_by_id(form_id), TTL_FORM)
    if not form:
        raise_form_not_found()
    return form


@router.put(
    "/{form_id}",
    response_model=FormResponse,
    responses={**_NOT_FOUND, **_VALIDATION},
    summary="Update form",
    description="Replaces the title, description, header image and questions of a form.",
)
async def update_form(
    form_id: UUID,
    payload: FormUpdate,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    existing = form_repo.get_by_id(form_id)
    if not existing:
        raise_form_not_found()

    updated = form_repo.update(
        form_id,
        title=payload.title,
        description=payload.description,
        header_image=payload.header_image,
        questions=[q.model_dump(mode="json") for q in payload.questions],
    )
    invalidate_form(form_id, existing["share_id"])
    return FormResponse(**updated)


@router.patch(
    "/{form_id}/publish",
    response_model=FormResponse,
    responses=_NOT_FOUND,
    summary="Publish or unpublish a form",
)
async def set_form_published(
    form_id: UUID,
    payload: PublishUpdate,
    form_repo: FormRepository = Depends(get_form_repository),
) -> FormResponse:
    existing = form_repo.get_by_id(form_id)
    if not existing:
        raise_form_not_found()

    updated = form_repo.set_published(form_id, payload.is_published)
    invalidate_form(form_id, existing["share_id"])
    return FormResponse(**updated)


@router.delete(
    "/{form_id}",
    responses=_NOT_FOUND,
    summary="Delete form",
)
async def delete_form(
    form_id: UUID,
    form_repo: FormRepository = Depends(get_form_repository),
) -> dict:
    existing = form_repo.get_by_id(form_id)
    if not existing:
        raise_form_not_found()

    form_repo.delete(form_id)
    invalidate_form(form_id, existing["share_id"])
    return {"message": "Form deleted successfully"}
