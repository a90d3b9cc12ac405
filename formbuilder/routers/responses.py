"""
Response Router - Form Builder API
formbuilder/routers/responses.py

Endpoints:
  POST /api/v1/responses                - Submit a response (scored, then stored)
  POST /api/v1/responses/test-scoring   - Score answers without storing them
  GET  /api/v1/responses/form/{form_id} - Responses for a form (paginated)
  GET  /api/v1/responses/user/{user_id} - Responses submitted by a respondent
  GET  /api/v1/responses/{response_id}  - Single response
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from formbuilder.config import settings
from formbuilder.core.dependencies import (
    get_form_repository,
    get_response_repository,
    get_response_service,
)
from formbuilder.models.enumerations import ErrorCode
from formbuilder.models.response import (
    PaginatedResponseList,
    ResponseCreate,
    ResponseRecord,
    ScoringTestRequest,
    ScoringTestResponse,
)
from formbuilder.repositories.form_repository import FormRepository
from formbuilder.repositories.response_repository import ResponseRepository
from formbuilder.routers.forms import raise_error, raise_form_not_found
from formbuilder.services.response_service import ResponseService

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/responses", tags=["Responses"])


def raise_response_not_found():
    raise_error(status.HTTP_404_NOT_FOUND, ErrorCode.RESPONSE_NOT_FOUND.value, "Response not found")


@router.post(
    "",
    response_model=ResponseRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a response",
    description="""
    Scores the submitted answers against the stored form and saves the response
    together with its score. Scoring never blocks a submission: if the form cannot
    be loaded or scored the response is saved with score 0 / max_score 0.
    """,
)
async def submit_response(
    payload: ResponseCreate,
    request: Request,
    service: ResponseService = Depends(get_response_service),
) -> ResponseRecord:
    return service.submit(
        payload,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


@router.post(
    "/test-scoring",
    response_model=ScoringTestResponse,
    summary="Preview scoring",
    description="Scores answers against a form and returns the result with a per-question breakdown. Nothing is stored.",
)
async def test_scoring(
    payload: ScoringTestRequest,
    service: ResponseService = Depends(get_response_service),
) -> ScoringTestResponse:
    return service.test_scoring(payload.form_id, payload.answers)


@router.get(
    "/form/{form_id}",
    response_model=PaginatedResponseList,
    summary="List responses for a form",
)
async def list_form_responses(
    form_id: UUID,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    form_repo: FormRepository = Depends(get_form_repository),
    response_repo: ResponseRepository = Depends(get_response_repository),
) -> PaginatedResponseList:
    if not form_repo.exists(form_id):
        raise_form_not_found()

    responses, total = response_repo.get_by_form(form_id, page=page, page_size=page_size)
    total_pages = (total + page_size - 1) // page_size if total > 0 else 0

    return PaginatedResponseList(
        items=[ResponseRecord(**r) for r in responses],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


@router.get(
    "/user/{user_id}",
    response_model=List[ResponseRecord],
    summary="List a respondent's responses",
)
async def list_user_responses(
    user_id: str,
    response_repo: ResponseRepository = Depends(get_response_repository),
) -> List[ResponseRecord]:
    return [ResponseRecord(**r) for r in response_repo.get_by_user(user_id)]


@router.get(
    "/{response_id}",
    response_model=ResponseRecord,
    summary="Get response by ID",
)
async def get_response(
    response_id: UUID,
    response_repo: ResponseRepository = Depends(get_response_repository),
) -> ResponseRecord:
    response = response_repo.get_by_id(response_id)
    if not response:
        raise_response_not_found()
    return ResponseRecord(**response)
