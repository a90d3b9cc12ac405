"""
Dependencies - Form Builder API
formbuilder/core/dependencies.py

FastAPI dependency injection for repositories and services.
"""

from functools import lru_cache

from fastapi import Depends

from formbuilder.repositories.form_repository import FormRepository
from formbuilder.repositories.response_repository import ResponseRepository
from formbuilder.services.response_service import ResponseService


@lru_cache()
def get_form_repository() -> FormRepository:
    """Get cached FormRepository instance."""
    return FormRepository()


@lru_cache()
def get_response_repository() -> ResponseRepository:
    """Get cached ResponseRepository instance."""
    return ResponseRepository()


def get_response_service(
    form_repo: FormRepository = Depends(get_form_repository),
    response_repo: ResponseRepository = Depends(get_response_repository),
) -> ResponseService:
    """Build a ResponseService over the current repositories."""
    return ResponseService(form_repo, response_repo)
