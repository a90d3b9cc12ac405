"""
Core Package - Form Builder API
formbuilder/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.
"""

from formbuilder.core.dependencies import (
    get_form_repository,
    get_response_repository,
    get_response_service,
)
from formbuilder.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    ForeignKeyViolationException,
    RepositoryException,
)

__all__ = [
    # Dependencies
    "get_form_repository",
    "get_response_repository",
    "get_response_service",
    # Exceptions
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "ForeignKeyViolationException",
    "RepositoryException",
]
