"""
Repositories Package - Form Builder API
formbuilder/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from formbuilder.repositories.base import BaseRepository
from formbuilder.repositories.form_repository import FormRepository
from formbuilder.repositories.response_repository import ResponseRepository

__all__ = [
    "BaseRepository",
    "FormRepository",
    "ResponseRepository",
]
