"""
Custom Exceptions - Form Builder API
formbuilder/core/exceptions.py

Exception hierarchy for the storage layer. Routers translate these into
ErrorResponse envelopes; the scoring engine never raises any of them.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class DuplicateEntityException(RepositoryException):
    """Unique constraint violation (e.g. a share id collision)."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Snowflake is unreachable or not configured."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class ForeignKeyViolationException(RepositoryException):
    """A response referenced a form that does not exist."""

    def __init__(self, message: str = "Foreign key constraint violation"):
        self.message = message
        super().__init__(message)
