"""
Snowflake Connection - Form Builder API
formbuilder/services/snowflake.py

Connection factory used by the repositories.
"""

import snowflake.connector

from formbuilder.config import settings
from formbuilder.core.exceptions import DatabaseConnectionException


def get_snowflake_connection() -> snowflake.connector.SnowflakeConnection:
    """
    Open a new Snowflake connection from settings.

    Raises:
        DatabaseConnectionException: if credentials are not configured.
    """
    if not settings.snowflake_configured:
        raise DatabaseConnectionException("Snowflake credentials are not configured")

    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=settings.SNOWFLAKE_PASSWORD.get_secret_value(),
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE or None,
    )
