"""
Form Repository - Form Builder API
formbuilder/repositories/form_repository.py

Data access layer for Form entity operations. Questions are stored as a
single VARIANT document per form.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from formbuilder.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    ID, TITLE, DESCRIPTION, HEADER_IMAGE, QUESTIONS, IS_PUBLISHED,
    SHARE_ID, CREATED_BY, CREATED_AT, UPDATED_AT
"""


class FormRepository(BaseRepository):
    """Repository for Form CRUD operations."""

    TABLE_NAME = "FORMS"

    def create(
        self,
        title: str,
        questions: List[Dict[str, Any]],
        description: Optional[str] = None,
        header_image: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a new, unpublished form with a fresh share id.

        Args:
            title: Form title
            questions: Question documents (already validated)
            description: Optional description
            header_image: Optional header image URL
            created_by: Administrator identifier

        Returns:
            Created form dict
        """
        form_id = uuid4()
        share_id = str(uuid4())
        now = datetime.now(timezone.utc)

        # INSERT ... SELECT so PARSE_JSON can be applied to the bound parameter
        sql = """
            INSERT INTO FORMS (ID, TITLE, DESCRIPTION, HEADER_IMAGE, QUESTIONS,
                               IS_PUBLISHED, SHARE_ID, CREATED_BY, CREATED_AT, UPDATED_AT)
            SELECT %s, %s, %s, %s, PARSE_JSON(%s), %s, %s, %s, %s, %s
        """
        params = (
            str(form_id),
            title,
            description,
            header_image,
            self.to_variant(questions),
            False,
            share_id,
            created_by,
            now,
            now,
        )

        self.execute_query(sql, params, commit=True)
        logger.info("form_created form_id=%s questions=%d", form_id, len(questions))

        return self.get_by_id(form_id)

    def get_by_id(self, form_id: UUID) -> Optional[Dict[str, Any]]:
        """
        Retrieve a form by ID.

        Returns:
            Form dict or None if not found
        """
        sql = f"SELECT {_COLUMNS} FROM FORMS WHERE ID = %s"
        row = self.execute_query(sql, (str(form_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_share_id(self, share_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a published form by its share id.

        Returns:
            Form dict, or None if no published form carries this share id
        """
        sql = f"SELECT {_COLUMNS} FROM FORMS WHERE SHARE_ID = %s AND IS_PUBLISHED = TRUE"
        row = self.execute_query(sql, (share_id,), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        is_published: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Retrieve a paginated list of forms, newest first.

        Returns:
            Tuple of (list of form dicts, total count)
        """
        offset = (page - 1) * page_size

        where_clauses = ["1=1"]
        params: List[Any] = []
        if is_published is not None:
            where_clauses.append("IS_PUBLISHED = %s")
            params.append(is_published)
        where_sql = " AND ".join(where_clauses)

        count_sql = f"SELECT COUNT(*) AS TOTAL FROM FORMS WHERE {where_sql}"
        count_result = self.execute_query(count_sql, tuple(params), fetch_one=True)
        total = count_result["TOTAL"] if count_result else 0

        data_sql = f"""
            SELECT {_COLUMNS}
            FROM FORMS
            WHERE {where_sql}
            ORDER BY CREATED_AT DESC
            LIMIT %s OFFSET %s
        """
        rows = self.execute_query(data_sql, tuple(params) + (page_size, offset), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows], total

    def update(
        self,
        form_id: UUID,
        title: str,
        questions: List[Dict[str, Any]],
        description: Optional[str] = None,
        header_image: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Replace the editable content of a form.

        Returns:
            Updated form dict or None if not found
        """
        sql = """
            UPDATE FORMS
            SET TITLE = %s,
                DESCRIPTION = %s,
                HEADER_IMAGE = %s,
                QUESTIONS = PARSE_JSON(%s),
                UPDATED_AT = %s
            WHERE ID = %s
        """
        params = (
            title,
            description,
            header_image,
            self.to_variant(questions),
            datetime.now(timezone.utc),
            str(form_id),
        )
        self.execute_query(sql, params, commit=True)
        return self.get_by_id(form_id)

    def set_published(self, form_id: UUID, is_published: bool) -> Optional[Dict[str, Any]]:
        """
        Publish or unpublish a form.

        Returns:
            Updated form dict or None if not found
        """
        sql = "UPDATE FORMS SET IS_PUBLISHED = %s, UPDATED_AT = %s WHERE ID = %s"
        self.execute_query(
            sql, (is_published, datetime.now(timezone.utc), str(form_id)), commit=True
        )
        logger.info("form_publish_changed form_id=%s is_published=%s", form_id, is_published)
        return self.get_by_id(form_id)

    def delete(self, form_id: UUID) -> bool:
        """
        Delete a form.

        Returns:
            True if a row was deleted
        """
        deleted = self.execute_query("DELETE FROM FORMS WHERE ID = %s", (str(form_id),), commit=True)
        return bool(deleted)

    def exists(self, form_id: UUID) -> bool:
        """Check if a form exists."""
        row = self.execute_query("SELECT 1 FROM FORMS WHERE ID = %s", (str(form_id),), fetch_one=True)
        return row is not None

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to form dict."""
        return {
            "id": UUID(row["ID"]),
            "title": row["TITLE"],
            "description": row["DESCRIPTION"],
            "header_image": row["HEADER_IMAGE"],
            "questions": self.from_variant(row["QUESTIONS"], default=[]),
            "is_published": bool(row["IS_PUBLISHED"]),
            "share_id": row["SHARE_ID"],
            "created_by": row["CREATED_BY"],
            "created_at": self.normalize_timestamp(row["CREATED_AT"]),
            "updated_at": self.normalize_timestamp(row["UPDATED_AT"]),
        }
