"""
Response Repository - Form Builder API
formbuilder/repositories/response_repository.py

Data access layer for submitted responses. A response and its computed
score are written in a single INSERT.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from formbuilder.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    ID, FORM_ID, USER_ID, ANSWERS, SCORE, MAX_SCORE,
    SUBMITTED_AT, IP_ADDRESS, USER_AGENT
"""


class ResponseRepository(BaseRepository):
    """Repository for Response operations."""

    TABLE_NAME = "RESPONSES"

    def create(
        self,
        form_id: UUID,
        answers: List[Dict[str, Any]],
        score: int,
        max_score: int,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Persist a scored response.

        Args:
            form_id: Form the response belongs to
            answers: Sanitized answer documents
            score: Points awarded
            max_score: Points available
            user_id: Respondent identity, None for anonymous responses
            ip_address: Client address
            user_agent: Client user agent

        Returns:
            Created response dict
        """
        response_id = uuid4()
        now = datetime.now(timezone.utc)

        sql = """
            INSERT INTO RESPONSES (ID, FORM_ID, USER_ID, ANSWERS, SCORE, MAX_SCORE,
                                   SUBMITTED_AT, IP_ADDRESS, USER_AGENT)
            SELECT %s, %s, %s, PARSE_JSON(%s), %s, %s, %s, %s, %s
        """
        params = (
            str(response_id),
            str(form_id),
            user_id,
            self.to_variant(answers),
            score,
            max_score,
            now,
            ip_address,
            user_agent,
        )
        self.execute_query(sql, params, commit=True)
        logger.info(
            "response_saved response_id=%s form_id=%s score=%s/%s",
            response_id, form_id, score, max_score,
        )

        return {
            "id": response_id,
            "form_id": form_id,
            "user_id": user_id,
            "answers": answers,
            "score": score,
            "max_score": max_score,
            "submitted_at": now,
            "ip_address": ip_address,
            "user_agent": user_agent,
        }

    def get_by_id(self, response_id: UUID) -> Optional[Dict[str, Any]]:
        """Retrieve a response by ID, or None."""
        sql = f"SELECT {_COLUMNS} FROM RESPONSES WHERE ID = %s"
        row = self.execute_query(sql, (str(response_id),), fetch_one=True)
        return self._row_to_dict(row) if row else None

    def get_by_form(
        self, form_id: UUID, page: int = 1, page_size: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Responses for one form, most recent first.

        Returns:
            Tuple of (list of response dicts, total count)
        """
        offset = (page - 1) * page_size

        count_result = self.execute_query(
            "SELECT COUNT(*) AS TOTAL FROM RESPONSES WHERE FORM_ID = %s",
            (str(form_id),),
            fetch_one=True,
        )
        total = count_result["TOTAL"] if count_result else 0

        sql = f"""
            SELECT {_COLUMNS}
            FROM RESPONSES
            WHERE FORM_ID = %s
            ORDER BY SUBMITTED_AT DESC
            LIMIT %s OFFSET %s
        """
        rows = self.execute_query(sql, (str(form_id), page_size, offset), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows], total

    def get_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """All responses submitted by one respondent, most recent first."""
        sql = f"""
            SELECT {_COLUMNS}
            FROM RESPONSES
            WHERE USER_ID = %s
            ORDER BY SUBMITTED_AT DESC
        """
        rows = self.execute_query(sql, (user_id,), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to response dict."""
        return {
            "id": UUID(row["ID"]),
            "form_id": UUID(row["FORM_ID"]),
            "user_id": row["USER_ID"],
            "answers": self.from_variant(row["ANSWERS"], default=[]),
            "score": int(row["SCORE"] or 0),
            "max_score": int(row["MAX_SCORE"] or 0),
            "submitted_at": self.normalize_timestamp(row["SUBMITTED_AT"]),
            "ip_address": row["IP_ADDRESS"],
            "user_agent": row["USER_AGENT"],
        }
