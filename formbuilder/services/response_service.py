"""
Response Service - Form Builder API
formbuilder/services/response_service.py

The two callers of the scoring engine:
  - submit()        load form → score → persist one response record
  - test_scoring()  load form → score → return result, persist nothing

Scoring is fail-soft: a missing form, a form that fails to load or parse,
or any error inside scoring yields ScoreResult.empty() and the submission
still goes through.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog

from formbuilder.config import settings
from formbuilder.models.form import FormResponse
from formbuilder.models.response import (
    QuestionScoreDetail,
    ResponseCreate,
    ResponseRecord,
    ScoreResult,
    ScoringTestResponse,
)
from formbuilder.repositories.form_repository import FormRepository
from formbuilder.repositories.response_repository import ResponseRepository
from formbuilder.scoring.answer_matching import sanitize_answers
from formbuilder.scoring.form_scorer import FormScorer, QuestionScore

logger = structlog.get_logger(__name__)


class ResponseService:
    """Scores and stores form submissions."""

    def __init__(
        self,
        form_repo: FormRepository,
        response_repo: ResponseRepository,
        trace_scoring: Optional[bool] = None,
    ):
        self.form_repo = form_repo
        self.response_repo = response_repo
        self.trace_scoring = (
            settings.SCORING_DEBUG_LOGGING if trace_scoring is None else trace_scoring
        )

    def _scorer(self, form_id: UUID) -> FormScorer:
        if self.trace_scoring:
            return FormScorer(logger=logger.bind(form_id=str(form_id)))
        return FormScorer()

    def score(self, form_id: UUID, answers: Any) -> Tuple[ScoreResult, List[QuestionScore]]:
        """
        Score answers against the stored form.

        Returns:
            (ScoreResult, per-question breakdown). ScoreResult.empty() and an
            empty breakdown when the form is missing or scoring fails.
        """
        try:
            form_data = self.form_repo.get_by_id(form_id)
            if not form_data:
                logger.warning("scoring_form_not_found", form_id=str(form_id))
                return ScoreResult.empty(), []

            form = FormResponse(**form_data)
            scorer = self._scorer(form_id)
            result, breakdown = scorer.evaluate(form.questions, answers)
        except Exception:
            logger.exception("scoring_failed", form_id=str(form_id))
            return ScoreResult.empty(), []

        logger.info(
            "score_computed",
            form_id=str(form_id),
            score=result.score,
            max_score=result.max_score,
        )
        return result, breakdown

    def submit(
        self,
        payload: ResponseCreate,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ResponseRecord:
        """Score a submission and persist it with its score."""
        valid_answers = sanitize_answers(payload.answers)
        logger.info(
            "response_submission",
            form_id=str(payload.form_id),
            authenticated=payload.user_id is not None,
            answers_received=len(payload.answers) if isinstance(payload.answers, list) else 0,
            answers_valid=len(valid_answers),
        )

        result, _ = self.score(payload.form_id, valid_answers)

        saved = self.response_repo.create(
            form_id=payload.form_id,
            answers=[a.model_dump(mode="json") for a in valid_answers],
            score=result.score,
            max_score=result.max_score,
            user_id=payload.user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return ResponseRecord(**saved)

    def test_scoring(self, form_id: UUID, answers: Any) -> ScoringTestResponse:
        """Score without persisting; used to check a form's scoring setup."""
        result, breakdown = self.score(form_id, answers)
        return ScoringTestResponse(
            result=result,
            breakdown=[QuestionScoreDetail(**_detail(q)) for q in breakdown],
            form_id=form_id,
            answers=answers,
        )


def _detail(q: QuestionScore) -> Dict[str, Any]:
    return {
        "question_id": q.question_id,
        "question_type": q.question_type,
        "score": q.score,
        "max_score": q.max_score,
        "scored": q.scored,
    }
