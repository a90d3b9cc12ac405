# formbuilder/scoring/form_scorer.py
"""
Form Scorer
-----------
Scores a respondent's answers against a form's question definitions.

Per question type:
    categorize     item correct  ⇔ placed category index == correct_answers[item]
    cloze          blank correct ⇔ trim/lower(answer) == trim/lower(correct_answers[blank])
    comprehension  sub-q correct ⇔ selected option == correct_answer   (strict, no normalization)

Every item / blank / sub-question adds its point value (default 1) to
max_score whether or not it was answered, so max_score depends only on the
form. Unknown question types, and known types missing the settings they are
scored against, add nothing to either side.

The scorer is pure: it reads its inputs, allocates local accumulators and
returns. The only optional side effect is logging through a logger passed
to the constructor.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from formbuilder.models.enumerations import QuestionType
from formbuilder.models.form import Question
from formbuilder.models.response import Answer, ScoreResult
from formbuilder.scoring.answer_matching import (
    CategorizeAnswer,
    ClozeAnswer,
    ComprehensionAnswer,
    find_answer,
    normalize_text,
    option_index,
    parse_answer,
    point_value,
    sanitize_answers,
)


@dataclass
class QuestionScore:
    """Output of FormScorer for one question."""
    question_id: str
    question_type: str
    score: int
    max_score: int
    scored: bool   # False for unknown types or missing settings


class FormScorer:
    """Compute {score, max_score} for one submission."""

    def __init__(self, logger: Any = None):
        """
        Args:
            logger: Optional structlog-style logger. When omitted the scorer
                    emits nothing.
        """
        self._log = logger

    def calculate(self, questions: Optional[Iterable[Any]], answers: Any) -> ScoreResult:
        """
        Args:
            questions: The form's questions in order (Question models or
                       plain mappings). None means the form could not be
                       resolved.
            answers: Submitted answers, sanitized here.

        Returns:
            ScoreResult; ScoreResult.empty() when there is no form.

        Examples:
            >>> form = [{"id": "q1", "type": "cloze", "settings": {
            ...     "blanks": ["brown"], "correct_answers": {0: "brown"}}}]
            >>> FormScorer().calculate(form, [{"question_id": "q1",
            ...     "question_type": "cloze", "answer": {"0": " Brown"}}])
            ScoreResult(score=1, max_score=1)
        """
        result, _ = self.evaluate(questions, answers)
        return result

    def evaluate(
        self, questions: Optional[Iterable[Any]], answers: Any
    ) -> Tuple[ScoreResult, List[QuestionScore]]:
        """Total and per-question breakdown from one pass."""
        breakdown = self.score_questions(questions, answers)
        result = ScoreResult(
            score=sum(q.score for q in breakdown),
            max_score=sum(q.max_score for q in breakdown),
        )
        self._emit(
            "info",
            "form_scored",
            question_count=len(breakdown),
            score=result.score,
            max_score=result.max_score,
        )
        return result, breakdown

    def score_questions(
        self, questions: Optional[Iterable[Any]], answers: Any
    ) -> List[QuestionScore]:
        """Per-question breakdown, in form order."""
        if questions is None:
            self._emit("warning", "form_missing")
            return []

        valid_answers = sanitize_answers(answers)
        self._emit("debug", "answers_sanitized", valid_answers=len(valid_answers))

        results: List[QuestionScore] = []
        for question in _coerce_questions(questions):
            answer = find_answer(valid_answers, question.id)
            result = self.score_question(question, answer)
            self._emit(
                "debug",
                "question_scored",
                question_id=result.question_id,
                question_type=result.question_type,
                answered=answer is not None,
                score=result.score,
                max_score=result.max_score,
                scored=result.scored,
            )
            results.append(result)
        return results

    def score_question(self, question: Question, answer: Optional[Answer]) -> QuestionScore:
        """Dispatch on the stored question type, never on the answer's claim."""
        settings = question.settings
        payload = answer.answer if answer is not None else None
        typed = parse_answer(question.type, payload)

        if question.type == QuestionType.COMPREHENSION.value and settings.questions:
            score, max_score = self._score_comprehension(question, typed)
        elif question.type == QuestionType.CATEGORIZE.value and settings.correct_answers is not None:
            score, max_score = self._score_categorize(question, typed)
        elif question.type == QuestionType.CLOZE.value and settings.correct_answers is not None:
            score, max_score = self._score_cloze(question, typed)
        else:
            return QuestionScore(question.id, question.type, 0, 0, scored=False)

        return QuestionScore(question.id, question.type, score, max_score, scored=True)

    # ------------------------------------------------------------------
    # Per-type scorers
    # ------------------------------------------------------------------

    def _score_comprehension(self, question: Question, typed: Any) -> tuple[int, int]:
        selections = typed.selections if isinstance(typed, ComprehensionAnswer) else {}
        score = max_score = 0
        for q_index, sub in enumerate(question.settings.questions or []):
            points = point_value(sub.score)
            selected = selections.get(q_index)
            expected = option_index(sub.correct_answer)
            correct = selected is not None and expected is not None and selected == expected
            if correct:
                score += points
            max_score += points
            self._emit(
                "debug",
                "sub_question_checked",
                question_id=question.id,
                index=q_index,
                selected=selected,
                expected=sub.correct_answer,
                points=points,
                correct=correct,
            )
        return score, max_score

    def _score_categorize(self, question: Question, typed: Any) -> tuple[int, int]:
        settings = question.settings
        items = settings.items or []
        categories = settings.categories or []
        correct_answers = settings.correct_answers or {}

        # {category name: [labels]} -> {item index: category index}
        placed: dict[int, int] = {}
        if isinstance(typed, CategorizeAnswer):
            for category_name, labels in typed.placements.items():
                if category_name not in categories:
                    continue
                category_index = categories.index(category_name)
                for label in labels:
                    if label in items:
                        placed[items.index(label)] = category_index

        score = max_score = 0
        for item_index, item in enumerate(items):
            points = point_value(settings.item_scores, item_index)
            chosen = placed.get(item_index)
            expected = option_index(correct_answers.get(item_index))
            correct = chosen is not None and expected is not None and chosen == expected
            if correct:
                score += points
            max_score += points
            self._emit(
                "debug",
                "item_checked",
                question_id=question.id,
                item=item,
                chosen=chosen,
                expected=expected,
                points=points,
                correct=correct,
            )
        return score, max_score

    def _score_cloze(self, question: Question, typed: Any) -> tuple[int, int]:
        settings = question.settings
        values = typed.values if isinstance(typed, ClozeAnswer) else {}
        correct_answers = settings.correct_answers or {}

        score = max_score = 0
        for blank_index, _ in enumerate(settings.blanks or []):
            points = point_value(settings.blank_scores, blank_index)
            submitted = values.get(blank_index)
            expected = correct_answers.get(blank_index)
            correct = bool(
                submitted
                and isinstance(expected, str)
                and expected
                and normalize_text(submitted) == normalize_text(expected)
            )
            if correct:
                score += points
            max_score += points
            self._emit(
                "debug",
                "blank_checked",
                question_id=question.id,
                index=blank_index,
                submitted=submitted,
                expected=expected,
                points=points,
                correct=correct,
            )
        return score, max_score

    def _emit(self, level: str, event: str, **fields: Any) -> None:
        if self._log is not None:
            getattr(self._log, level)(event, **fields)


def _coerce_questions(questions: Iterable[Any]) -> List[Question]:
    """Questions as models; entries that cannot be read as a question are skipped."""
    if isinstance(questions, (str, bytes, Mapping)):
        return []
    try:
        entries = list(questions)
    except TypeError:
        return []

    coerced: List[Question] = []
    for entry in entries:
        if isinstance(entry, Question):
            coerced.append(entry)
            continue
        try:
            coerced.append(Question.model_validate(entry))
        except ValidationError:
            continue
    return coerced


def _questions_of(form: Any) -> Optional[Sequence[Any]]:
    if form is None:
        return None
    if isinstance(form, Mapping):
        return form.get("questions") or []
    if hasattr(form, "questions"):
        return form.questions or []
    return form


def compute_score(form: Any, answers: Any, logger: Any = None) -> ScoreResult:
    """
    Score `answers` against `form`.

    `form` may be None (unresolvable form), a form model or mapping with a
    `questions` field, or the question sequence itself.
    """
    return FormScorer(logger=logger).calculate(_questions_of(form), answers)
