"""
Answer Matching
formbuilder/scoring/answer_matching.py

Turns untrusted submission payloads into typed answers the scorers can
rely on.

Pipeline:
    raw answers ──sanitize_answers──▶ List[Answer]
    Answer.answer ──parse_answer(question.type)──▶ CategorizeAnswer
                                                 | ClozeAnswer
                                                 | ComprehensionAnswer
                                                 | None (unanswered)

Malformed entries are dropped one at a time; nothing here raises for bad
input.
"""

from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from formbuilder.models.enumerations import QuestionType
from formbuilder.models.response import Answer


@dataclass(frozen=True)
class CategorizeAnswer:
    """Category name -> item labels the respondent dropped into it."""
    placements: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class ClozeAnswer:
    """Blank index -> submitted text."""
    values: Dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ComprehensionAnswer:
    """Sub-question index -> selected option index."""
    selections: Dict[int, int] = field(default_factory=dict)


TypedAnswer = Union[CategorizeAnswer, ClozeAnswer, ComprehensionAnswer]


def sanitize_answers(raw: Any) -> List[Answer]:
    """
    Keep only well-formed answer entries.

    An entry survives if it carries a non-empty question_id, a non-empty
    question_type and an explicit `answer` key (whose value may be None).
    Anything that is not a list or tuple is treated as no answers at all.
    """
    if not isinstance(raw, (list, tuple)):
        return []

    valid: List[Answer] = []
    for entry in raw:
        if isinstance(entry, Answer):
            if entry.question_id and entry.question_type:
                valid.append(entry)
            continue
        if not isinstance(entry, Mapping) or "answer" not in entry:
            continue
        question_id = entry.get("question_id")
        question_type = entry.get("question_type")
        if not isinstance(question_id, str) or not isinstance(question_type, str):
            continue
        try:
            valid.append(Answer(
                question_id=question_id,
                question_type=question_type,
                answer=entry["answer"],
            ))
        except ValidationError:
            continue
    return valid


def find_answer(answers: Iterable[Answer], question_id: str) -> Optional[Answer]:
    """First answer for `question_id`; later duplicates are ignored."""
    return next((a for a in answers if a.question_id == question_id), None)


def index_key(key: Any) -> Optional[int]:
    """
    Normalize a positional key.

    JSON object keys arrive as strings, so "0" and 0 address the same
    slot. Booleans and negative numbers are not positions.
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if key >= 0 else None
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def _indexed_entries(payload: Any) -> Iterable[tuple]:
    """(position, value) pairs from a mapping, or from a list read positionally."""
    if isinstance(payload, Mapping):
        for key, value in payload.items():
            position = index_key(key)
            if position is not None:
                yield position, value
    elif isinstance(payload, (list, tuple)):
        yield from enumerate(payload)


def option_index(value: Any) -> Optional[int]:
    """Option index from a JSON number, or None."""
    # Strict: "2" is not 2, True is not 1. Integral floats are JSON numbers.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_categorize(payload: Any) -> Optional[CategorizeAnswer]:
    if not isinstance(payload, Mapping):
        return None
    placements: Dict[str, List[str]] = {}
    for category_name, labels in payload.items():
        if not isinstance(category_name, str) or not isinstance(labels, (list, tuple)):
            continue
        placements[category_name] = [label for label in labels if isinstance(label, str)]
    return CategorizeAnswer(placements=placements)


def parse_cloze(payload: Any) -> Optional[ClozeAnswer]:
    if not isinstance(payload, (Mapping, list, tuple)):
        return None
    values = {
        position: value
        for position, value in _indexed_entries(payload)
        if isinstance(value, str)
    }
    return ClozeAnswer(values=values)


def parse_comprehension(payload: Any) -> Optional[ComprehensionAnswer]:
    if not isinstance(payload, (Mapping, list, tuple)):
        return None
    selections: Dict[int, int] = {}
    for position, value in _indexed_entries(payload):
        option = option_index(value)
        if option is not None:
            selections[position] = option
    return ComprehensionAnswer(selections=selections)


_PARSERS = {
    QuestionType.CATEGORIZE.value: parse_categorize,
    QuestionType.CLOZE.value: parse_cloze,
    QuestionType.COMPREHENSION.value: parse_comprehension,
}


def parse_answer(question_type: str, payload: Any) -> Optional[TypedAnswer]:
    """
    Parse an answer payload for the given question type.

    The type must come from the stored question, never from the answer's
    self-reported question_type. Returns None for an empty payload, a
    payload of the wrong shape, or an unknown question type.
    """
    if not payload:
        return None
    parser = _PARSERS.get(question_type)
    if parser is None:
        return None
    return parser(payload)


def normalize_text(value: str) -> str:
    """Comparison form for free-text answers: trimmed and lower-cased."""
    return value.strip().lower()


def point_value(points: Any, index: Optional[int] = None) -> int:
    """
    Configured point value, defaulting to 1.

    `points` is either a single value or a mapping keyed by position
    (`index`). Missing, zero, negative or non-integer values all fall back
    to 1 so that a correct answer always awards exactly what maxScore
    counts for it.
    """
    value = points
    if index is not None:
        if not isinstance(points, Mapping):
            return 1
        value = points.get(index, points.get(str(index)))
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return 1
    return value
