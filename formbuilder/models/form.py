from pydantic import BaseModel, Field, field_validator
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formbuilder.models.enumerations import QuestionType


class SubQuestion(BaseModel):
    """
    One multiple-choice question attached to a comprehension passage.
    """

    question: Optional[str] = Field(default=None, description="Sub-question prompt")

    options: List[str] = Field(
        default_factory=list,
        description="Answer options, addressed by index"
    )

    correct_answer: Any = Field(
        default=None,
        description="Index into options of the correct option; anything else never matches"
    )

    score: Any = Field(
        default=None,
        description="Point value; 1 when absent or not a positive integer"
    )


class QuestionSettings(BaseModel):
    """
    Type-dependent question settings.

    Only the fields relevant to the question's type are populated; the
    scorer reads them and never mutates them.
    """

    # Categorize
    categories: Optional[List[str]] = None
    items: Optional[List[str]] = None
    item_scores: Optional[Dict[int, Any]] = None

    # Cloze
    text: Optional[str] = None
    blanks: Optional[List[str]] = None
    blank_scores: Optional[Dict[int, Any]] = None

    # Comprehension
    passage: Optional[str] = None
    questions: Optional[List[SubQuestion]] = None

    # Categorize: item index -> category index. Cloze: blank index -> text.
    # Values are kept as stored (null for an unassigned item); point maps
    # likewise, so the scorer applies the defaults.
    correct_answers: Optional[Dict[int, Any]] = None


class Question(BaseModel):
    """
    A single question within a form.

    `type` is kept as a free string so that stored questions of a type this
    service does not know about still load; they score as no-ops.
    """

    id: str = Field(..., min_length=1, description="Identifier unique within the form")

    type: str = Field(..., description="categorize, cloze or comprehension")

    title: str = Field(default="", max_length=500)

    description: Optional[str] = None

    image: Optional[str] = Field(default=None, description="Image URL")

    required: bool = Field(
        default=False,
        description="Checked by the submission UI, not by the scorer"
    )

    settings: QuestionSettings = Field(default_factory=QuestionSettings)


class FormBase(BaseModel):
    """
    Base Pydantic model for Form.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Form title"
    )

    description: Optional[str] = Field(
        default=None,
        description="Form description shown above the questions"
    )

    header_image: Optional[str] = Field(
        default=None,
        description="Header image URL"
    )

    questions: List[Question] = Field(
        default_factory=list,
        description="Ordered questions"
    )


class FormCreate(FormBase):
    """
    Model for creating a new form.
    """

    created_by: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Identifier of the administrator creating the form"
    )

    @field_validator("questions")
    @classmethod
    def validate_questions(cls, questions: List[Question]) -> List[Question]:
        return _check_questions(questions)


class FormUpdate(FormBase):
    """
    Model for replacing the content of an existing form.
    """

    @field_validator("questions")
    @classmethod
    def validate_questions(cls, questions: List[Question]) -> List[Question]:
        return _check_questions(questions)


def _check_questions(questions: List[Question]) -> List[Question]:
    """Reject unknown question types and duplicate question ids."""
    allowed = {t.value for t in QuestionType}
    seen = set()
    for question in questions:
        if question.type not in allowed:
            raise ValueError(
                f"Question '{question.id}' has unsupported type '{question.type}'"
            )
        if question.id in seen:
            raise ValueError(f"Duplicate question id '{question.id}'")
        seen.add(question.id)
    return questions


class FormResponse(FormBase):
    """
    Model returned in API responses.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique form identifier"
    )

    is_published: bool = Field(
        default=False,
        description="Whether the form accepts public responses"
    )

    share_id: str = Field(
        ...,
        description="Public share identifier used in shareable links"
    )

    created_by: Optional[str] = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Record creation timestamp (UTC)"
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last update timestamp (UTC)"
    )

    class Config:
        from_attributes = True


class FormSummary(BaseModel):
    """
    Listing entry, without the question bodies.
    """

    id: UUID
    title: str
    description: Optional[str] = None
    is_published: bool
    share_id: str
    created_by: Optional[str] = None
    created_at: datetime


class PublishUpdate(BaseModel):
    """
    Model for publishing or unpublishing a form.
    """

    is_published: bool = Field(..., description="New publish state")


class PaginatedFormResponse(BaseModel):
    """
    Paginated response for listing forms.
    """

    items: List[FormSummary]
    total: int
    page: int
    page_size: int
    total_pages: int


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")
