from pydantic import BaseModel, Field, computed_field, model_validator
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Any, List, Optional

from formbuilder.scoring.utils import score_percentage


class Answer(BaseModel):
    """
    One respondent answer. The payload shape depends on the question type
    and is only interpreted by the scoring engine.
    """

    question_id: str = Field(..., min_length=1)
    question_type: str = Field(..., min_length=1)
    answer: Any = Field(default=None, description="Type-dependent answer payload")


class ScoreResult(BaseModel):
    """
    Output of the scoring engine.
    """

    score: int = Field(default=0, ge=0, description="Points awarded")
    max_score: int = Field(default=0, ge=0, description="Points available")

    @model_validator(mode="after")
    def validate_bounds(self):
        """Ensure score never exceeds max_score."""
        if self.score > self.max_score:
            raise ValueError("score must be <= max_score")
        return self

    @classmethod
    def empty(cls) -> "ScoreResult":
        """The fallback result: no reliable score."""
        return cls(score=0, max_score=0)


class ResponseCreate(BaseModel):
    """
    Model for submitting a response. `answers` is accepted as arbitrary
    JSON and sanitized server side so that one malformed entry never
    rejects the whole submission.
    """

    form_id: UUID = Field(..., description="Form being answered")

    user_id: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Respondent identity; absent for anonymous responses"
    )

    answers: Any = Field(default_factory=list, description="List of answers")


class ResponseRecord(BaseModel):
    """
    A persisted response, as returned by the API.
    """

    id: UUID = Field(default_factory=uuid4)
    form_id: UUID
    user_id: Optional[str] = None
    answers: List[Answer] = Field(default_factory=list)
    score: int = Field(default=0, ge=0)
    max_score: int = Field(default=0, ge=0)
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Submission timestamp (UTC)"
    )
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @computed_field
    @property
    def score_percentage(self) -> int:
        return score_percentage(self.score, self.max_score)

    @computed_field
    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    class Config:
        from_attributes = True


class PaginatedResponseList(BaseModel):
    """
    Paginated response for listing a form's responses.
    """

    items: List[ResponseRecord]
    total: int
    page: int
    page_size: int
    total_pages: int


class ScoringTestRequest(BaseModel):
    """
    Payload for the scoring preview endpoint.
    """

    form_id: UUID
    answers: Any = Field(default_factory=list)


class QuestionScoreDetail(BaseModel):
    question_id: str
    question_type: str
    score: int
    max_score: int
    scored: bool


class ScoringTestResponse(BaseModel):
    """
    Result of a scoring preview. Nothing is persisted.
    """

    message: str = "Scoring test completed"
    result: ScoreResult
    breakdown: List[QuestionScoreDetail] = Field(default_factory=list)
    form_id: UUID
    answers: Any = None
