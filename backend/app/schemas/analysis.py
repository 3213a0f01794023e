"""Request/response schemas for materials, gap analysis and quizzes."""

from pydantic import Field

from app.schemas.entities import CamelModel, GapRecord, QuizQuestion
from app.schemas.teaching import Notice


class GapAnalysisRequest(CamelModel):
    session_id: int
    material_ids: list[int] = Field(default_factory=list)


class TeachConceptRequest(CamelModel):
    session_id: int
    concept: str = Field(..., min_length=1)


class TeachConceptResponse(CamelModel):
    gap: GapRecord
    notice: Notice


class QuizGenerateRequest(CamelModel):
    session_id: int
    topic: str | None = None


class QuizAnswerRequest(CamelModel):
    question_index: int = Field(..., ge=0)
    option_index: int = Field(..., ge=0, le=3)


class QuizAnswerResponse(CamelModel):
    correct: bool
    correct_option: int
    finished: bool
    next_question_index: int | None = None
    next_question: QuizQuestion | None = None
    advance_after_seconds: float
