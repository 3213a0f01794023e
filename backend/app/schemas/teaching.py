"""Request/response schemas for progress, chat and session export."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from app.domain.enums import Feedback, FeynmanStep
from app.schemas.entities import (
    AiPersonaRecord,
    CamelModel,
    GapRecord,
    MaterialRecord,
    MessageRecord,
    QuizRecord,
    SessionRecord,
)


class Notice(CamelModel):
    """Short user-facing message the UI shows as a toast."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


# ==================== PROGRESS ====================


class StepView(CamelModel):
    id: FeynmanStep
    label: str
    description: str
    complete: bool


class ProgressResponse(CamelModel):
    session_id: int
    current_step: FeynmanStep
    steps_completed: list[FeynmanStep]
    all_complete: bool
    percent: int
    steps: list[StepView]


class AdvanceResponse(CamelModel):
    """Outcome of an advance.

    ``progress`` is the new state. ``persisted`` says whether storage accepted
    it; on failure ``confirmed`` still holds the last stored state and
    ``error`` says why. The new state is retained, not reverted.
    """

    progress: ProgressResponse
    confirmed: ProgressResponse
    persisted: bool
    error: str | None = None
    notice: Notice


class FeedbackRequest(CamelModel):
    feedback: Feedback
    message: str = ""


class FeedbackResponse(CamelModel):
    progress: ProgressResponse
    advanced: bool
    persisted: bool = True
    notice: Notice


# ==================== CHAT ====================


class ChatSendRequest(CamelModel):
    content: str = ""
    is_initial: bool = False

    @model_validator(mode="after")
    def require_content(self):
        if not self.is_initial and not self.content.strip():
            raise ValueError("content must not be empty")
        return self


class ChatSendResponse(CamelModel):
    """Messages written by one chat turn.

    status: "greeted" for the opening line, "answered" when the persona
    replied, "unanswered" when the AI failed and only the user turn was kept.
    """

    status: Literal["greeted", "answered", "unanswered"]
    session: SessionRecord
    user_message: MessageRecord | None = None
    ai_message: MessageRecord | None = None
    notice: Notice | None = None


class LegacyChatRequest(CamelModel):
    message: str = Field(..., min_length=1)
    persona_id: int
    session_id: int | None = None
    feynman_step: FeynmanStep | None = None


class LegacyChatResponse(CamelModel):
    message: str


# ==================== EXPORT ====================


class SessionExport(CamelModel):
    session: SessionRecord
    persona: AiPersonaRecord | None
    messages: list[MessageRecord]
    materials: list[MaterialRecord]
    gaps: list[GapRecord]
    quizzes: list[QuizRecord]
    progress: ProgressResponse
    exported_at: datetime
