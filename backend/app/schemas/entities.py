"""Record and create schemas shared by both storage backends.

Every backend returns these Pydantic records, so services and routes never see
ORM rows or in-memory dicts. Wire names are camelCase (``aiPersonaId``,
``currentStep``); snake_case is accepted on input as well.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.domain.enums import (
    CommunicationStyle,
    FeynmanStep,
    GapStatus,
    MaterialType,
    MessageRole,
)

QUIZ_OPTION_COUNT = 4


class CamelModel(BaseModel):
    """Base model with camelCase aliases and ORM attribute loading."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ==================== USERS ====================


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    email: str | None = None
    avatar_url: str | None = None


class UserRecord(UserCreate):
    id: int
    created_at: datetime


# ==================== AI PERSONAS ====================


class AiPersonaCreate(CamelModel):
    user_id: int
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=10, le=120)
    interests: list[str] = Field(..., min_length=1)
    communication_style: CommunicationStyle
    avatar_url: str | None = None


class AiPersonaUpdate(CamelModel):
    """Partial persona edit; unset fields are left untouched."""

    name: str | None = Field(None, min_length=1)
    age: int | None = Field(None, ge=10, le=120)
    interests: list[str] | None = Field(None, min_length=1)
    communication_style: CommunicationStyle | None = None
    avatar_url: str | None = None


class AiPersonaRecord(AiPersonaCreate):
    id: int
    active: bool = True
    created_at: datetime


# ==================== SESSIONS ====================


class SessionCreate(CamelModel):
    user_id: int
    ai_persona_id: int
    title: str = Field(..., min_length=1)
    topic: str | None = None
    current_step: FeynmanStep = FeynmanStep.EXPLAIN
    steps_completed: list[FeynmanStep] = Field(default_factory=list)

    @field_validator("current_step", mode="before")
    @classmethod
    def default_step(cls, v):
        return FeynmanStep.EXPLAIN if v is None else v

    @field_validator("steps_completed", mode="before")
    @classmethod
    def default_steps(cls, v):
        return [] if v is None else v


class SessionUpdate(CamelModel):
    """Partial session edit from the save action."""

    title: str | None = Field(None, min_length=1)
    topic: str | None = None
    current_step: FeynmanStep | None = None
    steps_completed: list[FeynmanStep] | None = None
    completed: bool | None = None


class SessionRecord(SessionCreate):
    id: int
    completed: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("completed", mode="before")
    @classmethod
    def default_completed(cls, v):
        return bool(v)


# ==================== MESSAGES ====================


class MessageCreate(CamelModel):
    session_id: int
    role: MessageRole
    content: str
    feynman_step: FeynmanStep | None = None


class MessageRecord(MessageCreate):
    id: int
    created_at: datetime


# ==================== MATERIALS ====================


class MaterialCreate(CamelModel):
    user_id: int
    session_id: int | None = None
    name: str = Field(..., min_length=1)
    type: MaterialType
    content: str
    extracted_concepts: list[str] | None = None


class MaterialRecord(MaterialCreate):
    id: int
    created_at: datetime


# ==================== GAPS ====================


class GapCreate(CamelModel):
    session_id: int
    concept: str = Field(..., min_length=1)
    description: str | None = None
    status: GapStatus = GapStatus.NOT_COVERED

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return GapStatus.NOT_COVERED if v is None else v


class GapRecord(GapCreate):
    id: int
    created_at: datetime
    updated_at: datetime


# ==================== QUIZZES ====================


class QuizQuestion(CamelModel):
    """Multiple-choice question with exactly four options."""

    id: str
    question: str = Field(..., min_length=1)
    options: list[str]
    correct_option: int

    @model_validator(mode="after")
    def check_options(self):
        if len(self.options) != QUIZ_OPTION_COUNT:
            raise ValueError(f"Quiz questions need exactly {QUIZ_OPTION_COUNT} options")
        if not 0 <= self.correct_option < len(self.options):
            raise ValueError("correctOption must index one of the options")
        return self


class QuizCreate(CamelModel):
    session_id: int
    title: str = Field(..., min_length=1)
    questions: list[QuizQuestion]


class QuizRecord(QuizCreate):
    id: int
    created_at: datetime
