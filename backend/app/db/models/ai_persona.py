"""AiPersona model: the simulated learner a user teaches."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.db.base import Base


class AiPersona(Base):
    __tablename__ = "ai_personas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    interests = Column(JSON, nullable=False, default=list)  # list[str]
    communication_style = Column(String(20), nullable=False)  # formal, casual, balanced
    avatar_url = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
