"""TeachingSession model: one conversation between a user and a persona.

Table is named ``sessions`` to match the wire entity; the class name avoids
clashing with SQLAlchemy's own Session.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.db.base import Base


class TeachingSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    ai_persona_id = Column(Integer, ForeignKey("ai_personas.id"), nullable=False)

    title = Column(Text, nullable=False)
    topic = Column(Text, nullable=True)

    # Feynman progress
    current_step = Column(String(20), nullable=False, default="explain")  # explain, review, simplify, analogize
    steps_completed = Column(JSON, nullable=False, default=list)  # list[str] in step order
    completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
