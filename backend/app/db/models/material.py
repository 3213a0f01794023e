"""Material model: uploaded source text and its extracted concepts."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from app.db.base import Base


class Material(Base):
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=True, index=True)

    name = Column(Text, nullable=False)
    type = Column(String(10), nullable=False)  # pdf, text, docx, ppt
    content = Column(Text, nullable=False)
    # Null until concept extraction runs (separate write after insert)
    extracted_concepts = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
