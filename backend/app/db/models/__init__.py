"""Re-export all models so Base.metadata sees them."""

from app.db.models.ai_persona import AiPersona
from app.db.models.gap import Gap
from app.db.models.material import Material
from app.db.models.message import Message
from app.db.models.quiz import Quiz
from app.db.models.teaching_session import TeachingSession
from app.db.models.user import User

__all__ = [
    "AiPersona",
    "Gap",
    "Material",
    "Message",
    "Quiz",
    "TeachingSession",
    "User",
]
