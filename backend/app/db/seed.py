"""Idempotent seed data: one demo user and their demo persona."""

import structlog

from app.domain.enums import CommunicationStyle
from app.schemas.entities import AiPersonaCreate, UserCreate
from app.storage.base import Storage

logger = structlog.get_logger(__name__)

DEMO_USER = {
    "username": "johndoe",
    "password": "password",
    "display_name": "John Doe",
    "email": "john@example.com",
    "avatar_url": "https://api.dicebear.com/7.x/thumbs/svg?seed=John",
}

DEMO_PERSONA = {
    "name": "Alex",
    "age": 16,
    "interests": ["Science", "Gaming"],
    "communication_style": CommunicationStyle.BALANCED,
    "avatar_url": "https://api.dicebear.com/7.x/bottts/svg?seed=Alex",
}


async def seed_demo_data(storage: Storage) -> None:
    """Create the demo user and persona unless the user already exists."""
    existing = await storage.get_user_by_username(DEMO_USER["username"])
    if existing is not None:
        logger.info("seed_skipped", reason="demo_user_exists", user_id=existing.id)
        return

    user = await storage.create_user(UserCreate(**DEMO_USER))
    persona = await storage.create_ai_persona(AiPersonaCreate(user_id=user.id, **DEMO_PERSONA))
    logger.info("seed_completed", user_id=user.id, persona_id=persona.id)
