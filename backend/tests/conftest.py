"""Shared test fixtures for all test groups."""

import pytest

from app.ai.analyzer_heuristic import HeuristicAnalyzer
from app.core.exceptions import AIGatewayError
from app.domain.enums import CommunicationStyle
from app.schemas.entities import AiPersonaCreate, SessionCreate, UserCreate
from app.storage.memory import MemStorage


class FailingAnalyzer(HeuristicAnalyzer):
    """Heuristic analyzer whose persona replies always fail upstream."""

    name = "failing"

    async def reply(self, message, persona, step=None):
        raise AIGatewayError("Anthropic API rate limit exceeded. Retry after 60 seconds.")


@pytest.fixture
def storage():
    """Fresh, empty in-memory storage."""
    return MemStorage()


@pytest.fixture
def analyzer():
    return HeuristicAnalyzer()


@pytest.fixture
def failing_analyzer():
    return FailingAnalyzer()


@pytest.fixture
async def teaching_session(storage):
    """A user, their persona and an explain-step session in ``storage``."""
    user = await storage.create_user(
        UserCreate(username="ada", password="secret", display_name="Ada Lovelace")
    )
    persona = await storage.create_ai_persona(
        AiPersonaCreate(
            user_id=user.id,
            name="Alex",
            age=16,
            interests=["Science", "Gaming"],
            communication_style=CommunicationStyle.BALANCED,
        )
    )
    return await storage.create_session(
        SessionCreate(user_id=user.id, ai_persona_id=persona.id, title="Physics basics")
    )
