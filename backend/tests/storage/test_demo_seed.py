"""Tests for the demo seed run at startup."""
import pytest

from app.db.seed import DEMO_USER, seed_demo_data
from app.storage import MemStorage

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_seed_creates_user_and_persona_only():
    storage = MemStorage()

    await seed_demo_data(storage)

    user = await storage.get_user_by_username(DEMO_USER["username"])
    personas = await storage.list_ai_personas_by_user(user.id)
    assert [p.name for p in personas] == ["Alex"]
    assert await storage.list_sessions_by_user(user.id) == []


@pytest.mark.asyncio
async def test_seed_is_idempotent():
    storage = MemStorage()

    await seed_demo_data(storage)
    await seed_demo_data(storage)

    user = await storage.get_user_by_username(DEMO_USER["username"])
    assert len(await storage.list_ai_personas_by_user(user.id)) == 1
