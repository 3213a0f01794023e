"""Tests for HeuristicAnalyzer canned replies and keyword analysis."""
from datetime import UTC, datetime

import pytest

from app.ai.analyzer import ContentAnalyzer
from app.ai.analyzer_heuristic import HeuristicAnalyzer
from app.domain.enums import CommunicationStyle, GapStatus, MaterialType, MessageRole
from app.schemas.entities import AiPersonaRecord, MaterialRecord, MessageRecord

pytestmark = pytest.mark.unit

NOW = datetime(2024, 5, 1, tzinfo=UTC)

PERSONA = AiPersonaRecord(
    id=1,
    user_id=1,
    name="Alex",
    age=16,
    interests=["Science", "Gaming"],
    communication_style=CommunicationStyle.BALANCED,
    created_at=NOW,
)


def message(content):
    return MessageRecord(id=1, session_id=1, role=MessageRole.USER, content=content, created_at=NOW)


@pytest.fixture
def heuristic():
    return HeuristicAnalyzer()


def test_satisfies_protocol(heuristic):
    assert isinstance(heuristic, ContentAnalyzer)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text,expected_start",
    [
        ("Newton's LAW of inertia", "Oh cool, physics!"),
        ("When forces are balanced", "Oh, you're right!"),
        ("I want to teach you biology", "I'd love to learn about that!"),
    ],
)
async def test_canned_replies(heuristic, text, expected_start):
    assert (await heuristic.reply(text, PERSONA)).startswith(expected_start)


@pytest.mark.asyncio
async def test_echo_reply_quotes_first_thirty_chars(heuristic):
    text = "Photosynthesis turns sunlight into chemical energy"
    reply = await heuristic.reply(text, PERSONA)
    assert f"Let me see if I understand: {text[:30]}..." in reply


@pytest.mark.asyncio
async def test_gap_scenario_newton(heuristic):
    material = MaterialRecord(
        id=1, user_id=1, name="n.txt", type=MaterialType.TEXT, content="Newton's second law f=ma", created_at=NOW
    )
    gaps = await heuristic.analyze_gaps([message("newton")], [material])
    statuses = {g["concept"]: g["status"] for g in gaps}

    assert statuses["Newton's Laws of Motion"] == GapStatus.PARTIALLY_COVERED


@pytest.mark.asyncio
async def test_quiz_scenario_mitochondria(heuristic):
    [question] = await heuristic.generate_quiz([message("mitochondria live in the cell")])
    assert question["options"][question["correct_option"]] == "Mitochondria"
