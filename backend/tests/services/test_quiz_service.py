"""Tests for QuizService generation and stateless answer checking."""
from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.core.exceptions import RecordNotFoundError
from app.domain.enums import MessageRole
from app.schemas.entities import MessageCreate
from app.services.quiz_service import QuizService, normalize_questions

pytestmark = pytest.mark.unit


def raw_question(i, options=4, correct=0, key="correctOption"):
    return {"id": f"q{i}", "question": f"Q{i}?", "options": [f"o{n}" for n in range(options)], key: correct}


@pytest.mark.asyncio
async def test_mitochondria_quiz_fallback(storage, analyzer, teaching_session):
    await storage.create_message(
        MessageCreate(
            session_id=teaching_session.id,
            role=MessageRole.USER,
            content="The mitochondria is the part of the cell that makes energy",
        )
    )

    quiz = await QuizService(storage, analyzer).generate(teaching_session.id)

    assert quiz.title == "Quiz on Current Topic"
    [question] = quiz.questions
    assert question.options[question.correct_option] == "Mitochondria"


@pytest.mark.asyncio
async def test_topic_becomes_title(storage, analyzer, teaching_session):
    quiz = await QuizService(storage, analyzer).generate(teaching_session.id, topic="Newton's laws")

    assert quiz.title == "Newton's laws"
    assert quiz.questions[0].id == "physics-1"


@pytest.mark.asyncio
async def test_malformed_questions_dropped_and_capped(storage, teaching_session):
    analyzer = AsyncMock()
    analyzer.name = "mock"
    analyzer.generate_quiz.return_value = [raw_question(0, options=3)] + [raw_question(i) for i in range(1, 8)]

    quiz = await QuizService(storage, analyzer, Settings(max_quiz_questions=5)).generate(teaching_session.id)

    assert [q.id for q in quiz.questions] == ["q1", "q2", "q3", "q4", "q5"]


@pytest.mark.asyncio
async def test_empty_ai_output_still_stores_quiz(storage, teaching_session):
    analyzer = AsyncMock()
    analyzer.name = "mock"
    analyzer.generate_quiz.return_value = []

    quiz = await QuizService(storage, analyzer).generate(teaching_session.id)

    assert quiz.questions == []
    assert (await storage.get_quiz(quiz.id)) == quiz


@pytest.mark.asyncio
async def test_generate_unknown_session(storage, analyzer):
    with pytest.raises(RecordNotFoundError):
        await QuizService(storage, analyzer).generate(31337)


@pytest.mark.asyncio
async def test_answer_flow(storage, teaching_session):
    analyzer_mock = AsyncMock()
    analyzer_mock.name = "mock"
    analyzer_mock.generate_quiz.return_value = [raw_question(1, correct=2), raw_question(2, correct=0)]
    service = QuizService(storage, analyzer_mock)
    quiz = await service.generate(teaching_session.id)

    first = await service.answer(quiz.id, 0, 1)
    assert first.correct is False
    assert first.correct_option == 2
    assert first.finished is False
    assert first.next_question_index == 1

    last = await service.answer(quiz.id, 1, 0)
    assert last.correct is True
    assert last.finished is True
    assert last.next_question is None


@pytest.mark.asyncio
async def test_answer_bad_question_index(storage, analyzer, teaching_session):
    service = QuizService(storage, analyzer)
    quiz = await service.generate(teaching_session.id)

    with pytest.raises(ValueError):
        await service.answer(quiz.id, 5, 0)


def test_normalize_questions_fills_ids_and_accepts_snake_case():
    questions = normalize_questions(
        [
            {"question": "A?", "options": ["1", "2", "3", "4"], "correct_option": 3},
            raw_question(9, correct=7),
        ],
        limit=5,
    )
    assert len(questions) == 1
    assert questions[0].id == "q1"
    assert questions[0].correct_option == 3
