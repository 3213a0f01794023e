"""QuizService: quiz generation from a session transcript and answer checking."""

from typing import Iterable

import structlog
from pydantic import ValidationError

from app.ai.analyzer import ContentAnalyzer
from app.core.config import Settings, get_settings
from app.core.exceptions import RecordNotFoundError
from app.domain.quiz import QuizAttempt
from app.schemas.analysis import QuizAnswerResponse
from app.schemas.entities import QuizCreate, QuizQuestion, QuizRecord
from app.storage.base import Storage

logger = structlog.get_logger(__name__)

DEFAULT_QUIZ_TITLE = "Quiz on Current Topic"


def normalize_questions(raw_questions: Iterable[dict], limit: int) -> list[QuizQuestion]:
    """Validate raw questions, dropping malformed ones and keeping at most ``limit``.

    Missing ids are filled with q1, q2, ... by position.
    """
    questions = []
    for raw in raw_questions:
        data = dict(raw)
        data.setdefault("id", f"q{len(questions) + 1}")
        data["id"] = str(data["id"])
        try:
            questions.append(QuizQuestion.model_validate(data))
        except ValidationError as e:
            logger.debug("quiz_question_dropped", question_id=data["id"], errors=e.error_count())
            continue
        if len(questions) == limit:
            break
    return questions


class QuizService:
    def __init__(self, storage: Storage, analyzer: ContentAnalyzer, settings: Settings | None = None):
        self.storage = storage
        self.analyzer = analyzer
        self.settings = settings or get_settings()

    async def generate(self, session_id: int, topic: str | None = None) -> QuizRecord:
        """Generate and store a quiz over the session's transcript.

        Raises:
            RecordNotFoundError: If the session does not exist
        """
        if await self.storage.get_session(session_id) is None:
            raise RecordNotFoundError("Session", session_id)

        messages = await self.storage.list_messages_by_session(session_id)
        raw_questions = await self.analyzer.generate_quiz(messages, topic)
        questions = normalize_questions(raw_questions, self.settings.max_quiz_questions)

        quiz = await self.storage.create_quiz(
            QuizCreate(session_id=session_id, title=topic or DEFAULT_QUIZ_TITLE, questions=questions)
        )
        logger.info(
            "quiz_generated",
            session_id=session_id,
            quiz_id=quiz.id,
            analyzer=self.analyzer.name,
            question_count=len(questions),
            dropped=len(raw_questions) - len(questions),
        )
        return quiz

    async def answer(self, quiz_id: int, question_index: int, option_index: int) -> QuizAnswerResponse:
        """Check one answer without keeping attempt state between calls.

        Raises:
            RecordNotFoundError: If the quiz does not exist
            ValueError: If question_index or option_index is out of range
        """
        quiz = await self.storage.get_quiz(quiz_id)
        if quiz is None:
            raise RecordNotFoundError("Quiz", quiz_id)
        if not 0 <= question_index < len(quiz.questions):
            raise ValueError(f"questionIndex must be between 0 and {len(quiz.questions) - 1}")

        attempt = QuizAttempt(
            questions=quiz.questions,
            advance_delay_seconds=self.settings.quiz_advance_delay_seconds,
            current_index=question_index,
        )
        result = attempt.answer(option_index)
        logger.info(
            "quiz_answer_checked",
            quiz_id=quiz_id,
            question_index=question_index,
            correct=result.correct,
            finished=result.finished,
        )
        return QuizAnswerResponse(
            correct=result.correct,
            correct_option=result.correct_option,
            finished=result.finished,
            next_question_index=result.next_question_index,
            next_question=result.next_question,
            advance_after_seconds=result.advance_after_seconds,
        )
