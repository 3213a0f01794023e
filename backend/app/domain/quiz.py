"""Quiz attempt state: answer checking and question advancement.

Pure domain logic. The attempt moves to the next question after every answer,
correct or not, and finishes after the last one.
"""
from dataclasses import dataclass, field

from app.core.exceptions import QuizFinishedError
from app.schemas.entities import QUIZ_OPTION_COUNT, QuizQuestion

DEFAULT_ADVANCE_DELAY_SECONDS = 1.0


def check_answer(question: QuizQuestion, option_index: int) -> bool:
    """Return True when ``option_index`` is the question's correct option.

    Raises:
        ValueError: If option_index is not one of the four option positions.
    """
    if not 0 <= option_index < QUIZ_OPTION_COUNT:
        raise ValueError(f"optionIndex must be between 0 and {QUIZ_OPTION_COUNT - 1}")
    return option_index == question.correct_option


@dataclass
class AnswerResult:
    """Outcome of answering the current question."""

    correct: bool
    correct_option: int
    finished: bool
    next_question: QuizQuestion | None = None
    next_question_index: int | None = None
    advance_after_seconds: float = DEFAULT_ADVANCE_DELAY_SECONDS


@dataclass
class QuizAttempt:
    """One pass through a quiz's questions."""

    questions: list[QuizQuestion]
    advance_delay_seconds: float = DEFAULT_ADVANCE_DELAY_SECONDS
    current_index: int = 0
    answers: list[int] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def current_question(self) -> QuizQuestion | None:
        return None if self.finished else self.questions[self.current_index]

    @property
    def score(self) -> int:
        return sum(
            1 for question, answer in zip(self.questions, self.answers)
            if answer == question.correct_option
        )

    def answer(self, option_index: int) -> AnswerResult:
        """Check ``option_index`` against the current question and move on.

        Raises:
            QuizFinishedError: If every question has already been answered.
            ValueError: If option_index is out of range.
        """
        question = self.current_question
        if question is None:
            raise QuizFinishedError("Quiz already completed")

        correct = check_answer(question, option_index)
        self.answers.append(option_index)
        self.current_index += 1

        return AnswerResult(
            correct=correct,
            correct_option=question.correct_option,
            finished=self.finished,
            next_question=self.current_question,
            next_question_index=None if self.finished else self.current_index,
            advance_after_seconds=self.advance_delay_seconds,
        )
