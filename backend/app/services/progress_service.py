"""ProgressService: Feynman step transitions for a stored session.

Wraps the pure functions in app.domain.progress with loading and persisting.
Advance failures follow a retain-and-report rule: the new snapshot is returned
even when storage rejects it, flagged ``persisted=False``.
"""

import structlog

from app.core.exceptions import RecordNotFoundError, StorageError
from app.domain.enums import Feedback, FeynmanStep
from app.domain.progress import (
    FeynmanProgress,
    advance_progress,
    describe_steps,
    make_progress,
    recompute_from_transcript,
)
from app.schemas.entities import SessionRecord
from app.schemas.teaching import (
    AdvanceResponse,
    FeedbackResponse,
    Notice,
    ProgressResponse,
    StepView,
)
from app.storage.base import Storage

logger = structlog.get_logger(__name__)


def progress_of(session: SessionRecord) -> FeynmanProgress:
    return make_progress(session.current_step, session.steps_completed)


def progress_view(session_id: int, progress: FeynmanProgress) -> ProgressResponse:
    return ProgressResponse(
        session_id=session_id,
        current_step=progress.current_step,
        steps_completed=list(progress.steps_completed),
        all_complete=progress.all_complete,
        percent=progress.percent,
        steps=[StepView(**step) for step in describe_steps(progress)],
    )


def advance_notice(progress: FeynmanProgress) -> Notice:
    if progress.all_complete:
        return Notice(
            title="Feynman Process Completed",
            description="You've completed all Feynman technique steps!",
        )
    return Notice(title="Feynman Process", description=f"Moving to {progress.current_step.value} step")


class ProgressService:
    """Load, transition and persist session progress."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def load_session(self, session_id: int) -> SessionRecord:
        session = await self.storage.get_session(session_id)
        if session is None:
            raise RecordNotFoundError("Session", session_id)
        return session

    async def snapshot(self, session_id: int) -> ProgressResponse:
        session = await self.load_session(session_id)
        return progress_view(session_id, progress_of(session))

    async def advance(self, session_id: int) -> AdvanceResponse:
        """Complete the current step and move on, then persist.

        Raises:
            RecordNotFoundError: If the session does not exist
        """
        session = await self.load_session(session_id)
        confirmed = progress_of(session)
        progress = advance_progress(confirmed)

        try:
            await self.storage.update_session(
                session_id,
                {
                    "current_step": progress.current_step,
                    "steps_completed": list(progress.steps_completed),
                },
            )
        except StorageError as e:
            logger.error(
                "session_advance_not_persisted",
                session_id=session_id,
                current_step=progress.current_step.value,
                error=str(e),
            )
            return AdvanceResponse(
                progress=progress_view(session_id, progress),
                confirmed=progress_view(session_id, confirmed),
                persisted=False,
                error=str(e),
                notice=advance_notice(progress),
            )

        logger.info(
            "session_advanced",
            session_id=session_id,
            from_step=confirmed.current_step.value,
            to_step=progress.current_step.value,
            all_complete=progress.all_complete,
        )
        view = progress_view(session_id, progress)
        return AdvanceResponse(progress=view, confirmed=view, persisted=True, notice=advance_notice(progress))

    async def recompute(self, session_id: int) -> ProgressResponse:
        """Rebuild progress from the transcript's step tags and persist it."""
        session = await self.load_session(session_id)
        messages = await self.storage.list_messages_by_session(session_id)
        previous = progress_of(session)
        progress = recompute_from_transcript(messages, fallback=previous)

        if progress != previous:
            await self.storage.update_session(
                session_id,
                {
                    "current_step": progress.current_step,
                    "steps_completed": list(progress.steps_completed),
                },
            )
            logger.info(
                "session_progress_recomputed",
                session_id=session_id,
                current_step=progress.current_step.value,
                steps_completed=[s.value for s in progress.steps_completed],
            )
        return progress_view(session_id, progress)

    async def record_feedback(self, session_id: int, feedback: Feedback, message: str = "") -> FeedbackResponse:
        """Apply learner feedback on an AI message.

        "good" while on the explain step advances the session; anything else
        only produces a notice.
        """
        session = await self.load_session(session_id)
        logger.info(
            "feedback_recorded",
            session_id=session_id,
            feedback=feedback.value,
            current_step=session.current_step.value,
            message_chars=len(message),
        )

        if feedback is Feedback.GOOD:
            notice = Notice(title="Good Explanation", description="Great! Let's move to the next step.")
            if session.current_step is FeynmanStep.EXPLAIN:
                result = await self.advance(session_id)
                return FeedbackResponse(
                    progress=result.progress,
                    advanced=True,
                    persisted=result.persisted,
                    notice=notice,
                )
        else:
            notice = Notice(title="Still Confused", description="Let's try to clarify this concept further.")

        return FeedbackResponse(
            progress=progress_view(session_id, progress_of(session)),
            advanced=False,
            notice=notice,
        )
