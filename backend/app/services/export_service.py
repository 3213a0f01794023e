"""Session export: everything recorded for one session as a single JSON bundle."""

from datetime import UTC, datetime

import structlog

from app.core.exceptions import RecordNotFoundError
from app.schemas.teaching import SessionExport
from app.services.progress_service import progress_of, progress_view
from app.storage.base import Storage

logger = structlog.get_logger(__name__)


def export_filename(session_id: int) -> str:
    return f"session-{session_id}-export.json"


async def export_session(storage: Storage, session_id: int) -> SessionExport:
    """Collect the session, its persona, transcript, materials, gaps, quizzes and progress.

    Raises:
        RecordNotFoundError: If the session does not exist
    """
    session = await storage.get_session(session_id)
    if session is None:
        raise RecordNotFoundError("Session", session_id)

    bundle = SessionExport(
        session=session,
        persona=await storage.get_ai_persona(session.ai_persona_id),
        messages=await storage.list_messages_by_session(session_id),
        materials=await storage.list_materials_by_session(session_id),
        gaps=await storage.list_gaps_by_session(session_id),
        quizzes=await storage.list_quizzes_by_session(session_id),
        progress=progress_view(session_id, progress_of(session)),
        exported_at=datetime.now(UTC),
    )
    logger.info("session_exported", session_id=session_id, message_count=len(bundle.messages))
    return bundle
