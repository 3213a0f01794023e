"""ChatService: one teaching turn between the user and the AI persona.

Flow for a normal turn:
1. Persist the user message tagged with the session's current step
2. Derive a topic from the first user message if the session has none
3. Ask the analyzer for an in-character reply
4. Persist the AI reply with the same tag

An AI failure in step 3 leaves the user message in place and reports the
turn as unanswered; the user re-sends to retry.
"""

import structlog

from app.ai.analyzer import ContentAnalyzer
from app.core.exceptions import AIGatewayError, RecordNotFoundError
from app.domain.enums import FeynmanStep, MessageRole
from app.schemas.entities import AiPersonaRecord, MessageCreate, SessionRecord
from app.schemas.teaching import ChatSendResponse, LegacyChatRequest, Notice
from app.storage.base import Storage

logger = structlog.get_logger(__name__)

TOPIC_MIN_CHARS = 5
TOPIC_WORDS = 3

FAILED_NOTICE = Notice(
    title="Message Failed",
    description="Failed to send message. Please try again.",
    variant="destructive",
)

LEGACY_FALLBACK_REPLY = "Sorry, I'm having trouble responding right now. Let's continue in a moment."


def derive_topic(content: str) -> str | None:
    """First three words plus an ellipsis, for messages longer than 5 chars."""
    content = content.strip()
    if len(content) <= TOPIC_MIN_CHARS:
        return None
    return " ".join(content.split()[:TOPIC_WORDS]) + "..."


class ChatService:
    """Orchestrates chat turns over storage and a ContentAnalyzer."""

    def __init__(self, storage: Storage, analyzer: ContentAnalyzer):
        self.storage = storage
        self.analyzer = analyzer

    async def _load(self, session_id: int) -> tuple[SessionRecord, AiPersonaRecord]:
        session = await self.storage.get_session(session_id)
        if session is None:
            raise RecordNotFoundError("Session", session_id)
        persona = await self.storage.get_ai_persona(session.ai_persona_id)
        if persona is None:
            raise RecordNotFoundError("AI Persona", session.ai_persona_id)
        return session, persona

    async def send(self, session_id: int, content: str, is_initial: bool = False) -> ChatSendResponse:
        """Run one chat turn.

        Raises:
            RecordNotFoundError: If the session or its persona does not exist
            ValueError: If content is empty on a non-initial turn
        """
        session, persona = await self._load(session_id)

        if is_initial:
            greeting = await self.analyzer.greet(persona)
            ai_message = await self.storage.create_message(
                MessageCreate(
                    session_id=session_id,
                    role=MessageRole.AI,
                    content=greeting,
                    feynman_step=FeynmanStep.EXPLAIN,
                )
            )
            logger.info("chat_greeting_sent", session_id=session_id, persona_id=persona.id)
            return ChatSendResponse(status="greeted", session=session, ai_message=ai_message)

        if not content.strip():
            raise ValueError("Message content must not be empty")

        step = session.current_step
        user_message = await self.storage.create_message(
            MessageCreate(session_id=session_id, role=MessageRole.USER, content=content, feynman_step=step)
        )

        if not session.topic:
            topic = derive_topic(content)
            if topic:
                session = await self.storage.update_session(session_id, {"topic": topic})
                logger.info("session_topic_derived", session_id=session_id, topic=topic)

        try:
            reply = await self.analyzer.reply(content, persona, step)
        except AIGatewayError as e:
            logger.warning(
                "chat_reply_failed",
                session_id=session_id,
                analyzer=self.analyzer.name,
                user_message_id=user_message.id,
                error=str(e),
            )
            return ChatSendResponse(
                status="unanswered",
                session=session,
                user_message=user_message,
                notice=FAILED_NOTICE,
            )

        ai_message = await self.storage.create_message(
            MessageCreate(session_id=session_id, role=MessageRole.AI, content=reply, feynman_step=step)
        )
        logger.info(
            "chat_reply_sent",
            session_id=session_id,
            step=step.value,
            analyzer=self.analyzer.name,
            reply_chars=len(reply),
        )
        return ChatSendResponse(
            status="answered",
            session=session,
            user_message=user_message,
            ai_message=ai_message,
        )

    async def legacy_reply(self, request: LegacyChatRequest) -> str:
        """Reply to a bare message for a persona, persisting both turns if a session is given.

        An analyzer failure returns a fixed apology and stores no AI turn.

        Raises:
            RecordNotFoundError: If the persona or session does not exist
        """
        persona = await self.storage.get_ai_persona(request.persona_id)
        if persona is None:
            raise RecordNotFoundError("AI Persona", request.persona_id)

        if request.session_id is not None:
            await self.storage.create_message(
                MessageCreate(
                    session_id=request.session_id,
                    role=MessageRole.USER,
                    content=request.message,
                    feynman_step=request.feynman_step,
                )
            )

        try:
            reply = await self.analyzer.reply(request.message, persona, request.feynman_step)
        except AIGatewayError as e:
            logger.warning("legacy_chat_reply_failed", persona_id=persona.id, session_id=request.session_id, error=str(e))
            return LEGACY_FALLBACK_REPLY

        if request.session_id is not None:
            await self.storage.create_message(
                MessageCreate(
                    session_id=request.session_id,
                    role=MessageRole.AI,
                    content=reply,
                    feynman_step=request.feynman_step,
                )
            )
        return reply
