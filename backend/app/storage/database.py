"""DatabaseStorage: SQLAlchemy async implementation of the Storage protocol.

Every call opens its own AsyncSession from the factory; there are no
transactions spanning multiple calls (e.g. "create material" and "attach
extracted concepts" are two separate commits).
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import RecordNotFoundError, StorageError
from app.db.base import Base
from app.db.models import AiPersona, Gap, Material, Message, Quiz, TeachingSession, User
from app.schemas.entities import (
    AiPersonaCreate,
    AiPersonaRecord,
    GapCreate,
    GapRecord,
    MaterialCreate,
    MaterialRecord,
    MessageCreate,
    MessageRecord,
    QuizCreate,
    QuizRecord,
    SessionCreate,
    SessionRecord,
    UserCreate,
    UserRecord,
)

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_ENTITY_NAMES: dict[type[Base], str] = {
    User: "User",
    AiPersona: "AI Persona",
    TeachingSession: "Session",
    Message: "Message",
    Material: "Material",
    Gap: "Gap",
    Quiz: "Quiz",
}


def _to_column(value: Any) -> Any:
    """Convert enum values (also inside lists) to their persisted strings."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_to_column(v) for v in value]
    return value


class DatabaseStorage:
    """ORM-backed implementation of the Storage protocol."""

    name = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def ping(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("storage_ping_failed", backend=self.name, error=str(e))
            return False

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    async def _get(self, model: type[Base], record_cls: type[RecordT], record_id: int) -> RecordT | None:
        async with self.session_factory() as session:
            row = await session.get(model, record_id)
            return record_cls.model_validate(row) if row is not None else None

    async def _list(self, record_cls: type[RecordT], stmt) -> list[RecordT]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [record_cls.model_validate(row) for row in result.scalars().all()]

    async def _require(self, session: AsyncSession, model: type[Base], record_id: int | None) -> None:
        if record_id is not None and await session.get(model, record_id) is None:
            raise RecordNotFoundError(_ENTITY_NAMES[model], record_id)

    async def _create(
        self,
        model: type[Base],
        record_cls: type[RecordT],
        values: dict[str, Any],
        requires: tuple[tuple[type[Base], int | None], ...] = (),
    ) -> RecordT:
        try:
            async with self.session_factory() as session:
                for parent_model, parent_id in requires:
                    await self._require(session, parent_model, parent_id)

                row = model(**{key: _to_column(value) for key, value in values.items()})
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return record_cls.model_validate(row)
        except SQLAlchemyError as e:
            logger.error("storage_write_failed", entity=_ENTITY_NAMES[model], error=str(e))
            raise StorageError(f"Failed to create {_ENTITY_NAMES[model]}") from e

    async def _update(
        self,
        model: type[Base],
        record_cls: type[RecordT],
        record_id: int,
        updates: dict[str, Any],
    ) -> RecordT:
        try:
            async with self.session_factory() as session:
                row = await session.get(model, record_id)
                if row is None:
                    raise RecordNotFoundError(_ENTITY_NAMES[model], record_id)

                for key, value in updates.items():
                    setattr(row, key, _to_column(value))
                if hasattr(row, "updated_at"):
                    row.updated_at = datetime.now(UTC)

                await session.commit()
                await session.refresh(row)
                return record_cls.model_validate(row)
        except SQLAlchemyError as e:
            logger.error("storage_write_failed", entity=_ENTITY_NAMES[model], record_id=record_id, error=str(e))
            raise StorageError(f"Failed to update {_ENTITY_NAMES[model]}") from e

    # ---------------------------------------------------------------------
    # Users
    # ---------------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserRecord | None:
        return await self._get(User, UserRecord, user_id)

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        users = await self._list(UserRecord, select(User).where(User.username == username))
        return users[0] if users else None

    async def create_user(self, data: UserCreate) -> UserRecord:
        return await self._create(User, UserRecord, data.model_dump())

    # ---------------------------------------------------------------------
    # AI personas
    # ---------------------------------------------------------------------

    async def get_ai_persona(self, persona_id: int) -> AiPersonaRecord | None:
        return await self._get(AiPersona, AiPersonaRecord, persona_id)

    async def list_ai_personas_by_user(self, user_id: int) -> list[AiPersonaRecord]:
        stmt = select(AiPersona).where(AiPersona.user_id == user_id).order_by(AiPersona.id)
        return await self._list(AiPersonaRecord, stmt)

    async def create_ai_persona(self, data: AiPersonaCreate) -> AiPersonaRecord:
        return await self._create(
            AiPersona, AiPersonaRecord, data.model_dump(), requires=((User, data.user_id),)
        )

    async def update_ai_persona(self, persona_id: int, updates: dict[str, Any]) -> AiPersonaRecord:
        return await self._update(AiPersona, AiPersonaRecord, persona_id, updates)

    # ---------------------------------------------------------------------
    # Sessions
    # ---------------------------------------------------------------------

    async def get_session(self, session_id: int) -> SessionRecord | None:
        return await self._get(TeachingSession, SessionRecord, session_id)

    async def list_sessions_by_user(self, user_id: int) -> list[SessionRecord]:
        stmt = select(TeachingSession).where(TeachingSession.user_id == user_id).order_by(TeachingSession.id)
        return await self._list(SessionRecord, stmt)

    async def create_session(self, data: SessionCreate) -> SessionRecord:
        return await self._create(
            TeachingSession,
            SessionRecord,
            data.model_dump(),
            requires=((User, data.user_id), (AiPersona, data.ai_persona_id)),
        )

    async def update_session(self, session_id: int, updates: dict[str, Any]) -> SessionRecord:
        return await self._update(TeachingSession, SessionRecord, session_id, updates)

    # ---------------------------------------------------------------------
    # Messages
    # ---------------------------------------------------------------------

    async def get_message(self, message_id: int) -> MessageRecord | None:
        return await self._get(Message, MessageRecord, message_id)

    async def list_messages_by_session(self, session_id: int) -> list[MessageRecord]:
        stmt = (
            select(Message)
            .where(Message.session_id == session_id)
            .order_by(Message.created_at, Message.id)
        )
        return await self._list(MessageRecord, stmt)

    async def create_message(self, data: MessageCreate) -> MessageRecord:
        return await self._create(
            Message, MessageRecord, data.model_dump(), requires=((TeachingSession, data.session_id),)
        )

    # ---------------------------------------------------------------------
    # Materials
    # ---------------------------------------------------------------------

    async def get_material(self, material_id: int) -> MaterialRecord | None:
        return await self._get(Material, MaterialRecord, material_id)

    async def list_materials_by_user(self, user_id: int) -> list[MaterialRecord]:
        stmt = select(Material).where(Material.user_id == user_id).order_by(Material.id)
        return await self._list(MaterialRecord, stmt)

    async def list_materials_by_session(self, session_id: int) -> list[MaterialRecord]:
        stmt = select(Material).where(Material.session_id == session_id).order_by(Material.id)
        return await self._list(MaterialRecord, stmt)

    async def create_material(self, data: MaterialCreate) -> MaterialRecord:
        return await self._create(
            Material,
            MaterialRecord,
            data.model_dump(),
            requires=((User, data.user_id), (TeachingSession, data.session_id)),
        )

    async def update_material(self, material_id: int, updates: dict[str, Any]) -> MaterialRecord:
        return await self._update(Material, MaterialRecord, material_id, updates)

    # ---------------------------------------------------------------------
    # Gaps
    # ---------------------------------------------------------------------

    async def get_gap(self, gap_id: int) -> GapRecord | None:
        return await self._get(Gap, GapRecord, gap_id)

    async def list_gaps_by_session(self, session_id: int) -> list[GapRecord]:
        stmt = select(Gap).where(Gap.session_id == session_id).order_by(Gap.id)
        return await self._list(GapRecord, stmt)

    async def create_gap(self, data: GapCreate) -> GapRecord:
        return await self._create(
            Gap, GapRecord, data.model_dump(), requires=((TeachingSession, data.session_id),)
        )

    async def update_gap(self, gap_id: int, updates: dict[str, Any]) -> GapRecord:
        return await self._update(Gap, GapRecord, gap_id, updates)

    # ---------------------------------------------------------------------
    # Quizzes
    # ---------------------------------------------------------------------

    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        return await self._get(Quiz, QuizRecord, quiz_id)

    async def list_quizzes_by_session(self, session_id: int) -> list[QuizRecord]:
        stmt = select(Quiz).where(Quiz.session_id == session_id).order_by(Quiz.id)
        return await self._list(QuizRecord, stmt)

    async def create_quiz(self, data: QuizCreate) -> QuizRecord:
        values = {
            "session_id": data.session_id,
            "title": data.title,
            "questions": [q.model_dump(by_alias=True) for q in data.questions],
        }
        return await self._create(Quiz, QuizRecord, values, requires=((TeachingSession, data.session_id),))
