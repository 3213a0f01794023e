"""MemStorage: in-process storage backend.

One dict per entity plus a monotonically increasing id counter each. There is
no concurrency control; a single event loop is the only writer. Each instance
is independent, so tests and apps hold their own store explicitly.
"""

from datetime import UTC, datetime
from itertools import count
from typing import Any, TypeVar

from pydantic import BaseModel

from app.core.exceptions import RecordNotFoundError
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

RecordT = TypeVar("RecordT", bound=BaseModel)


class _Table:
    """Rows of one entity keyed by id, with its own id counter."""

    def __init__(self, entity: str):
        self.entity = entity
        self.rows: dict[int, Any] = {}
        self._ids = count(1)

    def next_id(self) -> int:
        return next(self._ids)


class MemStorage:
    """Dict-backed implementation of the Storage protocol."""

    name = "memory"

    def __init__(self):
        self._users = _Table("User")
        self._personas = _Table("AI Persona")
        self._sessions = _Table("Session")
        self._messages = _Table("Message")
        self._materials = _Table("Material")
        self._gaps = _Table("Gap")
        self._quizzes = _Table("Quiz")

    async def ping(self) -> bool:
        return True

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def _insert(self, table: _Table, record_cls: type[RecordT], data: BaseModel, **extra: Any) -> RecordT:
        now = self._now()
        fields = {"created_at": now, **data.model_dump(), **extra}
        if "updated_at" in record_cls.model_fields:
            fields["updated_at"] = now
        record = record_cls.model_validate({"id": table.next_id(), **fields})
        table.rows[record.id] = record
        return record

    def _update(self, table: _Table, record_id: int, updates: dict[str, Any]) -> Any:
        current = table.rows.get(record_id)
        if current is None:
            raise RecordNotFoundError(table.entity, record_id)

        fields = {**current.model_dump(), **updates, "id": current.id, "created_at": current.created_at}
        if "updated_at" in type(current).model_fields:
            fields["updated_at"] = self._now()
        record = type(current).model_validate(fields)
        table.rows[record_id] = record
        return record

    @staticmethod
    def _where(table: _Table, **criteria: Any) -> list[Any]:
        return [
            row for row in table.rows.values()
            if all(getattr(row, key) == value for key, value in criteria.items())
        ]

    def _require(self, table: _Table, record_id: int) -> None:
        if record_id not in table.rows:
            raise RecordNotFoundError(table.entity, record_id)

    # ---------------------------------------------------------------------
    # Users
    # ---------------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserRecord | None:
        return self._users.rows.get(user_id)

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        matches = self._where(self._users, username=username)
        return matches[0] if matches else None

    async def create_user(self, data: UserCreate) -> UserRecord:
        return self._insert(self._users, UserRecord, data)

    # ---------------------------------------------------------------------
    # AI personas
    # ---------------------------------------------------------------------

    async def get_ai_persona(self, persona_id: int) -> AiPersonaRecord | None:
        return self._personas.rows.get(persona_id)

    async def list_ai_personas_by_user(self, user_id: int) -> list[AiPersonaRecord]:
        return self._where(self._personas, user_id=user_id)

    async def create_ai_persona(self, data: AiPersonaCreate) -> AiPersonaRecord:
        self._require(self._users, data.user_id)
        return self._insert(self._personas, AiPersonaRecord, data, active=True)

    async def update_ai_persona(self, persona_id: int, updates: dict[str, Any]) -> AiPersonaRecord:
        return self._update(self._personas, persona_id, updates)

    # ---------------------------------------------------------------------
    # Sessions
    # ---------------------------------------------------------------------

    async def get_session(self, session_id: int) -> SessionRecord | None:
        return self._sessions.rows.get(session_id)

    async def list_sessions_by_user(self, user_id: int) -> list[SessionRecord]:
        return self._where(self._sessions, user_id=user_id)

    async def create_session(self, data: SessionCreate) -> SessionRecord:
        self._require(self._users, data.user_id)
        self._require(self._personas, data.ai_persona_id)
        return self._insert(self._sessions, SessionRecord, data, completed=False)

    async def update_session(self, session_id: int, updates: dict[str, Any]) -> SessionRecord:
        return self._update(self._sessions, session_id, updates)

    # ---------------------------------------------------------------------
    # Messages
    # ---------------------------------------------------------------------

    async def get_message(self, message_id: int) -> MessageRecord | None:
        return self._messages.rows.get(message_id)

    async def list_messages_by_session(self, session_id: int) -> list[MessageRecord]:
        rows = self._where(self._messages, session_id=session_id)
        return sorted(rows, key=lambda m: (m.created_at, m.id))

    async def create_message(self, data: MessageCreate) -> MessageRecord:
        self._require(self._sessions, data.session_id)
        return self._insert(self._messages, MessageRecord, data)

    # ---------------------------------------------------------------------
    # Materials
    # ---------------------------------------------------------------------

    async def get_material(self, material_id: int) -> MaterialRecord | None:
        return self._materials.rows.get(material_id)

    async def list_materials_by_user(self, user_id: int) -> list[MaterialRecord]:
        return self._where(self._materials, user_id=user_id)

    async def list_materials_by_session(self, session_id: int) -> list[MaterialRecord]:
        return self._where(self._materials, session_id=session_id)

    async def create_material(self, data: MaterialCreate) -> MaterialRecord:
        self._require(self._users, data.user_id)
        if data.session_id is not None:
            self._require(self._sessions, data.session_id)
        return self._insert(self._materials, MaterialRecord, data)

    async def update_material(self, material_id: int, updates: dict[str, Any]) -> MaterialRecord:
        return self._update(self._materials, material_id, updates)

    # ---------------------------------------------------------------------
    # Gaps
    # ---------------------------------------------------------------------

    async def get_gap(self, gap_id: int) -> GapRecord | None:
        return self._gaps.rows.get(gap_id)

    async def list_gaps_by_session(self, session_id: int) -> list[GapRecord]:
        return self._where(self._gaps, session_id=session_id)

    async def create_gap(self, data: GapCreate) -> GapRecord:
        self._require(self._sessions, data.session_id)
        return self._insert(self._gaps, GapRecord, data)

    async def update_gap(self, gap_id: int, updates: dict[str, Any]) -> GapRecord:
        return self._update(self._gaps, gap_id, updates)

    # ---------------------------------------------------------------------
    # Quizzes
    # ---------------------------------------------------------------------

    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        return self._quizzes.rows.get(quiz_id)

    async def list_quizzes_by_session(self, session_id: int) -> list[QuizRecord]:
        return self._where(self._quizzes, session_id=session_id)

    async def create_quiz(self, data: QuizCreate) -> QuizRecord:
        self._require(self._sessions, data.session_id)
        return self._insert(self._quizzes, QuizRecord, data)
