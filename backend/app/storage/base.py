"""Storage Protocol: the capability interface every persistence backend provides.

Two implementations exist:
- MemStorage: in-process dicts with per-entity id counters (dev, tests)
- DatabaseStorage: SQLAlchemy async ORM (production)

Both return the Pydantic records from ``app.schemas.entities``. ``get_*``
returns None for a missing id; ``update_*`` raises RecordNotFoundError.
Creating a row whose foreign keys point at missing rows also raises
RecordNotFoundError.
"""

from typing import Any, Protocol, runtime_checkable

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


@runtime_checkable
class Storage(Protocol):
    """Persistence operations for every Feynman Teacher entity."""

    name: str

    async def ping(self) -> bool:
        """Return True when the backend can serve requests."""
        ...

    # Users
    async def get_user(self, user_id: int) -> UserRecord | None: ...

    async def get_user_by_username(self, username: str) -> UserRecord | None: ...

    async def create_user(self, data: UserCreate) -> UserRecord: ...

    # AI personas
    async def get_ai_persona(self, persona_id: int) -> AiPersonaRecord | None: ...

    async def list_ai_personas_by_user(self, user_id: int) -> list[AiPersonaRecord]: ...

    async def create_ai_persona(self, data: AiPersonaCreate) -> AiPersonaRecord: ...

    async def update_ai_persona(self, persona_id: int, updates: dict[str, Any]) -> AiPersonaRecord: ...

    # Sessions
    async def get_session(self, session_id: int) -> SessionRecord | None: ...

    async def list_sessions_by_user(self, user_id: int) -> list[SessionRecord]: ...

    async def create_session(self, data: SessionCreate) -> SessionRecord: ...

    async def update_session(self, session_id: int, updates: dict[str, Any]) -> SessionRecord:
        """Apply ``updates`` and bump ``updated_at``."""
        ...

    # Messages
    async def get_message(self, message_id: int) -> MessageRecord | None: ...

    async def list_messages_by_session(self, session_id: int) -> list[MessageRecord]:
        """Transcript ordered by (created_at, id)."""
        ...

    async def create_message(self, data: MessageCreate) -> MessageRecord: ...

    # Materials
    async def get_material(self, material_id: int) -> MaterialRecord | None: ...

    async def list_materials_by_user(self, user_id: int) -> list[MaterialRecord]: ...

    async def list_materials_by_session(self, session_id: int) -> list[MaterialRecord]: ...

    async def create_material(self, data: MaterialCreate) -> MaterialRecord: ...

    async def update_material(self, material_id: int, updates: dict[str, Any]) -> MaterialRecord: ...

    # Gaps
    async def get_gap(self, gap_id: int) -> GapRecord | None: ...

    async def list_gaps_by_session(self, session_id: int) -> list[GapRecord]: ...

    async def create_gap(self, data: GapCreate) -> GapRecord: ...

    async def update_gap(self, gap_id: int, updates: dict[str, Any]) -> GapRecord: ...

    # Quizzes
    async def get_quiz(self, quiz_id: int) -> QuizRecord | None: ...

    async def list_quizzes_by_session(self, session_id: int) -> list[QuizRecord]: ...

    async def create_quiz(self, data: QuizCreate) -> QuizRecord: ...
