"""MaterialsService: material ingestion, concept extraction and gap analysis."""

from typing import Iterable

import structlog

from app.ai.analyzer import ContentAnalyzer
from app.core.config import Settings, get_settings
from app.core.exceptions import RecordNotFoundError
from app.domain.enums import GapStatus
from app.domain.materials import classify_material_type, decode_upload
from app.schemas.analysis import TeachConceptResponse
from app.schemas.entities import GapCreate, GapRecord, MaterialCreate, MaterialRecord
from app.schemas.teaching import Notice
from app.storage.base import Storage

logger = structlog.get_logger(__name__)

_STATUSES = {status.value for status in GapStatus}


def normalize_gaps(raw_gaps: Iterable[dict], limit: int) -> list[dict]:
    """Keep well-formed gaps with a known status, at most ``limit`` of them."""
    gaps = []
    for raw in raw_gaps:
        concept = raw.get("concept")
        status = getattr(raw.get("status"), "value", raw.get("status"))
        if not isinstance(concept, str) or not concept.strip() or status not in _STATUSES:
            continue
        description = raw.get("description")
        gaps.append(
            {
                "concept": concept.strip(),
                "description": description if isinstance(description, str) else None,
                "status": GapStatus(status),
            }
        )
        if len(gaps) == limit:
            break
    return gaps


class MaterialsService:
    """Upload materials and compare them against what was taught."""

    def __init__(self, storage: Storage, analyzer: ContentAnalyzer, settings: Settings | None = None):
        self.storage = storage
        self.analyzer = analyzer
        self.settings = settings or get_settings()

    async def create_material(self, data: MaterialCreate) -> MaterialRecord:
        """Store a material, then attach its extracted concepts in a second write.

        Raises:
            RecordNotFoundError: If the user or session does not exist
        """
        material = await self.storage.create_material(data)
        concepts = await self.analyzer.extract_concepts(material.content)
        material = await self.storage.update_material(material.id, {"extracted_concepts": concepts})
        logger.info(
            "material_created",
            material_id=material.id,
            material_type=material.type.value,
            concept_count=len(concepts),
        )
        return material

    async def upload(
        self,
        user_id: int,
        session_id: int | None,
        files: Iterable[tuple[str, bytes | str]],
    ) -> list[MaterialRecord]:
        """Create one material per (filename, content) pair."""
        materials = []
        for filename, content in files:
            materials.append(
                await self.create_material(
                    MaterialCreate(
                        user_id=user_id,
                        session_id=session_id,
                        name=filename,
                        type=classify_material_type(filename),
                        content=decode_upload(content),
                    )
                )
            )
        return materials

    async def analyze_gaps(self, session_id: int, material_ids: list[int]) -> list[GapRecord]:
        """Compare materials against the session transcript and append gap rows.

        With no material ids the session's own materials are used.

        Raises:
            RecordNotFoundError: If the session or any material does not exist
        """
        if await self.storage.get_session(session_id) is None:
            raise RecordNotFoundError("Session", session_id)

        if material_ids:
            materials = []
            for material_id in material_ids:
                material = await self.storage.get_material(material_id)
                if material is None:
                    raise RecordNotFoundError("Material", material_id)
                materials.append(material)
        else:
            materials = await self.storage.list_materials_by_session(session_id)

        messages = await self.storage.list_messages_by_session(session_id)
        raw_gaps = await self.analyzer.analyze_gaps(messages, materials)
        gaps = normalize_gaps(raw_gaps, self.settings.max_gaps)

        records = [await self.storage.create_gap(GapCreate(session_id=session_id, **gap)) for gap in gaps]
        logger.info(
            "gap_analysis_completed",
            session_id=session_id,
            analyzer=self.analyzer.name,
            material_count=len(materials),
            message_count=len(messages),
            raw_gap_count=len(raw_gaps),
            gap_count=len(records),
        )
        return records

    async def teach_concept(self, session_id: int, concept: str) -> TeachConceptResponse:
        """Mark the newest gap named ``concept`` as covered.

        Raises:
            RecordNotFoundError: If the session has no gap with that concept
        """
        gaps = await self.storage.list_gaps_by_session(session_id)
        matching = [gap for gap in gaps if gap.concept == concept]
        if not matching:
            raise RecordNotFoundError("Gap", concept)

        newest = max(matching, key=lambda gap: (gap.created_at, gap.id))
        gap = await self.storage.update_gap(newest.id, {"status": GapStatus.COVERED})
        logger.info("gap_concept_taught", session_id=session_id, gap_id=gap.id, concept=concept)
        return TeachConceptResponse(
            gap=gap,
            notice=Notice(title="Concept Selected", description=f"Let's teach about: {concept}"),
        )
