"""ContentAnalyzer Protocol: the seam between orchestration and AI content.

Services depend on this protocol only. Two implementations exist:
- HeuristicAnalyzer: keyword rules and scripted replies, no network calls
- DelegatedAIAnalyzer: Anthropic-backed generation

Return shapes are plain dicts and lists; the services validate and cap them,
so a misbehaving model can never push malformed rows into storage.
"""

from typing import Protocol, Sequence, runtime_checkable

from app.domain.enums import FeynmanStep
from app.schemas.entities import AiPersonaRecord, MaterialRecord, MessageRecord


@runtime_checkable
class ContentAnalyzer(Protocol):
    """Protocol for persona replies and teaching-content analysis."""

    name: str

    async def greet(self, persona: AiPersonaRecord) -> str:
        """Opening line for a new session, spoken as ``persona``."""
        ...

    async def reply(
        self,
        message: str,
        persona: AiPersonaRecord,
        step: FeynmanStep | None = None,
    ) -> str:
        """Reply in character to the user's latest teaching message.

        Raises:
            AIGatewayError: If no reply could be produced
        """
        ...

    async def extract_concepts(self, text: str) -> list[str]:
        """Key concept names found in a material's text. Never raises; [] on failure."""
        ...

    async def analyze_gaps(
        self,
        messages: Sequence[MessageRecord],
        materials: Sequence[MaterialRecord],
    ) -> list[dict]:
        """Concepts from ``materials`` the transcript has not fully covered.

        Returns:
            List of dicts with keys: concept, description, status.
            Never raises; [] on failure.
        """
        ...

    async def generate_quiz(
        self,
        messages: Sequence[MessageRecord],
        topic: str | None = None,
    ) -> list[dict]:
        """Multiple-choice questions about what was taught.

        Returns:
            List of dicts with keys: id, question, options, correct_option.
            Never raises; [] on failure.
        """
        ...
