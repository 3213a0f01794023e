"""HeuristicAnalyzer: keyword-rule implementation of the ContentAnalyzer protocol.

Used whenever no Anthropic key is configured. Everything is deterministic and
instant:
- greet: the scripted persona greeting
- reply: canned persona replies keyed on a few phrases
- extract_concepts / analyze_gaps / generate_quiz: subject-area keyword rules
  from app.domain.heuristics
"""

from typing import Sequence

import structlog

from app.ai.prompts import scripted_greeting
from app.domain import heuristics
from app.domain.enums import FeynmanStep
from app.domain.materials import combine_materials, format_transcript
from app.schemas.entities import AiPersonaRecord, MaterialRecord, MessageRecord

logger = structlog.get_logger(__name__)

NEWTON_REPLY = (
    "Oh cool, physics! So Newton's first law of motion is also called the law of inertia. "
    "Basically, it means that an object will stay at rest or keep moving at the same speed and "
    "direction unless a force acts on it.\n\n"
    "Like if you have a ball sitting on the ground, it'll just stay there until you kick it or "
    "something. And if you're cruising on a skateboard, you'll keep going until you hit a rock "
    "or push your foot down to stop."
)

BALANCED_FORCES_REPLY = (
    "Oh, you're right! I totally missed that part. So Newton's first law also talks about "
    "balanced forces.\n\n"
    "When an object is at rest, it means all the forces acting on it are balanced or cancel each "
    "other out. Like a book on a table - gravity pulls it down, but the table pushes up with an "
    "equal force.\n\n"
    "And when an object is moving with constant velocity (same speed and direction), the forces "
    "are also balanced. That's why if you're in a car moving at constant speed on a straight "
    "road, you don't feel like you're being pushed or pulled."
)

EAGER_REPLY = (
    "I'd love to learn about that! Can you start by explaining the basic concept? I learn best "
    "when people start with the fundamentals and then build up to more complex ideas. I'm all ears!"
)

ECHO_REPLY = (
    "Thanks for teaching me about that! Let me see if I understand: {excerpt}... "
    "That's really interesting. Could you explain more about how this works?"
)

ECHO_EXCERPT_CHARS = 30


class HeuristicAnalyzer:
    """Deterministic ContentAnalyzer with no network access."""

    name = "heuristic"

    async def greet(self, persona: AiPersonaRecord) -> str:
        return scripted_greeting(persona)

    async def reply(
        self,
        message: str,
        persona: AiPersonaRecord,
        step: FeynmanStep | None = None,
    ) -> str:
        """Pick a canned reply by phrase matching on the lower-cased message."""
        lowered = message.lower()
        if "newton" in lowered and "law" in lowered:
            return NEWTON_REPLY
        if "forces" in lowered and "balanced" in lowered:
            return BALANCED_FORCES_REPLY
        if "teach" in lowered:
            return EAGER_REPLY
        return ECHO_REPLY.format(excerpt=message[:ECHO_EXCERPT_CHARS])

    async def extract_concepts(self, text: str) -> list[str]:
        return heuristics.concepts_in(text)

    async def analyze_gaps(
        self,
        messages: Sequence[MessageRecord],
        materials: Sequence[MaterialRecord],
    ) -> list[dict]:
        gaps = heuristics.assess_gaps(combine_materials(materials), format_transcript(messages))
        logger.debug("heuristic_gaps_assessed", gap_count=len(gaps))
        return gaps

    async def generate_quiz(
        self,
        messages: Sequence[MessageRecord],
        topic: str | None = None,
    ) -> list[dict]:
        # Topic words count as teaching context for subject matching
        transcript = format_transcript(messages)
        if topic:
            transcript = f"{topic}\n\n{transcript}"
        return heuristics.pick_quiz_questions(transcript)
