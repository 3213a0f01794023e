"""DelegatedAIAnalyzer: Anthropic-backed implementation of the ContentAnalyzer protocol.

Implements the protocol with:
- Real Claude calls via anthropic.AsyncAnthropic
- Tenacity retry on overload / rate-limit / timeout (see llm_helpers)
- Markdown fence stripping before JSON parsing
- Silent JSON retry with a stricter prompt on first parse failure

Failure policy: ``reply`` raises AIGatewayError so the chat flow can tell the
user the message went unanswered. The analysis methods log and return [].
"""

import json
from typing import Any, Sequence

import anthropic
import structlog

from app.ai import prompts
from app.ai.llm_helpers import _invoke_with_retry, _parse_json_response, find_list
from app.core.config import Settings, get_settings
from app.core.exceptions import AIGatewayError
from app.domain.enums import FeynmanStep
from app.domain.materials import combine_materials, format_transcript
from app.schemas.entities import AiPersonaRecord, MaterialRecord, MessageRecord

logger = structlog.get_logger(__name__)


class DelegatedAIAnalyzer:
    """ContentAnalyzer that delegates generation to Claude."""

    name = "anthropic"

    def __init__(self, client: Any | None = None, settings: Settings | None = None):
        """Initialize the analyzer.

        Args:
            client: Object exposing ``messages.create`` (AsyncAnthropic in production).
                    Built from settings if not provided.
            settings: Application settings. Defaults to get_settings().
        """
        self.settings = settings or get_settings()
        if client is None:
            client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.ai_timeout_seconds,
                max_retries=0,
            )
        self.client = client

    async def _complete(self, model: str, system: str, user_content: str) -> str:
        try:
            text = await _invoke_with_retry(
                self.client,
                model=model,
                system=system,
                messages=[{"role": "user", "content": user_content}],
                max_tokens=self.settings.ai_max_tokens,
            )
        except anthropic.APIError as e:
            logger.warning("ai_request_failed", model=model, error=str(e), error_type=type(e).__name__)
            raise AIGatewayError(f"AI provider request failed: {e}") from e

        if not text or not text.strip():
            raise AIGatewayError("AI provider returned an empty response")
        return text

    async def _complete_json(self, task: str, operation: str) -> dict | list:
        """Run an analysis task and parse its JSON, retrying once with a stricter prompt.

        Raises:
            AIGatewayError: If the provider fails or the output is still not JSON
        """
        model = self.settings.analysis_model
        text = await self._complete(model, prompts.ANALYST_SYSTEM, task)
        try:
            return _parse_json_response(text)
        except json.JSONDecodeError:
            logger.warning("ai_json_parse_failed_retrying", operation=operation)

        text = await self._complete(model, prompts.ANALYST_SYSTEM, task + prompts.STRICT_JSON_SUFFIX)
        try:
            return _parse_json_response(text)
        except json.JSONDecodeError as e:
            raise AIGatewayError(f"AI provider returned malformed JSON for {operation}") from e

    async def greet(self, persona: AiPersonaRecord) -> str:
        return prompts.scripted_greeting(persona)

    async def reply(
        self,
        message: str,
        persona: AiPersonaRecord,
        step: FeynmanStep | None = None,
    ) -> str:
        """Reply in character as ``persona`` during ``step``.

        Raises:
            AIGatewayError: If the provider call fails after retries
        """
        system = prompts.build_persona_prompt(persona, step)
        return await self._complete(self.settings.tutor_model, system, message)

    async def extract_concepts(self, text: str) -> list[str]:
        task = prompts.EXTRACT_CONCEPTS_TASK.format(material=text[: self.settings.material_char_limit])
        try:
            payload = await self._complete_json(task, "extract_concepts")
        except AIGatewayError as e:
            logger.warning("concept_extraction_failed", error=str(e))
            return []

        return [c.strip() for c in find_list(payload, "concepts") if isinstance(c, str) and c.strip()]

    async def analyze_gaps(
        self,
        messages: Sequence[MessageRecord],
        materials: Sequence[MaterialRecord],
    ) -> list[dict]:
        limit = self.settings.transcript_char_limit
        task = prompts.ANALYZE_GAPS_TASK.format(
            materials=combine_materials(materials, limit),
            transcript=format_transcript(messages, limit),
            max_gaps=self.settings.max_gaps,
        )
        try:
            payload = await self._complete_json(task, "analyze_gaps")
        except AIGatewayError as e:
            logger.warning("gap_analysis_failed", error=str(e))
            return []

        return [gap for gap in find_list(payload, "gaps") if isinstance(gap, dict)]

    async def generate_quiz(
        self,
        messages: Sequence[MessageRecord],
        topic: str | None = None,
    ) -> list[dict]:
        task = prompts.GENERATE_QUIZ_TASK.format(
            topic_instruction=f"Focus on the topic: {topic}" if topic else "",
            transcript=format_transcript(messages, self.settings.transcript_char_limit),
            max_questions=self.settings.max_quiz_questions,
        )
        try:
            payload = await self._complete_json(task, "generate_quiz")
        except AIGatewayError as e:
            logger.warning("quiz_generation_failed", error=str(e))
            return []

        return [q for q in find_list(payload, "questions") if isinstance(q, dict)]
