"""Async model-backed advisor with the same interface as ``AdvisorStub``."""

from __future__ import annotations

import asyncio
import json
import logging

from ollama import AsyncClient
from pydantic import ValidationError

from history import AdvisorResponse

from .advisor_stub import NEXT_STEP_PROMPT, extract_preference
from .config import MODEL_NAME
from .prompt_templates import ADVISOR_SYSTEM_PROMPT, render_advisor_prompt

logger = logging.getLogger(__name__)


class LLMAdvisor:
    """Generate advisor responses through a local Ollama model."""

    def __init__(
        self,
        model_name: str = MODEL_NAME,
        host: str | None = None,
        timeout_s: float = 60.0,
        client: AsyncClient | None = None,
    ) -> None:
        self.model_name = model_name
        self._client = client or AsyncClient(host=host)
        self.timeout_s = timeout_s

    async def generate_text(self, prompt: str, system: str | None = None) -> str:
        response = await asyncio.wait_for(
            self._client.generate(model=self.model_name, prompt=prompt, system=system),
            timeout=self.timeout_s,
        )
        return response["response"].strip()

    async def generate_response(self, raw_input: str) -> AdvisorResponse:
        raw = await self.generate_text(render_advisor_prompt(raw_input), system=ADVISOR_SYSTEM_PROMPT)
        logger.debug("Model %s returned %d characters", self.model_name, len(raw))
        return parse_advisor_response(raw, raw_input)


def parse_advisor_response(raw_response: str, raw_input: str) -> AdvisorResponse:
    cleaned = _strip_code_fence(raw_response.strip())
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Could not parse advisor response from model output: {raw_response!r}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Advisor response must be a JSON object, got: {raw_response!r}")

    payload.setdefault("next_step_prompt", NEXT_STEP_PROMPT)
    if payload.get("memory_snippet") is None:
        payload["memory_snippet"] = extract_preference(raw_input)
    try:
        return AdvisorResponse.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Advisor response is missing required fields: {exc}") from exc


def _strip_code_fence(text: str) -> str:
    # Some models wrap JSON in a markdown fence despite the system prompt.
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
