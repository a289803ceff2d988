"""Deterministic stand-in for the model that answers captured thoughts."""

from __future__ import annotations

from history import AdvisorResponse

from .config import BULLET_LIMIT, MEMORY_LIMIT, SUMMARY_LIMIT, TITLE_LIMIT

ELLIPSIS = "…"
UNTITLED = "Untitled"
NEXT_STEP_PROMPT = "Would you like me to turn this into a simple plan?"
PREFERENCE_MARKERS = ("i prefer ", "i like ")


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def make_title(raw_input: str, limit: int = TITLE_LIMIT) -> str:
    """First line of the trimmed input, truncated."""

    trimmed = raw_input.strip()
    if not trimmed:
        return UNTITLED
    return truncate(trimmed.split("\n", 1)[0], limit)


def extract_preference(raw_input: str) -> str | None:
    lowered = raw_input.lower()
    if any(marker in lowered for marker in PREFERENCE_MARKERS):
        return truncate(raw_input, MEMORY_LIMIT)
    return None


class AdvisorStub:
    """Template-based generator; swap for ``LLMAdvisor`` when a model is available."""

    async def generate_response(self, raw_input: str) -> AdvisorResponse:
        return self.respond(raw_input)

    def respond(self, raw_input: str) -> AdvisorResponse:
        return AdvisorResponse(
            summary=f"You’re thinking through: “{truncate(raw_input, SUMMARY_LIMIT)}”",
            organized=[
                f"Key point: {truncate(raw_input, BULLET_LIMIT)}",
                "Constraint: unclear (worth clarifying)",
                "Next: decide what “done” looks like",
            ],
            next_step_prompt=NEXT_STEP_PROMPT,
            memory_snippet=extract_preference(raw_input),
        )
