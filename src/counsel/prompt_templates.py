"""Standardized prompt templates for the model-backed advisor."""

from __future__ import annotations

ADVISOR_SYSTEM_PROMPT = (
    "You are a calm advisor. Summarize what the user is working through, organize it into short bullets, "
    "and never invent facts. Return strict JSON only."
)


def render_advisor_prompt(raw_input: str, max_bullets: int = 3) -> str:
    return (
        "Read the captured thought below and respond as JSON with keys "
        "\"summary\" (one sentence), \"organized\" (a list of at most "
        f"{max_bullets} short bullets, each starting with a label such as \"Key point:\", \"Constraint:\" "
        "or \"Next:\"), \"next_step_prompt\" (one question offering a plan) and \"memory_snippet\" "
        "(a stated preference, or null)."
        f"\nThought: {raw_input}"
    )
