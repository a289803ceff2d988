"""Plan action normalization: raw bullets into short imperative next steps."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from history import Priority, Timeframe

MAX_ACTIONS = 3

LABEL_PREFIXES = ("key point:", "constraint:", "next:", "note:")
ACTION_VERBS = frozenset(
    {"decide", "write", "list", "pick", "define", "clarify", "schedule", "draft", "start", "review", "ask"}
)

CLARIFY_MEANING = "Write one sentence clarifying what you mean."
CLARIFY_PRIORITIES = "Write 3 bullets clarifying what matters most."

DEFAULT_ACTIONS = (
    "Write down what 'done' looks like.",
    "List the smallest next step you can take.",
    "Block 15 minutes and start.",
)


class PlanRequest(BaseModel):
    """Validated caller input for action derivation."""

    bullets: list[str] = Field(default_factory=list)
    timeframe: Timeframe
    priority: Priority


def strip_label(text: str) -> str:
    lowered = text.lower()
    for prefix in LABEL_PREFIXES:
        if lowered.startswith(prefix):
            return text[len(prefix) :].strip()
    return text


def starts_with_action_verb(text: str) -> bool:
    words = text.split(maxsplit=1)
    if not words:
        return False
    return words[0].lower().strip(",.:;!?") in ACTION_VERBS


def normalize_bullet(raw: str) -> str | None:
    """Rewrite one bullet as an imperative action, or ``None`` if nothing is left."""

    text = strip_label(raw.strip())
    if not text:
        return None

    lowered = text.lower()
    if "unclear" in lowered or "not sure" in lowered:
        text = CLARIFY_MEANING
    elif "worth clarifying" in lowered:
        text = CLARIFY_PRIORITIES

    if not starts_with_action_verb(text):
        text = f"Clarify {text}"

    text = text[:1].upper() + text[1:]
    return text.rstrip(".").rstrip() or None


def apply_priority(actions: Sequence[str], timeframe: Timeframe, priority: Priority) -> list[str]:
    if priority is Priority.quick_win:
        return [f"Quick win ({timeframe.value.lower()}): {action}" for action in actions]
    if priority is Priority.deep_work:
        return [f"Deep work: {action}" for action in actions]
    return list(actions)


def plan_actions(
    bullets: Sequence[str],
    timeframe: Timeframe,
    priority: Priority,
    *,
    max_actions: int = MAX_ACTIONS,
) -> list[str]:
    """Up to ``max_actions`` flavored actions; the default trio when no bullet survives."""

    actions: list[str] = []
    for bullet in bullets:
        normalized = normalize_bullet(bullet)
        if normalized:
            actions.append(normalized)
        if len(actions) >= max_actions:
            break

    if not actions:
        actions = list(DEFAULT_ACTIONS)

    return apply_priority(actions, timeframe, priority)


def derive_actions(bullets: Sequence[str], timeframe: Timeframe | str, priority: Priority | str) -> list[str]:
    """Boundary entry point: reject unknown timeframe/priority before computing."""

    request = PlanRequest(bullets=list(bullets), timeframe=timeframe, priority=priority)
    return plan_actions(request.bullets, request.timeframe, request.priority)
