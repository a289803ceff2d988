"""Deterministic theme extraction from captured text."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

MAX_THEMES = 4
MIN_TOKEN_LENGTH = 4

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "to", "of", "in", "on", "for", "with", "my", "i", "me", "you",
        "this", "that", "it", "is", "are", "be", "was", "were", "as", "at", "by", "from", "we",
        # Domain words that show up in every generated response.
        "plan", "help", "notes", "summary", "meeting", "today", "week", "morning",
        "thinking", "through", "would", "like", "turn", "into", "simple", "about", "your", "recent",
    }
)

_TOKEN_SPLIT = re.compile(r"[\W_]+")


def tokenize(text: str) -> list[str]:
    """Split lowercased text on every non-alphanumeric boundary."""

    normalized = text.replace("’", "'").lower()
    return [token for token in _TOKEN_SPLIT.split(normalized) if token]


def candidate_tokens(text: str) -> list[str]:
    """Tokens long enough to carry meaning and not in the stop-word set."""

    return [
        token
        for token in tokenize(text)
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def extract_themes(texts: Iterable[str], max_themes: int = MAX_THEMES) -> list[str]:
    """Rank surviving tokens by frequency.

    Equal counts keep first-occurrence order, so the same input always yields
    the same ranking.
    """

    counts = Counter(candidate_tokens(" ".join(texts)))
    return [token for token, _ in counts.most_common(max_themes)]
