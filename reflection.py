"""Reflection assembly and the optional cadence gate."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Any

from pydantic import TypeAdapter

from bucketing import WEEKLY_THRESHOLD_DAYS, Bucket, Granularity, bucket_key, calendar_day, partition_history
from history import HistoryRecord, Reflection
from identity import stable_reflection_id
from themes import MAX_THEMES, extract_themes

SAMPLE_SIZE = 8
FALLBACK_THEME_TEXT = "your recent focus areas"
MIN_HISTORY_FOR_CADENCE = 3
DAILY_CADENCE_LIMIT = 7

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(list[HistoryRecord])


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def theme_text(themes: Sequence[str]) -> str:
    return ", ".join(themes) if themes else FALLBACK_THEME_TEXT


def render_title(themes: Sequence[str]) -> str:
    return f"Themes: {capitalize_first(theme_text(themes))}"


def render_insight(themes: Sequence[str]) -> str:
    return (
        f"Across your recent conversations, the recurring themes are: {theme_text(themes)}.\n"
        "If you want, I can turn one of these into a short, prioritized plan."
    )


def build_reflection(
    key: str,
    records: Sequence[HistoryRecord],
    *,
    sample_size: int = SAMPLE_SIZE,
    max_themes: int = MAX_THEMES,
    created_at: datetime | None = None,
) -> Reflection:
    """Summarize the newest ``sample_size`` records under one key.

    ``created_at`` defaults to the newest contributing record.
    """

    sample = Bucket(key=key, records=list(records)).most_recent(sample_size)
    themes = extract_themes((record.theme_text() for record in sample), max_themes=max_themes)
    return Reflection(
        id=stable_reflection_id(key),
        created_at=created_at or max(record.created_at for record in sample),
        title=render_title(themes),
        insight=render_insight(themes),
        supporting_history_ids=[record.id for record in sample],
        bucket_key=key,
    )


def assemble_reflections(
    history: Sequence[HistoryRecord],
    *,
    tz: tzinfo = timezone.utc,
    sample_size: int = SAMPLE_SIZE,
    max_themes: int = MAX_THEMES,
    weekly_threshold_days: int = WEEKLY_THRESHOLD_DAYS,
) -> list[Reflection]:
    """Recompute the complete reflection set, newest first."""

    buckets = partition_history(history, tz=tz, weekly_threshold_days=weekly_threshold_days)
    reflections = [
        build_reflection(bucket.key, bucket.records, sample_size=sample_size, max_themes=max_themes)
        for bucket in buckets
    ]
    return sorted(reflections, key=lambda item: (item.created_at, item.bucket_key), reverse=True)


def derive_reflections(history: Iterable[HistoryRecord | dict[str, Any]], **options: Any) -> list[Reflection]:
    """Validate caller input, then assemble reflections.

    Raises ``pydantic.ValidationError`` when a record is malformed; nothing is
    computed in that case.
    """

    records = _history_adapter.validate_python(list(history))
    return assemble_reflections(records, **options)


class Cadence(str, Enum):
    """How often the incremental mode may append a reflection."""

    daily = "daily"
    weekly = "weekly"


def cadence_for(reflection_count: int) -> Cadence:
    return Cadence.daily if reflection_count < DAILY_CADENCE_LIMIT else Cadence.weekly


def cadence_allows(
    last_reflection_at: datetime | None,
    now: datetime,
    cadence: Cadence,
    tz: tzinfo = timezone.utc,
) -> bool:
    """True when ``now`` falls in a later period than the last reflection."""

    if last_reflection_at is None:
        return True
    if cadence is Cadence.daily:
        return calendar_day(last_reflection_at, tz) != calendar_day(now, tz)
    return bucket_key(last_reflection_at, Granularity.week, tz) != bucket_key(now, Granularity.week, tz)


def next_cadence_reflection(
    history: Sequence[HistoryRecord],
    reflections: Sequence[Reflection],
    now: datetime,
    *,
    tz: tzinfo = timezone.utc,
    sample_size: int = SAMPLE_SIZE,
    max_themes: int = MAX_THEMES,
) -> Reflection | None:
    """Incremental alternative to full recompute.

    Returns a new reflection over the newest records when the gate is open,
    otherwise ``None``. ``reflections`` is expected newest first. The new
    reflection is stamped with ``now`` so the gate stays closed for the rest of
    the period.
    """

    if len(history) < MIN_HISTORY_FOR_CADENCE:
        return None

    cadence = cadence_for(len(reflections))
    last_at = reflections[0].created_at if reflections else None
    if not cadence_allows(last_at, now, cadence, tz):
        logger.debug("Cadence gate closed (%s) since %s", cadence.value, last_at)
        return None

    granularity = Granularity.day if cadence is Cadence.daily else Granularity.week
    key = bucket_key(now, granularity, tz)
    return build_reflection(key, history, sample_size=sample_size, max_themes=max_themes, created_at=now)
