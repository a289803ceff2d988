"""Volume-aware partitioning of history into day or ISO-week buckets."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from enum import Enum

from history import HistoryRecord

WEEKLY_THRESHOLD_DAYS = 7

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    """Calendar unit used to group history."""

    day = "day"
    week = "week"


@dataclass
class Bucket:
    """Transient grouping of records sharing a calendar key."""

    key: str
    records: list[HistoryRecord] = field(default_factory=list)

    @property
    def sort_date(self) -> datetime:
        return max(record.created_at for record in self.records)

    def most_recent(self, limit: int) -> list[HistoryRecord]:
        """Newest records first; equal timestamps fall back to id order."""

        ordered = sorted(self.records, key=lambda record: (record.created_at, str(record.id)), reverse=True)
        return ordered[:limit]


def calendar_day(moment: datetime, tz: tzinfo = timezone.utc) -> date:
    return moment.astimezone(tz).date()


def choose_granularity(
    history: Sequence[HistoryRecord],
    *,
    tz: tzinfo = timezone.utc,
    weekly_threshold_days: int = WEEKLY_THRESHOLD_DAYS,
) -> Granularity:
    """Switch to weekly buckets once history covers enough distinct days."""

    distinct_days = {calendar_day(record.created_at, tz) for record in history}
    if len(distinct_days) >= weekly_threshold_days:
        return Granularity.week
    return Granularity.day


def bucket_key(moment: datetime, granularity: Granularity, tz: tzinfo = timezone.utc) -> str:
    """Format ``YYYY-MM-DD`` for days and ``YYYY-Www`` for ISO weeks."""

    day = calendar_day(moment, tz)
    if granularity is Granularity.week:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def partition_history(
    history: Sequence[HistoryRecord],
    *,
    tz: tzinfo = timezone.utc,
    weekly_threshold_days: int = WEEKLY_THRESHOLD_DAYS,
) -> list[Bucket]:
    """Group records by key, newest bucket first."""

    if not history:
        return []

    granularity = choose_granularity(history, tz=tz, weekly_threshold_days=weekly_threshold_days)
    buckets: dict[str, Bucket] = {}
    for record in history:
        key = bucket_key(record.created_at, granularity, tz)
        buckets.setdefault(key, Bucket(key=key)).records.append(record)

    logger.debug("Partitioned %d records into %d %s buckets", len(history), len(buckets), granularity.value)
    return sorted(buckets.values(), key=lambda bucket: (bucket.sort_date, bucket.key), reverse=True)
