from __future__ import annotations

import hashlib
import unittest
import uuid
from datetime import datetime, timedelta, timezone

from bucketing import Granularity, bucket_key, choose_granularity, partition_history
from history import HistoryRecord
from identity import stable_id_from_seed, stable_reflection_id


def make_record(created_at: datetime, title: str = "Entry") -> HistoryRecord:
    return HistoryRecord(
        created_at=created_at,
        title=title,
        summary=f"Summary of {title}",
        organized=[],
        next_step_prompt="Next?",
    )


def daily_records(start: datetime, days: int) -> list[HistoryRecord]:
    return [make_record(start + timedelta(days=offset), title=f"Day {offset}") for offset in range(days)]


MONDAY_W10 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


class TimeBucketerTests(unittest.TestCase):
    def test_empty_history_yields_no_buckets(self) -> None:
        self.assertEqual(partition_history([]), [])

    def test_six_distinct_days_bucket_by_day(self) -> None:
        history = daily_records(MONDAY_W10, 6)

        self.assertIs(choose_granularity(history), Granularity.day)
        buckets = partition_history(history)
        self.assertEqual(
            [bucket.key for bucket in buckets],
            ["2024-03-09", "2024-03-08", "2024-03-07", "2024-03-06", "2024-03-05", "2024-03-04"],
        )

    def test_seven_distinct_days_bucket_by_iso_week(self) -> None:
        history = daily_records(datetime(2024, 3, 8, 9, 0, tzinfo=timezone.utc), 7)

        self.assertIs(choose_granularity(history), Granularity.week)
        buckets = partition_history(history)
        self.assertEqual([bucket.key for bucket in buckets], ["2024-W11", "2024-W10"])
        self.assertEqual(len(buckets[0].records), 4)
        self.assertEqual(len(buckets[1].records), 3)

    def test_many_records_on_few_days_stay_daily(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(minutes=minute)) for minute in range(20)]

        buckets = partition_history(history)
        self.assertEqual([bucket.key for bucket in buckets], ["2024-03-04"])
        self.assertEqual(buckets[0].sort_date, MONDAY_W10 + timedelta(minutes=19))

    def test_keys_are_zero_padded_and_use_iso_week_year(self) -> None:
        self.assertEqual(bucket_key(MONDAY_W10, Granularity.day), "2024-03-04")
        self.assertEqual(bucket_key(MONDAY_W10, Granularity.week), "2024-W10")
        self.assertEqual(bucket_key(datetime(2024, 12, 30, tzinfo=timezone.utc), Granularity.week), "2025-W01")
        self.assertEqual(bucket_key(datetime(2021, 1, 3, tzinfo=timezone.utc), Granularity.week), "2020-W53")

    def test_calendar_day_follows_configured_zone(self) -> None:
        late = datetime(2024, 3, 4, 23, 30, tzinfo=timezone.utc)
        plus_two = timezone(timedelta(hours=2))

        self.assertEqual(bucket_key(late, Granularity.day), "2024-03-04")
        self.assertEqual(bucket_key(late, Granularity.day, plus_two), "2024-03-05")

    def test_most_recent_orders_newest_first(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(minutes=minute), title=str(minute)) for minute in range(10)]

        bucket = partition_history(history)[0]
        titles = [record.title for record in bucket.most_recent(8)]
        self.assertEqual(titles, ["9", "8", "7", "6", "5", "4", "3", "2"])


class StableIdentityTests(unittest.TestCase):
    def test_same_seed_same_id(self) -> None:
        self.assertEqual(stable_id_from_seed("reflection-2024-W10"), stable_id_from_seed("reflection-2024-W10"))
        self.assertEqual(stable_reflection_id("2024-W10"), stable_id_from_seed("reflection-2024-W10"))

    def test_different_seeds_differ(self) -> None:
        self.assertNotEqual(stable_id_from_seed("reflection-2024-W10"), stable_id_from_seed("reflection-2024-W11"))
        self.assertNotEqual(stable_reflection_id("2024-03-04"), stable_reflection_id("2024-03-05"))

    def test_uses_leading_sha256_bytes(self) -> None:
        expected = uuid.UUID(bytes=hashlib.sha256(b"reflection-2024-W10").digest()[:16])

        self.assertEqual(stable_reflection_id("2024-W10"), expected)


if __name__ == "__main__":
    unittest.main()
