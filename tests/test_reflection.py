from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from history import HistoryRecord
from identity import stable_reflection_id
from reflection import (
    Cadence,
    assemble_reflections,
    cadence_allows,
    cadence_for,
    derive_reflections,
    next_cadence_reflection,
)

MONDAY_W10 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def make_record(created_at: datetime, title: str, summary: str = "", organized: list[str] | None = None) -> HistoryRecord:
    return HistoryRecord(
        created_at=created_at,
        title=title,
        summary=summary,
        organized=organized or [],
        next_step_prompt="Would you like me to turn this into a simple plan?",
    )


class ReflectionAssemblerTests(unittest.TestCase):
    def test_empty_history_gives_no_reflections(self) -> None:
        self.assertEqual(derive_reflections([]), [])
        self.assertEqual(assemble_reflections([]), [])

    def test_recompute_is_deterministic(self) -> None:
        history = [
            make_record(MONDAY_W10, "Budget review", "Quarterly budget numbers", ["Key point: hiring freeze"]),
            make_record(MONDAY_W10 + timedelta(days=1), "Hiring plan", "Hiring for the budget"),
        ]

        first = derive_reflections(history)
        second = derive_reflections(list(reversed(history)))

        self.assertEqual([item.model_dump_json() for item in first], [item.model_dump_json() for item in second])

    def test_reflection_fields(self) -> None:
        history = [
            make_record(MONDAY_W10, "Budget review", "budget budget hiring"),
            make_record(MONDAY_W10 + timedelta(hours=2), "Hiring", "hiring budget"),
        ]

        (reflection,) = assemble_reflections(history)

        self.assertEqual(reflection.id, stable_reflection_id("2024-03-04"))
        self.assertEqual(reflection.bucket_key, "2024-03-04")
        self.assertEqual(reflection.title, "Themes: Budget, hiring, review")
        self.assertIn("the recurring themes are: budget, hiring, review.", reflection.insight)
        self.assertEqual(reflection.created_at, MONDAY_W10 + timedelta(hours=2))
        self.assertEqual(reflection.supporting_history_ids, [history[1].id, history[0].id])

    def test_fallback_title_when_no_theme_survives(self) -> None:
        history = [make_record(MONDAY_W10, "Plan", "the plan for today", ["my notes"])]

        (reflection,) = assemble_reflections(history)

        self.assertEqual(reflection.title, "Themes: Your recent focus areas")
        self.assertIn("your recent focus areas", reflection.insight)

    def test_only_eight_most_recent_records_contribute(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(minutes=minute), f"Entry {minute}") for minute in range(8)]
        history.append(make_record(MONDAY_W10 - timedelta(minutes=1), "Oldest", "gardening gardening gardening"))

        (reflection,) = assemble_reflections(history)

        self.assertEqual(len(reflection.supporting_history_ids), 8)
        self.assertNotIn(history[-1].id, reflection.supporting_history_ids)
        self.assertNotIn("gardening", reflection.title.lower())
        self.assertEqual(reflection.supporting_history_ids[0], history[7].id)

    def test_identity_survives_new_entries_in_same_bucket(self) -> None:
        history = [make_record(MONDAY_W10, "Budget review", "budget")]
        before = assemble_reflections(history)

        history.append(make_record(MONDAY_W10 + timedelta(hours=1), "Garden", "gardening gardening"))
        after = assemble_reflections(history)

        self.assertEqual(before[0].id, after[0].id)
        self.assertNotEqual(before[0].title, after[0].title)

    def test_sorted_newest_first_and_regrouped_by_week(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(days=offset), f"Topic {offset}") for offset in range(6)]
        daily = assemble_reflections(history)
        self.assertEqual(len(daily), 6)
        self.assertEqual(daily[0].bucket_key, "2024-03-09")
        self.assertTrue(all(a.created_at > b.created_at for a, b in zip(daily, daily[1:])))

        history.append(make_record(MONDAY_W10 + timedelta(days=7), "Topic 7"))
        weekly = assemble_reflections(history)
        self.assertEqual([item.bucket_key for item in weekly], ["2024-W11", "2024-W10"])
        self.assertEqual(weekly[0].id, stable_reflection_id("2024-W11"))

    def test_accepts_plain_mappings_and_rejects_malformed_records(self) -> None:
        payload = {
            "created_at": "2024-03-04T09:00:00+00:00",
            "title": "Budget review",
            "summary": "budget",
            "next_step_prompt": "Next?",
        }
        (reflection,) = derive_reflections([payload])
        self.assertEqual(reflection.bucket_key, "2024-03-04")

        with self.assertRaises(ValidationError):
            derive_reflections([{"title": "missing summary"}])


class CadenceGateTests(unittest.TestCase):
    def test_cadence_switches_to_weekly_after_seven(self) -> None:
        self.assertIs(cadence_for(0), Cadence.daily)
        self.assertIs(cadence_for(6), Cadence.daily)
        self.assertIs(cadence_for(7), Cadence.weekly)

    def test_gate_compares_calendar_periods(self) -> None:
        self.assertTrue(cadence_allows(None, MONDAY_W10, Cadence.daily))
        self.assertFalse(cadence_allows(MONDAY_W10, MONDAY_W10 + timedelta(hours=3), Cadence.daily))
        self.assertTrue(cadence_allows(MONDAY_W10, MONDAY_W10 + timedelta(days=1), Cadence.daily))
        self.assertFalse(cadence_allows(MONDAY_W10, MONDAY_W10 + timedelta(days=6), Cadence.weekly))
        self.assertTrue(cadence_allows(MONDAY_W10, MONDAY_W10 + timedelta(days=7), Cadence.weekly))

    def test_needs_three_records_and_respects_gate(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(minutes=minute), f"Budget {minute}", "budget") for minute in range(2)]
        self.assertIsNone(next_cadence_reflection(history, [], MONDAY_W10))

        history.append(make_record(MONDAY_W10 + timedelta(minutes=5), "Budget again", "budget"))
        first = next_cadence_reflection(history, [], MONDAY_W10 + timedelta(minutes=5))
        assert first is not None
        self.assertEqual(first.id, stable_reflection_id("2024-03-04"))
        self.assertEqual(len(first.supporting_history_ids), 3)

        self.assertIsNone(next_cadence_reflection(history, [first], MONDAY_W10 + timedelta(hours=1)))
        self.assertIsNotNone(next_cadence_reflection(history, [first], MONDAY_W10 + timedelta(days=1)))

    def test_cadence_reflection_is_stamped_when_created(self) -> None:
        history = [make_record(MONDAY_W10 + timedelta(minutes=minute), f"Budget {minute}", "budget") for minute in range(3)]
        tuesday = MONDAY_W10 + timedelta(days=1)

        created = next_cadence_reflection(history, [], tuesday, max_themes=1)
        assert created is not None
        self.assertEqual(created.created_at, tuesday)
        self.assertEqual(created.title, "Themes: Budget")
        self.assertIsNone(next_cadence_reflection(history, [created], tuesday + timedelta(minutes=1)))


if __name__ == "__main__":
    unittest.main()
