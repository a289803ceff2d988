"""Capture -> reflect -> plan loop wired to injected collaborators."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Protocol

from history import AdvisorResponse, HistoryRecord, PlanCommitment, Priority, Reflection, Timeframe
from planning import PlanRequest, plan_actions
from reflection import assemble_reflections, next_cadence_reflection

from .advisor_stub import make_title
from .config import CounselConfig, ReflectionMode
from .entitlements import EntitlementService, visible_reflections
from .storage.sqlite_store import HistoryStore

logger = logging.getLogger(__name__)


class Advisor(Protocol):
    async def generate_response(self, raw_input: str) -> AdvisorResponse:
        ...


class CounselSession:
    """Owns no global state: store, advisor and entitlements are passed in."""

    def __init__(
        self,
        store: HistoryStore,
        advisor: Advisor,
        entitlements: EntitlementService,
        config: CounselConfig | None = None,
    ) -> None:
        self.store = store
        self.advisor = advisor
        self.entitlements = entitlements
        self.config = config or CounselConfig()
        self._reflections: list[Reflection] = []

    @property
    def reflections(self) -> list[Reflection]:
        """Reflections the current entitlement allows the user to see."""

        return visible_reflections(self._reflections, self.entitlements, self.config.free_reflection_limit)

    @property
    def all_reflections(self) -> list[Reflection]:
        return list(self._reflections)

    async def record_interaction(self, raw_input: str, now: datetime | None = None) -> HistoryRecord:
        """Single entry point for anything the user submits."""

        text = raw_input.strip()
        if not text:
            raise ValueError("Cannot record an empty interaction.")

        moment = now or datetime.now(timezone.utc)
        response = await self.advisor.generate_response(text)
        record = HistoryRecord.from_response(make_title(text, self.config.title_limit), response, created_at=moment)
        await self.store.append(record)
        await self.refresh_reflections(now=moment)
        return record

    async def refresh_reflections(self, now: datetime | None = None) -> list[Reflection]:
        history = await self.store.fetch_all()

        if self.config.reflection_mode is ReflectionMode.cadence:
            created = next_cadence_reflection(
                history,
                self._reflections,
                now or datetime.now(timezone.utc),
                sample_size=self.config.reflection_sample_size,
                max_themes=self.config.max_themes,
            )
            if created is not None:
                self._reflections.insert(0, created)
        else:
            self._reflections = assemble_reflections(
                history,
                sample_size=self.config.reflection_sample_size,
                max_themes=self.config.max_themes,
                weekly_threshold_days=self.config.weekly_bucket_threshold_days,
            )

        logger.debug("Holding %d reflections (%s)", len(self._reflections), self.config.reflection_mode.value)
        return self.reflections

    async def history(self, query: str | None = None) -> list[HistoryRecord]:
        if query:
            return await self.store.search(query)
        return await self.store.fetch_all()

    async def plan_options(
        self,
        record_id: uuid.UUID | str,
        timeframe: Timeframe | str,
        priority: Priority | str,
    ) -> list[str]:
        request = PlanRequest(timeframe=timeframe, priority=priority)
        record = await self.store.get(record_id)
        return plan_actions(record.organized, request.timeframe, request.priority)

    async def commit_plan(
        self,
        record_id: uuid.UUID | str,
        timeframe: Timeframe | str,
        priority: Priority | str,
        action: str,
    ) -> HistoryRecord:
        """Lock in one of the offered actions verbatim."""

        options = await self.plan_options(record_id, timeframe, priority)
        if action not in options:
            raise ValueError(f"Action {action!r} is not one of the offered options: {options}")
        commitment = PlanCommitment(timeframe=timeframe, priority=priority, committed_action=action)
        return await self.store.commit_plan(record_id, commitment)

    async def clear_all(self) -> int:
        deleted = await self.store.clear_all()
        self._reflections = []
        return deleted
