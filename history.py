"""Core history and reflection models for the Counsel engine."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Timeframe(str, Enum):
    """When the user intends to act on a plan."""

    today = "Today"
    this_week = "This week"
    this_month = "This month"


class Priority(str, Enum):
    """Focus flavor applied to plan actions."""

    quick_win = "quickWin"
    important = "important"
    deep_work = "deepWork"


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AdvisorResponse(BaseModel):
    """Generated response attached to a captured thought."""

    summary: str
    organized: list[str] = Field(default_factory=list)
    next_step_prompt: str
    memory_snippet: str | None = None


class PlanCommitment(BaseModel):
    """The one action a user locked in for a history record."""

    timeframe: Timeframe
    priority: Priority
    committed_action: str = Field(..., min_length=1)
    committed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("committed_at")
    @classmethod
    def normalize_dt(cls, value: datetime) -> datetime:
        return _utc(value)


class HistoryRecord(BaseModel):
    """One captured thought plus its generated response."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    title: str = Field(..., min_length=1)
    summary: str
    organized: list[str] = Field(default_factory=list)
    next_step_prompt: str
    memory_snippet: str | None = None
    plan_commitment: PlanCommitment | None = None

    @field_validator("created_at")
    @classmethod
    def normalize_dt(cls, value: datetime) -> datetime:
        return _utc(value)

    @classmethod
    def from_response(
        cls,
        title: str,
        response: AdvisorResponse,
        created_at: datetime | None = None,
    ) -> HistoryRecord:
        """Build a new record from a generator response."""

        return cls(
            created_at=created_at or datetime.now(timezone.utc),
            title=title,
            summary=response.summary,
            organized=list(response.organized),
            next_step_prompt=response.next_step_prompt,
            memory_snippet=response.memory_snippet,
        )

    def theme_text(self) -> str:
        """Text contributed to theme extraction."""

        return " ".join([self.title, self.summary, *self.organized])


class Reflection(BaseModel):
    """Derived thematic summary over one bucket of history."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    created_at: datetime
    title: str
    insight: str
    supporting_history_ids: list[uuid.UUID] = Field(default_factory=list)
    bucket_key: str
