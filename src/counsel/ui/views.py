"""Rich renderables for history, reflections and plan options."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from history import HistoryRecord, Reflection

EMPTY_HISTORY = "Nothing yet."
NO_MATCHES = "No matches."
EMPTY_REFLECTIONS = "No reflections yet.\nAdd a few entries first."


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%b %d, %Y %H:%M")


def build_history_table(records: Sequence[HistoryRecord], *, searched: bool = False) -> Table | Panel:
    if not records:
        return Panel.fit(NO_MATCHES if searched else EMPTY_HISTORY, title="Recent")

    table = Table(title="Recent")
    table.add_column("Id", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Captured")
    table.add_column("Next step", style="green")
    for record in records:
        committed = record.plan_commitment.committed_action if record.plan_commitment else "-"
        table.add_row(str(record.id), record.title, format_timestamp(record.created_at), committed)
    return table


def build_reflections_renderable(reflections: Sequence[Reflection], hidden_count: int = 0) -> Group | Panel:
    if not reflections:
        return Panel.fit(EMPTY_REFLECTIONS, title="Reflections")

    panels = [
        Panel(
            reflection.insight,
            title=f"[bold]{reflection.title}[/bold]",
            subtitle=f"{format_timestamp(reflection.created_at)} · {len(reflection.supporting_history_ids)} entries",
        )
        for reflection in reflections
    ]
    if hidden_count:
        panels.append(Panel.fit(f"{hidden_count} more with Counsel Pro.", title="Unlimited reflections"))
    return Group(*panels)


def build_plan_table(record: HistoryRecord, actions: Sequence[str]) -> Table:
    table = Table(title=f"Choose your next step: {record.title}")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Action", style="green")
    for index, action in enumerate(actions, start=1):
        table.add_row(str(index), action)
    return table
