"""Terminal views for the Counsel CLI."""

from .views import build_history_table, build_plan_table, build_reflections_renderable

__all__ = ["build_history_table", "build_plan_table", "build_reflections_renderable"]
