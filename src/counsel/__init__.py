"""Counsel runtime package."""

from .advisor_stub import AdvisorStub
from .config import CounselConfig, ReflectionMode
from .entitlements import StaticEntitlements, visible_reflections

__all__ = [
    "AdvisorStub",
    "CounselConfig",
    "CounselSession",
    "HistoryStore",
    "LLMAdvisor",
    "ReflectionMode",
    "StaticEntitlements",
    "visible_reflections",
]


def __getattr__(name: str):
    if name == "CounselSession":
        from .session import CounselSession

        return CounselSession
    if name == "HistoryStore":
        from .storage import HistoryStore

        return HistoryStore
    if name == "LLMAdvisor":
        from .llm_client import LLMAdvisor

        return LLMAdvisor
    raise AttributeError(f"module 'counsel' has no attribute {name!r}")
