"""Injected subscription entitlements and the Pro gate for reflections."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from history import Reflection

from .config import FREE_REFLECTION_LIMIT

PRO_MONTHLY = "counsel_pro_monthly"
PRODUCT_IDS = frozenset({PRO_MONTHLY})


class EntitlementService(Protocol):
    def is_pro(self) -> bool:
        ...


class StaticEntitlements:
    """Entitlements fixed at construction; the CLI and tests use this."""

    def __init__(self, active_products: Sequence[str] = ()) -> None:
        self.active_products = frozenset(active_products)

    def is_pro(self) -> bool:
        return bool(self.active_products & PRODUCT_IDS)


def visible_reflections(
    reflections: Sequence[Reflection],
    entitlements: EntitlementService,
    free_limit: int = FREE_REFLECTION_LIMIT,
) -> list[Reflection]:
    """Pro users see every reflection; free users see the newest ``free_limit``."""

    if entitlements.is_pro():
        return list(reflections)
    return list(reflections[: max(free_limit, 0)])
