"""
context.py — Calculation Context

Named defaults the engine falls back to. Built from application settings,
overridable per call (tests, what-if runs).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from roi_app.core.config import settings


@dataclass(frozen=True)
class CalculationContext:
    default_hourly_rate: float = 80.0
    default_frequency_unit: str = "month"
    support_ticket_cost: float = 50.0

    @classmethod
    def from_settings(cls, source: Any = None) -> "CalculationContext":
        """Build a context from a Settings object (the app singleton by default)."""
        source = source or settings
        return cls(
            default_hourly_rate=source.ROI_DEFAULT_HOURLY_RATE,
            default_frequency_unit=source.ROI_DEFAULT_FREQUENCY_UNIT,
            support_ticket_cost=source.ROI_SUPPORT_TICKET_COST,
        )

    def with_overrides(self, **changes: Any) -> "CalculationContext":
        return replace(self, **changes)


def default_context() -> CalculationContext:
    return CalculationContext.from_settings()
