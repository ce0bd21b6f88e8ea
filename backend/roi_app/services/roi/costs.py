"""
costs.py — Labor & Tool Cost Calculators

All results are annualized. Missing numerics were already coerced to 0 by the
adapter, so no entry can abort a sum.

Labor:
    normalized entry:  minutes/60 * annual_frequency
    legacy entry:      minutes/60 * legacy_monthly_occurrences(own frequency) * 12

Tools:
    normalized entry:  monthly_cost*12 + cost_per_execution*annual_frequency
    legacy entry:      "annual" value as-is, "monthly" value * 12
"""

from __future__ import annotations

from typing import Iterable

from roi_app.services.roi.frequency import legacy_annual_occurrences
from roi_app.services.roi.types import PersonTimeEntry, ToolCostEntry


def entry_annual_occurrences(entry: PersonTimeEntry, annual_frequency: float) -> float:
    """Occurrences per year that apply to one person entry."""
    if entry.has_own_frequency:
        return legacy_annual_occurrences(entry.frequency_quantity, entry.frequency_period)
    return annual_frequency


def entry_hours(entry: PersonTimeEntry, annual_frequency: float) -> float:
    if entry.is_validation_only:
        return 0.0
    return entry.time_spent_minutes / 60.0 * entry_annual_occurrences(entry, annual_frequency)


def labor_hours(entries: Iterable[PersonTimeEntry], annual_frequency: float) -> float:
    """Annual hours spent by all entries."""
    return sum((entry_hours(e, annual_frequency) for e in entries), 0.0)


def labor_cost(entries: Iterable[PersonTimeEntry], annual_frequency: float) -> float:
    """Annual labor cost: hours * hourly rate, per entry."""
    return sum((entry_hours(e, annual_frequency) * e.hourly_rate for e in entries), 0.0)


def tool_entry_cost(entry: ToolCostEntry, annual_frequency: float) -> float:
    if entry.is_legacy:
        value = entry.value or 0.0
        return value if entry.kind == "annual" else value * 12.0

    total = entry.monthly_cost * 12.0
    if entry.cost_per_execution is not None:
        total += entry.cost_per_execution * annual_frequency
    return total


def tool_cost(entries: Iterable[ToolCostEntry], annual_frequency: float) -> float:
    """Annual tool/licensing cost of all entries."""
    return sum((tool_entry_cost(e, annual_frequency) for e in entries), 0.0)
