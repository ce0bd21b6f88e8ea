"""
Unit tests for costs.py
"""

import pytest

from roi_app.services.roi.costs import labor_cost, labor_hours, tool_cost
from roi_app.services.roi.types import BASELINE, POST_CHANGE, PersonTimeEntry, ToolCostEntry


def person(minutes, rate=0.0, **kwargs):
    return PersonTimeEntry(scenario=BASELINE, time_spent_minutes=minutes, hourly_rate=rate, **kwargs)


# ============================================================================
# Labor
# ============================================================================

def test_labor_hours_use_indicator_frequency():
    entries = [person(60), person(30)]

    assert labor_hours(entries, 240) == pytest.approx(360)


def test_labor_cost_weights_each_entry_by_its_rate():
    entries = [person(60, rate=50), person(30, rate=100)]

    # 240h * 50 + 120h * 100
    assert labor_cost(entries, 240) == pytest.approx(24000)


def test_legacy_entry_uses_its_own_frequency():
    entry = person(30, rate=40, frequency_quantity=1, frequency_period="Diário")

    # 0.5h * 30/month * 12, independent of the scenario frequency
    assert labor_hours([entry], 9999) == pytest.approx(180)
    assert labor_cost([entry], 0) == pytest.approx(7200)


def test_validation_only_entry_contributes_nothing():
    entries = [person(60, rate=50), person(60, rate=50, is_validation_only=True)]

    assert labor_hours(entries, 12) == pytest.approx(12)
    assert labor_cost(entries, 12) == pytest.approx(600)


def test_empty_entries():
    assert labor_hours([], 100) == 0
    assert labor_cost([], 100) == 0
    assert tool_cost([], 100) == 0


# ============================================================================
# Tools
# ============================================================================

def test_tool_cost_monthly_plus_per_execution():
    tools = [ToolCostEntry(scenario=POST_CHANGE, monthly_cost=100, cost_per_execution=0.5)]

    assert tool_cost(tools, 240) == pytest.approx(1200 + 120)


def test_tool_cost_without_per_execution():
    tools = [ToolCostEntry(scenario=POST_CHANGE, monthly_cost=100)]

    assert tool_cost(tools, 240) == pytest.approx(1200)


def test_legacy_tool_kinds():
    annual = ToolCostEntry(scenario=POST_CHANGE, value=1200, kind="annual")
    monthly = ToolCostEntry(scenario=POST_CHANGE, value=100, kind="monthly")

    assert tool_cost([annual], 240) == pytest.approx(1200)
    assert tool_cost([monthly], 240) == pytest.approx(1200)
    assert tool_cost([annual, monthly], 0) == pytest.approx(2400)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
