"""
Unit tests for indicator.py

Covers the annualized aggregation for normalized and legacy records,
the infinite ROI/payback sentinels, and the fallback hourly rate.
"""

import math
from typing import Any, Dict

import pytest

from roi_app.services.roi.context import CalculationContext
from roi_app.services.roi.indicator import (
    compute_indicator_metrics,
    payback_months,
    roi_percent,
)


@pytest.fixture
def context() -> CalculationContext:
    return CalculationContext()


def make_indicator(minutes_before=60, minutes_after=10, rate=50, value=20, unit="month", **extra) -> Dict[str, Any]:
    record = {
        "id": "ind-1",
        "projectId": "proj-1",
        "frequencyValue": value,
        "frequencyUnit": unit,
        "personsBaseline": [{"id": "p1", "hourlyRate": rate, "timeSpentMinutes": minutes_before}],
        "personsPostChange": [{"id": "p1", "hourlyRate": rate, "timeSpentMinutes": minutes_after}],
    }
    record.update(extra)
    return record


# ============================================================================
# Reference scenario
# ============================================================================

def test_reference_scenario(context):
    m = compute_indicator_metrics(make_indicator(), context)

    assert m.hours_baseline == pytest.approx(240)
    assert m.hours_post_change == pytest.approx(40)
    assert m.hours_saved == pytest.approx(200)
    assert m.labor_cost_baseline == pytest.approx(12000)
    assert m.labor_cost_post_change == pytest.approx(2000)
    assert m.tool_cost_baseline == 0
    assert m.tool_cost_post_change == 0
    assert m.gross_savings_by_cost == pytest.approx(10000)
    assert m.gross_savings_by_hours == pytest.approx(10000)
    assert m.gross_savings == pytest.approx(10000)
    assert m.net_savings == pytest.approx(10000)
    assert m.implementation_cost == 0
    assert m.investment_year1 == 0
    assert m.payback_months == 0
    assert m.roi_percent == math.inf
    assert m.roi_steady_state == math.inf


def test_reference_scenario_gains_and_per_occurrence(context):
    m = compute_indicator_metrics(make_indicator(), context)

    assert m.productivity_gain_percent == pytest.approx(200 / 240 * 100)
    assert m.capacity_gain_percent == 0
    assert m.avg_minutes_per_occurrence_baseline == pytest.approx(60)
    assert m.avg_minutes_per_occurrence_post_change == pytest.approx(10)
    assert m.efficiency_percent == pytest.approx(100 * (1 - 10 / 60))
    assert m.equivalent_executions == pytest.approx(6)
    assert m.cost_per_occurrence_baseline == pytest.approx(50)
    assert m.cost_per_occurrence_post_change == pytest.approx(2000 / 240)
    assert m.savings_per_occurrence == pytest.approx(50 - 2000 / 240)


def test_none_record_yields_none(context):
    assert compute_indicator_metrics(None, context) is None


def test_idempotent(context):
    record = make_indicator(toolsPostChange=[{"monthlyCost": 100}])

    first = compute_indicator_metrics(record, context).to_dict()
    second = compute_indicator_metrics(record, context).to_dict()

    assert first == second


# ============================================================================
# Tools, ROI and payback
# ============================================================================

def test_post_change_tools_drag_net_savings(context):
    m = compute_indicator_metrics(make_indicator(toolsPostChange=[{"monthlyCost": 100}]), context)

    assert m.tool_cost_post_change == pytest.approx(1200)
    assert m.tool_cost_monthly_post_change == pytest.approx(100)
    # by cost: 12000 - (2000 + 1200) = 8800; by hours: 10000
    assert m.gross_savings_by_cost == pytest.approx(8800)
    assert m.gross_savings == pytest.approx(10000)
    assert m.net_savings == pytest.approx(8800)
    assert m.investment_year1 == pytest.approx(1200)
    assert m.roi_percent == pytest.approx((10000 - 1200) / 1200 * 100)
    assert m.roi_steady_state == pytest.approx((10000 - 1200) / 1200 * 100)
    assert m.payback_months == 0


def test_savings_never_negative_when_post_change_costs_more(context):
    record = make_indicator(minutes_before=10, minutes_after=60, toolsPostChange=[{"monthlyCost": 50}])

    m = compute_indicator_metrics(record, context)

    assert m.hours_saved == 0
    assert m.gross_savings_by_cost == 0
    assert m.gross_savings == 0
    assert m.net_savings == pytest.approx(-600)
    assert m.payback_months == math.inf
    assert m.roi_percent == pytest.approx(-100)
    assert m.productivity_gain_percent < 0


def test_no_savings_and_no_investment_gives_zero_roi(context):
    m = compute_indicator_metrics(make_indicator(minutes_before=30, minutes_after=30), context)

    assert m.gross_savings == 0
    assert m.roi_percent == 0
    assert m.roi_steady_state == 0
    assert m.payback_months == math.inf


def test_roi_and_payback_helpers():
    assert roi_percent(100, 0) == math.inf
    assert roi_percent(0, 0) == 0
    assert roi_percent(150, 100) == pytest.approx(50)
    assert payback_months(0, 1200) == 0
    assert payback_months(1200, 1200) == pytest.approx(12)
    assert payback_months(1200, 0) == math.inf
    assert payback_months(0, -10) == math.inf


# ============================================================================
# Hourly rate fallback
# ============================================================================

def test_default_hourly_rate_when_no_baseline_rate(context):
    m = compute_indicator_metrics(make_indicator(rate=0), context)

    assert m.avg_hourly_rate == 80
    assert m.gross_savings_by_cost == 0
    assert m.gross_savings == pytest.approx(200 * 80)


def test_default_hourly_rate_is_overridable():
    m = compute_indicator_metrics(make_indicator(rate=0), CalculationContext(default_hourly_rate=100))

    assert m.gross_savings == pytest.approx(200 * 100)


def test_no_fallback_rate_without_hours_saved(context):
    m = compute_indicator_metrics(make_indicator(rate=0, minutes_before=10, minutes_after=10), context)

    assert m.avg_hourly_rate == 0


def test_average_rate_ignores_zero_rates(context):
    record = make_indicator()
    record["personsBaseline"].append({"id": "p2", "hourlyRate": 0, "timeSpentMinutes": 0})
    record["personsBaseline"].append({"id": "p3", "hourlyRate": 100, "timeSpentMinutes": 0})

    m = compute_indicator_metrics(record, context)

    assert m.avg_hourly_rate == pytest.approx(75)


def test_average_rate_ignores_validation_only_persons(context):
    record = make_indicator()
    record["personsBaseline"].append(
        {"id": "reviewer", "hourlyRate": 500, "timeSpentMinutes": 30, "isValidationOnly": True}
    )

    m = compute_indicator_metrics(record, context)

    assert m.avg_hourly_rate == pytest.approx(50)
    assert m.gross_savings_by_hours == pytest.approx(10000)
    assert m.gross_savings == pytest.approx(10000)


def test_infinite_rate_degrades_to_zero(context):
    record = make_indicator()
    record["personsBaseline"].append({"id": "p2", "hourlyRate": "inf", "timeSpentMinutes": 0})
    record["personsPostChange"].append({"id": "p2", "hourlyRate": float("inf"), "timeSpentMinutes": 5})

    m = compute_indicator_metrics(record, context)

    for value in m.to_dict().values():
        assert not math.isnan(value)
    assert m.labor_cost_baseline == pytest.approx(12000)
    assert m.avg_hourly_rate == pytest.approx(50)


# ============================================================================
# Frequencies
# ============================================================================

def test_capacity_gain_from_post_change_frequency(context):
    m = compute_indicator_metrics(make_indicator(postChangeFrequency=25), context)

    assert m.annual_frequency_baseline == 240
    assert m.annual_frequency_post_change == 300
    assert m.capacity_gain_percent == pytest.approx(25)


def test_zero_frequency_gives_zero_efficiency(context):
    m = compute_indicator_metrics(make_indicator(value=0), context)

    assert m.hours_baseline == 0
    assert m.efficiency_percent == 0
    assert m.capacity_gain_percent == 0
    assert m.productivity_gain_percent == 0
    assert m.equivalent_executions == 0


def test_unknown_unit_is_monthly(context):
    m = compute_indicator_metrics(make_indicator(unit="fortnight"), context)

    assert m.hours_baseline == pytest.approx(240)


# ============================================================================
# Legacy records
# ============================================================================

def test_legacy_record(context):
    record = {
        "id": "legacy-1",
        "baselineData": {"pessoas": [
            {"id": "a", "valorHora": 50, "tempoGasto": 60, "frequenciaReal": {"quantidade": 1, "periodo": "Diário"}},
        ]},
        "postIAData": {"pessoas": [
            {"id": "a", "valorHora": 50, "tempoGasto": 15, "frequenciaReal": {"quantidade": 1, "periodo": "Diário"}},
        ]},
        "custos": [{"valor": 100, "tipo": "mensal"}],
    }

    m = compute_indicator_metrics(record, context)

    assert m.hours_baseline == pytest.approx(360)
    assert m.hours_post_change == pytest.approx(90)
    assert m.hours_saved == pytest.approx(270)
    assert m.labor_cost_baseline == pytest.approx(18000)
    assert m.labor_cost_post_change == pytest.approx(4500)
    assert m.tool_cost_post_change == pytest.approx(1200)
    assert m.gross_savings_by_cost == pytest.approx(12300)
    assert m.gross_savings == pytest.approx(13500)
    assert m.net_savings == pytest.approx(12300)
    assert m.efficiency_percent == pytest.approx(75)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
