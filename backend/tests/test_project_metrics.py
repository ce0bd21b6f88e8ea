"""
Unit tests for project.py

Covers filtering, totals, the averaging-exclusion rule for gains, and the
per-category summary.
"""

import math
from typing import Any, Dict

import pytest

from roi_app.services.roi.context import CalculationContext
from roi_app.services.roi.indicator import compute_indicator_metrics
from roi_app.services.roi.project import compute_project_metrics, summarize_categories
from roi_app.services.roi.types import ProjectCosts


@pytest.fixture
def context() -> CalculationContext:
    return CalculationContext()


def make_indicator(indicator_id, project_id="proj-1", minutes_before=60, minutes_after=10,
                   rate=50, value=20, **extra) -> Dict[str, Any]:
    record = {
        "id": indicator_id,
        "projectId": project_id,
        "name": f"Indicator {indicator_id}",
        "category": "productivity",
        "frequencyValue": value,
        "frequencyUnit": "month",
        "personsBaseline": [{"id": "p1", "hourlyRate": rate, "timeSpentMinutes": minutes_before}],
        "personsPostChange": [{"id": "p1", "hourlyRate": rate, "timeSpentMinutes": minutes_after}],
    }
    record.update(extra)
    return record


# ============================================================================
# Empty projects
# ============================================================================

def test_empty_project_is_neutral(context):
    result = compute_project_metrics("proj-1", [], None, context)

    assert result.total_indicators == 0
    assert result.net_savings_annual_total == 0
    assert result.gross_savings_annual_total == 0
    assert result.hours_saved_annual_total == 0
    assert result.implementation_cost_total == 0
    assert result.recurring_cost_annual_total == 0
    assert result.investment_year1 == 0
    assert result.roi_overall == 0
    assert result.productivity_gain_avg == 0
    assert result.capacity_gain_avg == 0
    assert result.payback_avg_months == math.inf
    assert result.indicator_details == []


def test_project_without_matching_indicators_ignores_project_costs(context):
    records = [make_indicator("a", project_id="other")]

    result = compute_project_metrics("proj-1", records, {"implementationCost": 5000}, context)

    assert result.total_indicators == 0
    assert result.implementation_cost_total == 0
    assert result.payback_avg_months == math.inf


def test_none_records_are_tolerated(context):
    result = compute_project_metrics("proj-1", None, None, context)

    assert result.total_indicators == 0


# ============================================================================
# Totals
# ============================================================================

def test_filters_by_project_id_and_aliases(context):
    legacy_style = make_indicator("b", project_id=None)
    del legacy_style["projectId"]
    legacy_style["projetoId"] = "proj-1"
    records = [
        make_indicator("a"),
        legacy_style,
        make_indicator("c", project_id="proj-2"),
        None,
        "garbage",
    ]

    result = compute_project_metrics("proj-1", records, None, context)

    assert result.total_indicators == 2
    assert [d.indicator_id for d in result.indicator_details] == ["a", "b"]


def test_project_ids_compare_as_strings(context):
    result = compute_project_metrics(7, [make_indicator("a", project_id="7")], None, context)

    assert result.total_indicators == 1


def test_net_savings_are_additive(context):
    records = [
        make_indicator("a"),
        make_indicator("b", minutes_before=120, minutes_after=30, toolsPostChange=[{"monthlyCost": 80}]),
        make_indicator("c", minutes_before=15, minutes_after=20),
    ]

    result = compute_project_metrics("proj-1", records, None, context)

    individual = [compute_indicator_metrics(r, context) for r in records]
    assert result.net_savings_annual_total == pytest.approx(sum(m.net_savings for m in individual))
    assert result.gross_savings_annual_total == pytest.approx(sum(m.gross_savings for m in individual))
    assert result.hours_saved_annual_total == pytest.approx(sum(m.hours_saved for m in individual))


def test_project_costs_drive_investment_roi_and_payback(context):
    project = ProjectCosts(implementation_cost=6000, monthly_maintenance_cost=100)

    result = compute_project_metrics("proj-1", [make_indicator("a")], project, context)

    assert result.implementation_cost_total == 6000
    assert result.recurring_cost_annual_total == pytest.approx(1200)
    assert result.investment_year1 == pytest.approx(7200)
    assert result.roi_overall == pytest.approx((10000 - 7200) / 7200 * 100)
    assert result.payback_avg_months == pytest.approx(6000 / (10000 / 12))


def test_recurring_cost_includes_indicator_tools(context):
    record = make_indicator("a", toolsPostChange=[{"monthlyCost": 50}])

    result = compute_project_metrics(
        "proj-1", [record], {"implementation_cost": 0, "monthly_maintenance_cost": 25}, context
    )

    assert result.recurring_cost_annual_total == pytest.approx(600 + 300)


def test_infinite_roi_without_investment(context):
    result = compute_project_metrics("proj-1", [make_indicator("a")], None, context)

    assert result.roi_overall == math.inf
    assert result.payback_avg_months == 0


def test_implementation_cost_is_not_summed_from_indicators(context):
    records = [make_indicator("a", implementationCost=999), make_indicator("b", implementationCost=999)]

    result = compute_project_metrics("proj-1", records, {"implementationCost": 100}, context)

    assert result.implementation_cost_total == 100


# ============================================================================
# Average gains
# ============================================================================

def test_average_gains_exclude_non_positive_indicators(context):
    records = [
        make_indicator("a"),                                    # 83.3% productivity gain
        make_indicator("b", minutes_before=30, minutes_after=30),  # no gain
        make_indicator("c", minutes_before=30, minutes_after=45),  # negative gain
    ]

    result = compute_project_metrics("proj-1", records, None, context)

    assert result.productivity_gain_avg == pytest.approx(200 / 240 * 100)


def test_capacity_gain_average(context):
    records = [
        make_indicator("a", postChangeFrequency=30),  # +50%
        make_indicator("b", postChangeFrequency=25),  # +25%
        make_indicator("c"),                          # 0%
    ]

    result = compute_project_metrics("proj-1", records, None, context)

    assert result.capacity_gain_avg == pytest.approx(37.5)


# ============================================================================
# Details and serialization
# ============================================================================

def test_indicator_details(context):
    result = compute_project_metrics("proj-1", [make_indicator("a")], None, context)

    detail = result.indicator_details[0]
    assert detail.indicator_id == "a"
    assert detail.name == "Indicator a"
    assert detail.category == "productivity"
    assert detail.metrics.net_savings == pytest.approx(10000)


def test_to_dict_without_details(context):
    result = compute_project_metrics("proj-1", [make_indicator("a")], None, context)

    assert "indicator_details" not in result.to_dict(include_details=False)
    assert result.to_dict()["indicator_details"][0]["metrics"]["hours_saved"] == pytest.approx(200)


# ============================================================================
# Category summary
# ============================================================================

def test_summarize_categories(context):
    records = [
        {
            "id": "rev", "projectId": "proj-1",
            "infoData": {"nome": "Upsell", "tipoIndicador": "INCREMENTO RECEITA"},
            "baselineData": {"valorReceitaAntes": 10000},
            "postIAData": {"valorReceitaDepois": 13000},
        },
        {
            "id": "margin", "projectId": "proj-1", "category": "MarginImprovement",
            "baseline": {"revenue_before": 100000, "cost_before": 80000},
            "post_change": {"revenue_after": 110000, "cost_after": 82000},
        },
        {"id": "misc", "projectId": "proj-1", "category": "OUTROS"},
        {"id": "elsewhere", "projectId": "proj-2", "category": "speed"},
    ]

    summary = summarize_categories(records, context, project_id="proj-1")

    assert set(summary) == {"revenue_increase", "margin_improvement", "other"}
    assert summary["revenue_increase"][0]["name"] == "Upsell"
    assert summary["revenue_increase"][0]["fields"]["delta_revenue"] == pytest.approx(3000)
    assert summary["margin_improvement"][0]["fields"]["delta_annual"] == pytest.approx(96000)
    assert summary["other"] == [{"indicator_id": "misc", "name": "", "fields": {}}]


def test_summarize_categories_without_project_filter(context):
    records = [{"id": "x", "projectId": "p", "category": "speed"}, {"id": "y", "category": "speed"}]

    summary = summarize_categories(records, context)

    assert [e["indicator_id"] for e in summary["speed"]] == ["x", "y"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
