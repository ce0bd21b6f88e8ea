"""
project.py — Project ROI Aggregator

Purpose:
- Reduce the per-indicator metrics of one project into project totals.
- Group a project's indicators by category and run each category calculator
  (the dashboard's per-category view).

Rules:
- Implementation cost comes from the project, never summed from indicators.
- Recurring cost = Σ indicator post-change tool cost + monthly maintenance * 12.
- Average gains only count indicators whose own gain is > 0.
- A project with no indicators yields zeros (project costs included) and an
  infinite payback.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from roi_app.core.logging import get_logger
from roi_app.services.roi.adapter import LEGACY_BASELINE_KEYS, LEGACY_POST_CHANGE_KEYS
from roi_app.services.roi.categories import get_category_calculator
from roi_app.services.roi.context import CalculationContext, default_context
from roi_app.services.roi.indicator import compute_indicator_metrics, payback_months, roi_percent
from roi_app.services.roi.numeric import first_present, mean
from roi_app.services.roi.types import (
    IndicatorDetail,
    ProjectCosts,
    ProjectMetrics,
    resolve_category,
)

logger = get_logger(__name__)

PROJECT_ID_KEYS = ("projectId", "project_id", "projetoId")
INDICATOR_ID_KEYS = ("id", "indicatorId", "indicator_id")
CATEGORY_KEYS = ("category", "improvementType", "improvement_type", "tipoIndicador", "tipo")
NAME_KEYS = ("name", "nome")

OTHER_BUCKET = "other"


# -----------------------------------------------------------------------------
# Record accessors
# -----------------------------------------------------------------------------

def _info(record: Dict[str, Any]) -> Dict[str, Any]:
    info = first_present(record, "infoData", "info_data")
    return info if isinstance(info, dict) else {}


def indicator_project_id(record: Dict[str, Any]) -> Any:
    return first_present(record, *PROJECT_ID_KEYS)


def indicator_category(record: Dict[str, Any]) -> Any:
    """Raw category label, from the record or its `infoData` block."""
    value = first_present(record, *CATEGORY_KEYS)
    if value is None:
        value = first_present(_info(record), *CATEGORY_KEYS)
    return value


def indicator_name(record: Dict[str, Any]) -> str:
    value = first_present(record, *NAME_KEYS)
    if value is None:
        value = first_present(_info(record), *NAME_KEYS)
    return str(value or "")


def category_payloads(record: Dict[str, Any]):
    """(baseline, post_change) category payloads of a record."""
    baseline = first_present(record, *(LEGACY_BASELINE_KEYS + ("baseline",)))
    post_change = first_present(record, *(LEGACY_POST_CHANGE_KEYS + ("postChange", "post_change")))
    return baseline or {}, post_change or {}


def filter_project_indicators(project_id: Any, records: Iterable[Any]) -> List[Dict[str, Any]]:
    """Indicators of `project_id`; ids are compared as strings."""
    wanted = str(project_id)
    return [
        r for r in (records or [])
        if isinstance(r, dict)
        and indicator_project_id(r) is not None
        and str(indicator_project_id(r)) == wanted
    ]


# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------

def compute_project_metrics(
    project_id: Any,
    records: Iterable[Any],
    project: Any = None,
    context: Optional[CalculationContext] = None,
) -> ProjectMetrics:
    """
    Aggregate the metrics of every indicator that belongs to a project.

    Args:
        project_id: Project identity used to filter `records`
        records: Indicator records (any project; filtered here)
        project: ProjectCosts, a dict with implementation/maintenance costs, or None
        context: Engine defaults

    Returns:
        ProjectMetrics (never None)
    """
    context = context or default_context()
    costs = ProjectCosts.from_any(project)
    indicators = filter_project_indicators(project_id, records)
    if not indicators:
        # Every field neutral, project costs included
        return ProjectMetrics()

    result = ProjectMetrics(implementation_cost_total=costs.implementation_cost)
    productivity_gains: List[float] = []
    capacity_gains: List[float] = []
    tool_cost_total = 0.0

    for record in indicators:
        metrics = compute_indicator_metrics(record, context)
        category = resolve_category(indicator_category(record))
        result.indicator_details.append(IndicatorDetail(
            indicator_id=first_present(record, *INDICATOR_ID_KEYS),
            name=indicator_name(record),
            category=category.value if category else None,
            metrics=metrics,
        ))

        result.net_savings_annual_total += metrics.net_savings
        result.gross_savings_annual_total += metrics.gross_savings
        result.hours_saved_annual_total += metrics.hours_saved
        tool_cost_total += metrics.tool_cost_post_change

        if metrics.productivity_gain_percent > 0:
            productivity_gains.append(metrics.productivity_gain_percent)
        if metrics.capacity_gain_percent > 0:
            capacity_gains.append(metrics.capacity_gain_percent)

    result.total_indicators = len(indicators)
    result.recurring_cost_annual_total = tool_cost_total + costs.monthly_maintenance_cost * 12.0
    result.investment_year1 = result.implementation_cost_total + result.recurring_cost_annual_total
    result.roi_overall = roi_percent(result.gross_savings_annual_total, result.investment_year1)
    result.payback_avg_months = payback_months(
        result.implementation_cost_total, result.net_savings_annual_total
    )
    result.productivity_gain_avg = mean(productivity_gains)
    result.capacity_gain_avg = mean(capacity_gains)

    logger.debug(
        "Project %s: %d indicators, net savings %.2f",
        project_id, result.total_indicators, result.net_savings_annual_total,
    )
    return result


def summarize_categories(
    records: Iterable[Any],
    context: Optional[CalculationContext] = None,
    project_id: Any = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Group indicators by category and compute each one's category fields.

    Indicators whose category has no calculator land in the "other" bucket
    with empty fields.

    Returns:
        {category value: [{"indicator_id", "name", "fields"}, ...]}
    """
    context = context or default_context()
    if project_id is not None:
        items = filter_project_indicators(project_id, records)
    else:
        items = [r for r in (records or []) if isinstance(r, dict)]

    summary: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for record in items:
        raw_category = indicator_category(record)
        calculator = get_category_calculator(raw_category, context)
        entry = {
            "indicator_id": first_present(record, *INDICATOR_ID_KEYS),
            "name": indicator_name(record),
            "fields": {},
        }
        if calculator is None:
            summary[OTHER_BUCKET].append(entry)
            continue
        baseline, post_change = category_payloads(record)
        entry["fields"] = calculator.calculate(baseline, post_change)
        summary[calculator.category.value].append(entry)
    return dict(summary)
