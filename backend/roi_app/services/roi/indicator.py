"""
indicator.py — Indicator ROI Aggregator

Purpose:
- Combine hours, labor costs and tool costs of one indicator into a single
  annualized metrics record (savings, ROI, payback, gain percentages).

Notes:
- Implementation cost lives at project level only, so it is always 0 here
  and payback is either 0 (net savings positive) or infinite.
- Gross savings is the larger of the cost-accounting view and the
  labor-value view (hours saved * average hourly rate).

This module does NOT:
- Apply category-specific formulas (see categories.py).
- Persist anything.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from roi_app.core.logging import get_logger
from roi_app.services.roi.adapter import adapt
from roi_app.services.roi.context import CalculationContext, default_context
from roi_app.services.roi.costs import labor_cost, labor_hours, tool_cost
from roi_app.services.roi.numeric import mean, safe_divide
from roi_app.services.roi.types import CanonicalView, IndicatorMetrics

logger = get_logger(__name__)


def roi_percent(gain: float, investment: float) -> float:
    """(gain - investment) / investment * 100; inf when nothing was invested but something was gained."""
    if investment > 0:
        return (gain - investment) / investment * 100.0
    return math.inf if gain > 0 else 0.0


def payback_months(implementation_cost: float, net_savings_annual: float) -> float:
    """Months to recover the implementation cost from monthly net savings."""
    monthly = net_savings_annual / 12.0
    if monthly <= 0:
        return math.inf
    if implementation_cost == 0:
        return 0.0
    return implementation_cost / monthly


def average_hourly_rate(view: CanonicalView) -> float:
    """Mean hourly rate of baseline persons who do the work and have a positive rate."""
    return mean(
        p.hourly_rate for p in view.persons_baseline
        if p.hourly_rate > 0 and not p.is_validation_only
    )


def compute_metrics_from_view(
    view: CanonicalView,
    context: Optional[CalculationContext] = None,
) -> IndicatorMetrics:
    """
    Compute indicator metrics from an already adapted view.

    Args:
        view: Canonical view produced by adapter.adapt()
        context: Engine defaults (fallback hourly rate)

    Returns:
        IndicatorMetrics
    """
    context = context or default_context()
    m = IndicatorMetrics()

    freq_base = view.annual_frequency_baseline
    freq_post = view.annual_frequency_post_change
    m.annual_frequency_baseline = freq_base
    m.annual_frequency_post_change = freq_post

    # 1. Hours
    m.hours_baseline = labor_hours(view.persons_baseline, freq_base)
    m.hours_post_change = labor_hours(view.persons_post_change, freq_post)
    m.hours_saved = max(0.0, m.hours_baseline - m.hours_post_change)

    # 2. Costs per scenario
    m.labor_cost_baseline = labor_cost(view.persons_baseline, freq_base)
    m.labor_cost_post_change = labor_cost(view.persons_post_change, freq_post)
    m.tool_cost_baseline = tool_cost(view.tools_baseline, freq_base)
    m.tool_cost_post_change = tool_cost(view.tools_post_change, freq_post)
    m.total_cost_baseline = m.labor_cost_baseline + m.tool_cost_baseline
    m.total_cost_post_change = m.labor_cost_post_change + m.tool_cost_post_change

    # 3-5. Gross savings
    m.gross_savings_by_cost = max(0.0, m.total_cost_baseline - m.total_cost_post_change)
    m.avg_hourly_rate = average_hourly_rate(view)
    if m.avg_hourly_rate == 0 and m.hours_saved > 0:
        logger.debug("No baseline hourly rate, using default %.2f", context.default_hourly_rate)
        m.avg_hourly_rate = context.default_hourly_rate
    m.gross_savings_by_hours = m.hours_saved * m.avg_hourly_rate
    m.gross_savings = max(m.gross_savings_by_cost, m.gross_savings_by_hours)

    # 6. Net savings
    m.net_savings = m.gross_savings - m.tool_cost_post_change

    # 7-10. Investment, ROI, payback
    m.implementation_cost = 0.0
    m.investment_year1 = m.implementation_cost + m.tool_cost_post_change
    m.roi_percent = roi_percent(m.gross_savings, m.investment_year1)
    m.roi_steady_state = roi_percent(m.gross_savings, m.tool_cost_post_change)
    m.payback_months = payback_months(m.implementation_cost, m.net_savings)

    # 11-13. Gains
    m.productivity_gain_percent = safe_divide(
        (m.hours_baseline - m.hours_post_change) * 100.0, m.hours_baseline
    )
    m.capacity_gain_percent = (
        (freq_post / freq_base - 1.0) * 100.0 if freq_base > 0 else 0.0
    )

    m.avg_minutes_per_occurrence_baseline = safe_divide(m.hours_baseline * 60.0, freq_base)
    m.avg_minutes_per_occurrence_post_change = safe_divide(m.hours_post_change * 60.0, freq_post)
    if freq_base > 0 and freq_post > 0 and m.avg_minutes_per_occurrence_baseline > 0:
        m.efficiency_percent = (
            1.0 - m.avg_minutes_per_occurrence_post_change / m.avg_minutes_per_occurrence_baseline
        ) * 100.0
    else:
        m.efficiency_percent = 0.0

    # Per-occurrence view
    m.cost_per_occurrence_baseline = safe_divide(m.total_cost_baseline, freq_base)
    m.cost_per_occurrence_post_change = safe_divide(m.total_cost_post_change, freq_post)
    m.savings_per_occurrence = m.cost_per_occurrence_baseline - m.cost_per_occurrence_post_change
    m.equivalent_executions = safe_divide(
        m.avg_minutes_per_occurrence_baseline, m.avg_minutes_per_occurrence_post_change
    )
    m.tool_cost_monthly_post_change = m.tool_cost_post_change / 12.0

    return m


def compute_indicator_metrics(
    record: Optional[Dict[str, Any]],
    context: Optional[CalculationContext] = None,
) -> Optional[IndicatorMetrics]:
    """
    Compute annualized ROI metrics for one indicator record.

    Args:
        record: Indicator record (normalized or legacy shape), or None
        context: Engine defaults; the settings-backed context when omitted

    Returns:
        IndicatorMetrics, or None when record is None
    """
    if record is None:
        return None
    return compute_metrics_from_view(adapt(record, context), context)
