"""
results.py — Calculated Result Records

Purpose:
- Map indicator metrics to the monthly record the persistence gateway stores
  as a cache of the latest calculation.
- Make metric dicts safe for strict JSON (no inf/NaN literals).

This module does NOT:
- Call the persistence gateway. The recalculation trigger owns that.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from roi_app.services.roi.types import IndicatorMetrics

PERIOD_MONTHLY = "monthly"


def build_calculated_result(
    indicator_id: Any,
    metrics: IndicatorMetrics,
    calculation_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the monthly calculated-result record for one indicator.

    Annual hours and money fields are divided by 12; ROI and payback are
    copied as-is.

    Args:
        indicator_id: Indicator identity
        metrics: Output of compute_indicator_metrics()
        calculation_date: Timestamp of the calculation (UTC now by default)

    Returns:
        Dict ready to hand to the persistence gateway
    """
    calculation_date = calculation_date or datetime.now(timezone.utc)
    return {
        "indicator_id": indicator_id,
        "calculation_date": calculation_date.isoformat(),
        "period_type": PERIOD_MONTHLY,
        "hours_saved": metrics.hours_saved / 12.0,
        "money_saved": metrics.net_savings / 12.0,
        "cost_baseline": metrics.total_cost_baseline / 12.0,
        "cost_post_change": metrics.total_cost_post_change / 12.0,
        "gross_savings": metrics.gross_savings / 12.0,
        "net_savings": metrics.net_savings / 12.0,
        "roi_percentage": metrics.roi_percent,
        "payback_months": metrics.payback_months,
    }


def to_json_safe(value: Any) -> Any:
    """
    Recursively replace non-finite floats for strict JSON encoding.

    inf -> "Infinity", -inf -> "-Infinity", NaN -> None
    """
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return value
    if isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    return value
