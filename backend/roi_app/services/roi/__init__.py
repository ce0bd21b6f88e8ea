"""
ROI calculation engine.

Pure, synchronous functions that turn indicator records into annualized
time and money metrics, category deltas and project totals.
"""

from roi_app.services.roi.adapter import adapt
from roi_app.services.roi.categories import (
    CategoryCalculator,
    calculate_category_fields,
    get_category_calculator,
)
from roi_app.services.roi.context import CalculationContext, default_context
from roi_app.services.roi.frequency import (
    FREQUENCY_MULTIPLIERS,
    annual_frequency,
    frequency_multiplier,
    legacy_monthly_occurrences,
)
from roi_app.services.roi.indicator import compute_indicator_metrics, compute_metrics_from_view
from roi_app.services.roi.numeric import to_number
from roi_app.services.roi.project import compute_project_metrics, summarize_categories
from roi_app.services.roi.results import build_calculated_result, to_json_safe
from roi_app.services.roi.types import (
    CATEGORY_NAMES,
    CanonicalView,
    IndicatorCategory,
    IndicatorMetrics,
    PersonTimeEntry,
    ProjectCosts,
    ProjectMetrics,
    ToolCostEntry,
    resolve_category,
)

__all__ = [
    "adapt",
    "CategoryCalculator",
    "calculate_category_fields",
    "get_category_calculator",
    "CalculationContext",
    "default_context",
    "FREQUENCY_MULTIPLIERS",
    "annual_frequency",
    "frequency_multiplier",
    "legacy_monthly_occurrences",
    "compute_indicator_metrics",
    "compute_metrics_from_view",
    "to_number",
    "compute_project_metrics",
    "summarize_categories",
    "build_calculated_result",
    "to_json_safe",
    "CATEGORY_NAMES",
    "CanonicalView",
    "IndicatorCategory",
    "IndicatorMetrics",
    "PersonTimeEntry",
    "ProjectCosts",
    "ProjectMetrics",
    "ToolCostEntry",
    "resolve_category",
]
