"""
types.py — Shared Data Layer for the ROI Engine

Purpose:
- Define the data structures passed between engine stages:
  raw record -> CanonicalView -> IndicatorMetrics -> ProjectMetrics
- Define the closed set of indicator categories.

This module does NOT:
- Parse raw records (see adapter.py).
- Compute any metric.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from roi_app.services.roi.numeric import first_present, fold_text, to_number


BASELINE = "baseline"
POST_CHANGE = "post_change"

SCHEMA_NORMALIZED = "normalized"
SCHEMA_LEGACY = "legacy"


# =============================================================================
# INDICATOR CATEGORIES
# =============================================================================

class IndicatorCategory(str, Enum):
    """Closed enumeration of indicator categories."""
    PRODUCTIVITY = "productivity"
    ANALYTICAL_CAPACITY = "analytical_capacity"
    REVENUE_INCREASE = "revenue_increase"
    COST_REDUCTION = "cost_reduction"
    RISK_REDUCTION = "risk_reduction"
    DECISION_QUALITY = "decision_quality"
    SPEED = "speed"
    SATISFACTION = "satisfaction"
    MARGIN_IMPROVEMENT = "margin_improvement"


CATEGORY_NAMES: Dict[str, str] = {
    IndicatorCategory.PRODUCTIVITY.value: "Productivity",
    IndicatorCategory.ANALYTICAL_CAPACITY.value: "Analytical Capacity",
    IndicatorCategory.REVENUE_INCREASE.value: "Revenue Increase",
    IndicatorCategory.COST_REDUCTION.value: "Cost Reduction",
    IndicatorCategory.RISK_REDUCTION.value: "Risk Reduction",
    IndicatorCategory.DECISION_QUALITY.value: "Decision Quality",
    IndicatorCategory.SPEED.value: "Speed",
    IndicatorCategory.SATISFACTION.value: "Satisfaction",
    IndicatorCategory.MARGIN_IMPROVEMENT.value: "Margin Improvement",
}


# Labels used by stored records and the dashboard, folded with fold_text()
_CATEGORY_LABELS: Dict[str, IndicatorCategory] = {
    "produtividade": IndicatorCategory.PRODUCTIVITY,
    "capacidade_analitica": IndicatorCategory.ANALYTICAL_CAPACITY,
    "incremento_receita": IndicatorCategory.REVENUE_INCREASE,
    "incremento_de_receita": IndicatorCategory.REVENUE_INCREASE,
    "custos_relacionados": IndicatorCategory.COST_REDUCTION,
    "reducao_de_custos": IndicatorCategory.COST_REDUCTION,
    "reducao_custos": IndicatorCategory.COST_REDUCTION,
    "reducao_de_risco": IndicatorCategory.RISK_REDUCTION,
    "reducao_risco": IndicatorCategory.RISK_REDUCTION,
    "qualidade_decisao": IndicatorCategory.DECISION_QUALITY,
    "qualidade_de_decisao": IndicatorCategory.DECISION_QUALITY,
    "velocidade": IndicatorCategory.SPEED,
    "satisfacao": IndicatorCategory.SATISFACTION,
    "melhoria_margem": IndicatorCategory.MARGIN_IMPROVEMENT,
    "melhoria_de_margem": IndicatorCategory.MARGIN_IMPROVEMENT,
}


def _camel_to_snake(name: str) -> str:
    out = []
    for i, c in enumerate(name):
        if c.isupper() and i > 0 and not name[i - 1].isupper():
            out.append("_")
        out.append(c.lower())
    return "".join(out)


def resolve_category(value: Any) -> Optional[IndicatorCategory]:
    """
    Resolve a category from an enum member, its value ("revenue_increase"),
    its CamelCase name ("RevenueIncrease") or a stored label ("INCREMENTO RECEITA").

    Returns None for anything unrecognized.
    """
    if value is None:
        return None
    if isinstance(value, IndicatorCategory):
        return value

    text = str(value).strip()
    if not text:
        return None

    for candidate in (fold_text(text), fold_text(_camel_to_snake(text))):
        try:
            return IndicatorCategory(candidate)
        except ValueError:
            pass
        if candidate in _CATEGORY_LABELS:
            return _CATEGORY_LABELS[candidate]
    return None


# =============================================================================
# CANONICAL ENTRIES
# =============================================================================

@dataclass
class PersonTimeEntry:
    """
    One person's time on the measured activity in one scenario.

    Legacy records carry a per-person frequency (`frequency_quantity`,
    `frequency_period`); normalized records rely on the indicator frequency.
    """
    scenario: str
    name: str = ""
    role: str = ""
    hourly_rate: float = 0.0
    time_spent_minutes: float = 0.0
    person_id: Optional[str] = None
    frequency_quantity: Optional[float] = None
    frequency_period: Optional[str] = None
    desired_quantity: Optional[float] = None
    desired_period: Optional[str] = None
    is_validation_only: bool = False

    @property
    def has_own_frequency(self) -> bool:
        return self.frequency_quantity is not None


@dataclass
class ToolCostEntry:
    """
    A tool/licensing cost in one scenario.

    Normalized entries use `monthly_cost` and optional `cost_per_execution`.
    Legacy entries use `value` with `kind` of "monthly" or "annual".
    """
    scenario: str
    name: str = ""
    monthly_cost: float = 0.0
    cost_per_execution: Optional[float] = None
    execution_time_seconds: Optional[float] = None
    value: Optional[float] = None
    kind: Optional[str] = None

    @property
    def is_legacy(self) -> bool:
        return self.kind is not None


@dataclass
class CanonicalView:
    """Scenario-split view every calculator consumes."""
    persons_baseline: List[PersonTimeEntry] = field(default_factory=list)
    persons_post_change: List[PersonTimeEntry] = field(default_factory=list)
    tools_baseline: List[ToolCostEntry] = field(default_factory=list)
    tools_post_change: List[ToolCostEntry] = field(default_factory=list)
    annual_frequency_baseline: float = 0.0
    annual_frequency_post_change: float = 0.0
    annual_frequency_desired: float = 0.0
    schema: str = SCHEMA_NORMALIZED


# =============================================================================
# PROJECT COSTS
# =============================================================================

@dataclass
class ProjectCosts:
    """One-time and recurring costs attached to a project."""
    implementation_cost: float = 0.0
    monthly_maintenance_cost: float = 0.0

    @classmethod
    def from_any(cls, project: Any) -> "ProjectCosts":
        """Build from a ProjectCosts, a dict with camelCase or snake_case keys, or None."""
        if isinstance(project, ProjectCosts):
            return project
        if not isinstance(project, dict):
            return cls()
        return cls(
            implementation_cost=max(0.0, to_number(first_present(
                project, "implementation_cost", "implementationCost", "custoImplementacao"
            ))),
            monthly_maintenance_cost=max(0.0, to_number(first_present(
                project, "monthly_maintenance_cost", "monthlyMaintenanceCost", "custoManutencaoMensal"
            ))),
        )


# =============================================================================
# METRICS
# =============================================================================

@dataclass
class IndicatorMetrics:
    """
    Annualized metrics for one indicator.

    Infinite ROI/payback are represented with math.inf.
    """
    hours_baseline: float = 0.0
    hours_post_change: float = 0.0
    hours_saved: float = 0.0

    labor_cost_baseline: float = 0.0
    labor_cost_post_change: float = 0.0
    tool_cost_baseline: float = 0.0
    tool_cost_post_change: float = 0.0
    total_cost_baseline: float = 0.0
    total_cost_post_change: float = 0.0

    avg_hourly_rate: float = 0.0
    gross_savings_by_cost: float = 0.0
    gross_savings_by_hours: float = 0.0
    gross_savings: float = 0.0
    net_savings: float = 0.0

    implementation_cost: float = 0.0
    investment_year1: float = 0.0
    roi_percent: float = 0.0
    roi_steady_state: float = 0.0
    payback_months: float = math.inf

    productivity_gain_percent: float = 0.0
    capacity_gain_percent: float = 0.0
    efficiency_percent: float = 0.0

    annual_frequency_baseline: float = 0.0
    annual_frequency_post_change: float = 0.0
    avg_minutes_per_occurrence_baseline: float = 0.0
    avg_minutes_per_occurrence_post_change: float = 0.0
    cost_per_occurrence_baseline: float = 0.0
    cost_per_occurrence_post_change: float = 0.0
    savings_per_occurrence: float = 0.0
    equivalent_executions: float = 0.0
    tool_cost_monthly_post_change: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class IndicatorDetail:
    indicator_id: Any
    name: str
    category: Optional[str]
    metrics: IndicatorMetrics


@dataclass
class ProjectMetrics:
    """Totals across every indicator of a project."""
    total_indicators: int = 0
    net_savings_annual_total: float = 0.0
    gross_savings_annual_total: float = 0.0
    hours_saved_annual_total: float = 0.0
    implementation_cost_total: float = 0.0
    recurring_cost_annual_total: float = 0.0
    investment_year1: float = 0.0
    roi_overall: float = 0.0
    payback_avg_months: float = math.inf
    productivity_gain_avg: float = 0.0
    capacity_gain_avg: float = 0.0
    indicator_details: List[IndicatorDetail] = field(default_factory=list)

    def to_dict(self, include_details: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if not include_details:
            data.pop("indicator_details")
        return data
