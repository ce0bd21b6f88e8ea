"""
adapter.py — Input Adapter

Purpose:
- Accept an indicator record in either stored shape and produce the
  CanonicalView every calculator consumes.

Shapes handled:
- Normalized: indicator-level `frequencyValue`/`frequencyUnit` (optional
  overrides `baselineFrequencyReal`, `baselineFrequencyDesired`,
  `postChangeFrequency`) plus scenario-split persons/tools arrays, or a
  flat `persons`/`tools` list tagged with `scenario`.
- Legacy: persons nested under `baselineData` / `postChangeData`, each with its
  own `{quantidade, periodo}` frequency; tool costs in `custos`.

Field names are accepted in camelCase, snake_case and the legacy Portuguese
spelling, in that order of precedence.

This module does NOT:
- Compute costs or savings.
- Mutate the input record.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from roi_app.core.logging import get_logger
from roi_app.services.roi.context import CalculationContext, default_context
from roi_app.services.roi.frequency import (
    annual_frequency,
    legacy_annual_occurrences,
)
from roi_app.services.roi.numeric import first_present, to_number
from roi_app.services.roi.types import (
    BASELINE,
    POST_CHANGE,
    SCHEMA_LEGACY,
    SCHEMA_NORMALIZED,
    CanonicalView,
    PersonTimeEntry,
    ToolCostEntry,
)

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Field aliases
# -----------------------------------------------------------------------------

FREQUENCY_VALUE_KEYS = ("frequencyValue", "frequency_value")
FREQUENCY_UNIT_KEYS = ("frequencyUnit", "frequency_unit")
BASELINE_FREQUENCY_KEYS = ("baselineFrequencyReal", "baseline_frequency_real")
DESIRED_FREQUENCY_KEYS = ("baselineFrequencyDesired", "baseline_frequency_desired")
POST_CHANGE_FREQUENCY_KEYS = (
    "postChangeFrequency",
    "post_change_frequency",
    "postIaFrequency",
    "post_ia_frequency",
)

PERSONS_BASELINE_KEYS = ("personsBaseline", "persons_baseline")
PERSONS_POST_CHANGE_KEYS = (
    "personsPostChange",
    "persons_post_change",
    "personsPostIa",
    "persons_post_ia",
)
TOOLS_BASELINE_KEYS = ("toolsBaseline", "tools_baseline")
TOOLS_POST_CHANGE_KEYS = (
    "toolsPostChange",
    "tools_post_change",
    "toolsPostIa",
    "tools_post_ia",
)
FLAT_PERSONS_KEYS = ("persons", "personsInvolved", "persons_involved")
FLAT_TOOLS_KEYS = ("tools", "toolCosts", "tool_costs")

LEGACY_BASELINE_KEYS = ("baselineData", "baseline_data")
LEGACY_POST_CHANGE_KEYS = ("postChangeData", "post_change_data", "postIAData", "post_ia_data")
LEGACY_PERSON_LIST_KEYS = ("persons", "pessoas")

_SCENARIO_ALIASES = {
    "baseline": BASELINE,
    "before": BASELINE,
    "post_change": POST_CHANGE,
    "postchange": POST_CHANGE,
    "post_ia": POST_CHANGE,
    "postia": POST_CHANGE,
    "after": POST_CHANGE,
}


def _as_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _normalize_scenario(value: Any) -> Optional[str]:
    key = str(value or "").strip().lower().replace("-", "_")
    return _SCENARIO_ALIASES.get(key)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "sim")
    return bool(value)


def _frequency_pair(raw: Any) -> Tuple[Optional[float], Optional[str]]:
    """Read a legacy `{quantidade, periodo}` / `{quantity, period}` pair."""
    if not isinstance(raw, dict):
        return None, None
    quantity = first_present(raw, "quantity", "quantidade")
    period = first_present(raw, "period", "periodo")
    if quantity is None:
        return None, period
    return to_number(quantity), period


# -----------------------------------------------------------------------------
# Entry parsing
# -----------------------------------------------------------------------------

def parse_person(raw: Dict[str, Any], scenario: str, legacy: bool = False) -> PersonTimeEntry:
    """Build a PersonTimeEntry; negative rates/minutes are clamped to zero."""
    person_id = first_present(raw, "id", "personId", "person_id")
    entry = PersonTimeEntry(
        scenario=scenario,
        name=str(first_present(raw, "name", "personName", "person_name", "nome") or ""),
        role=str(first_present(raw, "role", "cargo") or ""),
        hourly_rate=max(0.0, to_number(first_present(raw, "hourlyRate", "hourly_rate", "valorHora"))),
        time_spent_minutes=max(0.0, to_number(first_present(
            raw, "timeSpentMinutes", "time_spent_minutes", "tempoGasto"
        ))),
        person_id=str(person_id) if person_id is not None else None,
        is_validation_only=_flag(first_present(raw, "isValidationOnly", "is_validation_only")),
    )

    if legacy:
        # Legacy entries always carry their own frequency; a missing one counts as zero occurrences
        quantity, period = _frequency_pair(first_present(raw, "frequencyReal", "frequenciaReal"))
        entry.frequency_quantity = quantity if quantity is not None else 0.0
        entry.frequency_period = period or "Mensal"
        desired_quantity, desired_period = _frequency_pair(
            first_present(raw, "frequencyDesired", "frequenciaDesejada")
        )
        entry.desired_quantity = desired_quantity
        entry.desired_period = desired_period

    return entry


def parse_tool(raw: Dict[str, Any], scenario: str) -> ToolCostEntry:
    """
    Build a ToolCostEntry.

    An entry with `value`/`valor` and no monthly cost is a legacy entry:
    its `kind`/`tipo` is "annual" or (by default) "monthly".
    """
    name = str(first_present(raw, "name", "toolName", "tool_name", "nomeFerramenta", "nome") or "")
    monthly = first_present(raw, "monthlyCost", "monthly_cost", "custoMensal")
    value = first_present(raw, "value", "valor")

    if monthly is None and value is not None:
        kind = str(first_present(raw, "kind", "tipo") or "monthly").strip().lower()
        return ToolCostEntry(
            scenario=scenario,
            name=name,
            value=max(0.0, to_number(value)),
            kind="annual" if kind in ("annual", "anual") else "monthly",
        )

    per_execution = first_present(raw, "costPerExecution", "cost_per_execution")
    execution_time = first_present(raw, "executionTimeSeconds", "execution_time_seconds")
    return ToolCostEntry(
        scenario=scenario,
        name=name,
        monthly_cost=max(0.0, to_number(monthly)),
        cost_per_execution=max(0.0, to_number(per_execution)) if per_execution is not None else None,
        execution_time_seconds=to_number(execution_time) if execution_time is not None else None,
    )


# -----------------------------------------------------------------------------
# Schema detection
# -----------------------------------------------------------------------------

def is_normalized(record: Dict[str, Any]) -> bool:
    """
    Normalized when the indicator carries its own frequency, or when
    scenario-split persons arrays are present.
    """
    if any(key in record for key in FREQUENCY_VALUE_KEYS + FREQUENCY_UNIT_KEYS):
        return True
    return any(
        isinstance(record.get(key), list)
        for key in PERSONS_BASELINE_KEYS + PERSONS_POST_CHANGE_KEYS
    )


def adapt(record: Dict[str, Any], context: Optional[CalculationContext] = None) -> CanonicalView:
    """
    Produce the canonical view of an indicator record.

    Args:
        record: Indicator record in either stored shape
        context: Engine defaults (default frequency unit)

    Returns:
        CanonicalView split by scenario, with annualized frequencies
    """
    context = context or default_context()
    if is_normalized(record):
        return _adapt_normalized(record, context)
    return _adapt_legacy(record)


def _adapt_normalized(record: Dict[str, Any], context: CalculationContext) -> CanonicalView:
    view = CanonicalView(schema=SCHEMA_NORMALIZED)

    view.persons_baseline = [
        parse_person(p, BASELINE) for p in _as_list(first_present(record, *PERSONS_BASELINE_KEYS))
    ]
    view.persons_post_change = [
        parse_person(p, POST_CHANGE) for p in _as_list(first_present(record, *PERSONS_POST_CHANGE_KEYS))
    ]
    view.tools_baseline = [
        parse_tool(t, BASELINE) for t in _as_list(first_present(record, *TOOLS_BASELINE_KEYS))
    ]
    view.tools_post_change = [
        parse_tool(t, POST_CHANGE) for t in _as_list(first_present(record, *TOOLS_POST_CHANGE_KEYS))
    ]

    # Flat lists tagged with a scenario column
    for raw in _as_list(first_present(record, *FLAT_PERSONS_KEYS)):
        scenario = _normalize_scenario(raw.get("scenario"))
        if scenario == BASELINE:
            view.persons_baseline.append(parse_person(raw, BASELINE))
        elif scenario == POST_CHANGE:
            view.persons_post_change.append(parse_person(raw, POST_CHANGE))
        else:
            logger.debug("Skipping person row with unknown scenario %r", raw.get("scenario"))
    for raw in _as_list(first_present(record, *FLAT_TOOLS_KEYS)):
        scenario = _normalize_scenario(raw.get("scenario"))
        if scenario == BASELINE:
            view.tools_baseline.append(parse_tool(raw, BASELINE))
        elif scenario == POST_CHANGE:
            view.tools_post_change.append(parse_tool(raw, POST_CHANGE))
        else:
            logger.debug("Skipping tool row with unknown scenario %r", raw.get("scenario"))

    unit = first_present(record, *FREQUENCY_UNIT_KEYS) or context.default_frequency_unit
    base_value = to_number(first_present(record, *FREQUENCY_VALUE_KEYS))

    baseline_value = to_number(first_present(record, *BASELINE_FREQUENCY_KEYS))
    post_value = to_number(first_present(record, *POST_CHANGE_FREQUENCY_KEYS))
    desired_value = to_number(first_present(record, *DESIRED_FREQUENCY_KEYS))

    view.annual_frequency_baseline = max(0.0, annual_frequency(
        baseline_value if baseline_value > 0 else base_value, unit
    ))
    view.annual_frequency_post_change = max(0.0, annual_frequency(
        post_value if post_value > 0 else base_value, unit
    ))
    view.annual_frequency_desired = max(0.0, annual_frequency(desired_value, unit))
    return view


def _adapt_legacy(record: Dict[str, Any]) -> CanonicalView:
    view = CanonicalView(schema=SCHEMA_LEGACY)

    baseline_data = first_present(record, *LEGACY_BASELINE_KEYS) or {}
    post_data = first_present(record, *LEGACY_POST_CHANGE_KEYS) or {}
    if not isinstance(baseline_data, dict):
        baseline_data = {}
    if not isinstance(post_data, dict):
        post_data = {}

    view.persons_baseline = [
        parse_person(p, BASELINE, legacy=True)
        for p in _as_list(first_present(baseline_data, *LEGACY_PERSON_LIST_KEYS))
    ]
    view.persons_post_change = [
        parse_person(p, POST_CHANGE, legacy=True)
        for p in _as_list(first_present(post_data, *LEGACY_PERSON_LIST_KEYS))
    ]

    costs = record.get("custos")
    if isinstance(costs, dict):
        costs = costs.get("custos")
    view.tools_post_change = [parse_tool(c, POST_CHANGE) for c in _as_list(costs)]

    # Per-person frequencies are summed across the scenario, not averaged
    view.annual_frequency_baseline = sum(
        (legacy_annual_occurrences(p.frequency_quantity, p.frequency_period)
         for p in view.persons_baseline),
        0.0,
    )
    view.annual_frequency_post_change = sum(
        (legacy_annual_occurrences(p.frequency_quantity, p.frequency_period)
         for p in view.persons_post_change),
        0.0,
    )
    view.annual_frequency_desired = sum(
        (legacy_annual_occurrences(p.desired_quantity, p.desired_period)
         for p in view.persons_baseline
         if p.desired_quantity is not None),
        0.0,
    )
    return view
