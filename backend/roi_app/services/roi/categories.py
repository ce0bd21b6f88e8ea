"""
categories.py — Category-Specific Variant Calculators

Purpose:
- One calculator per IndicatorCategory, each computing category-specific
  deltas from a baseline payload and a post-change payload.
- A registry for lookup by category (enum, value, CamelCase name or stored label).

Contract shared by every calculator:
- calculate(baseline, post_change) -> Dict[str, float]
- Never raises: None/non-dict payloads are treated as {}, missing or malformed
  numerics default to 0.
- Deltas keep their sign (a worse post-change state yields a negative delta).

Payload fields are read by English snake_case name first, then camelCase,
then the legacy Portuguese name.

This module does NOT:
- Touch the indicator-level ROI aggregation (see indicator.py).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from roi_app.core.logging import get_logger
from roi_app.services.roi.context import CalculationContext, default_context
from roi_app.services.roi.frequency import legacy_monthly_occurrences, monthly_period_factor
from roi_app.services.roi.numeric import first_present, mean, safe_divide, to_number
from roi_app.services.roi.types import IndicatorCategory, resolve_category

logger = get_logger(__name__)


def _payload(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _rows(payload: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    value = first_present(payload, *keys)
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def _num(payload: Dict[str, Any], *keys: str) -> float:
    return to_number(first_present(payload, *keys))


# =============================================================================
# BASE CLASS
# =============================================================================

class CategoryCalculator:
    """Base class; subclasses set `category` and implement `_calculate`."""

    category: IndicatorCategory

    def __init__(self, context: Optional[CalculationContext] = None):
        self.context = context or default_context()

    def calculate(self, baseline: Any, post_change: Any) -> Dict[str, float]:
        return self._calculate(_payload(baseline), _payload(post_change))

    def _calculate(self, baseline: Dict[str, Any], post_change: Dict[str, Any]) -> Dict[str, float]:
        raise NotImplementedError


# =============================================================================
# PRODUCTIVITY
# =============================================================================

PERSON_LIST_KEYS = ("persons", "pessoas")


def _person_id(person: Dict[str, Any]) -> Optional[str]:
    value = first_present(person, "id", "person_id", "personId")
    return str(value) if value is not None else None


def _person_minutes(person: Dict[str, Any]) -> float:
    return max(0.0, _num(person, "time_spent_minutes", "timeSpentMinutes", "tempoGasto"))


def _person_rate(person: Dict[str, Any]) -> float:
    return max(0.0, _num(person, "hourly_rate", "hourlyRate", "valorHora"))


def _person_occurrences(person: Dict[str, Any], desired: bool = False) -> float:
    """Monthly occurrences from a person's real (or desired) frequency."""
    if desired:
        raw = first_present(person, "desired_frequency", "frequencyDesired", "frequenciaDesejada")
    else:
        raw = first_present(person, "frequency", "frequencyReal", "frequenciaReal")
    raw = _payload(raw)
    return legacy_monthly_occurrences(
        first_present(raw, "quantity", "quantidade"),
        first_present(raw, "period", "periodo"),
    )


class ProductivityCalculator(CategoryCalculator):
    """
    Same-workload comparison: both HH values use the baseline person's
    monthly occurrences, so only the change in duration counts.

    Post-change persons are matched to baseline persons by id; unmatched
    persons contribute nothing. The hourly rate is the post-change person's,
    falling back to the baseline person's.
    """

    category = IndicatorCategory.PRODUCTIVITY

    def _calculate(self, baseline, post_change):
        baseline_people = _rows(baseline, *PERSON_LIST_KEYS)
        post_people = _rows(post_change, *PERSON_LIST_KEYS)
        by_id = {}
        for person in baseline_people:
            pid = _person_id(person)
            if pid is not None:
                by_id.setdefault(pid, person)

        delta = 0.0
        hours_saved = 0.0
        hours_saved_desired = 0.0
        cost_saved_desired = 0.0

        for post_person in post_people:
            pid = _person_id(post_person)
            base_person = by_id.get(pid) if pid is not None else None
            if base_person is None:
                continue

            minutes_before = _person_minutes(base_person)
            minutes_after = _person_minutes(post_person)
            rate = _person_rate(post_person) or _person_rate(base_person)

            occurrences = _person_occurrences(base_person)
            hh_before = minutes_before / 60.0 * occurrences
            hh_after = minutes_after / 60.0 * occurrences
            delta += (hh_before - hh_after) * rate
            hours_saved += hh_before - hh_after

            # Desired-frequency view, floored per person
            desired = _person_occurrences(base_person, desired=True)
            saved_desired = max(0.0, (minutes_before - minutes_after) / 60.0 * desired)
            hours_saved_desired += saved_desired
            cost_saved_desired += saved_desired * rate

        return {
            "delta_productivity": delta,
            "hours_saved_month": hours_saved,
            "hours_saved_year": hours_saved * 12.0,
            "cost_total_baseline": self._monthly_cost(baseline_people),
            "cost_total_post_change": self._monthly_cost(post_people),
            "hours_saved_desired_month": hours_saved_desired,
            "cost_saved_desired_month": cost_saved_desired,
        }

    @staticmethod
    def _monthly_cost(people: List[Dict[str, Any]]) -> float:
        """Σ rate * hours per occurrence * each person's own monthly occurrences."""
        return sum(
            (_person_rate(p) * _person_minutes(p) / 60.0 * _person_occurrences(p) for p in people),
            0.0,
        )


# =============================================================================
# REVENUE / MARGIN / COSTS
# =============================================================================

class RevenueIncreaseCalculator(CategoryCalculator):
    """Raw revenue delta, no annualization."""

    category = IndicatorCategory.REVENUE_INCREASE

    def _calculate(self, baseline, post_change):
        before = _num(baseline, "revenue_before", "revenueBefore", "revenue", "valorReceitaAntes", "receitaBase")
        after = _num(post_change, "revenue_after", "revenueAfter", "revenue", "valorReceitaDepois", "receitaNova")
        return {
            "revenue_before": before,
            "revenue_after": after,
            "delta_revenue": after - before,
        }


class MarginImprovementCalculator(CategoryCalculator):
    """
    Margin points and monthly gross-profit delta.

    When a margin percentage is absent it is derived from revenue and cost
    ((revenue - cost) / revenue * 100), or 0 when revenue is 0.
    """

    category = IndicatorCategory.MARGIN_IMPROVEMENT

    def _calculate(self, baseline, post_change):
        revenue_before = _num(baseline, "revenue_before", "revenueBefore", "revenue", "receitaBrutaMensal")
        cost_before = _num(baseline, "cost_before", "costBefore", "cost", "custoTotalMensal")
        revenue_after = _num(post_change, "revenue_after", "revenueAfter", "revenue", "receitaBrutaMensalEstimada")
        cost_after = _num(post_change, "cost_after", "costAfter", "cost", "custoTotalMensalEstimado")

        margin_before = first_present(
            baseline, "margin_before", "marginBefore", "margin_percent", "margemBrutaAtual"
        )
        margin_after = first_present(
            post_change, "margin_after", "marginAfter", "margin_percent", "margemBrutaEstimada", "margemDepois"
        )
        margin_before = (
            to_number(margin_before) if margin_before is not None
            else safe_divide((revenue_before - cost_before) * 100.0, revenue_before)
        )
        margin_after = (
            to_number(margin_after) if margin_after is not None
            else safe_divide((revenue_after - cost_after) * 100.0, revenue_after)
        )

        gross_profit_before = revenue_before - cost_before
        gross_profit_after = revenue_after - cost_after
        delta_monthly = gross_profit_after - gross_profit_before
        return {
            "delta_margin_points": margin_after - margin_before,
            "gross_profit_before": gross_profit_before,
            "gross_profit_after": gross_profit_after,
            "delta_monthly": delta_monthly,
            "delta_annual": delta_monthly * 12.0,
        }


TOOL_LIST_KEYS = ("tools", "ferramentas")


def _tool_monthly(tool: Dict[str, Any]) -> float:
    return (
        _num(tool, "monthly_cost", "monthlyCost", "custoMensal")
        + _num(tool, "other_costs", "otherCosts", "outrosCustos")
    )


class CostReductionCalculator(CategoryCalculator):
    """Monthly tool spend before/after; implementation cost summed from post-change tools."""

    category = IndicatorCategory.COST_REDUCTION

    def _calculate(self, baseline, post_change):
        before = sum((_tool_monthly(t) for t in _rows(baseline, *TOOL_LIST_KEYS)), 0.0)
        post_tools = _rows(post_change, *TOOL_LIST_KEYS)
        after = sum((_tool_monthly(t) for t in post_tools), 0.0)
        implementation = sum(
            (_num(t, "implementation_cost", "implementationCost", "custoImplementacao") for t in post_tools),
            0.0,
        )
        delta = before - after
        return {
            "cost_monthly_before": before,
            "cost_monthly_after": after,
            "delta_cost_monthly": delta,
            "delta_cost_annual": delta * 12.0,
            "implementation_cost_total": implementation,
        }


# =============================================================================
# RISK / DECISION QUALITY
# =============================================================================

class RiskReductionCalculator(CategoryCalculator):
    """
    Expected-loss exposure = probability% * financial impact, before and after.
    annual_benefit = monthly mitigation savings * 12 + risk value avoided.
    """

    category = IndicatorCategory.RISK_REDUCTION

    def _calculate(self, baseline, post_change):
        prob_before = _num(baseline, "probability", "probability_before", "probabilidadeAtual")
        impact_before = _num(baseline, "financial_impact", "impact", "impactoFinanceiro")
        mitigation_before = _num(baseline, "mitigation_cost", "mitigationCost", "custoMitigacaoAtual")

        prob_after = _num(post_change, "probability", "probability_after", "probabilidadeComIA", "probabilidadeDepois")
        impact_after = _num(
            post_change, "financial_impact", "impact", "impactoFinanceiroReduzido", "impactoFinanceiroDepois"
        )
        mitigation_after = _num(post_change, "mitigation_cost", "mitigationCost", "custoMitigacaoComIA")

        exposure_before = prob_before / 100.0 * impact_before
        exposure_after = prob_after / 100.0 * impact_after
        risk_value_avoided = exposure_before - exposure_after
        mitigation_savings = mitigation_before - mitigation_after
        return {
            "probability_reduction": prob_before - prob_after,
            "exposure_before": exposure_before,
            "exposure_after": exposure_after,
            "risk_value_avoided": risk_value_avoided,
            "mitigation_savings_monthly": mitigation_savings,
            "annual_benefit": mitigation_savings * 12.0 + risk_value_avoided,
        }


CRITERIA_KEYS = ("criteria", "criterios")


def _criteria_score(payload: Dict[str, Any]) -> float:
    scores = [_num(c, "score", "avaliacao") for c in _rows(payload, *CRITERIA_KEYS)]
    if scores:
        return mean(scores)
    return _num(payload, "average_score", "scoreMedio", "scoreMedioDepois")


class DecisionQualityCalculator(CategoryCalculator):
    """
    Monthly value of fewer wrong decisions plus time saved deciding.

    Decisions are normalized to per-month counts; wrong decisions are
    decisions * (1 - accuracy%).
    """

    category = IndicatorCategory.DECISION_QUALITY

    def _calculate(self, baseline, post_change):
        decisions_before = _num(baseline, "decisions_per_period", "numeroDecisoesPeriodo") * monthly_period_factor(
            first_present(baseline, "period", "periodo")
        )
        decisions_after = _num(
            post_change, "decisions_per_period", "numeroDecisoesPeriodoComIA"
        ) * monthly_period_factor(first_present(post_change, "period", "periodoComIA"))

        accuracy_before = _num(baseline, "accuracy_rate", "taxaAcertoAtual")
        accuracy_after = _num(post_change, "accuracy_rate", "taxaAcertoComIA")

        wrong_before = decisions_before * (1.0 - accuracy_before / 100.0)
        wrong_after = decisions_after * (1.0 - accuracy_after / 100.0)
        errors_avoided_savings = (
            wrong_before * _num(baseline, "wrong_decision_cost", "custoMedioDecisaoErrada")
            - wrong_after * _num(post_change, "wrong_decision_cost", "custoMedioDecisaoErradaComIA")
        )

        hours_before = (
            decisions_before
            * _num(baseline, "minutes_per_decision", "tempoMedioDecisao")
            * _num(baseline, "people_involved", "pessoasEnvolvidas")
        ) / 60.0
        hours_after = (
            decisions_after
            * _num(post_change, "minutes_per_decision", "tempoMedioDecisaoComIA")
            * _num(post_change, "people_involved", "pessoasEnvolvidasComIA")
        ) / 60.0
        time_saved_hours = hours_before - hours_after
        time_saved_value = time_saved_hours * _num(baseline, "avg_hourly_rate", "valorHoraMedio")

        score_before = _criteria_score(baseline)
        score_after = _criteria_score(post_change)
        return {
            "accuracy_improvement": accuracy_after - accuracy_before,
            "errors_avoided_savings": errors_avoided_savings,
            "time_saved_hours": time_saved_hours,
            "time_saved_value": time_saved_value,
            "total_monthly_benefit": errors_avoided_savings + time_saved_value,
            "score_before": score_before,
            "score_after": score_after,
            "delta_score": score_after - score_before,
        }


# =============================================================================
# SPEED / SATISFACTION
# =============================================================================

def _to_hours(value: float, unit: Any) -> float:
    label = str(unit or "").strip().lower()
    if label in ("dias", "dia", "days", "day"):
        return value * 24.0
    if label in ("minutos", "minuto", "minutes", "minute", "min"):
        return value / 60.0
    return value


class SpeedCalculator(CategoryCalculator):
    """Delivery throughput and lead-time changes, normalized to months and hours."""

    category = IndicatorCategory.SPEED

    def _calculate(self, baseline, post_change):
        deliveries_before = _num(
            baseline, "deliveries_per_period", "numeroEntregasPeriodo"
        ) * monthly_period_factor(first_present(baseline, "delivery_period", "periodoEntregas"))
        deliveries_after = _num(
            post_change, "deliveries_per_period", "numeroEntregasPeriodoComIA"
        ) * monthly_period_factor(first_present(post_change, "delivery_period", "periodoEntregasComIA"))

        lead_before = _to_hours(
            _num(baseline, "delivery_time", "tempoMedioEntregaAtual", "tempoInicialProcesso"),
            first_present(baseline, "delivery_time_unit", "unidadeTempoEntrega", "unidadeTempo"),
        )
        lead_after = _to_hours(
            _num(post_change, "delivery_time", "tempoMedioEntregaComIA", "tempoDepoisProcesso"),
            first_present(post_change, "delivery_time_unit", "unidadeTempoEntregaComIA", "unidadeTempo"),
        )

        delay_savings = (
            _num(baseline, "delay_cost", "custoPorAtraso")
            - _num(post_change, "delay_cost", "custoPorAtrasoReduzido")
        ) * deliveries_after

        work_before = (
            deliveries_before
            * _num(baseline, "work_hours_per_delivery", "tempoTrabalhoPorEntrega")
            * _num(baseline, "people_involved", "pessoasEnvolvidas")
        )
        work_after = (
            deliveries_after
            * _num(post_change, "work_hours_per_delivery", "tempoTrabalhoPorEntregaComIA")
            * _num(post_change, "people_involved", "pessoasEnvolvidasComIA")
        )
        hours_saved = work_before - work_after

        return {
            "delivery_time_reduction_percent": safe_divide((lead_before - lead_after) * 100.0, lead_before),
            "delta_delivery_time_hours": lead_before - lead_after,
            "capacity_increase": deliveries_after - deliveries_before,
            "delay_savings": delay_savings,
            "hours_saved": hours_saved,
            "time_saved_value": hours_saved * _num(baseline, "avg_hourly_rate", "valorHoraMedio"),
            "productivity_gain_percent": safe_divide(
                (deliveries_after - deliveries_before) * 100.0, deliveries_before
            ),
        }


class SatisfactionCalculator(CategoryCalculator):
    """
    Customer score, churn and support changes.

    retention_value and revenue_increase are annual; support_savings is
    monthly at the context's support ticket cost. LTV = value / churn%.
    """

    category = IndicatorCategory.SATISFACTION

    def _calculate(self, baseline, post_change):
        churn_before = _num(baseline, "churn_rate", "taxaChurnAtual")
        churn_after = _num(post_change, "churn_rate", "taxaChurnComIA")
        customers_before = _num(baseline, "customers", "numeroClientes")
        customers_after = _num(post_change, "customers", "numeroClientesEsperado")
        value_before = _num(baseline, "avg_value_per_customer", "valorMedioPorCliente")
        value_after = _num(post_change, "avg_value_per_customer", "valorMedioPorClienteComIA")
        tickets_before = _num(baseline, "support_tickets", "ticketMedioSuporte")
        tickets_after = _num(post_change, "support_tickets", "ticketMedioSuporteComIA")

        churn_reduction = churn_before - churn_after
        ltv_before = safe_divide(value_before, churn_before / 100.0)
        ltv_after = safe_divide(value_after, churn_after / 100.0)
        return {
            "delta_score": (
                _num(post_change, "score", "scoreComIA", "scoreDepois")
                - _num(baseline, "score", "scoreAtual")
            ),
            "churn_reduction": churn_reduction,
            "retention_value": customers_before * (churn_reduction / 100.0) * value_before * 12.0,
            "support_savings": (tickets_before - tickets_after) * self.context.support_ticket_cost,
            "revenue_increase": (
                customers_after * value_after * 12.0 - customers_before * value_before * 12.0
            ),
            "ltv_before": ltv_before,
            "ltv_after": ltv_after,
            "ltv_increase": ltv_after - ltv_before,
        }


# =============================================================================
# ANALYTICAL CAPACITY
# =============================================================================

QUALITATIVE_KEYS = ("qualitative_fields", "qualitativeFields", "camposQualitativos")


def _filled_criteria(payload: Dict[str, Any]) -> int:
    return sum(
        1 for row in _rows(payload, *QUALITATIVE_KEYS)
        if str(first_present(row, "value", "valor") or "").strip()
    )


class AnalyticalCapacityCalculator(CategoryCalculator):
    """Monthly analyses and their value; qualitative criteria are counted, not scored."""

    category = IndicatorCategory.ANALYTICAL_CAPACITY

    def _calculate(self, baseline, post_change):
        analyses_before = _num(
            baseline, "analyses_per_period", "quantidadeAnalises", "quantidadeOperacoes", "frequencia"
        ) * monthly_period_factor(first_present(baseline, "period", "periodoFrequencia"))
        analyses_after = _num(
            post_change, "analyses_per_period", "quantidadeAnalises", "quantidadeOperacoes", "frequencia"
        ) * monthly_period_factor(first_present(post_change, "period", "periodoFrequencia"))

        value_before = analyses_before * _num(baseline, "value_per_analysis", "valorPorAnalise", "valorDecisao")
        value_after = analyses_after * _num(post_change, "value_per_analysis", "valorPorAnalise", "valorDecisao")
        delta_value = value_after - value_before
        return {
            "analyses_monthly_before": analyses_before,
            "analyses_monthly_after": analyses_after,
            "delta_analyses_monthly": analyses_after - analyses_before,
            "analysis_value_before": value_before,
            "analysis_value_after": value_after,
            "delta_value_monthly": delta_value,
            "delta_value_annual": delta_value * 12.0,
            "qualitative_criteria_before": float(_filled_criteria(baseline)),
            "qualitative_criteria_after": float(_filled_criteria(post_change)),
        }


# =============================================================================
# REGISTRY
# =============================================================================

CATEGORY_CALCULATORS = {
    calculator.category: calculator
    for calculator in (
        ProductivityCalculator,
        AnalyticalCapacityCalculator,
        RevenueIncreaseCalculator,
        CostReductionCalculator,
        RiskReductionCalculator,
        DecisionQualityCalculator,
        SpeedCalculator,
        SatisfactionCalculator,
        MarginImprovementCalculator,
    )
}


def get_category_calculator(
    category: Any,
    context: Optional[CalculationContext] = None,
) -> Optional[CategoryCalculator]:
    """
    Look up the calculator for a category.

    Returns:
        A calculator instance, or None when the category is not recognized
    """
    resolved = resolve_category(category)
    if resolved is None:
        logger.debug("No category calculator for %r", category)
        return None
    return CATEGORY_CALCULATORS[resolved](context)


def calculate_category_fields(
    category: Any,
    baseline: Any,
    post_change: Any,
    context: Optional[CalculationContext] = None,
) -> Optional[Dict[str, float]]:
    """Run the category's calculator, or return None when there is none."""
    calculator = get_category_calculator(category, context)
    if calculator is None:
        return None
    return calculator.calculate(baseline, post_change)
