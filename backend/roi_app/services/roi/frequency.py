"""
frequency.py — Frequency Normalizer

Purpose:
- Convert (value, unit) frequency pairs into occurrences per year.
- Convert legacy per-person frequency labels ("Diário", "Semanal", ...) into
  occurrences per month.

Unit table (occurrences per year):
    hour 8760 | day 365 | week 52 | month 12 | quarter 4 | year 1

Unknown or missing units fall back to the monthly multiplier (12).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from roi_app.core.logging import get_logger
from roi_app.services.roi.numeric import fold_text, to_number

logger = get_logger(__name__)

# =============================================================================
# ANNUAL MULTIPLIERS
# =============================================================================

FREQUENCY_MULTIPLIERS: Dict[str, float] = {
    "hour": 8760.0,
    "day": 365.0,
    "week": 52.0,
    "month": 12.0,
    "quarter": 4.0,
    "year": 1.0,
}

DEFAULT_MULTIPLIER = FREQUENCY_MULTIPLIERS["month"]

# Spellings seen in stored records
_UNIT_ALIASES: Dict[str, str] = {
    "hours": "hour",
    "hora": "hour",
    "days": "day",
    "daily": "day",
    "dia": "day",
    "weeks": "week",
    "weekly": "week",
    "semana": "week",
    "months": "month",
    "monthly": "month",
    "mes": "month",
    "mês": "month",
    "quarters": "quarter",
    "quarterly": "quarter",
    "trimestre": "quarter",
    "years": "year",
    "yearly": "year",
    "annual": "year",
    "ano": "year",
}


def normalize_unit(unit: Any) -> Optional[str]:
    """Return the canonical unit name, or None if the unit is not recognized."""
    if unit is None:
        return None
    key = str(unit).strip().lower()
    if key in FREQUENCY_MULTIPLIERS:
        return key
    return _UNIT_ALIASES.get(key)


def frequency_multiplier(unit: Any) -> float:
    """
    Occurrences per year for one occurrence per `unit`.

    Unknown or missing units map to 12 (monthly).
    """
    canonical = normalize_unit(unit)
    if canonical is None:
        if unit is not None:
            logger.debug("Unknown frequency unit %r, assuming monthly", unit)
        return DEFAULT_MULTIPLIER
    return FREQUENCY_MULTIPLIERS[canonical]


def annual_frequency(value: Any, unit: Any) -> float:
    """Occurrences per year for `value` occurrences per `unit`."""
    return to_number(value) * frequency_multiplier(unit)


# =============================================================================
# LEGACY PERIOD LABELS (occurrences per month)
# =============================================================================

LEGACY_MONTHLY_FACTORS: Dict[str, float] = {
    "diário": 30.0,
    "diario": 30.0,
    "semanal": 4.33,
    "mensal": 1.0,
    "anual": 1.0 / 12.0,
}


def legacy_monthly_occurrences(quantity: Any, period_label: Any) -> float:
    """
    Occurrences per month for a legacy `{quantidade, periodo}` pair.

    "Diário" ×30, "Semanal" ×4.33, "Mensal" ×1, "Anual" ×1/12; any other
    label is treated as monthly (×1). Missing or zero quantity yields 0.

    "Anual" follows the stored per-indicator base calculation (once a year,
    so 1/12 per month). The older ROI service counted it as monthly; records
    scored by that service will come out 12x lower for yearly tasks here.
    """
    amount = to_number(quantity)
    if not amount:
        return 0.0
    label = str(period_label or "").strip().lower()
    return amount * LEGACY_MONTHLY_FACTORS.get(label, 1.0)


def legacy_annual_occurrences(quantity: Any, period_label: Any) -> float:
    return legacy_monthly_occurrences(quantity, period_label) * 12.0


# =============================================================================
# CATEGORY PAYLOAD PERIODS (occurrences per month)
# =============================================================================

_DAY_TOKENS = {"dia", "dias", "day", "days", "daily", "diario"}
_WEEK_TOKENS = {"semana", "semanas", "week", "weeks", "weekly", "semanal"}
_YEAR_TOKENS = {"ano", "anos", "year", "years", "yearly", "annual", "anual"}


def monthly_period_factor(period: Any) -> float:
    """
    Multiplier turning "N per <period>" into "N per month" for category payloads.

    day ×30, week ×4, year ×1/12, anything else (month, missing) ×1.
    Accepts labels such as "dia", "Por semana", "ano".
    """
    tokens = set(fold_text(period).split("_"))
    if tokens & _DAY_TOKENS:
        return 30.0
    if tokens & _WEEK_TOKENS:
        return 4.0
    if tokens & _YEAR_TOKENS:
        return 1.0 / 12.0
    return 1.0
