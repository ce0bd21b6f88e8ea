"""
numeric.py — Numeric Coercion Helpers

Purpose:
- Turn loosely typed record fields (numbers, numeric strings, None, "")
  into floats without ever raising.
- Provide the division/mean helpers shared by every calculator.

This module does NOT:
- Log anything. Coercion happens on every field of every record.
"""

from __future__ import annotations

import math
import numbers
import unicodedata
from decimal import Decimal
from typing import Any, Iterable, Optional


def to_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a value to float.

    Rules:
    - Real numbers (int, float, Decimal) are converted; bool is not a number.
    - Strings are stripped and parsed; a single decimal comma ("12,5") is accepted.
    - NaN, infinities and values too large for a float return `default`.
    - None, empty/whitespace strings, unparseable strings and any other type
      return `default`.

    Args:
        value: Raw field value
        default: Value returned when coercion fails

    Returns:
        Finite float value or default
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        if "," in value and "." not in value and value.count(",") == 1:
            value = value.replace(",", ".")
    elif not isinstance(value, (numbers.Real, Decimal)):
        return default

    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default

    if not math.isfinite(number):
        return default
    return number


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` when the denominator is zero."""
    if not denominator:
        return default
    return numerator / denominator


def mean(values: Iterable[float], default: float = 0.0) -> float:
    """Arithmetic mean; `default` for an empty iterable."""
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)


def first_present(data: Optional[dict], *keys: str) -> Any:
    """
    Return the first value in `data` whose key is present and not None.

    Used to resolve field aliases (camelCase, snake_case, legacy names).
    """
    if not data:
        return None
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def fold_text(text: Any) -> str:
    """
    Lower-case, strip accents and collapse separators to single underscores.

    "Redução de Risco" -> "reducao_de_risco", "Por dia" -> "por_dia"
    """
    decomposed = unicodedata.normalize("NFKD", str(text or ""))
    ascii_text = "".join(c for c in decomposed if not unicodedata.combining(c))
    cleaned = "".join(c if c.isalnum() else " " for c in ascii_text.lower())
    return "_".join(cleaned.split())
