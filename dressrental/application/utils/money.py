"""
Money and quantity helpers shared by the pricing calculator and the adapters.

Amounts are plain floats during arithmetic. Rounding to cents happens only
when a value is formatted, emitted in a payload, or leaves an editable field.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

# 20% VAT: HT = TTC * 5/6
DEFAULT_VAT_RATIO = 5 / 6

_SEPARATORS = re.compile(r"[\s\u00a0\u202f]")
_AMOUNT = re.compile(r"^[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)$")
_CENT = Decimal("0.01")


def parse_amount(text: Any) -> float | None:
    """
    Parse a locale amount such as "1 234,50" or "99.9".
    Returns None for empty or unparseable input, never NaN.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) else None
    cleaned = _SEPARATORS.sub("", str(text)).replace("€", "")
    if not cleaned or not _AMOUNT.match(cleaned):
        return None
    return float(cleaned.replace(",", "."))


def to_numeric(value: Any) -> float:
    """Lenient variant of parse_amount for wire data: anything unparseable is 0."""
    parsed = parse_amount(value)
    return parsed if parsed is not None else 0.0


def round_money(value: float) -> float:
    rounded = float(Decimal(repr(float(value))).quantize(_CENT, rounding=ROUND_HALF_UP))
    return rounded + 0.0  # drops -0.0


def format_amount(value: float) -> str:
    return f"{round_money(value):.2f}"


def vat_ratio(ht: float | None, ttc: float | None, fallback: float = DEFAULT_VAT_RATIO) -> float:
    """HT/TTC ratio of a priced item, or the fallback when either side is missing."""
    if ht is not None and ttc is not None and ht > 0 and ttc > 0:
        return ht / ttc
    return fallback


def price_pair(ht: Any, ttc: Any, fallback: float = DEFAULT_VAT_RATIO) -> tuple[float, float]:
    """Normalize an (HT, TTC) pair, deriving a missing half through vat_ratio."""
    ht_value = to_numeric(ht)
    ttc_value = to_numeric(ttc)
    ratio = vat_ratio(ht_value, ttc_value, fallback)
    if ht_value > 0 and ttc_value > 0:
        return ht_value, ttc_value
    if ttc_value > 0:
        return ttc_value * ratio, ttc_value
    if ht_value > 0 and ratio > 0:
        return ht_value, ht_value / ratio
    return 0.0, 0.0
