"""Decimal parsing, angle conversion, and guarded arithmetic."""

from __future__ import annotations

import math
import re

# Denominators smaller than this are treated as singular
DIV_EPS = 1e-12

_BLANKS = ("", "—", "-")


def parse_decimal(value) -> float:
    """Parse a number that may use a decimal comma or a decimal point.

    A comma, when present, is the decimal point and any dots before it are
    thousands separators ("1.234,56" -> 1234.56). Without a comma a dot is
    the decimal point and commas are thousands separators
    ("1,234.56" -> 1234.56).

    Returns NaN for None, blanks, dashes, and anything unparsable.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else math.nan

    s = re.sub(r"\s+", "", str(value))
    if s in _BLANKS:
        return math.nan

    if "," in s:
        s = s.replace(".", "").replace(",", ".", 1)
    else:
        s = s.replace(",", "")

    try:
        v = float(s)
    except ValueError:
        return math.nan
    return v if math.isfinite(v) else math.nan


def deg2rad(deg: float) -> float:
    return math.radians(deg)


def rad2deg(rad: float) -> float:
    return math.degrees(rad)


def safe_div(num: float, den: float) -> float:
    """Division that yields NaN instead of inf or ZeroDivisionError."""
    if not (math.isfinite(num) and math.isfinite(den)) or abs(den) < DIV_EPS:
        return math.nan
    return num / den


def is_finite(*values: float) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def max_finite(a: float, b: float) -> float:
    """Max of the finite operands; NaN if neither is finite."""
    fa = a is not None and math.isfinite(a)
    fb = b is not None and math.isfinite(b)
    if fa and fb:
        return max(a, b)
    if fa:
        return a
    if fb:
        return b
    return math.nan


def fmt(value: float, digits: int = 2, decimal_comma: bool = False) -> str:
    """Fixed-point text for protocol lines; non-finite values print as a dash."""
    if value is None or not math.isfinite(value):
        return "—"
    text = f"{value:.{digits}f}"
    if decimal_comma:
        text = text.replace(".", ",")
    return text
