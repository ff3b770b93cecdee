# utils/validators.py
import math

from ..errors import ValidationError


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    """
    if isinstance(x, bool):
        return False, None
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and math.isfinite(val) and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and math.isfinite(val) and val > 0)


# ---- Raising variants used by repositories/services ----

def require_text(value, label: str) -> str:
    if not non_empty(value):
        raise ValidationError(f"{label} is required.")
    return str(value).strip()


def optional_text(value) -> str:
    return str(value).strip() if value is not None else ""


def require_positive(value, label: str) -> float:
    if not is_strictly_positive_number(value):
        raise ValidationError(f"{label} must be greater than 0.")
    return float(value)


def require_non_negative(value, label: str) -> float:
    if not is_non_negative_number(value):
        raise ValidationError(f"{label} must be 0 or greater.")
    return float(value)


def require_count(value, label: str, *, positive: bool = False) -> int:
    """
    Whole-unit quantities (stock counters, sale/purchase quantities).
    """
    ok, val = try_parse_float(value)
    if not ok or val is None or not math.isfinite(val) or val != int(val):
        raise ValidationError(f"{label} must be a whole number.")
    n = int(val)
    if positive and n <= 0:
        raise ValidationError(f"{label} must be greater than 0.")
    if n < 0:
        raise ValidationError(f"{label} must be 0 or greater.")
    return n


def require_amount(value, label: str) -> float:
    """
    Strictly positive money value, rounded to 2 places (the rounded value
    must still be > 0).
    """
    amount = round(require_positive(value, label), 2)
    if amount <= 0:
        raise ValidationError(f"{label} must be greater than 0.")
    return amount
