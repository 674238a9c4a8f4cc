from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0):
    """Round with halves going up (built-in ``round`` rounds half to even)."""
    exp = Decimal(1).scaleb(-digits)
    result = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    return int(result) if digits == 0 else float(result)
