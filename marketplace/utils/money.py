# marketplace/utils/money.py

import math
from decimal import Decimal, ROUND_HALF_UP

Money = Decimal


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_float(x) -> float:
    """Money as float for JSON. None, NaN and unparsable values read as 0."""
    try:
        n = float(x)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(n) or math.isinf(n) else n


def to_opt_money(x):
    """Money column input: None stays None, garbage becomes None."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, str) and not x.strip():
        return None
    try:
        n = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(n) or math.isinf(n):
        return None
    return round_money(n)


def format_price(value, symbol="₹", decimals=2):
    return f"{symbol}{to_float(value):,.{decimals}f}"
