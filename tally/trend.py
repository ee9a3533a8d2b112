from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, getcontext, localcontext
from typing import Iterable, Optional, Tuple

from tally.domain import MonthBucket, TrendPoint, exact_arithmetic

PERCENT_QUANTUM = Decimal("0.01")
HUNDRED = Decimal(100)

METRICS = ("net", "total_earnings", "total_expenses")


def quantize_percent(value: Decimal) -> Decimal:
    value = Decimal(value)
    with localcontext() as ctx:
        # room for every integer digit plus the two decimals
        ctx.prec = max(getcontext().prec, value.adjusted() + 4)
        return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    """``numerator / denominator * 100`` rounded half-up to 2 places.

    The division truncates with enough digits past the hundredths that the
    final half-up rounding sees the true value.
    """
    numerator, denominator = Decimal(numerator), Decimal(denominator)
    with exact_arithmetic():
        scaled = numerator * HUNDRED
    with localcontext() as ctx:
        ctx.prec = max(getcontext().prec, scaled.adjusted() - denominator.adjusted() + 6)
        ctx.rounding = ROUND_DOWN
        ratio = scaled / denominator
    return quantize_percent(ratio)


def percentage_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """``(current - previous) / |previous| * 100`` rounded half-up to 2 places.

    Returns None when ``previous`` is zero: there is nothing to compare with.
    """
    current, previous = Decimal(current), Decimal(previous)
    if previous == 0:
        return None
    with exact_arithmetic():
        delta = current - previous
    return percent_of(delta, previous.copy_abs())


def compute_trend(buckets: Iterable[MonthBucket], metric: str = "net") -> Tuple[TrendPoint, ...]:
    """Turn buckets into trend points, comparing each with the one before it.

    Buckets are taken in the given order; the first has no prior data.
    """
    if metric not in METRICS:
        raise ValueError(f"unknown metric {metric!r}, expected one of {', '.join(METRICS)}")

    points = []
    previous: Optional[Decimal] = None
    for b in buckets:
        value = getattr(b, metric)
        change = None if previous is None else percentage_change(value, previous)
        points.append(TrendPoint(month=b.month, value=value, percent_change_from_previous=change))
        previous = value
    return tuple(points)
