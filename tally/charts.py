"""Chart-ready views of month buckets for line, bar and pie renderers."""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Tuple

import pandas as pd

from tally.domain import ZERO, CategoryShare, ChartSeries, MonthBucket, exact_arithmetic
from tally.trend import percent_of


def _category_order(totals: Dict[str, Decimal]) -> Tuple[str, ...]:
    # largest first; ties by label so the order never depends on dict order
    return tuple(name for name, _ in sorted(totals.items(), key=lambda item: (item[1].copy_abs().copy_negate(), item[0])))


def to_chart_series(buckets: Iterable[MonthBucket]) -> ChartSeries:
    buckets = tuple(buckets)

    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    with exact_arithmetic():
        for b in buckets:
            for name, value in b.by_category.items():
                totals[name] += value
        grand_total = sum((v.copy_abs() for v in totals.values()), ZERO)
    order = _category_order(totals)

    categories = {
        name: tuple(b.by_category.get(name, ZERO) for b in buckets)
        for name in order
    }

    shares: Tuple[CategoryShare, ...] = ()
    if grand_total:
        shares = tuple(
            CategoryShare(
                category=name,
                total=totals[name],
                percent=percent_of(totals[name].copy_abs(), grand_total),
            )
            for name in order
        )

    return ChartSeries(
        months=tuple(b.month for b in buckets),
        earnings=tuple(b.total_earnings for b in buckets),
        expenses=tuple(b.total_expenses for b in buckets),
        net=tuple(b.net for b in buckets),
        categories=categories,
        shares=shares,
    )


def series_frame(series: ChartSeries) -> pd.DataFrame:
    """Month-indexed frame: earnings, expenses, net, then one column per category."""
    index = pd.Index(list(series.months), name="month")
    totals = pd.DataFrame(
        {
            "earnings": [float(v) for v in series.earnings],
            "expenses": [float(v) for v in series.expenses],
            "net": [float(v) for v in series.net],
        },
        index=index,
    )
    by_category = pd.DataFrame(
        {name: [float(v) for v in values] for name, values in series.categories.items()},
        index=index,
    )
    # concat keeps a category literally named "net" as its own column
    return pd.concat([totals, by_category], axis=1)


def shares_frame(series: ChartSeries) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"category": s.category, "total": float(s.total), "percent": float(s.percent)}
            for s in series.shares
        ],
        columns=["category", "total", "percent"],
    )
