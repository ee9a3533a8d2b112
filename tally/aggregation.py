import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple, Union

from tally.domain import UNCATEGORIZED, ZERO, MonthBucket, MonthlySummary, Transaction, exact_arithmetic
from tally.trend import percentage_change
from tally.validation import ensure_transaction, parse_month

logger = logging.getLogger(__name__)

TransactionLike = Union[Transaction, Mapping]


def month_of(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def _split(month: str) -> Tuple[int, int]:
    year, mon = parse_month(month).split("-")
    return int(year), int(mon)


def previous_month(month: str) -> str:
    year, mon = _split(month)
    if mon == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{mon - 1:02d}"


def next_month(month: str) -> str:
    year, mon = _split(month)
    if mon == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{mon + 1:02d}"


def month_range(start: str, end: str) -> Tuple[str, ...]:
    """All months from ``start`` to ``end`` inclusive; empty when start > end."""
    start, end = parse_month(start), parse_month(end)
    if _split(start) > _split(end):
        return ()
    months = [start]
    while months[-1] != end:
        months.append(next_month(months[-1]))
    return tuple(months)


def in_month(month: str) -> Callable[[Transaction], bool]:
    month = parse_month(month)

    def _filter(t: Transaction) -> bool:
        return month_of(t.date) == month

    return _filter


def _validated(transactions: Iterable[TransactionLike]) -> Tuple[Transaction, ...]:
    return tuple(ensure_transaction(t) for t in transactions)


def _bucket(month: str, transactions: Iterable[Transaction]) -> MonthBucket:
    earnings = ZERO
    expenses = ZERO
    by_category: Dict[str, Decimal] = defaultdict(lambda: ZERO)

    with exact_arithmetic():
        for t in transactions:
            if t.amount > 0:
                earnings += t.amount
            elif t.amount < 0:
                spent = t.amount.copy_abs()
                expenses += spent
                by_category[t.category if t.category is not None else UNCATEGORIZED] += spent
        net = earnings - expenses

    return MonthBucket(
        month=month,
        total_earnings=earnings,
        total_expenses=expenses,
        net=net,
        by_category=by_category,
    )


def compute_monthly_summary(transactions: Iterable[TransactionLike], month: str) -> MonthBucket:
    """Aggregate the transactions that fall into ``month`` into a ``MonthBucket``.

    Input order does not matter and transactions from other months are
    ignored. An empty input yields a zero-valued bucket. Raises
    ``InvalidTransaction`` for a non-finite amount or an unparsable date.
    """
    month = parse_month(month)
    selected = tuple(filter(in_month(month), _validated(transactions)))
    bucket = _bucket(month, selected)
    logger.debug("Summarized %d transactions for %s", len(selected), month)
    return bucket


def compute_monthly_buckets(
    transactions: Iterable[TransactionLike],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Tuple[MonthBucket, ...]:
    """One bucket per calendar month from ``start`` to ``end``, gaps zero-filled.

    Without bounds the range spans the months present in the data.
    """
    trans = _validated(transactions)
    grouped: Dict[str, list] = defaultdict(list)
    for t in trans:
        grouped[month_of(t.date)].append(t)

    if start is None or end is None:
        if not grouped and start is None and end is None:
            return ()
        start = start or (min(grouped) if grouped else end)
        end = end or (max(grouped) if grouped else start)

    months = month_range(start, end)
    logger.debug("Bucketing %d transactions into %d months", len(trans), len(months))
    return tuple(_bucket(m, grouped.get(m, ())) for m in months)


def summarize_month(transactions: Iterable[TransactionLike], month: str) -> MonthlySummary:
    """Bucket for ``month`` plus the change in net against the prior month.

    The prior month only counts when it has at least one transaction;
    otherwise there is no prior data to compare with.
    """
    month = parse_month(month)
    prior = previous_month(month)
    trans = _validated(transactions)

    bucket = _bucket(month, filter(in_month(month), trans))
    prior_trans = tuple(filter(in_month(prior), trans))
    if not prior_trans:
        return MonthlySummary(bucket=bucket)

    previous = _bucket(prior, prior_trans)
    return MonthlySummary(
        bucket=bucket,
        previous=previous,
        percent_change=percentage_change(bucket.net, previous.net),
    )
