from dataclasses import dataclass, field
from datetime import date
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

UNCATEGORIZED = "Uncategorized"
ZERO = Decimal("0")


def exact_arithmetic():
    """Decimal context in which additions and subtractions never round."""
    return localcontext(Context(
        prec=MAX_PREC,
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
        traps=[InvalidOperation, DivisionByZero, Overflow],
    ))


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    amount: Decimal                 # + for earning, - for expense
    category: Optional[str] = None  # None -> "Uncategorized"
    note: str = ""

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_earning(self) -> bool:
        return self.amount > 0


@dataclass(frozen=True)
class MonthBucket:
    month: str  # YYYY-MM
    total_earnings: Decimal = ZERO
    total_expenses: Decimal = ZERO  # absolute value
    net: Decimal = ZERO
    # read-only view; left out of the hash
    by_category: Mapping[str, Decimal] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "by_category", MappingProxyType(dict(self.by_category)))


@dataclass(frozen=True)
class TrendPoint:
    month: str
    value: Decimal
    percent_change_from_previous: Optional[Decimal] = None  # None -> no prior data


@dataclass(frozen=True)
class MonthlySummary:
    bucket: MonthBucket
    previous: Optional[MonthBucket] = None
    percent_change: Optional[Decimal] = None

    @property
    def month(self) -> str:
        return self.bucket.month


@dataclass(frozen=True)
class CategoryShare:
    category: str
    total: Decimal
    percent: Decimal


@dataclass(frozen=True)
class ChartSeries:
    months: Tuple[str, ...]
    earnings: Tuple[Decimal, ...]
    expenses: Tuple[Decimal, ...]
    net: Tuple[Decimal, ...]
    # ordered by descending total, one value per month
    categories: Mapping[str, Tuple[Decimal, ...]] = field(hash=False)
    shares: Tuple[CategoryShare, ...]

    def __post_init__(self):
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))
