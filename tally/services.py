import logging
from typing import Callable, Dict, Iterable, Optional, Tuple

import requests

from tally.aggregation import compute_monthly_buckets, month_range, previous_month, summarize_month
from tally.charts import to_chart_series
from tally.client import TransactionClient
from tally.domain import ChartSeries, MonthBucket, MonthlySummary, Transaction, TrendPoint
from tally.formatting import format_currency, format_percent_change
from tally.logging_config import setup_logging
from tally.settings import Settings
from tally.trend import compute_trend
from tally.validation import parse_month

logger = logging.getLogger(__name__)

FetchMonth = Callable[[str], Iterable[Transaction]]


class SummaryService:
    """Facade wiring a transaction source to the aggregation engine.

    fetch_month: callable taking a YYYY-MM month and returning that month's
    transactions, typically ``TransactionClient.fetch_month``.
    currency: ISO code used by ``summary_card`` labels.
    """

    def __init__(self, fetch_month: FetchMonth, currency: str = "USD"):
        self.fetch_month = fetch_month
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "SummaryService":
        setup_logging(settings.log_level)
        client = TransactionClient.from_settings(settings, session=session)
        return cls(client.fetch_month, currency=settings.currency)

    def monthly_summary(self, month: str) -> MonthlySummary:
        month = parse_month(month)
        prior = previous_month(month)
        trans = tuple(self.fetch_month(prior)) + tuple(self.fetch_month(month))
        return summarize_month(trans, month)

    def summary_card(self, month: str) -> Dict[str, str]:
        """Display labels for a month's summary card."""
        summary = self.monthly_summary(month)
        b = summary.bucket
        return {
            "month": b.month,
            "earnings": format_currency(b.total_earnings, self.currency),
            "expenses": format_currency(b.total_expenses, self.currency),
            "net": format_currency(b.net, self.currency),
            "change": format_percent_change(summary.percent_change),
        }

    def trend(
        self, start: str, end: str, metric: str = "net"
    ) -> Tuple[Tuple[MonthBucket, ...], Tuple[TrendPoint, ...], ChartSeries]:
        months = month_range(start, end)
        if not months:
            raise ValueError(f"empty month range {start}..{end}")

        trans = []
        for m in months:
            trans.extend(self.fetch_month(m))
        logger.debug("Trend over %s..%s from %d transactions", months[0], months[-1], len(trans))

        buckets = compute_monthly_buckets(trans, months[0], months[-1])
        return buckets, compute_trend(buckets, metric), to_chart_series(buckets)
