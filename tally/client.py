"""HTTP client for the transactions REST backend (``GET /api/transactions``)."""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import requests

from tally.domain import Transaction
from tally.errors import TransactionFetchError
from tally.settings import Settings
from tally.validation import parse_month, parse_transactions

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


@dataclass(frozen=True)
class TransactionPage:
    month: str
    page: int
    transactions: Tuple[Transaction, ...]
    total_pages: Optional[int] = None

    @property
    def is_last(self) -> bool:
        if not self.transactions:
            return True
        return self.total_pages is not None and self.page >= self.total_pages


class TransactionClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: int = 10,
        page_limit: int = 50,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.page_limit = page_limit
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "TransactionClient":
        return cls(
            settings.api_url,
            token=settings.api_token,
            timeout=settings.timeout,
            page_limit=settings.page_limit,
            session=session,
        )

    def _get(self, path: str, params: dict) -> Any:
        url = f"{self.base_url}{path}"
        cookies = {TOKEN_COOKIE: self.token} if self.token else None
        logger.info("GET %s %s", url, params)
        try:
            resp = self.session.get(url, params=params, cookies=cookies, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise TransactionFetchError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            logger.warning("Response from %s is not JSON", url)
            raise TransactionFetchError(f"GET {url} returned invalid JSON") from exc

    def list_transactions(self, month: str, page: int = 1) -> TransactionPage:
        month = parse_month(month)
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        payload = self._get("/api/transactions", {"month": month, "page": page})
        if isinstance(payload, list):
            records, total_pages = payload, None
        elif isinstance(payload, dict) and isinstance(payload.get("transactions"), list):
            records = payload["transactions"]
            total_pages = payload.get("totalPages")
            if total_pages is not None:
                try:
                    total_pages = int(total_pages)
                except (TypeError, ValueError) as exc:
                    raise TransactionFetchError(
                        f"bad totalPages {payload['totalPages']!r} for {month} page {page}"
                    ) from exc
        else:
            raise TransactionFetchError(f"unexpected transactions payload for {month} page {page}")

        return TransactionPage(
            month=month,
            page=page,
            transactions=parse_transactions(records),
            total_pages=total_pages,
        )

    def fetch_month(self, month: str) -> Tuple[Transaction, ...]:
        """Every transaction for ``month``, walking pages until the last one."""
        month = parse_month(month)
        collected: list = []
        for page_no in range(1, self.page_limit + 1):
            page = self.list_transactions(month, page_no)
            collected.extend(page.transactions)
            if page.is_last:
                break
        else:
            logger.warning("Stopped after %d pages for %s", self.page_limit, month)
        logger.info("Fetched %d transactions for %s", len(collected), month)
        return tuple(collected)
