"""Boundary validation: loose API records in, typed ``Transaction`` records out.

Everything downstream of this module (aggregation, trends, charts) assumes the
invariants established here: a string id, a real calendar date and a finite,
signed ``Decimal`` amount.
"""
import logging
import re
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from dateutil.parser import isoparse

from tally.domain import Transaction
from tally.errors import InvalidMonth, InvalidTransaction
from tally.functional import Either, Left, Right, pipe

logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
# 1,234 or 1,234,567.89; any other comma is ambiguous (1,5 might mean 1.5)
GROUPED_RE = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$")

EARNING_TYPES = frozenset({"earning", "income"})
EXPENSE_TYPES = frozenset({"expense"})

RawTransaction = Mapping[str, Any]


def parse_month(value: Union[str, date]) -> str:
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str) and MONTH_RE.match(value.strip()):
        return value.strip()
    raise InvalidMonth(value)


def _first(raw: RawTransaction, *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def to_decimal(value: Any) -> Decimal:
    """Convert an API amount to ``Decimal``; raises ``ValueError`` on junk."""
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if "," in text:
            if not GROUPED_RE.match(text):
                raise ValueError(f"ambiguous comma in amount {value!r}")
            text = text.replace(",", "")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}") from None
    else:
        raise ValueError(f"unsupported amount type {type(value).__name__}")
    if not result.is_finite():
        raise ValueError(f"amount must be finite, got {value!r}")
    return result


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value.strip()).date()
        except (ValueError, OverflowError):
            raise ValueError(f"unparsable date {value!r}") from None
    raise ValueError(f"unsupported date type {type(value).__name__}")


def _check_id(raw: RawTransaction, fields: dict) -> Either[InvalidTransaction, dict]:
    tx_id = _first(raw, "id", "_id")
    if tx_id is None or str(tx_id).strip() == "":
        return Left(InvalidTransaction("id", tx_id, "missing id"))
    return Right({**fields, "id": str(tx_id)})


def _check_date(raw: RawTransaction, fields: dict) -> Either[InvalidTransaction, dict]:
    value = _first(raw, "date", "ts")
    try:
        return Right({**fields, "date": to_date(value)})
    except ValueError as exc:
        return Left(InvalidTransaction("date", value, str(exc), fields.get("id")))


def _check_amount(raw: RawTransaction, fields: dict) -> Either[InvalidTransaction, dict]:
    value = raw.get("amount")
    try:
        amount = to_decimal(value)
    except ValueError as exc:
        return Left(InvalidTransaction("amount", value, str(exc), fields.get("id")))

    kind = raw.get("type")
    if kind is None:
        return Right({**fields, "amount": amount})
    kind = str(kind).strip().lower()
    if kind in EARNING_TYPES:
        return Right({**fields, "amount": amount.copy_abs()})
    if kind in EXPENSE_TYPES:
        return Right({**fields, "amount": amount.copy_abs().copy_negate()})
    return Left(InvalidTransaction("type", raw.get("type"), "type must be earning or expense", fields.get("id")))


def category_label(value: Any) -> Optional[str]:
    """None for a missing or blank category, otherwise the label verbatim."""
    if isinstance(value, Mapping):
        value = value.get("name")
    if value is None or str(value).strip() == "":
        return None
    # labels are matched exactly, so no normalisation beyond the blank check
    return str(value)


def _check_category(raw: RawTransaction, fields: dict) -> Either[InvalidTransaction, dict]:
    return Right({**fields, "category": category_label(_first(raw, "category", "categoryName"))})


def _check_note(raw: RawTransaction, fields: dict) -> Either[InvalidTransaction, dict]:
    note = _first(raw, "note", "description")
    return Right({**fields, "note": "" if note is None else str(note)})


_CHECKS = (_check_id, _check_date, _check_amount, _check_category, _check_note)


def _step(raw: RawTransaction, check):
    return lambda acc: acc.bind(lambda fields: check(raw, fields))


def check_transaction(raw: RawTransaction) -> Either[InvalidTransaction, Transaction]:
    if not isinstance(raw, Mapping):
        return Left(InvalidTransaction("record", raw, f"expected a mapping, got {type(raw).__name__}"))
    return pipe(Right({}), *(_step(raw, check) for check in _CHECKS)).map(lambda f: Transaction(**f))


def parse_transaction(raw: RawTransaction) -> Transaction:
    return check_transaction(raw).get_or_raise()


def ensure_transaction(item: Union[Transaction, RawTransaction]) -> Transaction:
    """Accept a typed ``Transaction`` or a raw mapping and return a valid ``Transaction``."""
    if not isinstance(item, Transaction):
        return parse_transaction(item)

    try:
        tx_date = to_date(item.date)
    except ValueError as exc:
        raise InvalidTransaction("date", item.date, str(exc), item.id) from None
    try:
        amount = to_decimal(item.amount)
    except ValueError as exc:
        raise InvalidTransaction("amount", item.amount, str(exc), item.id) from None

    category = category_label(item.category)

    if tx_date is item.date and amount is item.amount and category is item.category:
        return item
    return replace(item, date=tx_date, amount=amount, category=category)


def parse_transactions(raws: Iterable[RawTransaction]) -> Tuple[Transaction, ...]:
    seen = set()
    result = []
    for raw in raws:
        t = parse_transaction(raw)
        if t.id in seen:
            raise InvalidTransaction("id", t.id, "duplicate id", t.id)
        seen.add(t.id)
        result.append(t)
    logger.debug("Parsed %d transactions", len(result))
    return tuple(result)
