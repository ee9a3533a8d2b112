from datetime import date, datetime
from decimal import Decimal

import pytest

from tally.domain import Transaction
from tally.errors import InvalidMonth, InvalidTransaction
from tally.validation import (
    check_transaction,
    ensure_transaction,
    parse_month,
    parse_transaction,
    parse_transactions,
    to_decimal,
)


def test_parse_transaction_basic():
    t = parse_transaction({"id": 1, "date": "2025-09-01", "amount": "-12.50", "category": "Food", "note": "lunch"})
    assert t == Transaction("1", date(2025, 9, 1), Decimal("-12.50"), "Food", "lunch")


def test_parse_transaction_accepts_api_aliases():
    t = parse_transaction({"_id": "abc", "ts": "2025-09-01T10:00:00Z", "amount": 100, "description": "Salary"})
    assert t.id == "abc"
    assert t.date == date(2025, 9, 1)
    assert t.amount == Decimal(100)
    assert t.note == "Salary"
    assert t.category is None


def test_type_flag_sets_sign():
    expense = parse_transaction({"id": "t1", "date": "2025-01-02", "amount": 40, "type": "Expense"})
    earning = parse_transaction({"id": "t2", "date": "2025-01-02", "amount": -40, "type": "income"})
    assert expense.amount == Decimal(-40)
    assert earning.amount == Decimal(40)


def test_unknown_type_flag_rejected():
    with pytest.raises(InvalidTransaction) as exc:
        parse_transaction({"id": "t1", "date": "2025-01-02", "amount": 40, "type": "transfer"})
    assert exc.value.field == "type"


def test_float_amount_keeps_decimal_digits():
    t = parse_transaction({"id": "t1", "date": "2025-01-02", "amount": 0.1})
    assert t.amount == Decimal("0.1")


@pytest.mark.parametrize("amount", ["NaN", "Infinity", float("inf"), "abc", True, None, Decimal("-Infinity")])
def test_bad_amount_rejected(amount):
    result = check_transaction({"id": "t1", "date": "2025-01-02", "amount": amount})
    assert result.is_left()
    error = result.get_error()
    assert isinstance(error, InvalidTransaction)
    assert error.field == "amount"
    assert error.transaction_id == "t1"


@pytest.mark.parametrize("value", ["2025-13-01", "yesterday", "", None, 20250101])
def test_bad_date_rejected(value):
    with pytest.raises(InvalidTransaction) as exc:
        parse_transaction({"id": "t1", "date": value, "amount": 1})
    assert exc.value.field == "date"
    assert exc.value.to_dict()["error"] == "invalid_transaction"


def test_missing_id_rejected():
    with pytest.raises(InvalidTransaction) as exc:
        parse_transaction({"date": "2025-01-01", "amount": 1})
    assert exc.value.field == "id"


def test_non_mapping_rejected():
    assert check_transaction(["t1", "2025-01-01", 1]).is_left()


def test_blank_category_is_uncategorized_but_labels_are_kept_verbatim():
    blank = parse_transaction({"id": "t1", "date": "2025-01-01", "amount": -1, "category": "  "})
    food = parse_transaction({"id": "t2", "date": "2025-01-01", "amount": -1, "category": "food "})
    nested = parse_transaction({"id": "t3", "date": "2025-01-01", "amount": -1, "category": {"name": "Rent"}})
    assert blank.category is None
    assert food.category == "food "
    assert nested.category == "Rent"


def test_parse_transactions_rejects_duplicate_ids():
    raws = [
        {"id": "t1", "date": "2025-01-01", "amount": 1},
        {"id": "t1", "date": "2025-01-02", "amount": 2},
    ]
    with pytest.raises(InvalidTransaction):
        parse_transactions(raws)


def test_ensure_transaction_passes_valid_records_through():
    t = Transaction("t1", date(2025, 1, 1), Decimal("5"))
    assert ensure_transaction(t) is t


def test_ensure_transaction_normalises_loose_fields():
    t = Transaction("t1", datetime(2025, 1, 1, 9, 30), 5)
    fixed = ensure_transaction(t)
    assert fixed.date == date(2025, 1, 1)
    assert fixed.amount == Decimal(5)


def test_ensure_transaction_rejects_nan_amount():
    t = Transaction("t1", date(2025, 1, 1), Decimal("NaN"))
    with pytest.raises(InvalidTransaction):
        ensure_transaction(t)


def test_parse_month():
    assert parse_month("2025-09") == "2025-09"
    assert parse_month(date(2025, 9, 14)) == "2025-09"
    for bad in ("2025-9", "2025-13", "09-2025", 202509):
        with pytest.raises(InvalidMonth):
            parse_month(bad)


@pytest.mark.parametrize("raw, expected", [("1,234.50", Decimal("1234.50")), ("-1,000", Decimal(-1000)), ("12,345,678", Decimal(12345678))])
def test_grouped_thousands_accepted(raw, expected):
    assert to_decimal(raw) == expected


@pytest.mark.parametrize("raw", ["1,5", "12,34", "1,23,456", ",100"])
def test_ambiguous_commas_rejected(raw):
    with pytest.raises(ValueError):
        to_decimal(raw)
    assert check_transaction({"id": "t1", "date": "2025-01-01", "amount": raw}).is_left()


def test_ensure_transaction_blanks_category():
    t = Transaction("t1", date(2025, 1, 1), Decimal(-5), category="  ")
    assert ensure_transaction(t).category is None
