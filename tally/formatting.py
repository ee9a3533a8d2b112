from decimal import Decimal
from typing import Optional

from tally.trend import quantize_percent

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

NO_PRIOR_DATA = "no prior data"


def format_currency(amount, currency: str = "USD") -> str:
    value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    sign = "-" if value < 0 else ""
    body = f"{value.copy_abs():,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{body} {currency.upper()}"
    return f"{sign}{symbol}{body}"


def format_percent_change(value: Optional[Decimal]) -> str:
    if value is None:
        return NO_PRIOR_DATA
    value = quantize_percent(Decimal(value))
    sign = "+" if value > 0 else ""
    return f"{sign}{value}%"
