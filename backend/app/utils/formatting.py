"""Display formatting for prices, counts and relative times."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£", "CHF": "CHF"}

# fr-FR uses a narrow no-break space as the thousands separator.
_GROUP_SEP = "\u202f"


def group_thousands(value: int) -> str:
    return f"{int(value):,}".replace(",", _GROUP_SEP)


def format_amount(value: Number, currency: str = "EUR", decimals: int = 2) -> str:
    """Format ``1234.5`` as ``"1 234,50 €"``."""
    symbol = CURRENCY_SYMBOLS.get((currency or "EUR").upper(), currency)
    rounded = f"{float(value):,.{decimals}f}"
    whole, _, frac = rounded.partition(".")
    body = whole.replace(",", _GROUP_SEP)
    if decimals:
        body = f"{body},{frac}"
    return f"{body} {symbol}"


def format_price_range(
    min_price: Optional[Number],
    max_price: Optional[Number],
    currency: str = "EUR",
    decimals: int = 2,
) -> Optional[str]:
    """Render a price bracket; a single bound gets a "From"/"Up to" prefix."""
    if min_price is not None and max_price is not None:
        return (
            f"{format_amount(min_price, currency, decimals)} - "
            f"{format_amount(max_price, currency, decimals)}"
        )
    if min_price is not None:
        return f"From {format_amount(min_price, currency, decimals)}"
    if max_price is not None:
        return f"Up to {format_amount(max_price, currency, decimals)}"
    return None


_TIME_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def time_ago(moment: Optional[datetime], now: Optional[datetime] = None) -> Optional[str]:
    """Human readable age such as ``"3 hours ago"``."""
    if moment is None:
        return None
    now = now or datetime.utcnow()
    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return "just now"
    for unit, size in _TIME_UNITS:
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
