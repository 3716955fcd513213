from decimal import Decimal
from typing import Union

from finansmart.aggregation import parse_date

Number = Union[int, float, Decimal]


def format_money(amount: Number, symbol: str = "R$") -> str:
    """Format as Brazilian currency, e.g. 'R$ 1.234,56'."""
    text = f"{abs(float(amount)):,.2f}"
    # swap separators: 1,234.56 -> 1.234,56
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if float(amount) < 0 else ""
    return f"{sign}{symbol} {text}"


def format_day_month(date_str: str) -> str:
    """Short 'd/m' label used in the tables; raw text when the date is invalid."""
    d = parse_date(date_str)
    if d is None:
        return date_str or ""
    return f"{d.day}/{d.month}"
