"""
Display formatting shared by the on-screen insights and both export formats.

Every report renders money, percentages and dates through these helpers so the
CSV and the HTML document always show the same rounded figures. Anything that
cannot be read as a number (None, NaN, garbage strings) displays as zero.
"""

import html
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from . import settings

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def to_decimal(value: Any) -> Decimal:
    """Lenient conversion for display only; validation happens in the schemas."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    return number if number.is_finite() else Decimal("0")


def round_half_up(value: Any, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_amount(value: Any) -> str:
    """A whole-unit amount without separators, e.g. '150000'."""
    return str(int(round_half_up(value)))


def format_currency(value: Any, grouping: bool = True) -> str:
    """'Rs. 150,000' for documents, 'Rs. 150000' when grouping is off (CSV cells)."""
    amount = int(round_half_up(value))
    digits = f"{amount:,}" if grouping else str(amount)
    return f"{settings.CURRENCY_PREFIX} {digits}"


def format_percent(value: Any) -> str:
    percentage = to_decimal(value)
    if 0 < percentage < 1:
        return "< 1%"
    return f"{int(round_half_up(percentage))}%"


def format_trend(value: Any) -> str:
    """Signed whole percentage, e.g. '+50%' or '-12%'."""
    rounded = int(round_half_up(value))
    sign = "+" if rounded > 0 else ""
    return f"{sign}{rounded}%"


def format_decimal(value: Any, places: int = 2) -> str:
    return f"{round_half_up(value, places):f}"


def format_rate(value: Any) -> str:
    """Commission-style rates keep up to two decimals: '5%', '7.5%'."""
    text = format_decimal(value, 2)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


def format_date(value: date | datetime | None) -> str:
    """US short style, e.g. 'Oct 19, 2026'."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def format_long_date(value: date | None) -> str:
    if value is None:
        return ""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def format_time(value: datetime | None) -> str:
    return value.strftime("%H:%M") if value else ""


def month_name(month: int) -> str:
    if not month or month < 1 or month > 12:
        return "Unknown"
    return MONTH_NAMES[month - 1]


def format_month_label(value: str) -> str:
    """'2024-05' -> 'May 2024'. Unrecognized labels are returned unchanged."""
    year, _, month = value.partition("-")
    if not (year.isdigit() and month.isdigit()):
        return value
    return f"{month_name(int(month))[:3]} {year}"


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def sanitize_field(value: Any) -> str:
    """Neutralizes characters that would break a comma-delimited row."""
    text = "" if value is None else str(value)
    return text.replace(",", " ").replace("\r", " ").replace("\n", " ")


def escape_markup(value: Any) -> str:
    """Escapes & < > " ' for interpolation into the HTML document."""
    return html.escape("" if value is None else str(value), quote=True)


def format_value(value: Any, kind: str = "text", grouping: bool = True) -> str:
    """Renders a cell or summary value by kind; ``grouping`` only affects currency."""
    if kind == "currency":
        return format_currency(value, grouping)
    if kind == "percent":
        return format_percent(value)
    if kind == "trend":
        return format_trend(value)
    if kind == "rate":
        return format_rate(value)
    if kind == "decimal":
        return format_decimal(value, 1)
    if kind == "count":
        return format_amount(value)
    if kind == "date":
        return format_date(value)
    if kind == "time":
        return format_time(value)
    return "" if value is None else str(value)
