"""
Guarded arithmetic and the shared business thresholds.

All calculators go through these helpers so a zero denominator, an empty list
or a missing previous period never raises; the result falls back to 0 or None.
"""

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any, TypeVar

from . import settings

T = TypeVar("T")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def safe_divide(numerator, denominator) -> Decimal:
    numerator, denominator = Decimal(numerator), Decimal(denominator)
    if denominator == 0:
        return ZERO
    return numerator / denominator


def percentage_of(part, whole) -> Decimal:
    """Share of ``whole`` in percent; 0 when the whole is 0."""
    return max(safe_divide(part, whole) * HUNDRED, ZERO)


def growth_rate(current, previous) -> Decimal:
    """
    Period-over-period change in percent.

    A previous value of 0 yields exactly 100 when the current value is
    positive and 0 otherwise; there is no symmetric negative case.
    """
    current, previous = Decimal(current), Decimal(previous)
    if previous > 0:
        return (current - previous) / previous * HUNDRED
    if current > 0:
        return HUNDRED
    return ZERO


def total(records: Iterable[Any], field: str) -> Decimal:
    return sum((Decimal(getattr(record, field)) for record in records), ZERO)


def mean(values: Sequence) -> Decimal:
    return safe_divide(sum(values, ZERO), len(values))


def pick_top(records: Sequence[T], key: Callable[[T], Any]) -> T | None:
    """Record with the largest key; the first one wins a tie."""
    return max(records, key=key, default=None)


def pick_bottom(records: Sequence[T], key: Callable[[T], Any]) -> T | None:
    """Record with the smallest key; the first one wins a tie."""
    return min(records, key=key, default=None)


def field_key(field: str) -> Callable[[Any], Any]:
    return lambda record: getattr(record, field)


def _classify(value, bounds: list[tuple[int, str]], default: str) -> str:
    for upper_bound, label in bounds:
        if value <= upper_bound:
            return label
    return default


def stock_health(current_stock, reorder_level) -> Decimal:
    """Current stock as a percentage of the reorder level (100 when no level is set)."""
    if reorder_level <= 0:
        return HUNDRED
    return percentage_of(current_stock, reorder_level)


def stock_health_bar(current_stock, reorder_level) -> Decimal:
    return min(stock_health(current_stock, reorder_level), Decimal(settings.STOCK_HEALTH_DISPLAY_CAP))


def stock_status(current_stock, reorder_level) -> str:
    if reorder_level <= 0:
        return settings.STOCK_STATUS_DEFAULT
    return _classify(
        stock_health(current_stock, reorder_level),
        settings.STOCK_STATUS_THRESHOLDS,
        settings.STOCK_STATUS_DEFAULT,
    )


def expiry_tier(days_until_expiry: int) -> str:
    return _classify(days_until_expiry, settings.EXPIRY_TIERS, settings.EXPIRY_TIER_DEFAULT)


def credit_risk(usage_percent) -> str:
    for lower_bound, label in settings.CREDIT_RISK_LEVELS:
        if usage_percent > lower_bound:
            return label
    return settings.CREDIT_RISK_DEFAULT


def status_color(label: str) -> str:
    return settings.STATUS_COLORS.get(label, "#6c757d")
