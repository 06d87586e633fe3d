"""
Format-neutral building blocks of a report.

Each report describes its summary, tables and charts once with these types;
the CSV serializer and the HTML renderer both read the same description, so
the two exports can only differ in presentation.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Metric:
    label: str
    value: Any
    kind: str = "text"


@dataclass(frozen=True)
class Column:
    header: str
    value: Callable[[Any], Any]
    kind: str = "text"
    # Returns a status label (see settings.STATUS_COLORS) used to color the cell.
    status: Callable[[Any], str] | None = None


@dataclass(frozen=True)
class Table:
    title: str
    columns: Sequence[Column]
    records: Sequence[Any]
    empty_message: str = "No records"


@dataclass(frozen=True)
class ChartPoint:
    label: str
    value: Decimal
    color: str


@dataclass(frozen=True)
class Chart:
    title: str
    kind: str  # "pie", "bar" or "line"
    points: Sequence[ChartPoint]


@dataclass(frozen=True)
class Alert:
    title: str
    text: str
    color: str = "#dc3545"


@dataclass(frozen=True)
class ReportLayout:
    title: str
    period_label: str
    generated_at: Any
    metrics: Sequence[Metric] = field(default_factory=list)
    tables: Sequence[Table] = field(default_factory=list)
    charts: Sequence[Chart] = field(default_factory=list)
    alerts: Sequence[Alert] = field(default_factory=list)
    recommendations: Sequence[Any] = field(default_factory=list)
