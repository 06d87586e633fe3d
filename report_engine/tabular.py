"""
Comma-delimited export of a report layout.

The output is a stack of "sheets": a title line followed by the sheet's rows,
with a blank line between sheets. Cells are formatted first and sanitized
second, so a comma or line break inside a name can never shift a column.
"""

from collections.abc import Sequence

import pandas as pd

from .formatting import format_timestamp, format_value, sanitize_field
from .layout import ReportLayout, Table


def _render_sheet(
    title: str, rows: Sequence[Sequence[str]], header: Sequence[str] | None = None
) -> str:
    frame = pd.DataFrame(
        [[sanitize_field(cell) for cell in row] for row in rows],
        columns=[sanitize_field(h) for h in header] if header else None,
    )
    body = frame.to_csv(index=False, header=header is not None, lineterminator="\n")
    return f"{sanitize_field(title)}\n{body}"


def _table_rows(table: Table) -> list[list[str]]:
    if not table.records:
        return [[table.empty_message] + [""] * (len(table.columns) - 1)]
    return [
        [format_value(col.value(record), col.kind, grouping=False) for col in table.columns]
        for record in table.records
    ]


def render_delimited(layout: ReportLayout) -> str:
    sheets = [
        _render_sheet(
            layout.title,
            [
                ["Generated", format_timestamp(layout.generated_at)],
                ["Period", layout.period_label],
            ],
        )
    ]

    if layout.metrics:
        sheets.append(
            _render_sheet(
                "Summary",
                [
                    [metric.label, format_value(metric.value, metric.kind, grouping=False)]
                    for metric in layout.metrics
                ],
                header=["Metric", "Value"],
            )
        )

    for table in layout.tables:
        sheets.append(
            _render_sheet(
                table.title, _table_rows(table), header=[c.header for c in table.columns]
            )
        )

    if layout.recommendations:
        sheets.append(
            _render_sheet(
                "Recommendations",
                [[str(n), rec.as_delimited()] for n, rec in enumerate(layout.recommendations, 1)],
                header=["#", "Recommendation"],
            )
        )

    return "\n".join(sheets)
