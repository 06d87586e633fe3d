"""
Self-contained HTML rendering of a report layout.

The document is meant to be handed to a rasterizer (HTML -> PDF). Chart data is
embedded as JSON in a ``data-chart`` attribute and drawn client-side by Chart.js;
a rasterizer without JavaScript still gets the tables and the narrative.
"""

import json

from . import settings
from .formatting import escape_markup, format_timestamp, format_value
from .layout import Alert, Chart, Metric, ReportLayout, Table
from .metrics import status_color

ROW_COLORS = ("#f9f9f9", "#ffffff")

STYLE = """
body { font-family: Helvetica, Arial, sans-serif; color: #333; margin: 24px; }
.header { text-align: center; border-bottom: 2px solid #7DA453; padding-bottom: 12px; margin-bottom: 20px; }
.header h1 { color: #7DA453; margin: 0 0 6px 0; font-size: 22px; }
.header p { margin: 2px 0; color: #666; font-size: 12px; }
.cards { display: flex; flex-wrap: wrap; gap: 10px; margin-bottom: 20px; }
.card { flex: 1 1 150px; border: 1px solid #e0e0e0; border-radius: 6px; padding: 10px; }
.card .label { font-size: 11px; color: #666; }
.card .value { font-size: 16px; font-weight: bold; margin-top: 4px; }
h2 { font-size: 15px; color: #346491; border-bottom: 1px solid #e0e0e0; padding-bottom: 4px; }
table { width: 100%; border-collapse: collapse; margin-bottom: 18px; font-size: 12px; }
th { background: #7DA453; color: #fff; text-align: left; padding: 6px 8px; }
td { padding: 5px 8px; border-bottom: 1px solid #eee; }
.badge { color: #fff; border-radius: 3px; padding: 1px 6px; font-size: 11px; }
.alert { border-left: 4px solid; padding: 8px 12px; margin-bottom: 16px; background: #fff8f8; }
.chart { margin-bottom: 20px; }
.recommendations li { margin-bottom: 6px; }
.footer { margin-top: 30px; font-size: 10px; color: #999; text-align: center; }
"""

CHART_SCRIPT = """
<script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
<script>
document.querySelectorAll("canvas[data-chart]").forEach(function (canvas) {
  if (typeof Chart === "undefined") { return; }
  var spec = JSON.parse(canvas.dataset.chart);
  new Chart(canvas, {
    type: spec.kind,
    data: {
      labels: spec.points.map(function (p) { return p.label; }),
      datasets: [{
        label: spec.title,
        data: spec.points.map(function (p) { return p.value; }),
        backgroundColor: spec.points.map(function (p) { return p.color; })
      }]
    },
    options: { animation: false }
  });
});
</script>
"""


def _metric_cards(metrics: list[Metric]) -> str:
    cards = "".join(
        f'<div class="card"><div class="label">{escape_markup(m.label)}</div>'
        f'<div class="value">{escape_markup(format_value(m.value, m.kind))}</div></div>'
        for m in metrics
    )
    return f'<div class="cards">{cards}</div>'


def _cell(column, record) -> str:
    text = escape_markup(format_value(column.value(record), column.kind))
    if column.status is None:
        return f"<td>{text}</td>"
    color = status_color(column.status(record))
    return f'<td><span class="badge" style="background:{color};">{text}</span></td>'


def _table(table: Table) -> str:
    head = "".join(f"<th>{escape_markup(c.header)}</th>" for c in table.columns)
    if table.records:
        body = "".join(
            f'<tr style="background:{ROW_COLORS[i % 2]};">'
            + "".join(_cell(c, record) for c in table.columns)
            + "</tr>"
            for i, record in enumerate(table.records)
        )
    else:
        body = (
            f'<tr><td colspan="{len(table.columns)}">'
            f"{escape_markup(table.empty_message)}</td></tr>"
        )
    return (
        f"<h2>{escape_markup(table.title)}</h2>"
        f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    )


def chart_data(chart: Chart) -> dict:
    return {
        "title": chart.title,
        "kind": chart.kind,
        "points": [
            {"label": p.label, "value": float(p.value), "color": p.color}
            for p in chart.points
        ],
    }


def _chart(chart: Chart) -> str:
    data = escape_markup(json.dumps(chart_data(chart), ensure_ascii=False))
    return (
        f'<div class="chart"><h2>{escape_markup(chart.title)}</h2>'
        f'<canvas data-chart="{data}" height="160"></canvas></div>'
    )


def _alert(alert: Alert) -> str:
    return (
        f'<div class="alert" style="border-color:{alert.color};">'
        f"<strong>{escape_markup(alert.title)}</strong><br>{escape_markup(alert.text)}</div>"
    )


def _recommendations(recommendations) -> str:
    items = "".join(
        f"<li><strong>{escape_markup(r.title)}:</strong> {escape_markup(r.text)}</li>"
        for r in recommendations
    )
    return f'<h2>Recommendations</h2><ul class="recommendations">{items}</ul>'


def render_document(layout: ReportLayout) -> str:
    sections = [_alert(a) for a in layout.alerts]
    if layout.metrics:
        sections.append(_metric_cards(list(layout.metrics)))
    sections.extend(_chart(c) for c in layout.charts if c.points)
    sections.extend(_table(t) for t in layout.tables)
    if layout.recommendations:
        sections.append(_recommendations(layout.recommendations))

    generated = format_timestamp(layout.generated_at)
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{escape_markup(layout.title)}</title>
<style>{STYLE}</style>
</head>
<body>
<div class="header">
<h1>{escape_markup(layout.title)}</h1>
<p>{escape_markup(settings.COMPANY_NAME)}</p>
<p>Period: {escape_markup(layout.period_label)}</p>
<p>Generated: {escape_markup(generated)}</p>
</div>
{"".join(sections)}
<div class="footer">{escape_markup(settings.COMPANY_NAME)} &middot; Generated {escape_markup(generated)}</div>
{CHART_SCRIPT}
</body>
</html>
"""
