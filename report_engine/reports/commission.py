from datetime import datetime
from decimal import Decimal

from report_engine import metrics, settings
from report_engine.formatting import format_percent, format_rate, month_name
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import CommissionHistory, CommissionReport, RepCommission


class CommissionInsights(Insights):
    top_performer: RepCommission | None
    under_performer: RepCommission | None
    avg_commission_amount: Decimal
    total_commission: Decimal
    commission_trend: Decimal
    total_commissions_paid: Decimal
    commission_percentage_of_sales: Decimal
    top_performer_share: Decimal
    current_month: CommissionHistory | None


def _month_label(month: CommissionHistory) -> str:
    return f"{month_name(month.month)} {month.year}"


class CommissionPipeline(ReportPipeline):
    report_type = "commission"
    title = "Sales Commission Report"
    file_prefix = "commission_report"

    rules = (
        Rule(
            "Address declining trend",
            lambda i, money: (
                f"Commission payouts show a {format_percent(abs(i.commission_trend))} decrease "
                "compared to previous month. Review sales targets and provide additional support."
            ),
            when=lambda i: i.commission_trend < 0,
        ),
        Rule(
            "Maintain positive momentum",
            lambda i, money: (
                f"Commission payouts have increased by {format_percent(i.commission_trend)} "
                "compared to previous month."
            ),
            when=lambda i: i.commission_trend >= 0,
        ),
        Rule(
            "Recognize top performers",
            lambda i, money: (
                f"Acknowledge {i.top_performer.full_name}'s outstanding performance and "
                "consider sharing their successful strategies with the rest of the team."
            ),
            when=lambda i: i.top_performer is not None,
        ),
        Rule(
            "Support underperforming reps",
            lambda i, money: (
                "Consider providing additional training and support to "
                f"{i.under_performer.full_name} who generated "
                f"{money(i.under_performer.total_sales)} in sales, "
                "significantly below the top performer."
            ),
            when=lambda i: i.under_performer is not None and i.top_performer is not None,
        ),
        Rule(
            "Review commission structure",
            lambda i, money: (
                "The average commission rate is "
                f"{format_rate(i.current_month.avg_commission_rate if i.current_month else 0)}. "
                "Evaluate if this rate continues to provide adequate motivation while "
                "remaining cost-effective."
            ),
        ),
        Rule(
            "Plan for seasonality",
            "Analyze commission trends across months to identify seasonal patterns and "
            "prepare for potential fluctuations in commission payouts.",
        ),
    )

    def fetch(self, client) -> CommissionReport:
        return client.get_commission_report()

    def calculate(self, payload: CommissionReport, generated_at: datetime) -> CommissionInsights:
        reps = payload.rep_commissions
        history = payload.commission_history
        current = history[0] if history else None

        top = metrics.pick_top(reps, metrics.field_key("commission_amount"))
        # Reps without any sales are not counted as under-performing
        under = metrics.pick_bottom(
            [r for r in reps if r.total_sales > 0], metrics.field_key("commission_amount")
        )
        total_commission = metrics.total(reps, "commission_amount")

        trend = metrics.ZERO
        if len(history) >= 2:
            trend = metrics.growth_rate(history[0].total_commission, history[1].total_commission)

        return CommissionInsights(
            generated_at=generated_at,
            top_performer=top,
            under_performer=under,
            avg_commission_amount=metrics.safe_divide(total_commission, len(reps)),
            total_commission=total_commission,
            commission_trend=trend,
            total_commissions_paid=metrics.total(history, "total_commission"),
            commission_percentage_of_sales=(
                metrics.percentage_of(current.total_commission, current.total_sales)
                if current
                else metrics.ZERO
            ),
            top_performer_share=(
                metrics.percentage_of(top.commission_amount, total_commission)
                if top
                else metrics.ZERO
            ),
            current_month=current,
        )

    def summary_metrics(self, insights: CommissionInsights) -> list[Metric]:
        top = insights.top_performer
        summary = [
            Metric("Total Commission", insights.total_commission, "currency"),
            Metric("Average Commission", insights.avg_commission_amount, "currency"),
            Metric("Month-over-Month Trend", insights.commission_trend, "trend"),
            Metric("Commissions Paid (History)", insights.total_commissions_paid, "currency"),
            Metric("Commission % of Sales", insights.commission_percentage_of_sales, "percent"),
        ]
        if top:
            summary += [
                Metric("Top Performer", top.full_name),
                Metric("Top Performer Sales", top.total_sales, "currency"),
                Metric("Top Performer Commission", top.commission_amount, "currency"),
                Metric("Top Performer Rate", top.commission_rate, "rate"),
                Metric("Top Performer Share", insights.top_performer_share, "percent"),
            ]
        return summary

    def tables(self, payload: CommissionReport, insights: CommissionInsights) -> list[Table]:
        return [
            Table(
                "Commission by Sales Rep",
                [
                    Column("Sales Rep", lambda r: r.full_name),
                    Column("Rate", lambda r: r.commission_rate, "rate"),
                    Column("Sales", lambda r: r.total_sales, "currency"),
                    Column("Commission", lambda r: r.commission_amount, "currency"),
                ],
                payload.rep_commissions,
            ),
            Table(
                "Commission History",
                [
                    Column("Month", _month_label),
                    Column("Sales Reps", lambda h: h.rep_count, "count"),
                    Column("Sales", lambda h: h.total_sales, "currency"),
                    Column("Commission", lambda h: h.total_commission, "currency"),
                    Column("Average Rate", lambda h: h.avg_commission_rate, "rate"),
                ],
                payload.commission_history,
            ),
        ]

    def charts(self, payload: CommissionReport, insights: CommissionInsights) -> list[Chart]:
        sales_color, commission_color = settings.CHART_COLORS[0], settings.CHART_COLORS[1]
        # History arrives newest first; charts read oldest to newest
        history = list(reversed(payload.commission_history))
        return [
            Chart(
                "Monthly Sales",
                "bar",
                [ChartPoint(_month_label(h), h.total_sales, sales_color) for h in history],
            ),
            Chart(
                "Monthly Commission",
                "bar",
                [ChartPoint(_month_label(h), h.total_commission, commission_color) for h in history],
            ),
        ]

    def default_period_label(self, payload: CommissionReport, insights: CommissionInsights) -> str:
        if insights.current_month is None:
            return f"{insights.generated_at:%B %Y}"
        return _month_label(insights.current_month)
