from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from report_engine import metrics, settings
from report_engine.formatting import (
    format_amount,
    format_percent,
    format_trend,
    month_name,
)
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import CommissionHistory, CommissionReport, RepCommission


class RepEfficiency(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    efficiency: Decimal


class MonthlyGrowth(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: CommissionHistory
    growth: Decimal | None


class SalesRepInsights(Insights):
    top_performer: RepCommission | None
    total_sales: Decimal
    total_commission_payout: Decimal
    avg_commission_rate: Decimal
    commission_expense_ratio: Decimal
    commission_growth: Decimal
    rep_efficiency: list[RepEfficiency]
    most_efficient_rep: RepEfficiency | None
    monthly_growth: list[MonthlyGrowth]


def efficiency_score(rep: RepCommission) -> Decimal:
    """Sales generated per point of commission rate; 0 for reps without a rate."""
    return metrics.safe_divide(rep.total_sales, rep.commission_rate)


class SalesRepPipeline(ReportPipeline):
    report_type = "sales_reps"
    title = "Sales Representative Performance Report"
    file_prefix = "sales_rep_performance_report"

    rules = (
        Rule(
            "Reverse Commission Decline",
            lambda i, money: (
                f"Commission payouts fell {format_percent(abs(i.commission_growth))} from last "
                "month. Review targets with the team and identify reps who need support."
            ),
            when=lambda i: i.commission_growth < 0,
        ),
        Rule(
            "Share Top Strategies",
            lambda i, money: (
                f"{i.top_performer.full_name} leads the team in sales. Organize knowledge "
                "sharing sessions where top performers can share their strategies."
            ),
            when=lambda i: i.top_performer is not None,
        ),
        Rule(
            "Reward Efficiency",
            lambda i, money: (
                f"{i.most_efficient_rep.name} has the highest efficiency score at "
                f"{format_amount(i.most_efficient_rep.efficiency)}. Consider implementing a "
                "tiered commission structure based on efficiency scores."
            ),
            when=lambda i: i.most_efficient_rep is not None,
        ),
        Rule(
            "Review Commission Rates",
            "Review commission rates for low-performing representatives to provide more incentive.",
        ),
        Rule(
            "Keep Motivation High",
            "Explore additional incentives for high-performing representatives to maintain motivation.",
        ),
        Rule(
            "Optimize Cost Efficiency",
            lambda i, money: (
                f"Commissions cost {format_percent(i.commission_expense_ratio)} of sales. "
                "Analyze the correlation between commission rates and sales performance "
                "to optimize cost efficiency."
            ),
        ),
    )

    def fetch(self, client) -> CommissionReport:
        return client.get_commission_report()

    def calculate(self, payload: CommissionReport, generated_at: datetime) -> SalesRepInsights:
        reps = payload.rep_commissions
        history = payload.commission_history
        total_sales = metrics.total(reps, "total_sales")
        payout = metrics.total(reps, "commission_amount")

        # sorted() is stable, so equal scores keep their payload order
        efficiency = sorted(
            (
                RepEfficiency(user_id=r.user_id, name=r.full_name, efficiency=efficiency_score(r))
                for r in reps
            ),
            key=lambda e: e.efficiency,
            reverse=True,
        )

        growth = metrics.ZERO
        if len(history) >= 2:
            growth = metrics.growth_rate(history[0].total_commission, history[1].total_commission)

        monthly = [
            MonthlyGrowth(
                month=h,
                growth=(
                    metrics.growth_rate(h.total_commission, history[n + 1].total_commission)
                    if n + 1 < len(history)
                    else None
                ),
            )
            for n, h in enumerate(history)
        ]

        return SalesRepInsights(
            generated_at=generated_at,
            top_performer=metrics.pick_top(reps, metrics.field_key("total_sales")),
            total_sales=total_sales,
            total_commission_payout=payout,
            avg_commission_rate=metrics.mean([r.commission_rate for r in reps]),
            commission_expense_ratio=metrics.percentage_of(payout, total_sales),
            commission_growth=growth,
            rep_efficiency=efficiency,
            most_efficient_rep=efficiency[0] if efficiency else None,
            monthly_growth=monthly,
        )

    def summary_metrics(self, insights: SalesRepInsights) -> list[Metric]:
        top = insights.top_performer
        efficient = insights.most_efficient_rep
        return [
            Metric("Top Performer", top.full_name if top else "N/A"),
            Metric("Top Performer Sales", top.total_sales if top else 0, "currency"),
            Metric("Total Team Sales", insights.total_sales, "currency"),
            Metric("Total Commission Payout", insights.total_commission_payout, "currency"),
            Metric("Average Commission Rate", insights.avg_commission_rate, "rate"),
            Metric("Commission Expense Ratio", insights.commission_expense_ratio, "percent"),
            Metric("Commission Growth", insights.commission_growth, "trend"),
            Metric("Most Efficient Rep", efficient.name if efficient else "N/A"),
        ]

    def tables(self, payload: CommissionReport, insights: SalesRepInsights) -> list[Table]:
        ranked = list(enumerate(insights.rep_efficiency, 1))
        return [
            Table(
                "Sales Representative Performance",
                [
                    Column("Sales Rep", lambda r: r.full_name),
                    Column("Sales", lambda r: r.total_sales, "currency"),
                    Column(
                        "Share of Sales",
                        lambda r: metrics.percentage_of(r.total_sales, insights.total_sales),
                        "percent",
                    ),
                    Column("Commission Rate", lambda r: r.commission_rate, "rate"),
                    Column("Commission", lambda r: r.commission_amount, "currency"),
                ],
                sorted(payload.rep_commissions, key=lambda r: r.total_sales, reverse=True),
            ),
            Table(
                "Sales Efficiency Analysis",
                [
                    Column("Rank", lambda row: row[0], "count"),
                    Column("Sales Rep", lambda row: row[1].name),
                    Column("Efficiency Score", lambda row: row[1].efficiency, "count"),
                ],
                ranked,
            ),
            Table(
                "Monthly Commission Trend",
                [
                    Column("Month", lambda m: f"{month_name(m.month.month)} {m.month.year}"),
                    Column("Sales Reps", lambda m: m.month.rep_count, "count"),
                    Column("Sales", lambda m: m.month.total_sales, "currency"),
                    Column("Commission", lambda m: m.month.total_commission, "currency"),
                    Column("Average Rate", lambda m: m.month.avg_commission_rate, "rate"),
                    Column(
                        "Growth",
                        lambda m: format_trend(m.growth) if m.growth is not None else "N/A",
                    ),
                ],
                insights.monthly_growth,
            ),
        ]

    def charts(self, payload: CommissionReport, insights: SalesRepInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        ranked = sorted(payload.rep_commissions, key=lambda r: r.total_sales, reverse=True)
        return [
            Chart(
                "Sales by Representative",
                "bar",
                [
                    ChartPoint(r.full_name, r.total_sales, colors[i % len(colors)])
                    for i, r in enumerate(ranked[: settings.TOP_ROWS_LIMIT])
                ],
            )
        ]

    def default_period_label(self, payload: CommissionReport, insights: SalesRepInsights) -> str:
        if not payload.commission_history:
            return f"{insights.generated_at:%B %Y}"
        current = payload.commission_history[0]
        return f"{month_name(current.month)} {current.year}"
