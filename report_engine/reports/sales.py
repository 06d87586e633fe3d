from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from report_engine import metrics, settings
from report_engine.formatting import capitalize, format_date, format_percent
from report_engine.layout import Alert, Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import DailySales, ProductSales, RepSales, SalesReport

CREDIT_ALERT_SHARE = 50


class PaymentShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_type: str
    order_count: int
    total_sales: Decimal
    percentage: Decimal


class SalesInsights(Insights):
    total_sales: Decimal
    total_orders: int
    avg_order_value: Decimal
    avg_daily_sales: Decimal
    avg_daily_orders: Decimal
    best_selling_product: ProductSales | None
    best_sales_rep: RepSales | None
    rep_count: int
    payment_shares: list[PaymentShare]
    cash_percentage: Decimal
    credit_percentage: Decimal
    cheque_percentage: Decimal
    sales_trend: Decimal
    start_date: date | None
    end_date: date | None


def sales_trend(days: list[DailySales]) -> Decimal:
    """Average daily sales of the later half of the period against the earlier half."""
    if len(days) < 2:
        return metrics.ZERO
    ordered = sorted(days, key=lambda d: d.date)
    half = len(ordered) // 2
    first_avg = metrics.mean([d.total_sales for d in ordered[:half]])
    second_avg = metrics.mean([d.total_sales for d in ordered[half:]])
    return metrics.growth_rate(second_avg, first_avg)


def _payment_percentage(shares: list[PaymentShare], payment_type: str) -> Decimal:
    share = next((s for s in shares if s.payment_type == payment_type), None)
    return share.percentage if share else metrics.ZERO


class SalesPipeline(ReportPipeline):
    report_type = "sales"
    title = "Sales Performance Report"
    file_prefix = "sales_report"

    rules = (
        Rule(
            "Sales Trend",
            lambda i, money: (
                f"Sales are trending down by {format_percent(abs(i.sales_trend))}. "
                "Consider promotional activities to boost sales."
            ),
            when=lambda i: i.sales_trend < 0,
        ),
        Rule(
            "Sales Trend",
            lambda i, money: (
                f"Sales are trending up by {format_percent(i.sales_trend)}. "
                "Capitalize on this momentum with targeted marketing."
            ),
            when=lambda i: i.sales_trend >= 0,
        ),
        Rule(
            "Best Seller",
            lambda i, money: (
                f'Focus inventory management on "{i.best_selling_product.name}" '
                "to ensure availability of your best-selling product."
            ),
            when=lambda i: i.best_selling_product is not None,
        ),
        Rule(
            "Credit Policy",
            lambda i, money: (
                f"Credit sales at {format_percent(i.credit_percentage)} are high. "
                "Review credit policies to improve cash flow."
            ),
            when=lambda i: i.credit_percentage > settings.HIGH_CREDIT_SHARE,
        ),
        Rule(
            "Weekly Patterns",
            "Analyze sales patterns by day of week to optimize staffing and inventory planning.",
        ),
        Rule(
            "Customer Loyalty",
            "Consider implementing a loyalty program to increase repeat business "
            "and average order value.",
        ),
        Rule(
            "Team Performance",
            "Evaluate performance difference between top and bottom sales "
            "representatives to identify training opportunities.",
            when=lambda i: i.rep_count > 1,
        ),
    )

    def fetch(self, client) -> SalesReport:
        return client.get_sales_report()

    def calculate(self, payload: SalesReport, generated_at: datetime) -> SalesInsights:
        days = payload.sales_by_date
        total_sales = metrics.total(days, "total_sales")
        total_orders = sum(d.order_count for d in days)

        shares = [
            PaymentShare(
                payment_type=p.payment_type,
                order_count=p.order_count,
                total_sales=p.total_sales,
                percentage=metrics.percentage_of(p.total_sales, total_sales),
            )
            for p in payload.sales_by_payment_type
        ]
        dates = [d.date for d in days]

        return SalesInsights(
            generated_at=generated_at,
            total_sales=total_sales,
            total_orders=total_orders,
            avg_order_value=metrics.safe_divide(total_sales, total_orders),
            avg_daily_sales=metrics.safe_divide(total_sales, len(days)),
            avg_daily_orders=metrics.safe_divide(total_orders, len(days)),
            best_selling_product=metrics.pick_top(
                payload.sales_by_product, metrics.field_key("total_sales")
            ),
            best_sales_rep=metrics.pick_top(payload.sales_by_rep, metrics.field_key("total_sales")),
            rep_count=len(payload.sales_by_rep),
            payment_shares=shares,
            cash_percentage=_payment_percentage(shares, "cash"),
            credit_percentage=_payment_percentage(shares, "credit"),
            cheque_percentage=_payment_percentage(shares, "cheque"),
            sales_trend=sales_trend(days),
            # Without daily rows, fall back to the range the report was requested for
            start_date=min(dates) if dates else payload.start_date,
            end_date=max(dates) if dates else payload.end_date,
        )

    def summary_metrics(self, insights: SalesInsights) -> list[Metric]:
        product = insights.best_selling_product
        rep = insights.best_sales_rep
        return [
            Metric("Total Sales", insights.total_sales, "currency"),
            Metric("Total Orders", insights.total_orders, "count"),
            Metric("Average Order Value", insights.avg_order_value, "currency"),
            Metric("Average Daily Sales", insights.avg_daily_sales, "currency"),
            Metric("Average Daily Orders", insights.avg_daily_orders, "decimal"),
            Metric("Sales Trend", insights.sales_trend, "trend"),
            Metric("Cash Sales", insights.cash_percentage, "percent"),
            Metric("Credit Sales", insights.credit_percentage, "percent"),
            Metric("Cheque Sales", insights.cheque_percentage, "percent"),
            Metric("Best Selling Product", product.name if product else "N/A"),
            Metric("Top Sales Rep", rep.full_name if rep else "N/A"),
        ]

    def tables(self, payload: SalesReport, insights: SalesInsights) -> list[Table]:
        return [
            Table(
                "Sales by Product",
                [
                    Column("Product", lambda p: p.name),
                    Column("Quantity", lambda p: p.total_quantity, "count"),
                    Column("Sales", lambda p: p.total_sales, "currency"),
                    Column(
                        "Share",
                        lambda p: metrics.percentage_of(p.total_sales, insights.total_sales),
                        "percent",
                    ),
                ],
                payload.sales_by_product,
            ),
            Table(
                "Sales by Representative",
                [
                    Column("Sales Rep", lambda r: r.full_name),
                    Column("Orders", lambda r: r.order_count, "count"),
                    Column("Sales", lambda r: r.total_sales, "currency"),
                    Column(
                        "Average Order",
                        lambda r: metrics.safe_divide(r.total_sales, r.order_count),
                        "currency",
                    ),
                ],
                payload.sales_by_rep,
            ),
            Table(
                "Daily Sales",
                [
                    Column("Date", lambda d: d.date, "date"),
                    Column("Orders", lambda d: d.order_count, "count"),
                    Column("Sales", lambda d: d.total_sales, "currency"),
                ],
                sorted(payload.sales_by_date, key=lambda d: d.date, reverse=True),
            ),
            Table(
                "Sales by Payment Type",
                [
                    Column("Payment Type", lambda s: capitalize(s.payment_type)),
                    Column("Orders", lambda s: s.order_count, "count"),
                    Column("Sales", lambda s: s.total_sales, "currency"),
                    Column("Share", lambda s: s.percentage, "percent"),
                ],
                insights.payment_shares,
            ),
        ]

    def charts(self, payload: SalesReport, insights: SalesInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        ordered = sorted(payload.sales_by_date, key=lambda d: d.date)
        return [
            Chart(
                "Daily Sales",
                "line",
                [ChartPoint(format_date(d.date), d.total_sales, colors[0]) for d in ordered],
            ),
            Chart(
                "Sales by Payment Type",
                "pie",
                [
                    ChartPoint(capitalize(s.payment_type), s.total_sales, colors[i % len(colors)])
                    for i, s in enumerate(insights.payment_shares)
                ],
            ),
        ]

    def alerts(self, payload: SalesReport, insights: SalesInsights) -> list[Alert]:
        if insights.credit_percentage <= CREDIT_ALERT_SHARE:
            return []
        return [
            Alert(
                "Payment Risk Alert",
                f"Credit sales represent {format_percent(insights.credit_percentage)} of your "
                "total sales, which may impact cash flow. Consider implementing incentives "
                "for cash payments or stricter credit management policies.",
            )
        ]

    def default_period_label(self, payload: SalesReport, insights: SalesInsights) -> str:
        if insights.start_date is None:
            return super().default_period_label(payload, insights)
        return f"{format_date(insights.start_date)} to {format_date(insights.end_date)}"
