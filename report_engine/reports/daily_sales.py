from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from report_engine import metrics, settings
from report_engine.formatting import capitalize, format_long_date, format_percent
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import DailySalesReport, SalesRepBreakdown


class PaymentDistribution(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_type: str
    order_count: int
    amount: Decimal
    percentage: Decimal


class DailySalesInsights(Insights):
    report_date: date
    total_orders: int
    total_sales: Decimal
    total_discounts: Decimal
    avg_order_value: Decimal
    discount_percentage: Decimal
    top_sales_rep: SalesRepBreakdown | None
    payment_distribution: list[PaymentDistribution]
    credit_percentage: Decimal
    total_product_sales: Decimal


class DailySalesPipeline(ReportPipeline):
    report_type = "daily_sales"
    title = "Daily Sales Report"
    file_prefix = "daily_sales_report"

    rules = (
        Rule(
            "No Orders Recorded",
            "No orders were recorded for this day. Check route coverage and rep activity.",
            when=lambda i: i.total_orders == 0,
        ),
        Rule(
            "Review Discounting",
            lambda i, money: (
                f"Discounts amounted to {format_percent(i.discount_percentage)} of gross sales. "
                "Review discount approvals to protect margins."
            ),
            when=lambda i: i.discount_percentage > settings.HIGH_DISCOUNT_SHARE,
        ),
        Rule(
            "Follow Up on Credit",
            lambda i, money: (
                f"Credit sales made up {format_percent(i.credit_percentage)} of today's "
                "collections. Schedule follow-ups to keep cash flow healthy."
            ),
            when=lambda i: i.credit_percentage > settings.HIGH_CREDIT_SHARE,
        ),
        Rule(
            "Recognize Top Sales Rep",
            lambda i, money: (
                f"{i.top_sales_rep.sales_rep} generated {money(i.top_sales_rep.total_sales)} "
                f"from {i.top_sales_rep.order_count} orders today."
            ),
            when=lambda i: i.top_sales_rep is not None,
        ),
    )

    def __init__(self, report_date: date | None = None, **kwargs):
        super().__init__(**kwargs)
        self.requested_date = report_date

    def fetch(self, client) -> DailySalesReport:
        return client.get_daily_sales_report(self.requested_date)

    def calculate(self, payload: DailySalesReport, generated_at: datetime) -> DailySalesInsights:
        summary = payload.summary
        gross_sales = summary.total_sales + summary.total_discounts
        payment_total = metrics.total(payload.payment_breakdown, "amount")

        distribution = [
            PaymentDistribution(
                payment_type=p.payment_type,
                order_count=p.order_count,
                amount=p.amount,
                percentage=metrics.percentage_of(p.amount, payment_total),
            )
            for p in payload.payment_breakdown
        ]
        credit = next((p for p in distribution if p.payment_type == "credit"), None)

        return DailySalesInsights(
            generated_at=generated_at,
            report_date=payload.report_date or summary.report_date or generated_at.date(),
            total_orders=summary.total_orders,
            total_sales=summary.total_sales,
            total_discounts=summary.total_discounts,
            avg_order_value=metrics.safe_divide(summary.total_sales, summary.total_orders),
            discount_percentage=(
                metrics.percentage_of(summary.total_discounts, gross_sales)
                if summary.total_sales > 0
                else metrics.ZERO
            ),
            top_sales_rep=metrics.pick_top(
                payload.sales_rep_breakdown, metrics.field_key("total_sales")
            ),
            payment_distribution=distribution,
            credit_percentage=credit.percentage if credit else metrics.ZERO,
            total_product_sales=metrics.total(payload.product_breakdown, "total_sales"),
        )

    def summary_metrics(self, insights: DailySalesInsights) -> list[Metric]:
        rep = insights.top_sales_rep
        return [
            Metric("Total Orders", insights.total_orders, "count"),
            Metric("Total Sales", insights.total_sales, "currency"),
            Metric("Total Discounts", insights.total_discounts, "currency"),
            Metric("Average Order Value", insights.avg_order_value, "currency"),
            Metric("Discount % of Gross", insights.discount_percentage, "percent"),
            Metric("Credit Sales", insights.credit_percentage, "percent"),
            Metric("Top Sales Rep", rep.sales_rep if rep else "N/A"),
        ]

    def tables(self, payload: DailySalesReport, insights: DailySalesInsights) -> list[Table]:
        return [
            Table(
                "Payment Breakdown",
                [
                    Column("Payment Type", lambda p: capitalize(p.payment_type)),
                    Column("Orders", lambda p: p.order_count, "count"),
                    Column("Amount", lambda p: p.amount, "currency"),
                    Column("Share", lambda p: p.percentage, "percent"),
                ],
                insights.payment_distribution,
            ),
            Table(
                "Sales Rep Performance",
                [
                    Column("Sales Rep", lambda r: r.sales_rep),
                    Column("Orders", lambda r: r.order_count, "count"),
                    Column("Sales", lambda r: r.total_sales, "currency"),
                    Column(
                        "Average Order",
                        lambda r: metrics.safe_divide(r.total_sales, r.order_count),
                        "currency",
                    ),
                ],
                payload.sales_rep_breakdown,
            ),
            Table(
                "Top Products",
                [
                    Column("Product", lambda p: p.product_name),
                    Column("Quantity", lambda p: p.quantity_sold, "count"),
                    Column("Sales", lambda p: p.total_sales, "currency"),
                    Column(
                        "Share",
                        lambda p: metrics.percentage_of(p.total_sales, insights.total_product_sales),
                        "percent",
                    ),
                ],
                payload.product_breakdown[: settings.TOP_ROWS_LIMIT],
            ),
            Table(
                "Order Details",
                [
                    Column("Order", lambda o: o.order_id),
                    Column("Time", lambda o: o.order_date, "time"),
                    Column("Customer", lambda o: o.customer_name),
                    Column("Area", lambda o: o.area),
                    Column("Amount", lambda o: o.total_amount, "currency"),
                    Column("Discount", lambda o: o.discount_amount, "currency"),
                    Column("Payment", lambda o: capitalize(o.payment_type)),
                    Column("Payment Status", lambda o: capitalize(o.payment_status)),
                    Column("Status", lambda o: capitalize(o.status)),
                ],
                payload.order_details,
                empty_message="No orders recorded",
            ),
        ]

    def charts(self, payload: DailySalesReport, insights: DailySalesInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        return [
            Chart(
                "Payment Distribution",
                "pie",
                [
                    ChartPoint(capitalize(p.payment_type), p.amount, colors[i % len(colors)])
                    for i, p in enumerate(insights.payment_distribution)
                ],
            )
        ]

    def default_period_label(self, payload: DailySalesReport, insights: DailySalesInsights) -> str:
        return format_long_date(insights.report_date)

    def report_date(self, payload: DailySalesReport, insights: DailySalesInsights) -> date:
        return insights.report_date
