from datetime import datetime
from decimal import Decimal

from report_engine import metrics, settings
from report_engine.formatting import format_month_label
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import AreaSales, CreditCustomer, CustomerReport

HIGH_CREDIT_USAGE = settings.CREDIT_RISK_LEVELS[0][0]


class CustomerInsights(Insights):
    top_customers_avg_order: Decimal
    highest_credit_risk: CreditCustomer | None
    customer_growth_rate: Decimal
    best_area: AreaSales | None
    worst_area: AreaSales | None
    avg_credit_utilization: Decimal
    total_outstanding_credit: Decimal
    high_risk_count: int
    total_area_sales: Decimal


class CustomerPipeline(ReportPipeline):
    report_type = "customers"
    title = "Customer Analysis Report"
    file_prefix = "customer_report"

    rules = (
        Rule(
            "Reward Loyal Customers",
            "Implement a loyalty program for top customers to maintain their business relationship.",
        ),
        Rule(
            "Reduce Credit Exposure",
            lambda i, money: (
                f"{i.high_risk_count} customers are using more than {HIGH_CREDIT_USAGE}% of "
                "their credit limit. Follow up to reduce outstanding balances."
            ),
            when=lambda i: i.high_risk_count > 0,
        ),
        Rule(
            "Grow Weak Areas",
            lambda i, money: (
                f"Explore opportunities to increase customer acquisition in {i.worst_area.area}, "
                "the lowest performing area."
            ),
            when=lambda i: i.worst_area is not None,
        ),
        Rule(
            "Re-engage Infrequent Buyers",
            "Consider special promotions for customers with low ordering frequency to "
            "increase engagement.",
        ),
        Rule(
            "Targeted Marketing",
            "Develop targeted marketing strategies for areas with high customer "
            "concentration but low sales.",
        ),
    )

    def fetch(self, client) -> CustomerReport:
        return client.get_customer_report()

    def calculate(self, payload: CustomerReport, generated_at: datetime) -> CustomerInsights:
        credit = payload.credit_customers
        areas = payload.sales_by_area
        # Acquisition rows run oldest to newest
        acquisition = payload.customer_acquisition

        growth = metrics.ZERO
        if len(acquisition) >= 2:
            growth = metrics.growth_rate(
                acquisition[-1].new_customers, acquisition[-2].new_customers
            )

        return CustomerInsights(
            generated_at=generated_at,
            top_customers_avg_order=metrics.mean(
                [c.total_spent / max(c.order_count, 1) for c in payload.top_customers]
            ),
            highest_credit_risk=metrics.pick_top(credit, metrics.field_key("credit_usage_percent")),
            customer_growth_rate=growth,
            best_area=metrics.pick_top(areas, metrics.field_key("total_sales")),
            worst_area=metrics.pick_bottom(areas, metrics.field_key("total_sales")),
            avg_credit_utilization=metrics.mean([c.credit_usage_percent for c in credit]),
            total_outstanding_credit=metrics.total(credit, "credit_balance"),
            high_risk_count=sum(
                1 for c in credit if metrics.credit_risk(c.credit_usage_percent) == "High Risk"
            ),
            total_area_sales=metrics.total(areas, "total_sales"),
        )

    def summary_metrics(self, insights: CustomerInsights) -> list[Metric]:
        risk = insights.highest_credit_risk
        return [
            Metric("Top Customer Avg. Order", insights.top_customers_avg_order, "currency"),
            Metric("Customer Growth", insights.customer_growth_rate, "trend"),
            Metric("Total Outstanding Credit", insights.total_outstanding_credit, "currency"),
            Metric("Average Credit Utilization", insights.avg_credit_utilization, "percent"),
            Metric("Highest Credit Risk", risk.name if risk else "N/A"),
            Metric("Best Performing Area", insights.best_area.area if insights.best_area else "N/A"),
            Metric("Opportunity Area", insights.worst_area.area if insights.worst_area else "N/A"),
        ]

    def tables(self, payload: CustomerReport, insights: CustomerInsights) -> list[Table]:
        def risk(c):
            return metrics.credit_risk(c.credit_usage_percent)

        return [
            Table(
                "Top Customers",
                [
                    Column("Customer", lambda c: c.name),
                    Column("Area", lambda c: c.area),
                    Column("Orders", lambda c: c.order_count, "count"),
                    Column("Total Spent", lambda c: c.total_spent, "currency"),
                    Column(
                        "Avg. Order",
                        lambda c: c.total_spent / max(c.order_count, 1),
                        "currency",
                    ),
                ],
                payload.top_customers,
            ),
            Table(
                "Credit Customers",
                [
                    Column("Customer", lambda c: c.name),
                    Column("Balance", lambda c: c.credit_balance, "currency"),
                    Column("Limit", lambda c: c.credit_limit, "currency"),
                    Column("Usage", lambda c: c.credit_usage_percent, "percent"),
                    Column("Risk", risk, status=risk),
                ],
                payload.credit_customers,
            ),
            Table(
                "Sales by Area",
                [
                    Column("Area", lambda a: a.area),
                    Column("Customers", lambda a: a.customer_count, "count"),
                    Column("Orders", lambda a: a.order_count, "count"),
                    Column("Sales", lambda a: a.total_sales, "currency"),
                    Column(
                        "Share",
                        lambda a: metrics.percentage_of(a.total_sales, insights.total_area_sales),
                        "percent",
                    ),
                ],
                payload.sales_by_area,
            ),
            Table(
                "Customer Acquisition",
                [
                    Column("Month", lambda m: format_month_label(m.month)),
                    Column("New Customers", lambda m: m.new_customers, "count"),
                ],
                payload.customer_acquisition,
            ),
        ]

    def charts(self, payload: CustomerReport, insights: CustomerInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        return [
            Chart(
                "New Customers by Month",
                "bar",
                [
                    ChartPoint(format_month_label(m.month), Decimal(m.new_customers), colors[0])
                    for m in payload.customer_acquisition
                ],
            ),
            Chart(
                "Sales by Area",
                "pie",
                [
                    ChartPoint(a.area, a.total_sales, colors[i % len(colors)])
                    for i, a in enumerate(payload.sales_by_area)
                ],
            ),
        ]
