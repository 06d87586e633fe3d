from datetime import datetime
from decimal import Decimal

from report_engine import metrics, settings
from report_engine.formatting import format_percent
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.reports.inventory import (
    BatchExpiry,
    StockLevel,
    assess_batch,
    assess_stock,
)
from report_engine.schemas import ProductReport, ProductSales


class ProductInsights(Insights):
    top_selling_product: ProductSales | None
    total_sales: Decimal
    top_product_sales_percentage: Decimal
    critical_stock_count: int
    low_stock_count: int
    slow_moving_count: int
    soonest_expiring: BatchExpiry | None
    days_to_soonest_expiry: int | None
    avg_stock_health: Decimal
    stock_levels: list[StockLevel]
    batch_expiries: list[BatchExpiry]


class ProductPipeline(ReportPipeline):
    report_type = "products"
    title = "Product Performance Report"
    file_prefix = "product_performance_report"

    rules = (
        Rule(
            "Protect Top Sellers",
            lambda i, money: (
                f"{i.top_selling_product.name} drives "
                f"{format_percent(i.top_product_sales_percentage)} of product sales. "
                "Maintain optimal stock levels to prevent revenue loss from stockouts."
            ),
            when=lambda i: i.top_selling_product is not None,
        ),
        Rule(
            "Order Critical Stock",
            lambda i, money: (
                f"Place orders immediately for the {i.critical_stock_count} products "
                "with critically low stock levels."
            ),
            when=lambda i: i.critical_stock_count > 0,
        ),
        Rule(
            "Promote Expiring Products",
            lambda i, money: (
                f"The next batch expires in {i.days_to_soonest_expiry} days. "
                "Create promotional campaigns for products with approaching expiry dates."
            ),
            when=lambda i: (
                i.days_to_soonest_expiry is not None
                and i.days_to_soonest_expiry <= settings.EXPIRY_ALERT_DAYS
            ),
        ),
        Rule(
            "Move Slow Inventory",
            "Consider bundling slow-moving products with fast-moving items or offering "
            "special discounts to reduce holding costs.",
            when=lambda i: i.slow_moving_count > 0,
        ),
        Rule(
            "Plan for Seasonality",
            "Analyze seasonal trends to adjust inventory levels and prevent overstocking.",
        ),
    )

    def fetch(self, client) -> ProductReport:
        return client.get_product_report()

    def calculate(self, payload: ProductReport, generated_at: datetime) -> ProductInsights:
        today = generated_at.date()
        total_sales = metrics.total(payload.sales_by_product, "total_sales")
        top = metrics.pick_top(payload.sales_by_product, metrics.field_key("total_sales"))

        stock_levels = [assess_stock(p) for p in payload.low_stock_products]
        batch_expiries = [assess_batch(b, today) for b in payload.expiring_batches]
        soonest = metrics.pick_bottom(batch_expiries, metrics.field_key("days_left"))

        return ProductInsights(
            generated_at=generated_at,
            top_selling_product=top,
            total_sales=total_sales,
            top_product_sales_percentage=(
                metrics.percentage_of(top.total_sales, total_sales) if top else metrics.ZERO
            ),
            critical_stock_count=sum(1 for s in stock_levels if s.status == "Critical"),
            low_stock_count=len(payload.low_stock_products),
            slow_moving_count=len(payload.slow_moving_products),
            soonest_expiring=soonest,
            days_to_soonest_expiry=soonest.days_left if soonest else None,
            avg_stock_health=metrics.mean(
                [metrics.stock_health(p.total_stock, p.reorder_level) for p in payload.low_stock_products]
            ),
            stock_levels=stock_levels,
            batch_expiries=batch_expiries,
        )

    def summary_metrics(self, insights: ProductInsights) -> list[Metric]:
        top = insights.top_selling_product
        soonest = insights.soonest_expiring
        return [
            Metric("Top Selling Product", top.name if top else "N/A"),
            Metric("Top Product Sales", top.total_sales if top else 0, "currency"),
            Metric("Top Product Share", insights.top_product_sales_percentage, "percent"),
            Metric("Total Product Sales", insights.total_sales, "currency"),
            Metric("Critical Stock Items", insights.critical_stock_count, "count"),
            Metric("Low Stock Items", insights.low_stock_count, "count"),
            Metric("Average Stock Health", insights.avg_stock_health, "percent"),
            Metric("Slow Moving Products", insights.slow_moving_count, "count"),
            Metric("Soonest Expiring", soonest.batch.product_name if soonest else "N/A"),
            Metric(
                "Days to Soonest Expiry",
                insights.days_to_soonest_expiry if soonest else "N/A",
                "count" if soonest else "text",
            ),
        ]

    def tables(self, payload: ProductReport, insights: ProductInsights) -> list[Table]:
        moving_columns = [
            Column("Product", lambda p: p.name),
            Column("Quantity Sold", lambda p: p.quantity_sold, "count"),
        ]
        return [
            Table(
                "Top Selling Products",
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
                payload.sales_by_product[: settings.TOP_ROWS_LIMIT],
            ),
            Table(
                "Stock Health",
                [
                    Column("Product", lambda s: s.product.name),
                    Column("Current Stock", lambda s: s.product.total_stock, "count"),
                    Column("Reorder Level", lambda s: s.product.reorder_level, "count"),
                    Column("Stock Health", lambda s: s.health, "percent"),
                    Column("Status", lambda s: s.status, status=lambda s: s.status),
                ],
                insights.stock_levels,
                empty_message="No low stock products",
            ),
            Table(
                "Expiring Products",
                [
                    Column("Product", lambda b: b.batch.product_name),
                    Column("Batch", lambda b: b.batch.batch_number),
                    Column("Expiry Date", lambda b: b.batch.expiry_date, "date"),
                    Column("Days Left", lambda b: b.days_left, "count"),
                    Column("Quantity", lambda b: b.batch.current_quantity, "count"),
                    Column("Urgency", lambda b: b.tier, status=lambda b: b.tier),
                ],
                sorted(insights.batch_expiries, key=lambda b: b.days_left),
                empty_message="No batches expiring soon",
            ),
            Table("Fast Moving Products", moving_columns, payload.top_moving_products),
            Table("Slow Moving Products", moving_columns, payload.slow_moving_products),
        ]

    def charts(self, payload: ProductReport, insights: ProductInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        return [
            Chart(
                "Top Products by Sales",
                "bar",
                [
                    ChartPoint(p.name, p.total_sales, colors[i % len(colors)])
                    for i, p in enumerate(payload.sales_by_product[: settings.TOP_ROWS_LIMIT])
                ],
            )
        ]
