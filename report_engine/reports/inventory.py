from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from report_engine import metrics, settings
from report_engine.formatting import format_decimal, format_percent
from report_engine.layout import Chart, ChartPoint, Column, Metric, Table
from report_engine.pipeline import Insights, ReportPipeline
from report_engine.recommendations import Rule
from report_engine.schemas import (
    CategoryStock,
    ExpiringBatch,
    InventoryReport,
    LowStockProduct,
    MovingProduct,
)


class StockLevel(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: LowStockProduct
    health: Decimal
    status: str


class BatchExpiry(BaseModel):
    model_config = ConfigDict(frozen=True)

    batch: ExpiringBatch
    days_left: int
    tier: str


class CategoryShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: Decimal
    percentage: Decimal


class InventoryInsights(Insights):
    total_inventory_value: Decimal
    avg_unit_cost: Decimal
    low_stock_count: int
    critical_stock_count: int
    low_stock_value: Decimal
    low_stock_percentage: Decimal
    expiring_batch_count: int
    expiring_soon_count: int
    expiring_stock_value: Decimal
    expiring_stock_percentage: Decimal
    category_distribution: list[CategoryShare]
    most_valuable_category: CategoryShare | None
    top_moving_value: Decimal
    slow_moving_value: Decimal
    slow_moving_count: int
    inventory_turnover: Decimal
    stock_levels: list[StockLevel]
    batch_expiries: list[BatchExpiry]


def average_unit_cost(categories: list[CategoryStock]) -> Decimal:
    """Stock value per product; falls back to a flat estimate without product counts."""
    total_value = metrics.total(categories, "stock_value")
    product_count = sum(c.product_count or 0 for c in categories)
    if product_count > 0:
        return total_value / product_count
    return Decimal(settings.FALLBACK_UNIT_COST)


def days_until_expiry(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def assess_stock(product: LowStockProduct) -> StockLevel:
    return StockLevel(
        product=product,
        health=metrics.stock_health_bar(product.total_stock, product.reorder_level),
        status=metrics.stock_status(product.total_stock, product.reorder_level),
    )


def assess_batch(batch: ExpiringBatch, today: date) -> BatchExpiry:
    days_left = days_until_expiry(batch.expiry_date, today)
    return BatchExpiry(batch=batch, days_left=days_left, tier=metrics.expiry_tier(days_left))


def _moving_value(products: list[MovingProduct], unit_cost: Decimal) -> Decimal:
    return sum((p.quantity_sold * unit_cost for p in products), metrics.ZERO)


class InventoryPipeline(ReportPipeline):
    report_type = "inventory"
    title = "Inventory Analysis Report"
    file_prefix = "inventory_report"

    rules = (
        Rule(
            "Restock Critical Items",
            lambda i, money: (
                f"{i.critical_stock_count} products are at critical stock levels "
                "and need immediate attention."
            ),
            when=lambda i: i.critical_stock_count > 0,
        ),
        Rule(
            "Manage Expiring Stock",
            lambda i, money: (
                f"{i.expiring_soon_count} batches are expiring within "
                f"{settings.EXPIRY_ALERT_DAYS} days. Consider promotions to move this inventory."
            ),
            when=lambda i: i.expiring_batch_count > 0,
        ),
        Rule(
            "Address Slow-Moving Items",
            "Consider special promotions or discounts for slow-moving products "
            "to free up capital and storage space.",
            when=lambda i: i.slow_moving_count > 0,
        ),
        Rule(
            "Improve Inventory Turnover",
            lambda i, money: (
                f"Current turnover rate is {format_decimal(i.inventory_turnover, 1)}x. "
                "Industry standard is 4-6x. Consider reviewing procurement strategy."
            ),
            when=lambda i: i.inventory_turnover < settings.INVENTORY_TURNOVER_TARGET,
        ),
        Rule(
            "Optimize Category Balance",
            lambda i, money: (
                f"{i.most_valuable_category.name} represents "
                f"{format_percent(i.most_valuable_category.percentage)} of total inventory "
                "value. Ensure balanced stock distribution."
            ),
            when=lambda i: i.most_valuable_category is not None,
        ),
        Rule(
            "Adjust Reorder Levels",
            "Consider adjusting reorder levels for fast-moving products to prevent "
            "stockouts during peak demand periods.",
        ),
    )

    def fetch(self, client) -> InventoryReport:
        return client.get_inventory_report()

    def calculate(self, payload: InventoryReport, generated_at: datetime) -> InventoryInsights:
        today = generated_at.date()
        total_value = metrics.total(payload.stock_by_category, "stock_value")
        unit_cost = average_unit_cost(payload.stock_by_category)

        stock_levels = [assess_stock(p) for p in payload.low_stock_products]
        low_stock_value = sum(
            (p.total_stock * unit_cost for p in payload.low_stock_products), metrics.ZERO
        )
        total_products = payload.total_products_count or settings.FALLBACK_TOTAL_PRODUCTS

        batch_expiries = [assess_batch(b, today) for b in payload.expiring_batches]
        expiring_value = sum(
            (b.current_quantity * unit_cost for b in payload.expiring_batches), metrics.ZERO
        )

        distribution = [
            CategoryShare(
                name=c.category,
                value=c.stock_value,
                percentage=metrics.percentage_of(c.stock_value, total_value),
            )
            for c in payload.stock_by_category
        ]
        top_moving_value = _moving_value(payload.top_moving_products, unit_cost)

        return InventoryInsights(
            generated_at=generated_at,
            total_inventory_value=total_value,
            avg_unit_cost=unit_cost,
            low_stock_count=len(payload.low_stock_products),
            critical_stock_count=sum(1 for s in stock_levels if s.status == "Critical"),
            low_stock_value=low_stock_value,
            low_stock_percentage=metrics.percentage_of(
                len(payload.low_stock_products), total_products
            ),
            expiring_batch_count=len(payload.expiring_batches),
            expiring_soon_count=sum(
                1 for b in batch_expiries if b.days_left <= settings.EXPIRY_ALERT_DAYS
            ),
            expiring_stock_value=expiring_value,
            expiring_stock_percentage=metrics.percentage_of(expiring_value, total_value),
            category_distribution=distribution,
            most_valuable_category=metrics.pick_top(distribution, metrics.field_key("value")),
            top_moving_value=top_moving_value,
            slow_moving_value=_moving_value(payload.slow_moving_products, unit_cost),
            slow_moving_count=len(payload.slow_moving_products),
            # Monthly movement annualized
            inventory_turnover=metrics.safe_divide(top_moving_value, total_value) * 12,
            stock_levels=stock_levels,
            batch_expiries=batch_expiries,
        )

    def summary_metrics(self, insights: InventoryInsights) -> list[Metric]:
        top = insights.most_valuable_category
        return [
            Metric("Total Inventory Value", insights.total_inventory_value, "currency"),
            Metric("Low Stock Items", insights.low_stock_count, "count"),
            Metric("Critical Stock Items", insights.critical_stock_count, "count"),
            Metric("Low Stock Value", insights.low_stock_value, "currency"),
            Metric("Low Stock Percentage", insights.low_stock_percentage, "percent"),
            Metric("Expiring Batches", insights.expiring_batch_count, "count"),
            Metric("Expiring Stock Value", insights.expiring_stock_value, "currency"),
            Metric("Expiring Stock Percentage", insights.expiring_stock_percentage, "percent"),
            Metric("Inventory Turnover", insights.inventory_turnover, "decimal"),
            Metric("Most Valuable Category", top.name if top else "N/A"),
        ]

    def tables(self, payload: InventoryReport, insights: InventoryInsights) -> list[Table]:
        moving_columns = [
            Column("Product", lambda p: p.name),
            Column("Quantity Sold", lambda p: p.quantity_sold, "count"),
        ]
        return [
            Table(
                "Low Stock Products",
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
                "Expiring Batches",
                [
                    Column("Batch", lambda b: b.batch.batch_number),
                    Column("Product", lambda b: b.batch.product_name),
                    Column("Expiry Date", lambda b: b.batch.expiry_date, "date"),
                    Column("Days Left", lambda b: b.days_left, "count"),
                    Column("Quantity", lambda b: b.batch.current_quantity, "count"),
                    Column("Urgency", lambda b: b.tier, status=lambda b: b.tier),
                ],
                insights.batch_expiries,
                empty_message="No batches expiring soon",
            ),
            Table(
                "Stock Value by Category",
                [
                    Column("Category", lambda c: c.name),
                    Column("Stock Value", lambda c: c.value, "currency"),
                    Column("Share", lambda c: c.percentage, "percent"),
                ],
                insights.category_distribution,
            ),
            Table("Top Moving Products", moving_columns, payload.top_moving_products),
            Table("Slow Moving Products", moving_columns, payload.slow_moving_products),
        ]

    def charts(self, payload: InventoryReport, insights: InventoryInsights) -> list[Chart]:
        colors = settings.CHART_COLORS
        return [
            Chart(
                "Inventory Value Distribution by Category",
                "pie",
                [
                    ChartPoint(c.name, c.value, colors[i % len(colors)])
                    for i, c in enumerate(insights.category_distribution)
                ],
            )
        ]

    def default_period_label(self, payload: InventoryReport, insights: InventoryInsights) -> str:
        return f"As of {super().default_period_label(payload, insights)}"
