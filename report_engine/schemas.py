"""
Data contracts for the report payloads returned by the reporting API.

These models are the validation boundary: numeric fields are normalized here
(missing -> 0, numeric strings -> numbers) or rejected with a ValidationError,
so the calculators downstream only ever see clean, non-negative values.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, get_origin

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def _blank_to_zero(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    return value


def _to_quantity(value: Any) -> Any:
    """Accepts whole numbers in any spelling ("12", "12.00", 12.0)."""
    value = _blank_to_zero(value)
    if isinstance(value, bool):
        raise ValueError("quantity must be a number")
    if isinstance(value, (str, float)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"'{value}' is not a number")
        if not number.is_finite() or number != number.to_integral_value():
            raise ValueError(f"'{value}' is not a whole number")
        return int(number)
    return value


def _to_text(value: Any) -> Any:
    return "" if value is None else str(value)


def _to_date(value: Any) -> Any:
    # The API mixes plain dates and midnight timestamps ("2024-05-01T00:00:00.000Z")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


Amount = Annotated[Decimal, BeforeValidator(_blank_to_zero), Field(ge=0)]
Rate = Annotated[Decimal, BeforeValidator(_blank_to_zero), Field(ge=0)]
Quantity = Annotated[int, BeforeValidator(_to_quantity), Field(ge=0)]
Text = Annotated[str, BeforeValidator(_to_text)]
ReportDate = Annotated[date, BeforeValidator(_to_date)]


class ReportRecord(BaseModel):
    """A single flat row inside a report payload."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ReportPayload(BaseModel):
    """A named collection of record arrays, as returned by one report endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_arrays_are_empty(cls, value, info):
        field = cls.model_fields[info.field_name]
        if value is None and get_origin(field.annotation) is list:
            return []
        return value


# --- Inventory ---


class LowStockProduct(ReportRecord):
    product_id: Text = ""
    name: Text = ""
    reorder_level: Quantity = 0
    total_stock: Quantity = 0


class ExpiringBatch(ReportRecord):
    batch_id: Text = ""
    batch_number: Text = ""
    product_name: Text = ""
    expiry_date: ReportDate
    current_quantity: Quantity = 0


class CategoryStock(ReportRecord):
    category: Text = ""
    stock_value: Amount = Decimal("0")
    product_count: Quantity | None = None


class MovingProduct(ReportRecord):
    product_id: Text = ""
    name: Text = ""
    quantity_sold: Quantity = 0


class InventoryReport(ReportPayload):
    low_stock_products: list[LowStockProduct] = Field(
        default_factory=list, alias="lowStockProducts"
    )
    expiring_batches: list[ExpiringBatch] = Field(
        default_factory=list, alias="expiringBatches"
    )
    stock_by_category: list[CategoryStock] = Field(
        default_factory=list, alias="stockByCategory"
    )
    top_moving_products: list[MovingProduct] = Field(
        default_factory=list, alias="topMovingProducts"
    )
    slow_moving_products: list[MovingProduct] = Field(
        default_factory=list, alias="slowMovingProducts"
    )
    total_products_count: Quantity | None = Field(
        default=None, alias="totalProductsCount"
    )


# --- Sales ---


class DailySales(ReportRecord):
    date: ReportDate
    total_sales: Amount = Decimal("0")
    order_count: Quantity = 0


class ProductSales(ReportRecord):
    product_id: Text = ""
    name: Text = ""
    total_quantity: Quantity = 0
    total_sales: Amount = Decimal("0")


class RepSales(ReportRecord):
    user_id: Text = ""
    full_name: Text = ""
    order_count: Quantity = 0
    total_sales: Amount = Decimal("0")


class PaymentTypeSales(ReportRecord):
    payment_type: Text = ""
    order_count: Quantity = 0
    total_sales: Amount = Decimal("0")


class SalesReport(ReportPayload):
    sales_by_date: list[DailySales] = Field(default_factory=list, alias="salesByDate")
    sales_by_product: list[ProductSales] = Field(
        default_factory=list, alias="salesByProduct"
    )
    sales_by_rep: list[RepSales] = Field(default_factory=list, alias="salesByRep")
    sales_by_payment_type: list[PaymentTypeSales] = Field(
        default_factory=list, alias="salesByPaymentType"
    )
    # Filter range the report was requested for; used when salesByDate is empty.
    start_date: ReportDate | None = Field(default=None, alias="startDate")
    end_date: ReportDate | None = Field(default=None, alias="endDate")


# --- Commission ---


class RepCommission(ReportRecord):
    user_id: Text = ""
    full_name: Text = ""
    commission_rate: Rate = Decimal("0")
    total_sales: Amount = Decimal("0")
    commission_amount: Amount = Decimal("0")


class CommissionHistory(ReportRecord):
    month: Quantity = 0
    year: Quantity = 0
    rep_count: Quantity = 0
    total_sales: Amount = Decimal("0")
    total_commission: Amount = Decimal("0")
    avg_commission_rate: Rate = Decimal("0")


class CommissionReport(ReportPayload):
    rep_commissions: list[RepCommission] = Field(
        default_factory=list, alias="repCommissions"
    )
    # Most recent month first.
    commission_history: list[CommissionHistory] = Field(
        default_factory=list, alias="commissionHistory"
    )


# --- Daily sales ---


class DailySummary(ReportRecord):
    report_date: ReportDate | None = None
    total_orders: Quantity = 0
    total_sales: Amount = Decimal("0")
    total_discounts: Amount = Decimal("0")


class PaymentBreakdown(ReportRecord):
    payment_type: Text = ""
    order_count: Quantity = 0
    amount: Amount = Decimal("0")


class SalesRepBreakdown(ReportRecord):
    sales_rep: Text = ""
    order_count: Quantity = 0
    total_sales: Amount = Decimal("0")


class ProductBreakdown(ReportRecord):
    product_name: Text = ""
    quantity_sold: Quantity = 0
    total_sales: Amount = Decimal("0")


class OrderDetail(ReportRecord):
    order_id: Text = ""
    customer_name: Text = ""
    area: Text = ""
    order_date: datetime | None = None
    total_amount: Amount = Decimal("0")
    discount_amount: Amount = Decimal("0")
    payment_type: Text = ""
    payment_status: Text = ""
    status: Text = ""


class DailySalesReport(ReportPayload):
    report_date: ReportDate | None = Field(default=None, alias="reportDate")
    summary: DailySummary = Field(default_factory=DailySummary)
    payment_breakdown: list[PaymentBreakdown] = Field(
        default_factory=list, alias="paymentBreakdown"
    )
    sales_rep_breakdown: list[SalesRepBreakdown] = Field(
        default_factory=list, alias="salesRepBreakdown"
    )
    product_breakdown: list[ProductBreakdown] = Field(
        default_factory=list, alias="productBreakdown"
    )
    order_details: list[OrderDetail] = Field(
        default_factory=list, alias="orderDetails"
    )


# --- Product performance (sales + inventory combined) ---


class ProductReport(ReportPayload):
    sales_by_product: list[ProductSales] = Field(
        default_factory=list, alias="salesByProduct"
    )
    low_stock_products: list[LowStockProduct] = Field(
        default_factory=list, alias="lowStockProducts"
    )
    expiring_batches: list[ExpiringBatch] = Field(
        default_factory=list, alias="expiringBatches"
    )
    top_moving_products: list[MovingProduct] = Field(
        default_factory=list, alias="topMovingProducts"
    )
    slow_moving_products: list[MovingProduct] = Field(
        default_factory=list, alias="slowMovingProducts"
    )


# --- Customers ---


class TopCustomer(ReportRecord):
    customer_id: Text = ""
    name: Text = ""
    area: Text = ""
    order_count: Quantity = 0
    total_spent: Amount = Decimal("0")


class CreditCustomer(ReportRecord):
    customer_id: Text = ""
    name: Text = ""
    credit_balance: Amount = Decimal("0")
    credit_limit: Amount = Decimal("0")
    credit_usage_percent: Rate = Decimal("0")


class CustomerAcquisition(ReportRecord):
    month: Text = ""  # "YYYY-MM"
    new_customers: Quantity = 0


class AreaSales(ReportRecord):
    area: Text = ""
    customer_count: Quantity = 0
    order_count: Quantity = 0
    total_sales: Amount = Decimal("0")


class CustomerReport(ReportPayload):
    top_customers: list[TopCustomer] = Field(default_factory=list, alias="topCustomers")
    credit_customers: list[CreditCustomer] = Field(
        default_factory=list, alias="creditCustomers"
    )
    # Oldest month first.
    customer_acquisition: list[CustomerAcquisition] = Field(
        default_factory=list, alias="customerAcquisition"
    )
    sales_by_area: list[AreaSales] = Field(default_factory=list, alias="salesByArea")
