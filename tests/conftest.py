from datetime import datetime

import pytest

from report_engine.schemas import (
    CommissionReport,
    CustomerReport,
    DailySalesReport,
    InventoryReport,
    ProductReport,
    SalesReport,
)

AS_OF = datetime(2024, 5, 20, 9, 30)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def inventory_json():
    return {
        "lowStockProducts": [
            {"product_id": "P1", "name": "Neem Oil", "reorder_level": 40, "total_stock": 10},
            {"product_id": "P2", "name": "Aloe Gel", "reorder_level": "40", "total_stock": "35.00"},
        ],
        "expiringBatches": [
            {
                "batch_id": "B1",
                "batch_number": "BN-001",
                "product_name": "Neem Oil",
                "expiry_date": "2024-05-25",
                "current_quantity": 12,
            },
            {
                "batch_id": "B2",
                "batch_number": "BN-002",
                "product_name": "Aloe Gel",
                "expiry_date": "2024-06-10T00:00:00.000Z",
                "current_quantity": "8",
            },
        ],
        "stockByCategory": [
            {"category": "Oils", "stock_value": "150000.50", "product_count": 5},
            {"category": "Gels", "stock_value": 50000, "product_count": 5},
        ],
        "topMovingProducts": [{"product_id": "P3", "name": "Herbal Tea", "quantity_sold": 1}],
        "slowMovingProducts": [{"product_id": "P4", "name": "Balm", "quantity_sold": 2}],
        "totalProductsCount": 40,
    }


@pytest.fixture
def inventory_payload(inventory_json):
    return InventoryReport.model_validate(inventory_json)


@pytest.fixture
def sales_json():
    return {
        "salesByDate": [
            {"date": "2024-05-03", "total_sales": "3000", "order_count": 3},
            {"date": "2024-05-01", "total_sales": "1000", "order_count": 1},
            {"date": "2024-05-02", "total_sales": "1000", "order_count": 2},
            {"date": "2024-05-04", "total_sales": "3000", "order_count": 2},
        ],
        "salesByProduct": [
            {"product_id": "P1", "name": "Neem Oil", "total_quantity": 10, "total_sales": "5000"},
            {"product_id": "P3", "name": "Herbal Tea", "total_quantity": 5, "total_sales": "3000"},
        ],
        "salesByRep": [
            {"user_id": "U1", "full_name": "Kamal Silva", "order_count": 5, "total_sales": "5000"},
            {"user_id": "U2", "full_name": "Nimal Perera", "order_count": 3, "total_sales": "3000"},
        ],
        "salesByPaymentType": [
            {"payment_type": "cash", "order_count": 3, "total_sales": "2600"},
            {"payment_type": "credit", "order_count": 4, "total_sales": "4400"},
            {"payment_type": "cheque", "order_count": 1, "total_sales": "1000"},
        ],
    }


@pytest.fixture
def sales_payload(sales_json):
    return SalesReport.model_validate(sales_json)


@pytest.fixture
def commission_json():
    return {
        "repCommissions": [
            {
                "user_id": "U1",
                "full_name": "Kamal Silva",
                "commission_rate": "5.00",
                "total_sales": "100000",
                "commission_amount": "5000",
            },
            {
                "user_id": "U2",
                "full_name": "Nimal Perera",
                "commission_rate": "4",
                "total_sales": "50000",
                "commission_amount": "2000",
            },
            {
                "user_id": "U3",
                "full_name": "Sunil Fernando",
                "commission_rate": "3",
                "total_sales": "0",
                "commission_amount": "0",
            },
        ],
        "commissionHistory": [
            {
                "month": 5,
                "year": 2024,
                "rep_count": 3,
                "total_sales": "3000000",
                "total_commission": "150000",
                "avg_commission_rate": "4.00",
            },
            {
                "month": 4,
                "year": 2024,
                "rep_count": 3,
                "total_sales": "2000000",
                "total_commission": "100000",
                "avg_commission_rate": "4.00",
            },
        ],
    }


@pytest.fixture
def commission_payload(commission_json):
    return CommissionReport.model_validate(commission_json)


@pytest.fixture
def daily_json():
    return {
        "reportDate": "2024-05-20",
        "summary": {
            "report_date": "2024-05-20",
            "total_orders": 4,
            "total_sales": "9000",
            "total_discounts": "1000",
        },
        "paymentBreakdown": [
            {"payment_type": "cash", "order_count": 2, "amount": "4000"},
            {"payment_type": "credit", "order_count": 2, "amount": "5000"},
        ],
        "salesRepBreakdown": [
            {"sales_rep": "Kamal Silva", "order_count": 3, "total_sales": "7000"},
            {"sales_rep": "Nimal Perera", "order_count": 1, "total_sales": "2000"},
        ],
        "productBreakdown": [
            {"product_name": f"Product {n}", "quantity_sold": 20 - n, "total_sales": str(1000 - n * 50)}
            for n in range(12)
        ],
        "orderDetails": [
            {
                "order_id": "O1",
                "customer_name": "Perera & Sons",
                "area": "Kandy",
                "order_date": "2024-05-20T08:15:00",
                "total_amount": "2500",
                "discount_amount": "0",
                "payment_type": "cash",
                "payment_status": "paid",
                "status": "delivered",
            }
        ],
    }


@pytest.fixture
def daily_payload(daily_json):
    return DailySalesReport.model_validate(daily_json)


@pytest.fixture
def product_payload(sales_payload, inventory_payload):
    return ProductReport(
        sales_by_product=sales_payload.sales_by_product,
        low_stock_products=inventory_payload.low_stock_products,
        expiring_batches=inventory_payload.expiring_batches,
        top_moving_products=inventory_payload.top_moving_products,
        slow_moving_products=inventory_payload.slow_moving_products,
    )


@pytest.fixture
def customer_json():
    return {
        "topCustomers": [
            {"customer_id": "C1", "name": "Green Mart", "area": "Kandy", "order_count": 4, "total_spent": "10000"},
            {"customer_id": "C2", "name": "Lanka Stores", "area": "Galle", "order_count": 0, "total_spent": "3000"},
        ],
        "creditCustomers": [
            {
                "customer_id": "C1",
                "name": "Green Mart",
                "credit_balance": "9000",
                "credit_limit": "10000",
                "credit_usage_percent": "90",
            },
            {
                "customer_id": "C3",
                "name": "Hill Pharmacy",
                "credit_balance": "2000",
                "credit_limit": "10000",
                "credit_usage_percent": "20",
            },
        ],
        "customerAcquisition": [
            {"month": "2024-03", "new_customers": 0},
            {"month": "2024-04", "new_customers": 4},
            {"month": "2024-05", "new_customers": 6},
        ],
        "salesByArea": [
            {"area": "Kandy", "customer_count": 10, "order_count": 30, "total_sales": "12000"},
            {"area": "Galle", "customer_count": 4, "order_count": 6, "total_sales": "3000"},
        ],
    }


@pytest.fixture
def customer_payload(customer_json):
    return CustomerReport.model_validate(customer_json)


class RecordingSharer:
    def __init__(self):
        self.calls = []

    def __call__(self, path, mime_type, report_type):
        self.calls.append((path, mime_type, report_type))


@pytest.fixture
def sharer():
    return RecordingSharer()
