from decimal import Decimal

import pytest

from report_engine.reports.products import ProductPipeline
from report_engine.schemas import InventoryReport, ProductReport


@pytest.fixture
def pipeline(tmp_path):
    return ProductPipeline(output_dir=tmp_path, test_mode=True)


def test_product_insights(pipeline, product_payload, as_of):
    insights = pipeline.compute(product_payload, as_of)

    assert insights.top_selling_product.name == "Neem Oil"
    assert insights.top_product_sales_percentage == Decimal("62.5")
    assert insights.critical_stock_count == 1
    assert insights.low_stock_count == 2
    assert insights.soonest_expiring.batch.batch_number == "BN-001"
    assert insights.days_to_soonest_expiry == 5
    assert insights.avg_stock_health == Decimal("56.25")


def test_product_recommendations(pipeline, product_payload, as_of):
    insights = pipeline.compute(product_payload, as_of)
    assert [r.title for r in insights.recommendations] == [
        "Protect Top Sellers",
        "Order Critical Stock",
        "Promote Expiring Products",
        "Move Slow Inventory",
        "Plan for Seasonality",
    ]
    assert "drives 63% of product sales" in insights.recommendations[0].text
    assert "expires in 5 days" in insights.recommendations[2].text


def test_empty_product_report(pipeline, as_of):
    insights = pipeline.compute(ProductReport(), as_of)
    assert insights.top_selling_product is None
    assert insights.top_product_sales_percentage == 0
    assert insights.soonest_expiring is None
    assert insights.days_to_soonest_expiry is None
    assert [r.title for r in insights.recommendations] == ["Plan for Seasonality"]

    metrics = {m.label: m for m in pipeline.summary_metrics(insights)}
    assert metrics["Days to Soonest Expiry"].value == "N/A"


def test_expiring_products_sorted_by_days_left(pipeline, product_payload, as_of):
    insights = pipeline.compute(product_payload, as_of)
    table = next(t for t in pipeline.tables(product_payload, insights) if t.title == "Expiring Products")
    assert [b.days_left for b in table.records] == [5, 21]


def test_expiring_promotion_fires_at_alert_threshold(pipeline, inventory_json, as_of):
    inventory_json["expiringBatches"] = [
        {
            "batch_id": "B9",
            "batch_number": "BN-009",
            "product_name": "Neem Oil",
            "expiry_date": "2024-06-04",
            "current_quantity": 6,
        }
    ]
    batches = InventoryReport.model_validate(inventory_json).expiring_batches
    insights = pipeline.compute(ProductReport(expiring_batches=batches), as_of)

    assert insights.days_to_soonest_expiry == 15
    assert "Promote Expiring Products" in [r.title for r in insights.recommendations]
