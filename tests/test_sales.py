from datetime import date
from decimal import Decimal

import pytest

from report_engine.reports.sales import SalesPipeline, sales_trend
from report_engine.schemas import DailySales, SalesReport


@pytest.fixture
def pipeline(tmp_path):
    return SalesPipeline(output_dir=tmp_path, test_mode=True)


def test_sales_insights(pipeline, sales_payload, as_of):
    insights = pipeline.compute(sales_payload, as_of)

    assert insights.total_sales == 8000
    assert insights.total_orders == 8
    assert insights.avg_order_value == 1000
    assert insights.avg_daily_sales == 2000
    assert insights.avg_daily_orders == 2
    assert insights.best_selling_product.name == "Neem Oil"
    assert insights.best_sales_rep.full_name == "Kamal Silva"
    assert insights.credit_percentage == 55
    assert insights.cash_percentage == Decimal("32.5")
    assert insights.sales_trend == 200
    assert insights.start_date == date(2024, 5, 1)
    assert insights.end_date == date(2024, 5, 4)


def test_sales_recommendations(pipeline, sales_payload, as_of):
    insights = pipeline.compute(sales_payload, as_of)
    assert [r.title for r in insights.recommendations] == [
        "Sales Trend",
        "Best Seller",
        "Credit Policy",
        "Weekly Patterns",
        "Customer Loyalty",
        "Team Performance",
    ]
    assert "trending up by 200%" in insights.recommendations[0].text
    assert '"Neem Oil"' in insights.recommendations[1].text


def test_declining_sales_trend():
    days = [
        DailySales(date=date(2024, 5, 1), total_sales=Decimal("4000")),
        DailySales(date=date(2024, 5, 2), total_sales=Decimal("1000")),
    ]
    assert sales_trend(days) == -75
    assert sales_trend(days[:1]) == 0


def test_credit_alert_only_above_half(pipeline, sales_payload, as_of):
    insights = pipeline.compute(sales_payload, as_of)
    alerts = pipeline.alerts(sales_payload, insights)
    assert [a.title for a in alerts] == ["Payment Risk Alert"]
    assert "Payment Risk Alert" in pipeline.to_markup_document(sales_payload, insights)

    cash_only = SalesReport.model_validate(
        {
            "salesByDate": [{"date": "2024-05-01", "total_sales": "100", "order_count": 1}],
            "salesByPaymentType": [{"payment_type": "cash", "order_count": 1, "total_sales": "100"}],
        }
    )
    assert pipeline.alerts(cash_only, pipeline.compute(cash_only, as_of)) == []


def test_empty_sales_falls_back_to_requested_range(pipeline, as_of):
    payload = SalesReport.model_validate({"startDate": "2024-05-01", "endDate": "2024-05-31"})
    insights = pipeline.compute(payload, as_of)

    assert insights.total_sales == 0
    assert insights.avg_order_value == 0
    assert insights.best_selling_product is None
    assert insights.sales_trend == 0
    layout = pipeline.layout(payload, insights)
    assert layout.period_label == "May 1, 2024 to May 31, 2024"
    titles = [r.title for r in insights.recommendations]
    assert "Best Seller" not in titles
    assert "Team Performance" not in titles


def test_daily_sales_table_is_newest_first(pipeline, sales_payload, as_of):
    insights = pipeline.compute(sales_payload, as_of)
    daily = next(t for t in pipeline.tables(sales_payload, insights) if t.title == "Daily Sales")
    assert [d.date.day for d in daily.records] == [4, 3, 2, 1]


def test_payment_shares_in_csv(pipeline, sales_payload, as_of):
    insights = pipeline.compute(sales_payload, as_of)
    text = pipeline.to_delimited_text(sales_payload, insights)
    assert "Credit,4,Rs. 4400,55%" in text
    assert "Cash,3,Rs. 2600,33%" in text
