from decimal import Decimal

import pytest

from report_engine.reports.sales_reps import SalesRepPipeline, efficiency_score
from report_engine.schemas import CommissionReport, RepCommission


@pytest.fixture
def pipeline(tmp_path):
    return SalesRepPipeline(output_dir=tmp_path, test_mode=True)


def test_sales_rep_insights(pipeline, commission_payload, as_of):
    insights = pipeline.compute(commission_payload, as_of)

    assert insights.top_performer.full_name == "Kamal Silva"
    assert insights.total_sales == 150000
    assert insights.total_commission_payout == 7000
    assert insights.avg_commission_rate == 4
    assert round(insights.commission_expense_ratio, 2) == Decimal("4.67")
    assert insights.commission_growth == 50
    assert [(e.name, e.efficiency) for e in insights.rep_efficiency] == [
        ("Kamal Silva", 20000),
        ("Nimal Perera", 12500),
        ("Sunil Fernando", 0),
    ]
    assert insights.most_efficient_rep.name == "Kamal Silva"


def test_monthly_growth(pipeline, commission_payload, as_of):
    insights = pipeline.compute(commission_payload, as_of)
    assert [m.growth for m in insights.monthly_growth] == [50, None]

    text = pipeline.to_delimited_text(commission_payload, insights)
    assert "May 2024,3,Rs. 3000000,Rs. 150000,4%,+50%" in text
    assert "April 2024,3,Rs. 2000000,Rs. 100000,4%,N/A" in text


def test_equal_efficiency_keeps_payload_order(pipeline, as_of):
    payload = CommissionReport(
        rep_commissions=[
            RepCommission(full_name="First", commission_rate=Decimal("5"), total_sales=Decimal("1000")),
            RepCommission(full_name="Second", commission_rate=Decimal("2"), total_sales=Decimal("400")),
        ]
    )
    insights = pipeline.compute(payload, as_of)
    assert [e.name for e in insights.rep_efficiency] == ["First", "Second"]


def test_efficiency_without_rate():
    assert efficiency_score(RepCommission(total_sales=Decimal("500"))) == 0


def test_sales_rep_recommendations(pipeline, commission_payload, as_of):
    insights = pipeline.compute(commission_payload, as_of)
    titles = [r.title for r in insights.recommendations]

    assert "Reverse Commission Decline" not in titles
    assert titles[:2] == ["Share Top Strategies", "Reward Efficiency"]
    assert "efficiency score at 20000" in insights.recommendations[1].text
    assert insights.recommendations[-1].text.startswith("Commissions cost 5% of sales.")
