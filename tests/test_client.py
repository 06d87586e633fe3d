from datetime import date

import pytest
import requests

from report_engine import utils
from report_engine.client import ReportApiClient
from report_engine.exceptions import ReportFetchError, ReportValidationError

BASE_URL = "http://api.test/api"

INVALID_JSON = object()


class StubResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.body is INVALID_JSON:
            raise ValueError("Expecting value")
        return self.body


class StubSession:
    """Answers GET requests from a path -> response table and records each call."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.responses[url.removeprefix(BASE_URL)]


def make_client(session):
    return ReportApiClient(base_url=BASE_URL + "/", token="secret", timeout=5, session=session)


def test_inventory_report_is_validated(inventory_json):
    session = StubSession({"/reports/inventory": StubResponse(body=inventory_json)})
    report = make_client(session).get_inventory_report()

    assert report.low_stock_products[1].total_stock == 35
    assert session.calls == [(BASE_URL + "/reports/inventory", {}, 5)]
    assert session.headers["Authorization"] == "Bearer secret"


def test_missing_filters_are_not_sent():
    session = StubSession({"/reports/sales": StubResponse(body={})})
    make_client(session).get_sales_report(
        start_date=date(2024, 5, 1), end_date=date(2024, 5, 31), area="Kandy"
    )
    _, params, _ = session.calls[0]
    assert params == {"startDate": "2024-05-01", "endDate": "2024-05-31", "area": "Kandy"}


def test_sales_report_defaults_to_current_month():
    session = StubSession({"/reports/sales": StubResponse(body={"salesByDate": None})})
    report = make_client(session).get_sales_report()

    _, params, _ = session.calls[0]
    assert params["startDate"] == utils.first_day_of_month().isoformat()
    assert params["endDate"] == utils.last_day_of_month().isoformat()
    assert report.start_date == utils.first_day_of_month()
    assert report.sales_by_date == []


def test_daily_sales_date_param():
    session = StubSession({"/reports/daily-sales": StubResponse(body={})})
    client = make_client(session)

    client.get_daily_sales_report(date(2024, 5, 20))
    client.get_daily_sales_report()
    assert [params for _, params, _ in session.calls] == [{"date": "2024-05-20"}, {}]


def test_product_report_combines_sales_and_inventory(sales_json, inventory_json):
    session = StubSession(
        {
            "/reports/sales": StubResponse(body=sales_json),
            "/reports/inventory": StubResponse(body=inventory_json),
        }
    )
    report = make_client(session).get_product_report()

    assert [p.name for p in report.sales_by_product] == ["Neem Oil", "Herbal Tea"]
    assert len(report.expiring_batches) == 2
    assert len(session.calls) == 2


def test_server_message_is_surfaced():
    session = StubSession({"/reports/customers": StubResponse(403, {"message": "Access denied"})})
    with pytest.raises(ReportFetchError) as excinfo:
        make_client(session).get_customer_report()
    assert str(excinfo.value) == "Access denied"
    assert excinfo.value.status_code == 403


def test_server_error_without_body():
    session = StubSession({"/reports/customers": StubResponse(500, INVALID_JSON)})
    with pytest.raises(ReportFetchError, match="Server error: 500"):
        make_client(session).get_customer_report()


def test_invalid_json_body():
    session = StubSession({"/reports/customers": StubResponse(200, INVALID_JSON)})
    with pytest.raises(ReportFetchError, match="Invalid JSON"):
        make_client(session).get_customer_report()


def test_unreachable_server():
    session = StubSession(error=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(ReportFetchError, match="Could not reach"):
        make_client(session).get_commission_report()


def test_malformed_payload_raises_validation_error():
    body = {"lowStockProducts": [{"name": "Neem Oil", "total_stock": "lots"}]}
    session = StubSession({"/reports/inventory": StubResponse(body=body)})
    with pytest.raises(ReportValidationError) as excinfo:
        make_client(session).get_inventory_report()
    assert isinstance(excinfo.value, ReportFetchError)
    assert "InventoryReport" in str(excinfo.value)
