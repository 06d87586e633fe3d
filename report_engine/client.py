"""
Thin REST client for the reporting API.

Every response is validated into its pydantic payload model before it is
returned, so callers never see raw JSON.
"""

import logging
from datetime import date
from typing import Any, TypeVar

import requests
from pydantic import ValidationError

from . import settings, utils
from .exceptions import ReportFetchError, ReportValidationError
from .schemas import (
    CommissionReport,
    CustomerReport,
    DailySalesReport,
    InventoryReport,
    ProductReport,
    ReportPayload,
    SalesReport,
)

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=ReportPayload)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Server error: {response.status_code}"


class ReportApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        token = token if token is not None else settings.API_TOKEN
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}" if token else "",
            }
        )

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug(f"Making request to: {url} {query}")

        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ReportFetchError(f"Could not reach {url}: {e}") from e

        if not response.ok:
            raise ReportFetchError(_error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ReportFetchError(f"Invalid JSON from {url}") from e

    @staticmethod
    def _validate(model: type[P], data: Any) -> P:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ {model.__name__} failed validation:\n{e}")
            raise ReportValidationError(
                f"{model.__name__} payload failed validation ({e.error_count()} errors)"
            ) from e

    def _fetch(self, model: type[P], path: str, params: dict[str, Any] | None = None) -> P:
        return self._validate(model, self._get(path, params))

    def get_inventory_report(self) -> InventoryReport:
        return self._fetch(InventoryReport, "/reports/inventory")

    def get_sales_report(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        sales_rep_id: str | None = None,
        product_id: str | None = None,
        area: str | None = None,
    ) -> SalesReport:
        """Sales for a date range; defaults to the current calendar month."""
        start_date = start_date or utils.first_day_of_month()
        end_date = end_date or utils.last_day_of_month()
        data = self._get(
            "/reports/sales",
            {
                "startDate": start_date.isoformat(),
                "endDate": end_date.isoformat(),
                "salesRepId": sales_rep_id,
                "productId": product_id,
                "area": area,
            },
        )
        # Remember the requested range for reports with no daily rows.
        if isinstance(data, dict):
            data = {"startDate": start_date, "endDate": end_date, **data}
        return self._validate(SalesReport, data)

    def get_commission_report(
        self, month: int | None = None, year: int | None = None
    ) -> CommissionReport:
        return self._fetch(
            CommissionReport, "/reports/commissions", {"month": month, "year": year}
        )

    def get_daily_sales_report(self, report_date: date | None = None) -> DailySalesReport:
        return self._fetch(
            DailySalesReport,
            "/reports/daily-sales",
            {"date": report_date.isoformat() if report_date else None},
        )

    def get_customer_report(self) -> CustomerReport:
        return self._fetch(CustomerReport, "/reports/customers")

    def get_product_report(self) -> ProductReport:
        """Product performance combines this month's sales with current inventory."""
        sales = self.get_sales_report()
        inventory = self.get_inventory_report()
        return ProductReport(
            sales_by_product=sales.sales_by_product,
            low_stock_products=inventory.low_stock_products,
            expiring_batches=inventory.expiring_batches,
            top_moving_products=inventory.top_moving_products,
            slow_moving_products=inventory.slow_moving_products,
        )
