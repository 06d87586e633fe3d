import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from report_engine import data_handler, utils
from report_engine.document import render_document
from report_engine.exceptions import ExportError, ReportFetchError
from report_engine.formatting import format_date, format_value
from report_engine.layout import Alert, Chart, Metric, ReportLayout, Table
from report_engine.permissions import can_export_reports
from report_engine.recommendations import Recommendation, Rule, assemble
from report_engine.schemas import ReportPayload
from report_engine.tabular import render_delimited

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "csv": "text/csv",
    "pdf": "application/pdf",
    "html": "text/html",
}

Sharer = Callable[[Path, str, str], Any]


@dataclass(frozen=True)
class ExportResult:
    format: str
    success: bool
    path: Path | None = None
    mime_type: str | None = None
    message: str = ""


class Insights(BaseModel):
    """
    Derived metrics for one payload snapshot. Built once per payload and never
    mutated; ``generated_at`` is captured at compute time so that repeated
    exports of the same insights are byte-identical.
    """

    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    recommendations: tuple[Recommendation, ...] = ()


class ReportPipeline(ABC):
    """
    Abstract base class for report pipelines (Inventory, Sales, etc.).
    Follows an Extract -> Transform -> Load (ETL) pattern:
    fetch the payload, compute insights, then export and share each format.

    Subclasses describe their report once (summary metrics, tables, charts,
    recommendation rules); both export formats are rendered from that description.
    """

    report_type: str = ""
    title: str = ""
    file_prefix: str = ""
    rules: Sequence[Rule] = ()

    def __init__(self, output_dir: Path | None = None, test_mode: bool = False):
        self.output_dir = output_dir
        self.test_mode = test_mode

    # --- Domain hooks ---

    @abstractmethod
    def fetch(self, client) -> ReportPayload:
        """Pulls and validates this report's payload from the API client."""

    @abstractmethod
    def calculate(self, payload: ReportPayload, generated_at: datetime) -> Insights:
        """Derives the domain metrics. Recommendations are added by ``compute``."""

    @abstractmethod
    def summary_metrics(self, insights: Insights) -> list[Metric]:
        pass

    def tables(self, payload: ReportPayload, insights: Insights) -> list[Table]:
        return []

    def charts(self, payload: ReportPayload, insights: Insights) -> list[Chart]:
        return []

    def alerts(self, payload: ReportPayload, insights: Insights) -> list[Alert]:
        return []

    def default_period_label(self, payload: ReportPayload, insights: Insights) -> str:
        return format_date(insights.generated_at)

    def report_date(self, payload: ReportPayload, insights: Insights) -> date:
        """Date stamped into export filenames."""
        return insights.generated_at.date()

    # --- Core ---

    def compute(self, payload: ReportPayload | None, as_of: datetime | None = None) -> Insights | None:
        if payload is None:
            return None
        insights = self.calculate(payload, as_of or datetime.now())
        return insights.model_copy(
            update={"recommendations": tuple(assemble(self.rules, insights))}
        )

    def layout(
        self, payload: ReportPayload, insights: Insights, period_label: str | None = None
    ) -> ReportLayout:
        return ReportLayout(
            title=self.title,
            period_label=period_label or self.default_period_label(payload, insights),
            generated_at=insights.generated_at,
            metrics=self.summary_metrics(insights),
            tables=self.tables(payload, insights),
            charts=self.charts(payload, insights),
            alerts=self.alerts(payload, insights),
            recommendations=insights.recommendations,
        )

    def to_delimited_text(self, payload: ReportPayload | None, insights: Insights | None) -> str | None:
        if payload is None or insights is None:
            logger.warning(f"⚠️ Nothing to export for {self.report_type}.")
            return None
        return render_delimited(self.layout(payload, insights))

    def to_markup_document(
        self,
        payload: ReportPayload | None,
        insights: Insights | None,
        period_label: str | None = None,
    ) -> str | None:
        if payload is None or insights is None:
            logger.warning(f"⚠️ Nothing to export for {self.report_type}.")
            return None
        return render_document(self.layout(payload, insights, period_label))

    def log_insights(self, insights: Insights):
        """Prints the on-screen view of the insights."""
        logger.info(f"\n--- {self.title} ---")
        for metric in self.summary_metrics(insights):
            logger.info(f"{metric.label}: {format_value(metric.value, metric.kind)}")
        if insights.recommendations:
            logger.info("Recommendations:")
            for n, rec in enumerate(insights.recommendations, 1):
                logger.info(f"  {n}. {rec}")

    # --- Export ---

    def export(
        self,
        payload: ReportPayload | None,
        fmt: str,
        insights: Insights | None = None,
        rasterizer: data_handler.Rasterizer | None = None,
        sharer: Sharer | None = None,
        role: str | None = None,
        period_label: str | None = None,
    ) -> ExportResult:
        """
        Serializes, writes and shares a single export. Failures are logged and
        reported in the returned ExportResult rather than raised.
        """
        mime_type = MIME_TYPES.get(fmt)
        if mime_type is None:
            return ExportResult(fmt, False, message=f"Unsupported export format: {fmt}")
        if role is not None and not can_export_reports(role):
            logger.warning(f"⚠️ Role '{role}' may not export reports.")
            return ExportResult(fmt, False, mime_type=mime_type, message="You do not have permission to export reports")

        if insights is None:
            insights = self.compute(payload)
        if fmt == "csv":
            content = self.to_delimited_text(payload, insights)
        else:
            content = self.to_markup_document(payload, insights, period_label)
        if content is None:
            return ExportResult(fmt, False, mime_type=mime_type, message="Nothing to export")

        if sharer is None and not self.test_mode:
            sharer = data_handler.post_to_webhook

        filename = utils.build_export_filename(
            self.file_prefix, fmt, self.report_date(payload, insights)
        )
        try:
            if fmt == "pdf":
                if rasterizer is None:
                    raise ExportError("No document renderer configured")
                path = data_handler.save_rendered(content, filename, rasterizer, self.output_dir)
            else:
                path = data_handler.save_export(content, filename, self.output_dir)

            if sharer is not None:
                sharer(path, mime_type, self.report_type)
            else:
                logger.info("🧪 Test Mode: Skipping share.")
        except Exception as e:
            # Rasterizers and sharers are pluggable; any failure becomes a failed result.
            logger.error(f"❌ {fmt.upper()} export failed for {self.report_type}: {e}")
            return ExportResult(fmt, False, mime_type=mime_type, message=f"Failed to export {fmt.upper()}: {e}")

        return ExportResult(fmt, True, path=path, mime_type=mime_type, message=f"{fmt.upper()} exported")

    def run(
        self,
        client,
        formats: Sequence[str] = ("csv", "pdf"),
        rasterizer: data_handler.Rasterizer | None = None,
        sharer: Sharer | None = None,
        role: str | None = None,
        period_label: str | None = None,
    ) -> list[ExportResult]:
        """
        Orchestrates the pipeline execution. Fetch errors propagate to the caller.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        try:
            payload = self.fetch(client)
        except ReportFetchError as e:
            logger.error(f"❌ Could not fetch {self.report_type} report: {e}")
            raise

        # --- 2. TRANSFORM ---
        insights = self.compute(payload)
        self.log_insights(insights)

        # --- 3. LOAD ---
        results = [
            self.export(
                payload, fmt, insights,
                rasterizer=rasterizer, sharer=sharer, role=role, period_label=period_label,
            )
            for fmt in formats
        ]
        for result in results:
            status = "✅" if result.success else "⚠️"
            logger.info(f"{status} {result.format}: {result.path or result.message}")

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return results
