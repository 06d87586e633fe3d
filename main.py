import logging

from report_engine import settings
from report_engine.client import ReportApiClient
from report_engine.exceptions import ReportFetchError
from report_engine.logger import setup_logger
from report_engine.registry import get_pipeline

logger = logging.getLogger("report_engine.main")

# No rasterizer ships with the engine, so the runner exports the HTML document
# alongside the CSV. Pass a rasterizer to pipeline.run() to produce PDFs.
EXPORT_FORMATS = ("csv", "html")


def run_all_reports():
    """Main orchestration function: fetch, compute and export every report."""
    setup_logger()
    logger.info("--- Starting Report Export Process ---")

    client = ReportApiClient()
    failed = []

    for report_type in settings.REPORT_ORDER:
        pipeline = get_pipeline(report_type)
        try:
            results = pipeline.run(client, formats=EXPORT_FORMATS)
        except ReportFetchError as e:
            logger.error(f"Skipping {report_type}: {e}")
            failed.append(report_type)
            continue
        if not all(result.success for result in results):
            failed.append(report_type)

    if failed:
        logger.warning(f"⚠️ Finished with problems in: {', '.join(failed)}")
    else:
        logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_all_reports()
