from report_engine.pipeline import ReportPipeline
from report_engine.reports.commission import CommissionPipeline
from report_engine.reports.customers import CustomerPipeline
from report_engine.reports.daily_sales import DailySalesPipeline
from report_engine.reports.inventory import InventoryPipeline
from report_engine.reports.products import ProductPipeline
from report_engine.reports.sales import SalesPipeline
from report_engine.reports.sales_reps import SalesRepPipeline

# --- Pipeline Registry ---
# To add a report, write a ReportPipeline subclass and register it here.
PIPELINE_REGISTRY: dict[str, type[ReportPipeline]] = {
    pipeline.report_type: pipeline
    for pipeline in (
        InventoryPipeline,
        SalesPipeline,
        CommissionPipeline,
        DailySalesPipeline,
        ProductPipeline,
        SalesRepPipeline,
        CustomerPipeline,
    )
}


def get_pipeline(report_type: str, **kwargs) -> ReportPipeline:
    try:
        pipeline_cls = PIPELINE_REGISTRY[report_type]
    except KeyError:
        raise ValueError(f"Unknown report type: '{report_type}'") from None
    return pipeline_cls(**kwargs)
