from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopledger.config import get_settings
from shopledger.database import get_db
from shopledger.services.report_service import ReportService
from shopledger.schemas.common import DataResponse, ListResponse, StorageErrorResponse
from shopledger.schemas.report import ProductPerformance, SalesSummary, TopSeller

router = APIRouter(
    prefix="/report",
    tags=["Reports"],
    responses={500: {"model": StorageErrorResponse}},
)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


@router.get(
    "/top-sellers",
    response_model=ListResponse[TopSeller],
    summary="Top selling products",
    description="Products ranked by quantity sold, excluding products with no sales."
)
def top_sellers(service: ReportService = Depends(get_report_service)):
    """Get the best-selling products. Price and revenue are rounded to 2 decimals."""
    limit = get_settings().TOP_SELLERS_LIMIT
    rows = service.top_sellers(limit=limit)

    return ListResponse[TopSeller](
        message=f"Top {limit} best-selling products retrieved successfully",
        data=rows,
        count=len(rows),
    )


@router.get(
    "/sales-summary",
    response_model=DataResponse[SalesSummary],
    summary="Sales summary",
    description="Order count, items sold, revenue, average order value and date range across all orders."
)
def sales_summary(service: ReportService = Depends(get_report_service)):
    """Get overall sales totals."""
    return DataResponse[SalesSummary](
        message="Sales summary retrieved successfully",
        data=service.sales_summary(),
    )


@router.get(
    "/product-performance",
    response_model=ListResponse[ProductPerformance],
    summary="Product performance",
    description="Sales metrics for every product, including products that never sold."
)
def product_performance(service: ReportService = Depends(get_report_service)):
    """Get per-product sales metrics."""
    rows = service.product_performance()

    return ListResponse[ProductPerformance](
        message="Product performance data retrieved successfully",
        data=rows,
        count=len(rows),
    )
