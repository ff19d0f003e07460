"""API endpoints for dashboards, metric filters and sales tables."""

from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pulse_api.database.database import get_db
from pulse_api.schemas.records import (
    FilterDataRequest,
    MidmonthReviewCreate,
    ProductQtyUpdate,
    ResultsResponse,
    TerritoryRequest,
)
from pulse_api.services.reporting_service import ReportingService
from pulse_api.utils.errors import create_required_error


# =============================================================================
# Dependency Injection
# =============================================================================

def get_reporting_service(
    session: Annotated[Session, Depends(get_db)],
) -> ReportingService:
    """Get reporting service instance."""
    return ReportingService(session)


def _require_territory(request: TerritoryRequest) -> str:
    if not request.territory:
        raise create_required_error("Territory")
    return request.territory


# =============================================================================
# Router Setup
# =============================================================================

reporting_router = APIRouter(tags=["Reporting"])


# =============================================================================
# Dashboards
# =============================================================================

@reporting_router.post(
    "/dashboard/{level}/{period}",
    summary="Get Dashboard Row",
    description="Dashboard row for a BE, BM, BL, BH or SBUH territory, month (ftm) or year to date (ytd).",
)
async def get_dashboard_row(
    level: str,
    period: str,
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, Any]:
    """Get the dashboard row owned by a territory."""
    return service.get_dashboard_row(level, period, _require_territory(request))


@reporting_router.post("/dashboardYTD", summary="Year To Date Score Totals")
async def get_ytd_score_totals(
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, float]:
    """Activity and business score totals from the year-to-date dashboard."""
    return service.get_score_totals("ytd", _require_territory(request))


@reporting_router.post("/dashboardFTD", summary="Month Score Totals")
async def get_ftm_score_totals(
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, float]:
    """Activity and business score totals from the month dashboard."""
    return service.get_score_totals("ftm", _require_territory(request))


@reporting_router.post(
    "/efficiency/{level}",
    summary="Manager Efficiency Index",
    description="Business, effort, hygiene and commitment totals for a BM, BL, BH or SBUH territory.",
)
async def get_efficiency(
    level: str,
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, float]:
    """Month and year-to-date efficiency index of a manager territory."""
    return service.get_efficiency(level, _require_territory(request))


# =============================================================================
# Metric filters and edits
# =============================================================================

@reporting_router.post("/filterData", summary="Filter Territories By Metric")
async def filter_data(
    request: FilterDataRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> List[Dict[str, Any]]:
    """List occupied territories whose metric falls within [from, to]."""
    return service.filter_by_metric(request)


@reporting_router.put("/updateProductQty", summary="Update Mid-month Product Quantity")
async def update_product_qty(
    update: ProductQtyUpdate,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, Any]:
    """Set one mid-month quantity column for a territory."""
    return service.update_product_qty(update)


@reporting_router.post(
    "/midmonth-review",
    status_code=status.HTTP_201_CREATED,
    summary="Log Mid-month Review",
)
async def log_midmonth_review(
    review: MidmonthReviewCreate,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> Dict[str, Any]:
    """Record a reviewed metric value between two territories."""
    return service.log_midmonth_review(review)


# =============================================================================
# Sales tables
# =============================================================================

@reporting_router.post("/getTable1", response_model=ResultsResponse, summary="Stockist Sales")
async def get_stockist_sales(
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> ResultsResponse:
    """Stockist, product and sales rows for a territory."""
    return ResultsResponse(results=service.get_stockist_sales(_require_territory(request)))


@reporting_router.post("/getTable2", response_model=ResultsResponse, summary="Sales Pivot")
async def get_sales_pivot(
    request: TerritoryRequest,
    service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> ResultsResponse:
    """Product by stockist pivot with a grand total per product."""
    return ResultsResponse(results=service.get_sales_pivot(_require_territory(request)))
