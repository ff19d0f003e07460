"""API endpoints for territory hierarchy roll-ups."""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pulse_api.config.settings import Settings, get_settings
from pulse_api.data.hierarchy_repository import HierarchyRepository
from pulse_api.database.database import get_db
from pulse_api.schemas.hierarchy import (
    KpiHierarchyRequest,
    ManagerHierarchyRequest,
    MetricsHierarchyRequest,
    NoDataResponse,
    SalesHierarchyRequest,
)
from pulse_api.services.hierarchy_service import HierarchyService
from pulse_api.utils.errors import create_required_error


# =============================================================================
# Dependency Injection
# =============================================================================

def get_hierarchy_service(
    session: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HierarchyService:
    """Get hierarchy service instance."""
    return HierarchyService(HierarchyRepository(session), settings.hierarchy)


def _or_placeholder(result: Any) -> Dict[str, Any]:
    if result is None:
        return NoDataResponse().model_dump()
    return result


# =============================================================================
# Router Setup
# =============================================================================

hierarchy_router = APIRouter(tags=["Hierarchy"])


@hierarchy_router.post(
    "/hierarchy",
    summary="Metrics Hierarchy",
    description="Territory tree with averaged KPIs and summed mid-month quantities.",
)
async def get_metrics_hierarchy(
    service: Annotated[HierarchyService, Depends(get_hierarchy_service)],
    request: Optional[MetricsHierarchyRequest] = None,
) -> Dict[str, Any]:
    """
    Build the territory hierarchy from the aggregated metrics table.

    - Returns the requested territory's subtree, or every top-level territory
    - Vacant territories are excluded unless includeInactive is true
    - KPI averages are rounded half-up at every level; mid-month quantities
      are summed exactly and never rounded
    """
    request = request or MetricsHierarchyRequest()
    result = service.get_metrics_hierarchy(
        territory=request.territory or None,
        include_inactive=request.include_inactive,
    )
    return _or_placeholder(result)


@hierarchy_router.post(
    "/hierarchy-kpi",
    summary="KPI Hierarchy",
    description="KPI averages over a territory's downline.",
)
async def get_kpi_hierarchy(
    request: KpiHierarchyRequest,
    service: Annotated[HierarchyService, Depends(get_hierarchy_service)],
) -> Dict[str, Any]:
    """Build the KPI tree under one territory."""
    if not request.empterr:
        raise create_required_error("empterr")

    result = service.get_kpi_hierarchy(request.empterr, gate_by_role=request.gate_by_role)
    return _or_placeholder(result)


@hierarchy_router.post(
    "/hierarchy-manager",
    summary="Reporting Manager Hierarchy",
    description="KPI averages over an employee's reporting line.",
)
async def get_manager_hierarchy(
    request: ManagerHierarchyRequest,
    service: Annotated[HierarchyService, Depends(get_hierarchy_service)],
) -> Dict[str, Any]:
    """Build the KPI tree keyed by employee code."""
    if not request.emp_code:
        raise create_required_error("empCode")

    result = service.get_manager_hierarchy(request.emp_code, gate_by_role=request.gate_by_role)
    return _or_placeholder(result)


@hierarchy_router.post(
    "/hierarchy-sales",
    summary="Sales Hierarchy",
    description="Per-product sales summed up a territory's downline.",
)
async def get_sales_hierarchy(
    request: SalesHierarchyRequest,
    service: Annotated[HierarchyService, Depends(get_hierarchy_service)],
) -> Dict[str, Any]:
    """Build the sales tree with product totals and totalSales per node."""
    if not request.territory:
        raise create_required_error("territory")

    result = service.get_sales_hierarchy(request.territory, gate_by_role=request.gate_by_role)
    return _or_placeholder(result)
