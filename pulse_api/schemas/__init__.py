"""Pydantic schemas for API request/response validation."""

from pulse_api.schemas.hierarchy import (
    KpiHierarchyRequest,
    ManagerHierarchyRequest,
    MetricsHierarchyRequest,
    NoDataResponse,
    SalesHierarchyRequest,
)
from pulse_api.schemas.records import (
    CommitmentCreate,
    CommitmentSummary,
    CommitmentUpdate,
    DisclosureCreate,
    EscalationCreate,
    FilterDataRequest,
    InformationCreate,
    MidmonthReviewCreate,
    ProductQtyUpdate,
    ReceiverTerritoryRequest,
    ResultsResponse,
    TerritoryRequest,
)

__all__ = [
    # Hierarchy schemas
    "KpiHierarchyRequest",
    "ManagerHierarchyRequest",
    "MetricsHierarchyRequest",
    "NoDataResponse",
    "SalesHierarchyRequest",
    # Record schemas
    "CommitmentCreate",
    "CommitmentSummary",
    "CommitmentUpdate",
    "DisclosureCreate",
    "EscalationCreate",
    "FilterDataRequest",
    "InformationCreate",
    "MidmonthReviewCreate",
    "ProductQtyUpdate",
    "ReceiverTerritoryRequest",
    "ResultsResponse",
    "TerritoryRequest",
]
