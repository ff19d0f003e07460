"""Pydantic models for the hierarchy endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MetricsHierarchyRequest(BaseModel):
    """Request body for the metrics-table hierarchy."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    territory: Optional[str] = Field(
        default=None,
        description="Root territory. Omit to build every top-level territory.",
    )
    include_inactive: bool = Field(
        default=False,
        alias="includeInactive",
        description="Include vacant territories",
    )


class KpiHierarchyRequest(BaseModel):
    """Request body for the territory downline KPI hierarchy."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    empterr: Optional[str] = Field(default=None, description="Root territory")
    gate_by_role: Optional[bool] = Field(
        default=None,
        alias="gateByRole",
        description="Only leaf roles carry their own KPI values. Defaults to configuration.",
    )


class ManagerHierarchyRequest(BaseModel):
    """Request body for the reporting-manager hierarchy."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    emp_code: Optional[str] = Field(default=None, alias="empCode", description="Root employee code")
    gate_by_role: Optional[bool] = Field(default=None, alias="gateByRole")


class SalesHierarchyRequest(BaseModel):
    """Request body for the sales-by-product hierarchy."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    territory: Optional[str] = Field(default=None, description="Root territory")
    gate_by_role: Optional[bool] = Field(default=None, alias="gateByRole")


class NoDataResponse(BaseModel):
    """Placeholder payload when a hierarchy query returns no rows."""

    message: str = "No data found"
