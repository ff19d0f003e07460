"""API endpoints for organogram lookups."""

from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pulse_api.config.settings import Settings, get_settings
from pulse_api.database.database import get_db
from pulse_api.services.organogram_service import OrganogramService
from pulse_api.utils.errors import create_required_error


# =============================================================================
# Dependency Injection
# =============================================================================

def get_organogram_service(
    session: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> OrganogramService:
    """Get organogram service instance."""
    return OrganogramService(session, settings.role_check.allowed_roles)


# =============================================================================
# Router Setup
# =============================================================================

organogram_router = APIRouter(tags=["Organogram"])


@organogram_router.get("/employees", summary="List Employees")
async def list_employees(
    service: Annotated[OrganogramService, Depends(get_organogram_service)],
) -> List[Dict[str, Any]]:
    """List every employee with role, code and territory, ordered by name."""
    return service.list_employees()


@organogram_router.get("/checkrole", summary="Check Territory Role")
async def check_role(
    service: Annotated[OrganogramService, Depends(get_organogram_service)],
    territory: Annotated[Optional[str], Query(description="Territory code")] = None,
) -> Dict[str, Any]:
    """Report whether the territory holder has an individual-contributor role."""
    if not territory:
        raise create_required_error("territory")
    return service.check_role(territory)


@organogram_router.get("/getdivision", summary="Get Territory Division")
async def get_division(
    service: Annotated[OrganogramService, Depends(get_organogram_service)],
    territory: Annotated[Optional[str], Query(description="Territory code")] = None,
) -> Dict[str, Optional[str]]:
    """Get the division a territory belongs to."""
    if not territory:
        raise create_required_error("territory")
    return service.get_division(territory)


@organogram_router.get("/emp-name/{territory}", summary="Get Employee Name")
async def get_employee_name(
    territory: str,
    service: Annotated[OrganogramService, Depends(get_organogram_service)],
) -> Dict[str, str]:
    """Get the name of the employee seated at a territory."""
    return service.get_employee_name(territory)
