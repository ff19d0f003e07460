"""Service for organogram lookups (employees, roles, divisions)."""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from pulse_api.models.organogram import OrganogramEntry
from pulse_api.utils.errors import NotFoundError


DEFAULT_ALLOWED_ROLES = ("BE", "KAE", "TE", "NE")


class OrganogramService:
    """
    Service for flat lookups against the organogram table.

    The role check is a plain membership test used by the frontend to
    decide which views to show; it is not an authorization layer.
    """

    def __init__(self, session: Session, allowed_roles: Optional[Sequence[str]] = None):
        """Initialize with database session and the roles passing the role check."""
        self.session = session
        self.allowed_roles = {
            role.upper() for role in (allowed_roles or DEFAULT_ALLOWED_ROLES)
        }

    def _get_by_territory(self, territory: str) -> Optional[OrganogramEntry]:
        stmt = select(OrganogramEntry).where(OrganogramEntry.territory == territory).limit(1)
        return self.session.execute(stmt).scalars().first()

    def list_employees(self) -> List[Dict[str, Any]]:
        """List every employee ordered by name."""
        stmt = select(OrganogramEntry).order_by(OrganogramEntry.emp_name)
        entries = self.session.execute(stmt).scalars().all()
        return [
            {
                "name": entry.emp_name,
                "Role": entry.role,
                "Emp_Code": entry.emp_code,
                "Territory": entry.territory,
            }
            for entry in entries
        ]

    def check_role(self, territory: str) -> Dict[str, Any]:
        """Report whether the territory's role is an individual-contributor role."""
        entry = self._get_by_territory(territory)
        if entry is None:
            return {"allowed": False, "message": "Territory not found"}

        role = (entry.role or "").upper()
        return {
            "allowed": role in self.allowed_roles,
            "role": entry.role,
            "name": entry.emp_name,
        }

    def get_division(self, territory: str) -> Dict[str, Optional[str]]:
        """Get the division of a territory, or None when unknown."""
        entry = self._get_by_territory(territory)
        return {"division": entry.division if entry else None}

    def get_employee_name(self, territory: str) -> Dict[str, str]:
        """
        Get the employee name seated at a territory.

        Raises:
            NotFoundError: If no employee holds the territory
        """
        entry = self._get_by_territory(territory)
        if entry is None:
            raise NotFoundError(
                message="No employee found for given Territory",
                details={"territory": territory},
            )
        return {"Emp_Name": entry.emp_name}
