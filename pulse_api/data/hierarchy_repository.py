"""Hierarchy repository: fetches flat organizational rows for roll-ups."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session

from pulse_api.services.hierarchy_engine import OrgUnit


# Territory-parent rows with pre-computed KPI and mid-month quantity columns
METRICS_TABLE = "hierarchy_metrics_agg_rm"

KPI_COLUMNS = ("Coverage", "Calls", "Compliance", "Chemist_Calls")

MIDMONTH_QTY_COLUMNS = (
    "Deksel_Midmonth_Qty",
    "Voltaneuron_Midmonth_Qty",
    "Proaxen_Midmonth_Qty",
)

VACANT_EMP_CODE = "Vacant"


# UNION (not UNION ALL) so a parent loop in the data terminates the
# recursion; the engine then reports the loop as a malformed hierarchy.
_TERRITORY_DOWNLINE_SQL = """
    WITH RECURSIVE downline AS (
        SELECT Emp_Code, Emp_Name, Reporting_Manager_Code, Role, Territory, Area_Name
        FROM employee_details
        WHERE Territory = :root
        UNION
        SELECT e.Emp_Code, e.Emp_Name, e.Reporting_Manager_Code, e.Role, e.Territory, e.Area_Name
        FROM employee_details e
        INNER JOIN downline d ON e.Area_Name = d.Territory
    )
    SELECT * FROM downline
"""

_MANAGER_DOWNLINE_SQL = """
    WITH RECURSIVE downline AS (
        SELECT Emp_Code, Emp_Name, Reporting_Manager_Code, Role, Territory, Area_Name
        FROM employee_details
        WHERE Emp_Code = :root
        UNION
        SELECT e.Emp_Code, e.Emp_Name, e.Reporting_Manager_Code, e.Role, e.Territory, e.Area_Name
        FROM employee_details e
        INNER JOIN downline d ON e.Reporting_Manager_Code = d.Emp_Code
    )
    SELECT * FROM downline
"""


def _clean(value: Any) -> Optional[str]:
    """Trim a key column; blanks become None."""
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


class HierarchyRepository:
    """
    Repository for the row sets behind the hierarchy endpoints.

    Every method issues its queries and returns fully materialized
    OrgUnit lists. Database errors propagate to the caller unchanged.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    def _fetch(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Mapping[str, Any]]:
        result = self.session.execute(text(sql), params or {})
        return list(result.mappings().all())

    # =========================================================================
    # Territory-parent rows from the aggregated metrics table
    # =========================================================================

    def fetch_metrics_rows(self, include_inactive: bool = False) -> List[OrgUnit]:
        """
        Fetch every row of the metrics table.

        Vacant territories are skipped unless include_inactive is set.
        """
        sql = f"SELECT * FROM {METRICS_TABLE}"
        params: Dict[str, Any] = {}
        if not include_inactive:
            sql += " WHERE Emp_Code != :vacant"
            params["vacant"] = VACANT_EMP_CODE

        rows = self._fetch(sql, params)
        return [
            OrgUnit(
                key=_clean(row["Territory"]),
                parent_key=_clean(row.get("Area_Name")),
                display_name=row.get("Emp_Name"),
                role_class=row.get("Role"),
                raw_metrics={
                    column: row.get(column)
                    for column in KPI_COLUMNS + MIDMONTH_QTY_COLUMNS
                },
                extra={
                    "territory": _clean(row["Territory"]),
                    "empCode": row.get("Emp_Code"),
                },
            )
            for row in rows
            if _clean(row.get("Territory"))
        ]

    # =========================================================================
    # Recursive downlines from employee_details
    # =========================================================================

    def fetch_territory_downline(self, territory: str) -> List[OrgUnit]:
        """Fetch a territory and everything under it, keyed by territory."""
        rows = self._fetch(_TERRITORY_DOWNLINE_SQL, {"root": territory})
        kpis = self.fetch_kpis([_clean(row["Territory"]) for row in rows])
        return [
            OrgUnit(
                key=_clean(row["Territory"]),
                parent_key=_clean(row.get("Area_Name")),
                display_name=row.get("Emp_Name"),
                role_class=row.get("Role"),
                raw_metrics=kpis.get(_clean(row["Territory"]), {}),
                extra={
                    "territory": _clean(row["Territory"]),
                    "empCode": row.get("Emp_Code"),
                },
            )
            for row in rows
            if _clean(row.get("Territory"))
        ]

    def fetch_manager_downline(self, emp_code: str) -> List[OrgUnit]:
        """Fetch an employee and all reports under them, keyed by employee code."""
        rows = self._fetch(_MANAGER_DOWNLINE_SQL, {"root": emp_code})
        kpis = self.fetch_kpis([_clean(row.get("Territory")) for row in rows])
        return [
            OrgUnit(
                key=_clean(row["Emp_Code"]),
                parent_key=_clean(row.get("Reporting_Manager_Code")),
                display_name=row.get("Emp_Name"),
                role_class=row.get("Role"),
                raw_metrics=kpis.get(_clean(row.get("Territory")), {}),
                extra={
                    "territory": _clean(row.get("Territory")),
                    "empCode": _clean(row["Emp_Code"]),
                },
            )
            for row in rows
            if _clean(row.get("Emp_Code"))
        ]

    # =========================================================================
    # Leaf-level detail
    # =========================================================================

    def fetch_kpis(self, territories: Sequence[Optional[str]]) -> Dict[str, Dict[str, Any]]:
        """Fetch KPI values from dashboard1, keyed by territory."""
        territories = [t for t in territories if t]
        if not territories:
            return {}

        stmt = text(
            "SELECT Territory, Calls, Coverage, Compliance, Chemist_Calls "
            "FROM dashboard1 WHERE Territory IN :territories"
        ).bindparams(bindparam("territories", expanding=True))
        rows = self.session.execute(stmt, {"territories": territories}).mappings().all()

        return {
            _clean(row["Territory"]): {column: row.get(column) for column in KPI_COLUMNS}
            for row in rows
        }

    def fetch_sales_detail(self, territories: Sequence[Optional[str]]) -> Dict[str, List[tuple]]:
        """Fetch (product, sales) rows from sales_data, grouped by territory."""
        territories = [t for t in territories if t]
        if not territories:
            return {}

        stmt = text(
            "SELECT Territory, ProductName, Sales "
            "FROM sales_data WHERE Territory IN :territories"
        ).bindparams(bindparam("territories", expanding=True))
        rows = self.session.execute(stmt, {"territories": territories}).mappings().all()

        detail: Dict[str, List[tuple]] = {}
        for row in rows:
            detail.setdefault(_clean(row["Territory"]), []).append(
                (row["ProductName"], row.get("Sales"))
            )
        return detail
