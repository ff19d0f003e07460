"""Service composing hierarchy row fetching with the roll-up engine."""

import logging
from typing import Any, Dict, List, Optional

from pulse_api.config.settings import HierarchySettings
from pulse_api.data.hierarchy_repository import (
    KPI_COLUMNS,
    MIDMONTH_QTY_COLUMNS,
    HierarchyRepository,
)
from pulse_api.services.hierarchy_engine import (
    AggregationSchema,
    OrgUnit,
    RollupMode,
    build_hierarchy,
    count_nodes,
    serialize,
)


logger = logging.getLogger(__name__)


class HierarchyService:
    """
    Service for the territory hierarchy endpoints.

    Each variant fetches one flat row set, picks the aggregation schema for
    that variant and returns the serialized trees keyed by root. None is
    returned when the datastore yields no rows at all so the caller can
    answer with a placeholder payload.
    """

    def __init__(
        self,
        repository: HierarchyRepository,
        settings: Optional[HierarchySettings] = None,
    ):
        """Initialize with a row repository and hierarchy settings."""
        self.repository = repository
        self.settings = settings or HierarchySettings()
        self.rollup_mode = RollupMode(self.settings.rollup_mode)
        self.leaf_roles = frozenset(role.upper() for role in self.settings.leaf_roles)

    def _schema(self, gate_by_role: Optional[bool], **kwargs: Any) -> AggregationSchema:
        return AggregationSchema(
            gate_by_role=self.settings.gate_by_role if gate_by_role is None else gate_by_role,
            leaf_roles=self.leaf_roles,
            rollup_mode=self.rollup_mode,
            **kwargs,
        )

    def _compute(
        self,
        variant: str,
        rows: List[OrgUnit],
        root_key: Optional[str],
        schema: AggregationSchema,
    ) -> Optional[Dict[str, Any]]:
        if not rows:
            logger.info(f"{variant}: no rows for root {root_key!r}")
            return None

        roots = build_hierarchy(rows, root_key=root_key, schema=schema)
        logger.info(
            f"{variant}: {len(rows)} rows -> {len(roots)} root(s), "
            f"{count_nodes(roots)} nodes"
        )
        return serialize(roots, schema)

    def get_metrics_hierarchy(
        self,
        territory: Optional[str] = None,
        include_inactive: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Territory tree over the aggregated metrics table.

        KPI columns are averaged over direct children and mid-month product
        quantities are summed. Every row carries its own stored values, so
        no role gating applies here.
        """
        rows = self.repository.fetch_metrics_rows(include_inactive=include_inactive)
        schema = self._schema(
            gate_by_role=False,
            mean_metrics=KPI_COLUMNS,
            sum_metrics=MIDMONTH_QTY_COLUMNS,
        )
        return self._compute("metrics hierarchy", rows, territory, schema)

    def get_kpi_hierarchy(
        self,
        territory: str,
        gate_by_role: Optional[bool] = None,
    ) -> Optional[Dict[str, Any]]:
        """KPI tree for the downline of one territory."""
        rows = self.repository.fetch_territory_downline(territory)
        schema = self._schema(gate_by_role, mean_metrics=KPI_COLUMNS)
        return self._compute("kpi hierarchy", rows, territory, schema)

    def get_manager_hierarchy(
        self,
        emp_code: str,
        gate_by_role: Optional[bool] = None,
    ) -> Optional[Dict[str, Any]]:
        """KPI tree following reporting-manager codes instead of territories."""
        rows = self.repository.fetch_manager_downline(emp_code)
        schema = self._schema(gate_by_role, mean_metrics=KPI_COLUMNS)
        return self._compute("manager hierarchy", rows, emp_code, schema)

    def get_sales_hierarchy(
        self,
        territory: str,
        gate_by_role: Optional[bool] = None,
    ) -> Optional[Dict[str, Any]]:
        """Sales-by-product tree for the downline of one territory."""
        rows = self.repository.fetch_territory_downline(territory)
        detail = self.repository.fetch_sales_detail([unit.key for unit in rows])
        for unit in rows:
            unit.leaf_detail_rows = detail.get(unit.key, [])

        schema = self._schema(gate_by_role, track_details=True)
        return self._compute("sales hierarchy", rows, territory, schema)
