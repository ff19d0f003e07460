"""Tests for hierarchy service."""

from unittest.mock import MagicMock

import pytest

from pulse_api.config.settings import HierarchySettings
from pulse_api.services.hierarchy_engine import OrgUnit, RollupMode
from pulse_api.services.hierarchy_service import HierarchyService


@pytest.fixture
def mock_repository():
    """Create mock hierarchy repository."""
    return MagicMock()


def downline():
    """Territory R with a BE and an NE underneath."""
    return [
        OrgUnit(key="R", role_class="BM", display_name="Manager"),
        OrgUnit(key="A", parent_key="R", role_class="BE", raw_metrics={"Coverage": 80, "Calls": 10}),
        OrgUnit(key="B", parent_key="R", role_class="NE", raw_metrics={"Coverage": 60, "Calls": 20}),
    ]


class TestHierarchyService:
    """Tests for HierarchyService."""

    def test_service_initialization(self, mock_repository):
        """Test service reads roll-up mode and leaf roles from settings."""
        settings = HierarchySettings(leaf_roles=["be", "ke"], rollup_mode="leaf_weighted")

        service = HierarchyService(mock_repository, settings)

        assert service.repository == mock_repository
        assert service.rollup_mode == RollupMode.LEAF_WEIGHTED
        assert service.leaf_roles == frozenset({"BE", "KE"})

    def test_invalid_rollup_mode_is_rejected(self, mock_repository):
        """Test an unknown roll-up mode fails at construction."""
        with pytest.raises(ValueError):
            HierarchyService(mock_repository, HierarchySettings(rollup_mode="median"))

    def test_empty_rows_return_none(self, mock_repository):
        """Test no rows maps to the no-data placeholder signal."""
        mock_repository.fetch_territory_downline.return_value = []
        service = HierarchyService(mock_repository)

        assert service.get_kpi_hierarchy("T404") is None

    def test_kpi_hierarchy_gates_by_default(self, mock_repository):
        """Test configured gating zeroes non-leaf roles."""
        mock_repository.fetch_territory_downline.return_value = downline()
        service = HierarchyService(mock_repository, HierarchySettings(gate_by_role=True))

        result = service.get_kpi_hierarchy("R")

        mock_repository.fetch_territory_downline.assert_called_once_with("R")
        assert result["R"]["children"]["B"]["Coverage"] == 0
        assert result["R"]["Coverage"] == 40
        assert result["R"]["Calls"] == 5

    def test_request_flag_overrides_configured_gating(self, mock_repository):
        """Test gate_by_role=False aggregates every leaf."""
        mock_repository.fetch_territory_downline.return_value = downline()
        service = HierarchyService(mock_repository, HierarchySettings(gate_by_role=True))

        result = service.get_kpi_hierarchy("R", gate_by_role=False)

        assert result["R"]["Coverage"] == 70
        assert result["R"]["Calls"] == 15

    def test_manager_hierarchy_uses_emp_code_root(self, mock_repository):
        """Test the manager variant builds from the employee code."""
        mock_repository.fetch_manager_downline.return_value = [
            OrgUnit(key="E1", role_class="BM"),
            OrgUnit(key="E2", parent_key="E1", role_class="BE", raw_metrics={"Compliance": 99}),
        ]
        service = HierarchyService(mock_repository)

        result = service.get_manager_hierarchy("E1")

        mock_repository.fetch_manager_downline.assert_called_once_with("E1")
        assert result["E1"]["Compliance"] == 99

    def test_sales_hierarchy_attaches_detail_rows(self, mock_repository):
        """Test product totals roll up from the fetched sales detail."""
        mock_repository.fetch_territory_downline.return_value = [
            OrgUnit(key="R", role_class="BM"),
            OrgUnit(key="A", parent_key="R", role_class="BE"),
            OrgUnit(key="B", parent_key="R", role_class="BE"),
        ]
        mock_repository.fetch_sales_detail.return_value = {
            "A": [("ProductX", 10), ("ProductY", 5)],
            "B": [("ProductX", 3)],
        }
        service = HierarchyService(mock_repository)

        result = service.get_sales_hierarchy("R")

        mock_repository.fetch_sales_detail.assert_called_once_with(["R", "A", "B"])
        assert result["R"]["products"] == {"ProductX": 13, "ProductY": 5}
        assert result["R"]["totalSales"] == 18

    def test_metrics_hierarchy_sums_quantities_without_gating(self, mock_repository):
        """Test the metrics table variant averages KPIs and sums quantities."""
        mock_repository.fetch_metrics_rows.return_value = [
            OrgUnit(key="R", role_class="BM"),
            OrgUnit(key="A", parent_key="R", role_class="BM",
                    raw_metrics={"Coverage": 51, "Deksel_Midmonth_Qty": 4}),
            OrgUnit(key="B", parent_key="R", role_class="BE",
                    raw_metrics={"Coverage": 50, "Deksel_Midmonth_Qty": 6}),
        ]
        service = HierarchyService(mock_repository, HierarchySettings(gate_by_role=True))

        result = service.get_metrics_hierarchy(include_inactive=True)

        mock_repository.fetch_metrics_rows.assert_called_once_with(include_inactive=True)
        assert result["R"]["Coverage"] == 51  # 50.5 rounds up
        assert result["R"]["Deksel_Midmonth_Qty"] == 10
