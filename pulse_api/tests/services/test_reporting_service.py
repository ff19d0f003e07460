"""Tests for reporting service."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from pulse_api.schemas.records import FilterDataRequest, MidmonthReviewCreate, ProductQtyUpdate
from pulse_api.services.reporting_service import ReportingService, pivot_sales, sum_scores
from pulse_api.utils.errors import NotFoundError, ValidationError


@pytest.fixture
def mock_session():
    """Create mock database session."""
    return MagicMock()


def set_rows(session, rows, rowcount=0):
    """Make every session.execute return the given mapping rows."""
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    result.rowcount = rowcount
    session.execute.return_value = result
    return result


class TestPivotSales:
    """Tests for the stockist pivot."""

    def test_pivot_groups_products_across_stockists(self):
        rows = [
            {"stockistname": "S1", "ProductName": "Deksel", "Sales": 10},
            {"stockistname": "S2", "ProductName": "Deksel", "Sales": "5.5"},
            {"stockistname": "S1", "ProductName": "Proaxen", "Sales": None},
        ]

        pivot = pivot_sales(rows)

        assert pivot == [
            {"ProductName": "Deksel", "GrandTotal": 15.5, "S1": 10, "S2": "5.5"},
            {"ProductName": "Proaxen", "GrandTotal": 0.0, "S1": None},
        ]

    def test_pivot_of_nothing_is_empty(self):
        assert pivot_sales([]) == []

    def test_sum_scores_treats_missing_as_zero(self):
        row = {"a": 1.25, "b": None, "c": "2"}
        assert sum_scores(row, ("a", "b", "c", "d")) == 3.25


class TestDashboards:
    """Tests for dashboard lookups."""

    def test_unknown_level_rejected(self, mock_session):
        service = ReportingService(mock_session)
        with pytest.raises(ValidationError):
            service.get_dashboard_row("zone", "ftm", "T1")
        mock_session.execute.assert_not_called()

    def test_unknown_period_rejected(self, mock_session):
        service = ReportingService(mock_session)
        with pytest.raises(ValidationError):
            service.get_dashboard_row("be", "qtd", "T1")

    def test_dashboard_row_not_found(self, mock_session):
        set_rows(mock_session, [])
        service = ReportingService(mock_session)

        with pytest.raises(NotFoundError):
            service.get_dashboard_row("BM", "YTD", "T1")

    def test_dashboard_row_returned(self, mock_session):
        set_rows(mock_session, [{"BM_Territory": "T1", "Coverage": 88}])
        service = ReportingService(mock_session)

        assert service.get_dashboard_row("bm", "ytd", "T1") == {"BM_Territory": "T1", "Coverage": 88}
        sql = str(mock_session.execute.call_args[0][0])
        assert "bgm_bm_dashboard_ytd" in sql
        assert "BM_Territory" in sql

    def test_score_totals_by_period(self, mock_session):
        """Test year-to-date and month totals use their own keys."""
        set_rows(mock_session, [{"Calls_Score": 2.5, "RCPA_Score": 1, "RX_Growth_Score": 4}])
        service = ReportingService(mock_session)

        assert service.get_score_totals("ytd", "T1") == {"totalScore1": 3.5, "totalScore2": 4.0}
        assert service.get_score_totals("ftm", "T1") == {"totalScore3": 3.5, "totalScore4": 4.0}


class TestEfficiency:
    """Tests for the manager efficiency index."""

    def test_bm_efficiency_has_no_commitment_group(self, mock_session):
        set_rows(mock_session, [{
            "Target_Achieved_FTM_Score": 1.25,
            "BPI_FTM_Score": 2,
            "Calls_FTM_Score": 3,
            "Closing_FTM_Score": 0.5,
            "Target_Achieved_YTD_Score": 4,
            "CA_Percent_YTD_Score": 1.5,
        }])
        service = ReportingService(mock_session)

        result = service.get_efficiency("BM", "T1")

        assert result == {
            "businessMonth": 3.25,
            "effortMonth": 3.0,
            "hygieneMonth": 0.5,
            "efficiencyMonth": 6.75,
            "businessYTD": 4.0,
            "effortYTD": 0.0,
            "hygieneYTD": 1.5,
            "efficiencyYTD": 5.5,
        }
        first_sql = str(mock_session.execute.call_args_list[0][0][0])
        second_sql = str(mock_session.execute.call_args_list[1][0][0])
        assert "bgm_bm_dashboard_ftm" in first_sql
        assert "bgm_bm_dashboard_ytd" in second_sql
        assert "BM_Territory = :territory" in first_sql

    def test_bl_efficiency_includes_commitment(self, mock_session):
        set_rows(mock_session, [{"TP_Adherence_Score": 2, "Returns_Score": 1}])
        service = ReportingService(mock_session)

        result = service.get_efficiency("bl", "T1")

        assert result["commitmentMonth"] == 2.0
        assert result["commitmentYTD"] == 2.0
        assert result["hygieneMonth"] == 1.0
        assert result["efficiencyYTD"] == 3.0
        assert "BL_Territory" in str(mock_session.execute.call_args[0][0])

    def test_missing_ytd_row_not_found(self, mock_session):
        month = MagicMock()
        month.mappings.return_value.all.return_value = [{"Calls_Score": 1}]
        year = MagicMock()
        year.mappings.return_value.all.return_value = []
        mock_session.execute.side_effect = [month, year]
        service = ReportingService(mock_session)

        with pytest.raises(NotFoundError) as exc_info:
            service.get_efficiency("sbuh", "NAT")

        assert exc_info.value.message == "No SBUH record found for this Territory"
        assert exc_info.value.details["period"] == "ytd"

    def test_be_has_no_efficiency_index(self, mock_session):
        service = ReportingService(mock_session)
        with pytest.raises(ValidationError):
            service.get_efficiency("be", "T1")
        mock_session.execute.assert_not_called()


class TestMetricEdits:
    """Tests for metric filters and edits."""

    def test_filter_requires_fields(self, mock_session):
        service = ReportingService(mock_session)
        with pytest.raises(ValidationError):
            service.filter_by_metric(FilterDataRequest(metric="Coverage", range_from=1))

    def test_filter_rejects_unlisted_metric(self, mock_session):
        service = ReportingService(mock_session)
        request = FilterDataRequest.model_validate({"metric": "1; DROP TABLE x", "from": 0, "to": 1})

        with pytest.raises(ValidationError):
            service.filter_by_metric(request)
        mock_session.execute.assert_not_called()

    def test_filter_passes_range(self, mock_session):
        set_rows(mock_session, [{"Territory": "T1", "Coverage": 75}])
        service = ReportingService(mock_session)
        request = FilterDataRequest.model_validate({"metric": "Coverage", "from": 70, "to": 80})

        assert service.filter_by_metric(request) == [{"Territory": "T1", "Coverage": 75}]
        assert mock_session.execute.call_args[0][1] == {"low": 70, "high": 80}

    def test_update_qty_skips_unchanged_value(self, mock_session):
        """Test no UPDATE is issued when the stored value matches."""
        set_rows(mock_session, [{"current_value": 5}])
        service = ReportingService(mock_session)
        update = ProductQtyUpdate(territory="T1", metric_type="Deksel_Midmonth_Qty", value=5)

        assert service.update_product_qty(update) == {"alreadyUpToDate": True}
        assert mock_session.execute.call_count == 1

    def test_update_qty_writes_new_value(self, mock_session):
        set_rows(mock_session, [{"current_value": 3}], rowcount=1)
        service = ReportingService(mock_session)
        update = ProductQtyUpdate(territory="T1", metric_type="proaxen_midmonth_qty", value=8)

        result = service.update_product_qty(update)

        assert result == {"success": True, "affectedRows": 1, "alreadyUpToDate": False}
        assert mock_session.execute.call_count == 2

    def test_update_qty_rejects_unknown_column(self, mock_session):
        service = ReportingService(mock_session)
        update = ProductQtyUpdate(territory="T1", metric_type="Coverage", value=1)

        with pytest.raises(ValidationError):
            service.update_product_qty(update)

    def test_midmonth_review_requires_fields(self, mock_session):
        service = ReportingService(mock_session)

        with pytest.raises(ValidationError) as exc_info:
            service.log_midmonth_review(MidmonthReviewCreate(sender_territory="T1"))

        fields = {error.field for error in exc_info.value.field_errors}
        assert fields == {"receiver_territory", "Metric", "Value"}

    def test_midmonth_review_logged(self, mock_session):
        service = ReportingService(mock_session)
        review = MidmonthReviewCreate.model_validate({
            "sender_territory": "T1",
            "receiver_territory": "T2",
            "Metric": "Calls",
            "Value": 12,
            "created_at": datetime(2024, 6, 15, 9, 30, 0),
        })

        result = service.log_midmonth_review(review)

        assert result["success"] is True
        assert result["timestamp"] == "2024-06-15 09:30:00"
        entry = mock_session.add.call_args[0][0]
        assert entry.metric == "Calls"
        assert entry.value == 12
