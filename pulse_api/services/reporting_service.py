"""Service for dashboard rows, metric filters and sales tables."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from pulse_api.models.midmonth_review import MidmonthReviewLog
from pulse_api.schemas.records import FilterDataRequest, MidmonthReviewCreate, ProductQtyUpdate
from pulse_api.services.hierarchy_engine import coerce_number
from pulse_api.utils.errors import (
    NotFoundError,
    ValidationError,
    create_field_error,
    create_required_error,
)


logger = logging.getLogger(__name__)


IST = timezone(timedelta(hours=5, minutes=30))

# Numeric columns of the BE month dashboard that may be range-filtered
FILTERABLE_METRICS = ("Coverage", "Compliance", "Doctor_Calls", "Chemist_Met")

# Mid-month quantity columns editable through the product quantity update
EDITABLE_QTY_COLUMNS = (
    "deksel_midmonth_qty",
    "voltaneuron_midmonth_qty",
    "proaxen_midmonth_qty",
)

# Dashboard level -> column holding the owner territory
DASHBOARD_TERRITORY_COLUMNS = {
    "be": "Territory",
    "bm": "BM_Territory",
    "bl": "BL_Territory",
    "bh": "BH_Territory",
    "sbuh": "SBUH_Territory",
}

DASHBOARD_PERIODS = ("ftm", "ytd")

ACTIVITY_SCORE_COLUMNS = (
    "Calls_Score",
    "RCPA_Score",
    "Coverage_Score",
    "Compliance_Score",
    "Activity_Implementation_Score",
)

BUSINESS_SCORE_COLUMNS = (
    "Secondary_Sales_growth_Score",
    "MSR_Achievement_Score",
    "RX_Growth_Score",
    "Brand_Performance_Index_Score",
)

_BH_SBUH_EFFICIENCY_GROUPS = {
    "ftm": {
        "business": (
            "Target_Achievement_Score",
            "Territories_Achieving_Cat_A_MEP_Score",
            "Category_B_Sales_Vs_Target_Score",
            "BMs_Achieving_Target_Score",
            "Span_of_Performance_Score",
        ),
        "effort": (
            "Overall_Attrition_Rate_Score",
            "Secondary_Variance_Score",
            "MSP_Compliance_Territories_Score",
            "MSR_Compliance_Territories_Score",
            "BE_Active_vs_Sanctioned_Score",
            "BM_BL_Active_vs_Sanctioned_Score",
        ),
        "hygiene": (
            "Returns_Score",
            "Outstanding_Score",
            "Marketing_Activity_Sales_Score",
            "Closing_Score",
        ),
        "commitment": (
            "Calls_Score",
            "Coverage_Score",
            "Compliance_Score",
            "Priority_Drs_Coverage_Score",
            "Priority_RX_Drs_Score",
            "BM_Priority_Drs_Coverage_Score",
        ),
    },
    "ytd": {
        "business": (
            "Target_Achievement_Score",
            "Territories_Achieving_Cat_A_MEP_Score",
            "Category_B_Sales_Vs_Target_Score",
            "BMs_Achieving_Target_Score",
            "Span_of_Performance_Score",
        ),
        "effort": (
            "Overall_Attrition_Rate_Score",
            "Secondary_Variance_Score",
            "MSP_Compliance_Territories_Score",
            "MSR_Compliance_Territories_Score",
        ),
        "hygiene": ("Returns_Score", "Marketing_Activity_Sales_Score"),
        "commitment": (
            "Calls_Score",
            "Team_Coverage_Score",
            "Team_Compliance_Score",
            "Corporate_Drs_Coverage_Score",
            "Corporate_Drs_Active_Prescribers_Score",
            "BM_Priority_Drs_Coverage_Score",
        ),
    },
}

# Manager level -> period -> score group -> dashboard columns summed into it
EFFICIENCY_SCORE_GROUPS: Dict[str, Dict[str, Dict[str, Tuple[str, ...]]]] = {
    "bm": {
        "ftm": {
            "business": (
                "Target_Achieved_FTM_Score",
                "BPI_FTM_Score",
                "Span_Performance_FTM_Score",
                "RX_Growth_FTM_Score",
                "Viable_Territories_FTM_Score",
            ),
            "effort": (
                "Priority_Drs_Met_FTM_Score",
                "Calls_FTM_Score",
                "Coverage_Score2",
                "Compliance_Score2",
                "Marketing_Implementation_FTM_Score",
                "MSP_Compliance_FTM_Score",
                "Priority_RX_Drs_FTM_Score",
                "MSR_Comp_FTM_Score",
            ),
            "hygiene": (
                "Outstanding_FTM_Score",
                "Returns_Percent_FTM_Score",
                "CA_FTM_Score",
                "Closing_FTM_Score",
            ),
        },
        "ytd": {
            "business": (
                "Target_Achieved_YTD_Score",
                "Brand_Performance_Index_YTD_Score",
                "Span_of_Performance_YTD_Score",
                "RX_Growth_YTD_Score",
                "Viable_Territories_YTD_Score",
            ),
            "effort": (
                "Priority_Drs_Met_YTD_Score",
                "Calls_YTD_Score",
                "Coverage_YTD_Score",
                "Compliance_YTD_Score",
                "Marketing_Implementation_YTD_Score",
                "MSP_Compliance_YTD_Score",
                "Priority_RX_Drs_YTD_Score",
                "MSR_Compliance_YTD_Score",
            ),
            "hygiene": ("Returns_Percent_YTD_Score", "CA_Percent_YTD_Score"),
        },
    },
    "bl": {
        "ftm": {
            "business": (
                "Target_Achievement_Score",
                "Territories_Achieving_Target_Score",
                "Territories_Achieving_Cat_A_MEP_Score",
                "Category_B_Sales_Vs_Target_Score",
                "Corporate_Drs_Visited_Last_2M_Score",
                "Corporate_Drs_Active_Prescribers_Score",
            ),
            "effort": (
                "Hiring_Quality_Index_Score",
                "Induction_Score",
                "Infant_Attrition_Rate_Score",
                "Overall_Attrition_Rate_Score",
            ),
            "hygiene": (
                "Returns_Score",
                "Outstanding_Score",
                "Marketing_Activity_Sales_Score",
                "Closing_Score",
            ),
            "commitment": (
                "Team_Coverage_Score",
                "Team_Compliance_Score",
                "BM_Priority_Drs_Coverage_Score",
                "TP_Adherence_Score",
                "Secondary_Variance_Score",
                "MSP_Compliance_Territories_Score",
                "MSR_Compliance_Territories_Score",
            ),
        },
        "ytd": {
            "business": (
                "Target_Achievement_Score",
                "Territories_Achieving_Target_Score",
                "Territories_Achieving_Cat_A_MEP_Score",
                "Category_B_Sales_Vs_Target_Score",
                "Corporate_Drs_Active_Prescribers_Score",
            ),
            "effort": (
                "Hiring_Quality_Index_Score",
                "Induction_Score",
                "Infant_Attrition_Rate_Score",
                "Overall_Attrition_Rate_Score",
            ),
            "hygiene": ("Returns_Score", "Marketing_Activity_Sales_Score"),
            "commitment": (
                "Team_Coverage_Score",
                "Team_Compliance_Score",
                "BM_Priority_Drs_Coverage_Score",
                "TP_Adherence_Score",
                "Secondary_Variance_Score",
                "MSP_Compliance_Territories_Score",
                "MSR_Compliance_Territories_Score",
            ),
        },
    },
    "bh": _BH_SBUH_EFFICIENCY_GROUPS,
    "sbuh": _BH_SBUH_EFFICIENCY_GROUPS,
}

EFFICIENCY_PERIOD_SUFFIXES = {"ftm": "Month", "ytd": "YTD"}

STOCKIST_SALES_TABLE = "sales_data_testing_7"
PIVOT_SALES_TABLE = "sales_data"


def sum_scores(row: Mapping[str, Any], columns: Sequence[str]) -> float:
    """Sum score columns treating missing values as zero, rounded to 2 places."""
    return round(sum(coerce_number(row.get(column)) for column in columns), 2)


def pivot_sales(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Pivot stockist sales rows into one row per product.

    Each stockist becomes a column holding its sales for the product and
    GrandTotal carries the product's total across stockists.
    """
    pivot: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        product = row["ProductName"]
        entry = pivot.setdefault(product, {"ProductName": product, "GrandTotal": 0.0})
        entry[row["stockistname"]] = row["Sales"]
        entry["GrandTotal"] += coerce_number(row["Sales"])
    return list(pivot.values())


class ReportingService:
    """
    Service for read-mostly reporting queries over the dashboard views.

    The views are produced upstream and their column sets differ by level
    and period, so rows are returned as plain mappings.
    """

    def __init__(self, session: Session):
        """Initialize with database session."""
        self.session = session

    def _rows(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        result = self.session.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().all()]

    # =========================================================================
    # Dashboards
    # =========================================================================

    def get_dashboard_row(self, level: str, period: str, territory: str) -> Dict[str, Any]:
        """
        Get the dashboard row owned by a territory.

        Raises:
            ValidationError: If level or period is unknown
            NotFoundError: If the territory has no row
        """
        level = level.lower()
        period = period.lower()
        if level not in DASHBOARD_TERRITORY_COLUMNS:
            raise ValidationError(
                message="Invalid dashboard level",
                field_errors=[create_field_error("level", f"Unknown level '{level}'")],
            )
        if period not in DASHBOARD_PERIODS:
            raise ValidationError(
                message="Invalid dashboard period",
                field_errors=[create_field_error("period", f"Unknown period '{period}'")],
            )

        column = DASHBOARD_TERRITORY_COLUMNS[level]
        rows = self._rows(
            f"SELECT * FROM bgm_{level}_dashboard_{period} WHERE {column} = :territory",
            {"territory": territory},
        )
        if not rows:
            raise NotFoundError(
                message="No record found for this Territory",
                details={"territory": territory, "level": level, "period": period},
            )
        return rows[0]

    def get_score_totals(self, period: str, territory: str) -> Dict[str, float]:
        """
        Activity and business score totals of a BE dashboard row.

        The year-to-date row reports totalScore1/totalScore2, the month row
        totalScore3/totalScore4.
        """
        columns = ", ".join(ACTIVITY_SCORE_COLUMNS + BUSINESS_SCORE_COLUMNS)
        rows = self._rows(
            f"SELECT {columns} FROM bgm_be_dashboard_{period} WHERE Territory = :territory",
            {"territory": territory},
        )
        if not rows:
            raise NotFoundError(
                message="No record found for this Territory",
                details={"territory": territory, "period": period},
            )

        activity = sum_scores(rows[0], ACTIVITY_SCORE_COLUMNS)
        business = sum_scores(rows[0], BUSINESS_SCORE_COLUMNS)
        if period == "ytd":
            return {"totalScore1": activity, "totalScore2": business}
        return {"totalScore3": activity, "totalScore4": business}

    def get_efficiency(self, level: str, territory: str) -> Dict[str, float]:
        """
        Efficiency index of a manager territory for the month and year to date.

        Each score group is summed from its dashboard columns and rounded to
        2 places; efficiency is the rounded sum of the group totals. BM
        dashboards carry no commitment group.

        Raises:
            ValidationError: If the level has no efficiency index
            NotFoundError: If the month or year-to-date row is missing
        """
        level = level.lower()
        if level not in EFFICIENCY_SCORE_GROUPS:
            raise ValidationError(
                message="Invalid efficiency level",
                field_errors=[create_field_error(
                    "level", f"Allowed: {', '.join(EFFICIENCY_SCORE_GROUPS)}",
                )],
            )

        column = DASHBOARD_TERRITORY_COLUMNS[level]
        result: Dict[str, float] = {}
        for period, suffix in EFFICIENCY_PERIOD_SUFFIXES.items():
            groups = EFFICIENCY_SCORE_GROUPS[level][period]
            columns = list(dict.fromkeys(name for names in groups.values() for name in names))
            rows = self._rows(
                f"SELECT {', '.join(columns)} FROM bgm_{level}_dashboard_{period} "
                f"WHERE {column} = :territory",
                {"territory": territory},
            )
            if not rows:
                raise NotFoundError(
                    message=f"No {level.upper()} record found for this Territory",
                    details={"territory": territory, "level": level, "period": period},
                )

            totals = {group: sum_scores(rows[0], names) for group, names in groups.items()}
            for group, total in totals.items():
                result[f"{group}{suffix}"] = total
            result[f"efficiency{suffix}"] = round(sum(totals.values()), 2)

        return result

    # =========================================================================
    # Metric filters and edits
    # =========================================================================

    def filter_by_metric(self, request: FilterDataRequest) -> List[Dict[str, Any]]:
        """
        List occupied BE territories whose metric lies within a range.

        Raises:
            ValidationError: If fields are missing or the metric is not filterable
        """
        if not request.metric or request.range_from is None or request.range_to is None:
            raise ValidationError(message="Missing required fields")
        if request.metric not in FILTERABLE_METRICS:
            raise ValidationError(
                message="Invalid metric",
                field_errors=[create_field_error("metric", f"Allowed: {', '.join(FILTERABLE_METRICS)}")],
            )

        metric = request.metric
        return self._rows(
            f"SELECT Territory, Emp_Code, Emp_Name, {metric} "
            f"FROM bgm_be_dashboard_ftm "
            f"WHERE {metric} BETWEEN :low AND :high AND Emp_Code != 'Vacant'",
            {"low": request.range_from, "high": request.range_to},
        )

    def update_product_qty(self, update: ProductQtyUpdate) -> Dict[str, Any]:
        """
        Set one mid-month product quantity for a territory.

        Returns alreadyUpToDate without writing when the stored value matches.

        Raises:
            ValidationError: If fields are missing or the column is not editable
        """
        if not update.territory or not update.metric_type or update.value is None:
            raise ValidationError(message="territory, metric_type, and value are required")

        column = update.metric_type.lower()
        if column not in EDITABLE_QTY_COLUMNS:
            raise ValidationError(
                message="Invalid metric_type",
                field_errors=[create_field_error("metric_type", f"Unknown column '{update.metric_type}'")],
            )

        current = self._rows(
            f"SELECT {column} AS current_value FROM hierarchy_metrics_agg_rm "
            f"WHERE Territory = :territory",
            {"territory": update.territory},
        )
        if current and current[0]["current_value"] is not None:
            if coerce_number(current[0]["current_value"]) == update.value:
                return {"alreadyUpToDate": True}

        result = self.session.execute(
            text(
                f"UPDATE hierarchy_metrics_agg_rm SET {column} = :value "
                f"WHERE Territory = :territory"
            ),
            {"value": update.value, "territory": update.territory},
        )
        logger.info(f"Updated {column} for {update.territory}: {result.rowcount} row(s)")
        return {
            "success": True,
            "affectedRows": result.rowcount,
            "alreadyUpToDate": False,
        }

    def log_midmonth_review(self, review: MidmonthReviewCreate) -> Dict[str, Any]:
        """
        Record a mid-month review entry.

        created_at defaults to the current India Standard Time wall clock.

        Raises:
            ValidationError: If a required field is missing
        """
        missing = [
            alias
            for name, alias in (
                ("sender_territory", "sender_territory"),
                ("receiver_territory", "receiver_territory"),
                ("metric", "Metric"),
            )
            if not getattr(review, name)
        ]
        if review.value is None:
            missing.append("Value")
        if missing:
            raise ValidationError(
                message="All fields are required: sender_territory, receiver_territory, Metric, Value",
                field_errors=[create_field_error(name, f"{name} is required", "required") for name in missing],
            )

        created_at = review.created_at or datetime.now(IST).replace(tzinfo=None, microsecond=0)
        entry = MidmonthReviewLog(
            sender_territory=review.sender_territory,
            receiver_territory=review.receiver_territory,
            metric=review.metric,
            value=review.value,
            created_at=created_at,
        )
        self.session.add(entry)
        self.session.flush()
        return {
            "success": True,
            "message": "Record inserted successfully",
            "insertId": entry.id,
            "timestamp": created_at.strftime("%Y-%m-%d %H:%M:%S"),
        }

    # =========================================================================
    # Sales tables
    # =========================================================================

    def get_stockist_sales(self, territory: str) -> List[Dict[str, Any]]:
        """Stockist, product and sales rows for a territory."""
        if not territory:
            raise create_required_error("territory")
        return self._rows(
            f"SELECT stockistname, ProductName, Sales FROM {STOCKIST_SALES_TABLE} "
            f"WHERE Territory = :territory",
            {"territory": territory},
        )

    def get_sales_pivot(self, territory: str) -> List[Dict[str, Any]]:
        """Product by stockist pivot of a territory's sales."""
        if not territory:
            raise create_required_error("territory")
        rows = self._rows(
            f"SELECT stockistname, ProductName, Sales FROM {PIVOT_SALES_TABLE} "
            f"WHERE Territory = :territory",
            {"territory": territory},
        )
        return pivot_sales(rows)
