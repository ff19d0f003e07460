"""Pydantic models for commitment, escalation, message and metric endpoints."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# =============================================================================
# Commitments
# =============================================================================

class CommitmentCreate(BaseModel):
    """A goal sent to a receiving territory."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    metric: Optional[str] = None
    sender: Optional[str] = None
    sender_code: Optional[str] = None
    sender_territory: Optional[str] = None
    receiver: Optional[str] = None
    receiver_code: Optional[str] = None
    receiver_territory: Optional[str] = None
    goal: Optional[str] = None
    received_date: Optional[date] = None
    goal_date: Optional[date] = None
    receiver_commit_date: Optional[date] = None
    commitment: Optional[str] = None


class CommitmentUpdate(BaseModel):
    """Partial update of a commitment; only provided fields are written."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[int] = Field(default=None, description="Commitment row ID")
    receiver_commit_date: Optional[date] = None
    goal: Optional[str] = None


class CommitmentSummary(BaseModel):
    """Commitment as listed for a receiving territory."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    metric: Optional[str] = None
    sender: Optional[str] = None
    sender_territory: Optional[str] = None
    receiver_territory: Optional[str] = None
    commitment: Optional[str] = None
    goal: Optional[str] = None
    received_date: Optional[date] = None
    goal_date: Optional[date] = None
    receiver_commit_date: Optional[date] = None


# =============================================================================
# Escalations and Disclosures
# =============================================================================

class EscalationCreate(BaseModel):
    """An escalation raised against an employee."""

    metric: Optional[str] = None
    message: Optional[str] = None
    role: Optional[str] = None
    employee_name: Optional[str] = None
    territory_code: Optional[str] = None
    employee_code: Optional[str] = None
    entry_date: Optional[date] = None


class DisclosureCreate(BaseModel):
    """A metric range disclosure; required fields are checked by the service."""

    model_config = ConfigDict(populate_by_name=True)

    metric: Optional[str] = None
    sender: Optional[str] = None
    sender_code: Optional[str] = None
    sender_territory: Optional[str] = None
    range_from: Optional[float] = Field(default=None, alias="from")
    range_to: Optional[float] = Field(default=None, alias="to")
    received_date: Optional[date] = None
    goal_date: Optional[date] = None
    message: Optional[str] = None


# =============================================================================
# Information Messages
# =============================================================================

class InformationCreate(BaseModel):
    """A message for one receiver; @name and @metric are personalised."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    sender: Optional[str] = None
    sender_code: Optional[str] = None
    sender_territory: Optional[str] = None
    receiver: Optional[str] = None
    receiver_code: Optional[str] = None
    receiver_territory: Optional[str] = None
    received_date: Optional[datetime] = None
    message: str = ""
    metric: Optional[str] = None


class ReceiverTerritoryRequest(BaseModel):
    """Request body carrying a receiver territory."""

    receiver_territory: Optional[str] = None


# =============================================================================
# Metrics
# =============================================================================

class TerritoryRequest(BaseModel):
    """Request body carrying a territory under either casing."""

    model_config = ConfigDict(populate_by_name=True)

    # The dashboards send "Territory", the sales tables send "territory"
    territory: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("Territory", "territory"),
    )


class FilterDataRequest(BaseModel):
    """Range filter over a whitelisted metric column."""

    model_config = ConfigDict(populate_by_name=True)

    metric: Optional[str] = None
    range_from: Optional[float] = Field(default=None, alias="from")
    range_to: Optional[float] = Field(default=None, alias="to")


class ProductQtyUpdate(BaseModel):
    """Update of one mid-month product quantity column."""

    territory: Optional[str] = None
    metric_type: Optional[str] = None
    value: Optional[float] = None


class MidmonthReviewCreate(BaseModel):
    """A reviewed metric value sent from one territory to another."""

    model_config = ConfigDict(populate_by_name=True)

    sender_territory: Optional[str] = None
    receiver_territory: Optional[str] = None
    metric: Optional[str] = Field(default=None, alias="Metric")
    value: Optional[float] = Field(default=None, alias="Value")
    created_at: Optional[datetime] = None


class ResultsResponse(BaseModel):
    """Generic results wrapper."""

    results: List[Dict[str, Any]]
