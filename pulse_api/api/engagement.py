"""API endpoints for commitments, escalations and information messages."""

from typing import Annotated, Any, Dict, List, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from pulse_api.database.database import get_db
from pulse_api.schemas.records import (
    CommitmentCreate,
    CommitmentUpdate,
    DisclosureCreate,
    EscalationCreate,
    InformationCreate,
    ReceiverTerritoryRequest,
    ResultsResponse,
)
from pulse_api.services.engagement_service import EngagementService, message_to_dict
from pulse_api.utils.errors import create_required_error


# =============================================================================
# Dependency Injection
# =============================================================================

def get_engagement_service(
    session: Annotated[Session, Depends(get_db)],
) -> EngagementService:
    """Get engagement service instance."""
    return EngagementService(session)


def _as_list(body: Any) -> List[Any]:
    return body if isinstance(body, list) else [body]


# =============================================================================
# Router Setup
# =============================================================================

engagement_router = APIRouter(tags=["Engagement"])


# =============================================================================
# Commitments
# =============================================================================

@engagement_router.post(
    "/putData",
    status_code=status.HTTP_201_CREATED,
    response_class=PlainTextResponse,
    summary="Insert Commitments",
)
async def put_commitments(
    body: Union[List[CommitmentCreate], CommitmentCreate],
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> str:
    """Insert one commitment or a list of them."""
    service.add_commitments(_as_list(body))
    return "success"


@engagement_router.get("/getData/{territory}", summary="List Received Commitments")
async def get_commitments(
    territory: str,
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> List[Dict[str, Any]]:
    """List commitments received by a territory."""
    return service.list_commitments(territory)


@engagement_router.put(
    "/updateCommitment",
    response_class=PlainTextResponse,
    summary="Update Commitment",
)
async def update_commitment(
    update: CommitmentUpdate,
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> str:
    """Update the receiver commit date and/or goal of one commitment."""
    service.update_commitment(update)
    return "Updated successfully"


# =============================================================================
# Escalations and Disclosures
# =============================================================================

@engagement_router.post(
    "/putEscalations",
    status_code=status.HTTP_201_CREATED,
    response_class=PlainTextResponse,
    summary="Insert Escalations",
)
async def put_escalations(
    body: Union[List[EscalationCreate], EscalationCreate],
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> str:
    """Insert one escalation or a list of them."""
    service.add_escalations(_as_list(body))
    return "success"


@engagement_router.post(
    "/addEscalation",
    status_code=status.HTTP_201_CREATED,
    summary="Add Disclosure",
)
async def add_disclosure(
    request: DisclosureCreate,
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> Dict[str, str]:
    """Record a metric range disclosure."""
    service.add_disclosure(request)
    return {"message": "Commitment added successfully"}


# =============================================================================
# Information Messages
# =============================================================================

@engagement_router.get("/getInfo", summary="List Information Messages")
async def get_info(
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> List[Dict[str, Any]]:
    """List every information message, newest first."""
    return [message_to_dict(message) for message in service.list_messages()]


@engagement_router.post(
    "/putInfo",
    status_code=status.HTTP_201_CREATED,
    summary="Insert Information Messages",
)
async def put_info(
    body: Union[List[InformationCreate], InformationCreate],
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> Dict[str, Any]:
    """Insert personalised messages for one or more receivers."""
    inserted = service.add_messages(_as_list(body))
    return {"success": True, "inserted": inserted}


@engagement_router.post(
    "/getMessagesByTerritory",
    response_model=ResultsResponse,
    summary="List Messages For Territory",
)
async def get_messages_by_territory(
    request: ReceiverTerritoryRequest,
    service: Annotated[EngagementService, Depends(get_engagement_service)],
) -> ResultsResponse:
    """List messages delivered to one receiving territory."""
    if not request.receiver_territory:
        raise create_required_error("receiver_territory")

    messages = service.list_messages_for(request.receiver_territory)
    return ResultsResponse(results=[message_to_dict(message) for message in messages])
