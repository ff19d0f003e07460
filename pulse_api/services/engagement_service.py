"""Service for commitments, escalations, disclosures and information messages."""

import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from pulse_api.models.commitment import Commitment
from pulse_api.models.escalation import Disclosure, Escalation
from pulse_api.models.information import InformationMessage
from pulse_api.schemas.records import (
    CommitmentCreate,
    CommitmentSummary,
    CommitmentUpdate,
    DisclosureCreate,
    EscalationCreate,
    InformationCreate,
)
from pulse_api.utils.errors import (
    ValidationError,
    create_field_error,
    create_not_found_error,
    create_required_error,
)


logger = logging.getLogger(__name__)


DISCLOSURE_REQUIRED_FIELDS = (
    "metric",
    "sender",
    "sender_code",
    "sender_territory",
    "received_date",
    "goal_date",
)


def personalize_message(message: str, receiver: Any, metric: Any) -> str:
    """Replace @name with the receiver and @metric with the metric, when given."""
    personalized = message
    if "@name" in personalized:
        personalized = personalized.replace("@name", "" if receiver is None else str(receiver))
    if "@metric" in personalized and metric is not None:
        personalized = personalized.replace("@metric", str(metric))
    return personalized


class EngagementService:
    """
    Service for the manager-to-territory communication records.

    Covers goal commitments and their updates, escalations, range
    disclosures, and personalised information messages.
    """

    def __init__(self, session: Session):
        """Initialize with database session."""
        self.session = session

    # =========================================================================
    # Commitments
    # =========================================================================

    def add_commitments(self, items: Sequence[CommitmentCreate]) -> int:
        """Bulk insert commitments."""
        if not items:
            raise ValidationError(message="No data received")

        self.session.add_all([Commitment(**item.model_dump()) for item in items])
        self.session.flush()
        logger.info(f"Inserted {len(items)} commitment(s)")
        return len(items)

    def list_commitments(self, receiver_territory: str) -> List[Dict[str, Any]]:
        """List commitments received by a territory, dates as YYYY-MM-DD."""
        stmt = select(Commitment).where(Commitment.receiver_territory == receiver_territory)
        commitments = self.session.execute(stmt).scalars().all()
        return [
            CommitmentSummary.model_validate(commitment).model_dump(mode="json")
            for commitment in commitments
        ]

    def update_commitment(self, update: CommitmentUpdate) -> Commitment:
        """
        Update the receiver commit date and/or goal of a commitment.

        Only fields present in the request body are written; an explicit
        null clears the column.

        Raises:
            ValidationError: If the id is missing or nothing is updated
            NotFoundError: If no commitment has the id
        """
        if update.id is None:
            raise create_required_error("id")

        fields = {
            name: getattr(update, name)
            for name in ("receiver_commit_date", "goal")
            if name in update.model_fields_set
        }
        if not fields:
            raise ValidationError(message="Nothing to update")

        commitment = self.session.get(Commitment, update.id)
        if commitment is None:
            raise create_not_found_error("Commitment", update.id)

        for name, value in fields.items():
            setattr(commitment, name, value)
        self.session.flush()
        return commitment

    # =========================================================================
    # Escalations and Disclosures
    # =========================================================================

    def add_escalations(self, items: Sequence[EscalationCreate]) -> int:
        """Bulk insert escalations."""
        if not items:
            raise ValidationError(message="No data received")

        self.session.add_all([Escalation(**item.model_dump()) for item in items])
        self.session.flush()
        logger.info(f"Inserted {len(items)} escalation(s)")
        return len(items)

    def add_disclosure(self, request: DisclosureCreate) -> Disclosure:
        """
        Insert a metric range disclosure.

        Raises:
            ValidationError: If any required field is missing
        """
        field_errors = [
            create_field_error(name, f"{name} is required", "required")
            for name in DISCLOSURE_REQUIRED_FIELDS
            if not getattr(request, name)
        ]
        for name, alias in (("range_from", "from"), ("range_to", "to")):
            if getattr(request, name) is None:
                field_errors.append(create_field_error(alias, f"{alias} is required", "required"))

        if field_errors:
            raise ValidationError(message="Missing required fields", field_errors=field_errors)

        disclosure = Disclosure(**request.model_dump())
        self.session.add(disclosure)
        self.session.flush()
        return disclosure

    # =========================================================================
    # Information Messages
    # =========================================================================

    def list_messages(self) -> List[InformationMessage]:
        """List every message, newest first."""
        stmt = select(InformationMessage).order_by(InformationMessage.received_date.desc())
        return list(self.session.execute(stmt).scalars().all())

    def list_messages_for(self, receiver_territory: str) -> List[InformationMessage]:
        """List messages delivered to one territory."""
        stmt = select(InformationMessage).where(
            InformationMessage.receiver_territory == receiver_territory
        )
        return list(self.session.execute(stmt).scalars().all())

    def add_messages(self, items: Sequence[InformationCreate]) -> int:
        """Bulk insert messages, personalising each one for its receiver."""
        if not items:
            raise ValidationError(message="No data received")

        messages = [
            InformationMessage(
                sender=item.sender or None,
                sender_code=item.sender_code or None,
                sender_territory=item.sender_territory or None,
                receiver=item.receiver or None,
                receiver_code=item.receiver_code or None,
                receiver_territory=item.receiver_territory or None,
                received_date=item.received_date,
                message=personalize_message(item.message, item.receiver, item.metric) or None,
            )
            for item in items
        ]
        self.session.add_all(messages)
        self.session.flush()
        logger.info(f"Inserted {len(messages)} information message(s)")
        return len(messages)


def message_to_dict(message: InformationMessage) -> Dict[str, Any]:
    """Serialize an information message row."""
    return {
        "id": message.id,
        "sender": message.sender,
        "sender_code": message.sender_code,
        "sender_territory": message.sender_territory,
        "receiver": message.receiver,
        "receiver_code": message.receiver_code,
        "receiver_territory": message.receiver_territory,
        "received_date": message.received_date.isoformat() if message.received_date else None,
        "message": message.message,
    }
