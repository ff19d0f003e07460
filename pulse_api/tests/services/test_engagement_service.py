"""Tests for engagement service."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from pulse_api.models.commitment import Commitment
from pulse_api.schemas.records import (
    CommitmentCreate,
    CommitmentUpdate,
    DisclosureCreate,
    InformationCreate,
)
from pulse_api.services.engagement_service import EngagementService, personalize_message
from pulse_api.utils.errors import NotFoundError, ValidationError


@pytest.fixture
def mock_session():
    """Create mock database session."""
    return MagicMock()


class TestPersonalizeMessage:
    """Tests for message placeholder substitution."""

    def test_replaces_name_and_metric(self):
        assert (
            personalize_message("Hi @name, check @metric", "Asha", "Coverage")
            == "Hi Asha, check Coverage"
        )

    def test_metric_placeholder_kept_without_metric(self):
        assert personalize_message("Review @metric", "Asha", None) == "Review @metric"

    def test_missing_receiver_blanks_name(self):
        assert personalize_message("Hi @name", None, None) == "Hi "


class TestCommitments:
    """Tests for commitment operations."""

    def test_add_commitments_requires_items(self, mock_session):
        """Test an empty batch is rejected."""
        service = EngagementService(mock_session)

        with pytest.raises(ValidationError) as exc_info:
            service.add_commitments([])

        assert exc_info.value.message == "No data received"
        mock_session.add_all.assert_not_called()

    def test_add_commitments_inserts_every_item(self, mock_session):
        """Test every commitment becomes a row."""
        service = EngagementService(mock_session)
        items = [
            CommitmentCreate(metric="Calls", receiver_territory="T1", goal=12),
            CommitmentCreate(metric="Coverage", receiver_territory="T2", goal_date=date(2024, 5, 1)),
        ]

        assert service.add_commitments(items) == 2

        added = mock_session.add_all.call_args[0][0]
        assert [row.receiver_territory for row in added] == ["T1", "T2"]
        assert added[0].goal == "12"
        mock_session.flush.assert_called_once()

    def test_update_commitment_requires_id(self, mock_session):
        """Test an update without id fails."""
        service = EngagementService(mock_session)

        with pytest.raises(ValidationError):
            service.update_commitment(CommitmentUpdate(goal="5"))

    def test_update_commitment_requires_a_field(self, mock_session):
        """Test an update naming no fields fails."""
        service = EngagementService(mock_session)

        with pytest.raises(ValidationError) as exc_info:
            service.update_commitment(CommitmentUpdate(id=1))

        assert exc_info.value.message == "Nothing to update"

    def test_update_commitment_not_found(self, mock_session):
        """Test updating a missing commitment raises not found."""
        mock_session.get.return_value = None
        service = EngagementService(mock_session)

        with pytest.raises(NotFoundError):
            service.update_commitment(CommitmentUpdate(id=42, goal="5"))

    def test_update_commitment_writes_only_given_fields(self, mock_session):
        """Test absent fields are left untouched and explicit nulls clear."""
        commitment = Commitment(id=7, goal="10", receiver_commit_date=date(2024, 1, 1))
        mock_session.get.return_value = commitment
        service = EngagementService(mock_session)

        update = CommitmentUpdate.model_validate({"id": 7, "receiver_commit_date": None})
        service.update_commitment(update)

        assert commitment.receiver_commit_date is None
        assert commitment.goal == "10"


class TestDisclosures:
    """Tests for disclosure validation."""

    def test_missing_fields_are_listed(self, mock_session):
        """Test each missing required field is reported."""
        service = EngagementService(mock_session)
        request = DisclosureCreate.model_validate({"metric": "Calls", "from": 0})

        with pytest.raises(ValidationError) as exc_info:
            service.add_disclosure(request)

        fields = {error.field for error in exc_info.value.field_errors}
        assert "sender" in fields
        assert "to" in fields
        assert "from" not in fields
        assert "metric" not in fields
        mock_session.add.assert_not_called()

    def test_complete_disclosure_is_added(self, mock_session):
        """Test a complete disclosure is stored with its range."""
        service = EngagementService(mock_session)
        request = DisclosureCreate.model_validate({
            "metric": "Calls",
            "sender": "Ravi",
            "sender_code": "E1",
            "sender_territory": "T1",
            "from": 10,
            "to": 20,
            "received_date": "2024-04-01",
            "goal_date": "2024-04-30",
        })

        disclosure = service.add_disclosure(request)

        assert disclosure.range_from == 10
        assert disclosure.range_to == 20
        mock_session.add.assert_called_once_with(disclosure)


class TestInformationMessages:
    """Tests for information messages."""

    def test_add_messages_personalises_each_receiver(self, mock_session):
        """Test @name resolves per receiver."""
        service = EngagementService(mock_session)
        items = [
            InformationCreate(receiver="Asha", receiver_territory="T1", message="Hi @name"),
            InformationCreate(receiver="Ravi", receiver_territory="T2", message="Hi @name"),
        ]

        assert service.add_messages(items) == 2

        added = mock_session.add_all.call_args[0][0]
        assert [row.message for row in added] == ["Hi Asha", "Hi Ravi"]

    def test_add_messages_requires_items(self, mock_session):
        service = EngagementService(mock_session)
        with pytest.raises(ValidationError):
            service.add_messages([])
