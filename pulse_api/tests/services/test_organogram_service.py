"""Tests for organogram service."""

from unittest.mock import MagicMock

import pytest

from pulse_api.models.organogram import OrganogramEntry
from pulse_api.services.organogram_service import OrganogramService
from pulse_api.utils.errors import NotFoundError


@pytest.fixture
def mock_session():
    """Create mock database session."""
    return MagicMock()


class TestOrganogramService:
    """Tests for organogram lookups."""

    def _set_entry(self, session, entry):
        session.execute.return_value.scalars.return_value.first.return_value = entry

    def test_check_role_allows_individual_contributors(self, mock_session):
        self._set_entry(mock_session, OrganogramEntry(territory="T1", role="be", emp_name="Asha"))
        service = OrganogramService(mock_session)

        assert service.check_role("T1") == {"allowed": True, "role": "be", "name": "Asha"}

    def test_check_role_denies_managers(self, mock_session):
        self._set_entry(mock_session, OrganogramEntry(territory="T1", role="BM", emp_name="Ravi"))
        service = OrganogramService(mock_session, allowed_roles=["BE"])

        assert service.check_role("T1")["allowed"] is False

    def test_check_role_unknown_territory(self, mock_session):
        self._set_entry(mock_session, None)
        service = OrganogramService(mock_session)

        assert service.check_role("T404") == {"allowed": False, "message": "Territory not found"}

    def test_employee_name_not_found(self, mock_session):
        self._set_entry(mock_session, None)
        service = OrganogramService(mock_session)

        with pytest.raises(NotFoundError):
            service.get_employee_name("T404")
