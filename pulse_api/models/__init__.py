"""Models package for the reporting write tables."""

from pulse_api.models.base import Base
from pulse_api.models.commitment import Commitment
from pulse_api.models.escalation import Disclosure, Escalation
from pulse_api.models.information import InformationMessage
from pulse_api.models.midmonth_review import MidmonthReviewLog
from pulse_api.models.organogram import OrganogramEntry

__all__ = [
    "Base",
    "Commitment",
    "Disclosure",
    "Escalation",
    "InformationMessage",
    "MidmonthReviewLog",
    "OrganogramEntry",
]
