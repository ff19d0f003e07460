"""SQLAlchemy model for informational messages sent to territories."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulse_api.models.base import Base


class InformationMessage(Base):
    """A personalised message delivered to a receiving territory."""
    
    __tablename__ = "information"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    sender_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sender_territory: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    receiver: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    receiver_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    receiver_territory: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    received_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
