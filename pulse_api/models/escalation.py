"""SQLAlchemy models for escalations and range disclosures."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulse_api.models.base import Base


class Escalation(Base):
    """A metric escalation raised against an employee."""
    
    __tablename__ = "escalations"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metric: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    employee_name: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    territory_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    employee_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    entry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class Disclosure(Base):
    """A metric range disclosure sent by a manager."""
    
    __tablename__ = "disclosures"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metric: Mapped[str] = mapped_column(String(100), nullable=False)
    sender: Mapped[str] = mapped_column(String(150), nullable=False)
    sender_code: Mapped[str] = mapped_column(String(50), nullable=False)
    sender_territory: Mapped[str] = mapped_column(String(50), nullable=False)
    range_from: Mapped[Decimal] = mapped_column("from", Numeric(12, 2), nullable=False)
    range_to: Mapped[Decimal] = mapped_column("to", Numeric(12, 2), nullable=False)
    received_date: Mapped[date] = mapped_column(Date, nullable=False)
    goal_date: Mapped[date] = mapped_column(Date, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
