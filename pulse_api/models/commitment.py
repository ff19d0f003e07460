"""SQLAlchemy model for goal commitments between territories."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulse_api.models.base import Base


class Commitment(Base):
    """
    A metric goal sent by a manager to a receiving territory.
    
    The receiver later commits to a date by which the goal will be met.
    """
    
    __tablename__ = "commitments"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metric: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    
    # Sender
    sender: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    sender_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sender_territory: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    
    # Receiver
    receiver: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    receiver_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    receiver_territory: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    
    # Goal and dates
    goal: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    received_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    goal_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    receiver_commit_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    commitment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    
    def __repr__(self) -> str:
        return f"<Commitment(id={self.id}, metric={self.metric}, receiver={self.receiver_territory})>"
