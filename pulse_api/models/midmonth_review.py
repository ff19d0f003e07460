"""SQLAlchemy model for mid-month review log entries."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from pulse_api.models.base import Base


class MidmonthReviewLog(Base):
    """A metric value reviewed by a manager for a receiving territory."""
    
    __tablename__ = "Midmonth_review_logs"
    
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_territory: Mapped[str] = mapped_column(String(50), nullable=False)
    receiver_territory: Mapped[str] = mapped_column(String(50), nullable=False)
    metric: Mapped[str] = mapped_column("Metric", String(100), nullable=False)
    value: Mapped[Decimal] = mapped_column("Value", Numeric(14, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
