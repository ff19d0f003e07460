"""SQLAlchemy model for the organogram (employee to territory) table."""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pulse_api.models.base import Base


class OrganogramEntry(Base):
    """One employee seat in the field-force organogram."""
    
    __tablename__ = "organogram"
    
    territory: Mapped[str] = mapped_column("Territory", String(50), primary_key=True)
    emp_code: Mapped[str] = mapped_column("Emp_Code", String(50), nullable=False)
    emp_name: Mapped[str] = mapped_column("Emp_Name", String(150), nullable=False)
    role: Mapped[Optional[str]] = mapped_column("Role", String(20), nullable=True)
    division: Mapped[Optional[str]] = mapped_column("Division", String(100), nullable=True)
    
    def __repr__(self) -> str:
        return f"<OrganogramEntry(territory={self.territory}, emp_code={self.emp_code}, role={self.role})>"
