"""CashFlowOperation model - external money moved in or out of the portfolio."""

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import DecimalString, generate_uuid


class CashFlowOperation(Base):
    """A contribution (positive) or withdrawal (negative) recorded with a snapshot."""

    __tablename__ = "cash_flow_operations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    snapshot_id = Column(
        String(36), ForeignKey("snapshots.id"), nullable=False, index=True
    )
    description = Column(String, nullable=False, default="")
    amount = Column(DecimalString, nullable=False, default=Decimal("0"))
    currency = Column(String(10), nullable=False, default="")  # "" = display currency

    # Relationships
    snapshot = relationship("Snapshot", back_populates="cash_flow_operations")
