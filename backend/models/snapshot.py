"""Snapshot model - one dated observation of the portfolio."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Snapshot(Base):
    """A dated set of asset valuations.

    Dates are unique, so snapshots are totally ordered by ``date``.
    Platforms that were not updated for a snapshot are filled in by
    carry-forward at query time, never stored here.
    """

    __tablename__ = "snapshots"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    asset_values = relationship(
        "SnapshotAssetValue", back_populates="snapshot", cascade="all, delete-orphan"
    )
    cash_flow_operations = relationship(
        "CashFlowOperation", back_populates="snapshot", cascade="all, delete-orphan"
    )
    exchange_rate = relationship(
        "ExchangeRate", back_populates="snapshot", uselist=False, cascade="all, delete-orphan"
    )
