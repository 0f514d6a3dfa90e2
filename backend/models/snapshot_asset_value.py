"""SnapshotAssetValue model - an asset's market value within a snapshot."""

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import DecimalString, generate_uuid


class SnapshotAssetValue(Base):
    """Market value of one asset in one snapshot, in the asset's currency."""

    __tablename__ = "snapshot_asset_values"
    __table_args__ = (
        UniqueConstraint("snapshot_id", "asset_id", name="uix_snapshot_asset"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    snapshot_id = Column(
        String(36), ForeignKey("snapshots.id"), nullable=False, index=True
    )
    asset_id = Column(
        String(36), ForeignKey("assets.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    market_value = Column(DecimalString, nullable=False, default=Decimal("0"))

    # Relationships
    snapshot = relationship("Snapshot", back_populates="asset_values")
    asset = relationship("Asset", back_populates="snapshot_asset_values")
