"""Asset model - a single tracked position on a platform."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Asset(Base):
    """An asset held on a platform (brokerage, exchange, bank...).

    ``platform`` is the carry-forward grouping key. It is compared with
    exact string equality, and the empty string is a platform of its own.
    An empty ``currency`` means the asset is denominated in the display
    currency.
    """

    __tablename__ = "assets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    platform = Column(String, nullable=False, default="")
    currency = Column(String(10), nullable=False, default="")
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    category = relationship("Category", back_populates="assets")
    snapshot_asset_values = relationship("SnapshotAssetValue", back_populates="asset")
