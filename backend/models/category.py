"""Category model - user-defined allocation buckets."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class Category(Base):
    """A user-defined category with an optional target allocation."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False, unique=True)  # e.g., "Equities", "Crypto"
    target_allocation_percentage = Column(Numeric(7, 4), nullable=True)  # None = no target
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    assets = relationship("Asset", back_populates="category")
