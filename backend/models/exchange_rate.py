"""ExchangeRate model - the rate table captured for a snapshot."""

import json
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid


class ExchangeRate(Base):
    """Cached exchange rates for one snapshot.

    ``rates_json`` maps currency code -> units of that currency per one
    unit of ``base_currency``. Rates are stored as strings so they
    round-trip as exact decimals.
    """

    __tablename__ = "exchange_rates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    snapshot_id = Column(
        String(36), ForeignKey("snapshots.id"), nullable=False, unique=True
    )
    base_currency = Column(String(10), nullable=False)
    rates_json = Column(Text, nullable=False, default="{}")
    fetch_date = Column(Date, nullable=False)
    is_fallback = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    snapshot = relationship("Snapshot", back_populates="exchange_rate")

    @property
    def rate_table(self) -> dict[str, Decimal]:
        """Decoded rates keyed by uppercase currency code."""
        raw = json.loads(self.rates_json or "{}")
        return {code.upper(): Decimal(str(rate)) for code, rate in raw.items()}

    def set_rates(self, rates: dict[str, Decimal]) -> None:
        """Replace the stored rate table."""
        self.rates_json = json.dumps(
            {code.upper(): str(rate) for code, rate in sorted(rates.items())}
        )
