"""Pydantic schemas for snapshot and composite valuation endpoints."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class SnapshotSummary(BaseModel):
    """A snapshot in the history list with its composite total."""

    id: str
    date: date
    total_value: Decimal
    direct_count: int
    carried_count: int
    has_exchange_rate: bool


class SnapshotListResponse(BaseModel):
    display_currency: str
    snapshots: list[SnapshotSummary]  # newest first


class CompositeValueResponse(BaseModel):
    """One asset's resolved value within a composite snapshot."""

    asset_id: str
    asset_name: str
    platform: str
    category_name: Optional[str] = None
    currency: str  # Source currency of market_value
    market_value: Decimal
    converted_value: Decimal  # In the display currency
    is_carried_forward: bool
    source_date: Optional[date] = None


class PlatformTotalResponse(BaseModel):
    platform: str
    total_value: Decimal
    asset_count: int


class CategoryAllocationResponse(BaseModel):
    name: str
    value: Decimal
    percentage: Optional[Decimal] = None  # None when the total is zero
    is_uncategorized: bool = False


class CompositeSnapshotResponse(BaseModel):
    """Full composite breakdown of a snapshot."""

    snapshot_id: str
    date: date
    display_currency: str
    total_value: Decimal
    net_cash_flow: Decimal
    values: list[CompositeValueResponse]
    platforms: list[PlatformTotalResponse]
    categories: list[CategoryAllocationResponse]


class ExchangeRateResponse(BaseModel):
    """Rate table stored for a snapshot."""

    snapshot_id: str
    base_currency: str
    fetch_date: date
    is_fallback: bool
    rates: dict[str, Decimal]
