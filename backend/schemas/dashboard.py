"""Pydantic schemas for the dashboard endpoint."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from schemas.snapshot import CategoryAllocationResponse


class GoalProgressResponse(BaseModel):
    goal: Optional[Decimal] = None
    achievement_rate: Decimal  # Percent, 0 when no goal is set
    distance_to_goal: Decimal
    is_goal_reached: bool


class PeriodPerformanceResponse(BaseModel):
    """Growth and Modified Dietz return over a lookback window."""

    period: str  # "1M", "3M", "1Y"
    begin_date: Optional[date] = None
    end_date: Optional[date] = None
    growth_rate: Optional[Decimal] = None  # Fraction, e.g. 0.05 = 5%
    return_rate: Optional[Decimal] = None
    has_sufficient_data: bool


class ValueHistoryPoint(BaseModel):
    date: date
    total_value: Decimal
    net_cash_flow: Decimal


class ReturnHistoryPoint(BaseModel):
    date: date
    value: Optional[Decimal] = None


class CategoryHistoryPoint(BaseModel):
    date: date
    values: dict[str, Decimal]


class DashboardResponse(BaseModel):
    """Dashboard data response."""

    display_currency: str
    total_value: Decimal
    latest_snapshot_date: Optional[date] = None
    snapshot_count: int
    asset_count: int
    cumulative_twr: Optional[Decimal] = None
    cagr: Optional[Decimal] = None
    goal: GoalProgressResponse
    periods: list[PeriodPerformanceResponse]
    category_allocations: list[CategoryAllocationResponse]
    value_history: list[ValueHistoryPoint]
    twr_history: list[ReturnHistoryPoint]
    category_value_history: list[CategoryHistoryPoint]
