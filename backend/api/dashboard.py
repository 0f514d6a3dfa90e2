"""Dashboard API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from schemas.dashboard import (
    CategoryHistoryPoint,
    DashboardResponse,
    GoalProgressResponse,
    PeriodPerformanceResponse,
    ReturnHistoryPoint,
    ValueHistoryPoint,
)
from schemas.snapshot import CategoryAllocationResponse
from services.portfolio_service import PortfolioService
from utils.query_params import parse_currency, parse_goal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    currency: Optional[str] = Query(None, description="Display currency (default from settings)"),
    goal: Optional[str] = Query(None, description="Financial goal amount (default from settings)"),
    db: Session = Depends(get_db),
):
    """Get headline value, performance, goal progress and history series."""
    service = PortfolioService(parse_currency(currency, settings.DISPLAY_CURRENCY))
    financial_goal = parse_goal(goal, settings.FINANCIAL_GOAL)

    summary = service.get_dashboard(service.load_history(db), financial_goal)

    return DashboardResponse(
        display_currency=summary.display_currency,
        total_value=summary.total_value,
        latest_snapshot_date=summary.latest_snapshot_date,
        snapshot_count=summary.snapshot_count,
        asset_count=summary.asset_count,
        cumulative_twr=summary.cumulative_twr,
        cagr=summary.cagr,
        goal=GoalProgressResponse(
            goal=summary.goal.goal,
            achievement_rate=summary.goal.achievement_rate,
            distance_to_goal=summary.goal.distance_to_goal,
            is_goal_reached=summary.goal.is_goal_reached,
        ),
        periods=[
            PeriodPerformanceResponse(
                period=p.period,
                begin_date=p.begin_date,
                end_date=p.end_date,
                growth_rate=p.growth_rate,
                return_rate=p.return_rate,
                has_sufficient_data=p.has_sufficient_data,
            )
            for p in summary.periods
        ],
        category_allocations=[
            CategoryAllocationResponse(
                name=a.name,
                value=a.value,
                percentage=a.percentage,
                is_uncategorized=a.is_uncategorized,
            )
            for a in summary.category_allocations
        ],
        value_history=[
            ValueHistoryPoint(
                date=p.date, total_value=p.total_value, net_cash_flow=p.net_cash_flow
            )
            for p in summary.value_history
        ],
        twr_history=[
            ReturnHistoryPoint(date=p.date, value=p.value) for p in summary.twr_history
        ],
        category_value_history=[
            CategoryHistoryPoint(date=p.date, values=p.values)
            for p in summary.category_value_history
        ],
    )
