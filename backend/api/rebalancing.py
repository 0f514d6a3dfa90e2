"""Rebalancing API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from schemas.rebalancing import (
    RebalancingActionResponse,
    RebalancingResponse,
    TransferSuggestionResponse,
)
from schemas.snapshot import CategoryAllocationResponse
from services.portfolio_service import PortfolioService
from utils.query_params import parse_currency

router = APIRouter(prefix="/api/rebalancing", tags=["rebalancing"])


@router.get("", response_model=RebalancingResponse)
def get_rebalancing(
    currency: Optional[str] = Query(None, description="Display currency (default from settings)"),
    db: Session = Depends(get_db),
):
    """Get buy/sell suggestions that move categories toward their targets."""
    service = PortfolioService(parse_currency(currency, settings.DISPLAY_CURRENCY))
    result = service.get_rebalancing(service.load_history(db))

    uncategorized = None
    if result.uncategorized is not None:
        uncategorized = CategoryAllocationResponse(
            name=result.uncategorized.name,
            value=result.uncategorized.value,
            percentage=result.uncategorized.percentage,
            is_uncategorized=True,
        )

    return RebalancingResponse(
        display_currency=result.display_currency,
        total_value=result.total_value,
        actions=[
            RebalancingActionResponse(
                category_name=a.category_name,
                current_value=a.current_value,
                current_percentage=a.current_percentage,
                target_percentage=a.target_percentage,
                adjustment_amount=a.adjustment_amount,
                action=a.action,
            )
            for a in result.actions
        ],
        transfers=[
            TransferSuggestionResponse(
                from_category=t.from_category,
                to_category=t.to_category,
                amount=t.amount,
            )
            for t in result.transfers
        ],
        no_target_categories=[
            CategoryAllocationResponse(name=c.name, value=c.value, percentage=c.percentage)
            for c in result.no_target_categories
        ],
        uncategorized=uncategorized,
    )
