"""Pydantic schemas for the rebalancing endpoint."""

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel

from schemas.snapshot import CategoryAllocationResponse


class RebalancingActionResponse(BaseModel):
    category_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    adjustment_amount: Decimal  # Positive = buy, negative = sell
    action: Literal["buy", "sell", "none"]


class TransferSuggestionResponse(BaseModel):
    from_category: str
    to_category: str
    amount: Decimal


class RebalancingResponse(BaseModel):
    """Rebalancing suggestions for the latest snapshot."""

    display_currency: str
    total_value: Decimal
    actions: list[RebalancingActionResponse]
    transfers: list[TransferSuggestionResponse]
    no_target_categories: list[CategoryAllocationResponse]
    uncategorized: Optional[CategoryAllocationResponse] = None
