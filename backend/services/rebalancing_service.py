"""Rebalancing calculator.

Compares each category's current value against its target allocation and
suggests how much to buy or sell. Pure calculation; nothing is persisted.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional, Sequence

logger = logging.getLogger(__name__)

# Adjustments smaller than this (in display currency) need no action.
MINIMUM_ADJUSTMENT = Decimal("1")

HUNDRED = Decimal("100")

ActionType = Literal["buy", "sell", "none"]


@dataclass(frozen=True)
class CategoryTarget:
    """Input row: a category's current value and optional target percentage."""

    name: str
    current_value: Decimal
    target_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class RebalancingAction:
    category_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    adjustment_amount: Decimal  # positive = buy, negative = sell
    action: ActionType


@dataclass(frozen=True)
class TransferSuggestion:
    from_category: str
    to_category: str
    amount: Decimal


def _classify(adjustment: Decimal) -> ActionType:
    if abs(adjustment) < MINIMUM_ADJUSTMENT:
        return "none"
    return "buy" if adjustment > 0 else "sell"


def calculate_adjustments(
    categories: Sequence[CategoryTarget], total_value: Decimal
) -> list[RebalancingAction]:
    """Compute buy/sell amounts that move each category to its target.

    Categories without a target percentage are skipped. The result is
    sorted by absolute adjustment, largest first, and is empty when the
    portfolio total is not positive.
    """
    if total_value <= 0:
        return []

    actions: list[RebalancingAction] = []
    for category in categories:
        if category.target_percentage is None:
            continue

        target_value = total_value * category.target_percentage / HUNDRED
        adjustment = target_value - category.current_value
        actions.append(
            RebalancingAction(
                category_name=category.name,
                current_value=category.current_value,
                current_percentage=category.current_value / total_value * HUNDRED,
                target_percentage=category.target_percentage,
                adjustment_amount=adjustment,
                action=_classify(adjustment),
            )
        )

    actions.sort(key=lambda a: abs(a.adjustment_amount), reverse=True)
    return actions


def suggest_transfers(actions: Sequence[RebalancingAction]) -> list[TransferSuggestion]:
    """Pair sells with buys greedily, largest amounts first.

    Each sell's surplus is spent on buys in order until exhausted, so no
    amount is counted twice. Transfers below the minimum adjustment are
    dropped.
    """
    sells = sorted(
        (a for a in actions if a.action == "sell"),
        key=lambda a: abs(a.adjustment_amount),
        reverse=True,
    )
    buys = sorted(
        (a for a in actions if a.action == "buy"),
        key=lambda a: a.adjustment_amount,
        reverse=True,
    )
    if not sells or not buys:
        return []

    sell_remaining = [abs(a.adjustment_amount) for a in sells]
    buy_remaining = [a.adjustment_amount for a in buys]

    transfers: list[TransferSuggestion] = []
    for i, sell in enumerate(sells):
        for j, buy in enumerate(buys):
            amount = min(sell_remaining[i], buy_remaining[j])
            if amount < MINIMUM_ADJUSTMENT:
                continue
            sell_remaining[i] -= amount
            buy_remaining[j] -= amount
            transfers.append(
                TransferSuggestion(
                    from_category=sell.category_name,
                    to_category=buy.category_name,
                    amount=amount,
                )
            )

    logger.debug("Suggested %d transfers from %d actions", len(transfers), len(actions))
    return transfers
