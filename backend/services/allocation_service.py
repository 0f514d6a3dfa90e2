"""Category allocation and financial goal progress."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

UNCATEGORIZED = "Uncategorized"

HUNDRED = Decimal("100")


@dataclass
class CategoryAllocationData:
    """A category's share of the portfolio."""

    name: str
    value: Decimal
    percentage: Optional[Decimal]
    is_uncategorized: bool = False  # Assets with no category assigned


@dataclass
class GoalProgress:
    """Progress of the portfolio toward a financial goal."""

    goal: Optional[Decimal]
    achievement_rate: Decimal
    distance_to_goal: Decimal
    is_goal_reached: bool


def category_allocation(category_value: Decimal, total_value: Decimal) -> Optional[Decimal]:
    """Percentage of ``total_value`` held in a category.

    Returns None when the portfolio total is zero. Percentages are not
    normalized, so they may sum to slightly more or less than 100.
    """
    if total_value == 0:
        return None
    return category_value / total_value * HUNDRED


def calculate_category_allocations(
    category_values: Mapping[Optional[str], Decimal],
    total_value: Decimal,
) -> list[CategoryAllocationData]:
    """Allocation rows sorted by value, largest first.

    Args:
        category_values: Category name -> value. ``None`` or an empty name
            collects assets without a category.
        total_value: Portfolio total the percentages are relative to.
    """
    merged: dict[Optional[str], Decimal] = {}
    for name, value in category_values.items():
        key = name or None
        merged[key] = merged.get(key, Decimal("0")) + value

    allocations = [
        CategoryAllocationData(
            name=UNCATEGORIZED if name is None else name,
            value=value,
            percentage=category_allocation(value, total_value),
            is_uncategorized=name is None,
        )
        for name, value in merged.items()
    ]
    allocations.sort(key=lambda a: (-a.value, a.is_uncategorized, a.name))
    return allocations


def achievement_rate(total_value: Decimal, goal: Optional[Decimal]) -> Decimal:
    """Percent of the goal reached; 0 when no positive goal is set."""
    if goal is None or goal <= 0:
        return Decimal("0")
    return total_value / goal * HUNDRED


def distance_to_goal(total_value: Decimal, goal: Optional[Decimal]) -> Decimal:
    """Amount still missing; negative once the goal is exceeded."""
    if goal is None:
        return Decimal("0")
    return goal - total_value


def is_goal_reached(total_value: Decimal, goal: Optional[Decimal]) -> bool:
    if goal is None:
        return False
    return total_value >= goal


def goal_progress(total_value: Decimal, goal: Optional[Decimal]) -> GoalProgress:
    return GoalProgress(
        goal=goal,
        achievement_rate=achievement_rate(total_value, goal),
        distance_to_goal=distance_to_goal(total_value, goal),
        is_goal_reached=is_goal_reached(total_value, goal),
    )
