"""Portfolio service — composite snapshots, dashboard and rebalancing views.

Loads the snapshot history once per request and runs it through the
carry-forward engine, currency conversion and the calculators. Every
amount this service returns is in the display currency.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from config import settings
from models import Asset, Category, Snapshot, SnapshotAssetValue
from services.allocation_service import (
    UNCATEGORIZED,
    CategoryAllocationData,
    GoalProgress,
    calculate_category_allocations,
    category_allocation,
    goal_progress,
)
from services.carry_forward_service import composite_values
from services.currency_conversion_service import (
    ConvertedValue,
    convert,
    convert_composite_values,
    effective_currency,
)
from services.performance_service import (
    PeriodPerformance,
    ReturnPoint,
    ValuationPoint,
    summarize,
)
from services.rebalancing_service import (
    CategoryTarget,
    RebalancingAction,
    TransferSuggestion,
    calculate_adjustments,
    suggest_transfers,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class PortfolioHistory:
    """Read-only collections the engine works on."""

    snapshots: list[Snapshot]  # ascending by date
    asset_values: list[SnapshotAssetValue]
    categories: list[Category]  # by display_order, then name

    @property
    def latest(self) -> Optional[Snapshot]:
        return self.snapshots[-1] if self.snapshots else None

    def get_snapshot(self, snapshot_id: str) -> Optional[Snapshot]:
        for snapshot in self.snapshots:
            if snapshot.id == snapshot_id:
                return snapshot
        return None


@dataclass
class PlatformTotal:
    platform: str
    total_value: Decimal
    asset_count: int


@dataclass
class CompositeSnapshot:
    """A snapshot with carried-forward values, converted to the display currency."""

    snapshot_id: str
    date: date
    display_currency: str
    values: list[ConvertedValue] = field(default_factory=list)
    total_value: Decimal = ZERO
    net_cash_flow: Decimal = ZERO
    platform_totals: list[PlatformTotal] = field(default_factory=list)
    category_values: dict[Optional[str], Decimal] = field(default_factory=dict)
    category_allocations: list[CategoryAllocationData] = field(default_factory=list)

    @property
    def direct_count(self) -> int:
        return sum(1 for v in self.values if not v.composite.is_carried_forward)

    @property
    def carried_count(self) -> int:
        return sum(1 for v in self.values if v.composite.is_carried_forward)


@dataclass
class CategoryValuePoint:
    date: date
    values: dict[str, Decimal]


@dataclass
class DashboardSummary:
    """Headline figures and time series for the dashboard."""

    display_currency: str
    total_value: Decimal = ZERO
    latest_snapshot_date: Optional[date] = None
    snapshot_count: int = 0
    asset_count: int = 0
    cumulative_twr: Optional[Decimal] = None
    cagr: Optional[Decimal] = None
    goal: Optional[GoalProgress] = None
    periods: list[PeriodPerformance] = field(default_factory=list)
    category_allocations: list[CategoryAllocationData] = field(default_factory=list)
    value_history: list[ValuationPoint] = field(default_factory=list)
    twr_history: list[ReturnPoint] = field(default_factory=list)
    category_value_history: list[CategoryValuePoint] = field(default_factory=list)


@dataclass
class RebalancingResult:
    """Rebalancing view of the latest composite snapshot."""

    display_currency: str
    total_value: Decimal = ZERO
    actions: list[RebalancingAction] = field(default_factory=list)
    transfers: list[TransferSuggestion] = field(default_factory=list)
    no_target_categories: list[CategoryAllocationData] = field(default_factory=list)
    uncategorized: Optional[CategoryAllocationData] = None


class PortfolioService:
    """Composite valuation of the snapshot history in one display currency."""

    def __init__(self, display_currency: Optional[str] = None):
        self.display_currency = (display_currency or settings.DISPLAY_CURRENCY).upper()

    def load_history(self, db: Session) -> PortfolioHistory:
        """Load snapshots, asset values and categories in three queries."""
        snapshots = (
            db.query(Snapshot)
            .options(
                selectinload(Snapshot.cash_flow_operations),
                joinedload(Snapshot.exchange_rate),
            )
            .order_by(Snapshot.date)
            .all()
        )
        asset_values = (
            db.query(SnapshotAssetValue)
            .options(joinedload(SnapshotAssetValue.asset).joinedload(Asset.category))
            .all()
        )
        categories = (
            db.query(Category)
            .order_by(Category.display_order, Category.name)
            .all()
        )
        logger.debug(
            "Loaded history: %d snapshots, %d values, %d categories",
            len(snapshots), len(asset_values), len(categories),
        )
        return PortfolioHistory(
            snapshots=snapshots,
            asset_values=asset_values,
            categories=categories,
        )

    def _rate_context(self, snapshot: Snapshot) -> tuple[dict[str, Decimal], str]:
        """The snapshot's own rate table and base, or an empty table."""
        if snapshot.exchange_rate is not None:
            return snapshot.exchange_rate.rate_table, snapshot.exchange_rate.base_currency
        return {}, self.display_currency

    def get_composite_snapshot(
        self, history: PortfolioHistory, snapshot: Snapshot
    ) -> CompositeSnapshot:
        """Resolve, convert and aggregate one snapshot.

        Raises:
            SnapshotNotInHistoryError: ``snapshot`` is not in ``history``.
            MissingExchangeRateError: A needed rate is unavailable.
        """
        rates, base = self._rate_context(snapshot)
        resolved = composite_values(snapshot, history.snapshots, history.asset_values)
        converted = convert_composite_values(resolved, self.display_currency, rates, base)

        total = sum((v.converted_value for v in converted), ZERO)

        net_cash_flow = ZERO
        for cf in snapshot.cash_flow_operations:
            currency = effective_currency(cf.currency, self.display_currency)
            net_cash_flow += convert(cf.amount, currency, rates, base, self.display_currency)

        platform_values: dict[str, Decimal] = defaultdict(lambda: ZERO)
        platform_counts: dict[str, int] = defaultdict(int)
        category_values: dict[Optional[str], Decimal] = defaultdict(lambda: ZERO)
        for value in converted:
            asset = value.composite.asset
            platform_values[asset.platform] += value.converted_value
            platform_counts[asset.platform] += 1
            category_name = asset.category.name if asset.category else None
            category_values[category_name] += value.converted_value

        platform_totals = [
            PlatformTotal(
                platform=platform,
                total_value=platform_values[platform],
                asset_count=platform_counts[platform],
            )
            for platform in platform_values
        ]
        platform_totals.sort(key=lambda p: (-p.total_value, p.platform))

        return CompositeSnapshot(
            snapshot_id=snapshot.id,
            date=snapshot.date,
            display_currency=self.display_currency,
            values=converted,
            total_value=total,
            net_cash_flow=net_cash_flow,
            platform_totals=platform_totals,
            category_values=dict(category_values),
            category_allocations=calculate_category_allocations(category_values, total),
        )

    def get_composite_snapshots(self, history: PortfolioHistory) -> list[CompositeSnapshot]:
        """Composite view of every snapshot, ascending by date."""
        return [self.get_composite_snapshot(history, s) for s in history.snapshots]

    def valuation_points(self, history: PortfolioHistory) -> list[ValuationPoint]:
        """Total value and net cash flow per snapshot, ascending."""
        return [
            ValuationPoint(
                date=composite.date,
                total_value=composite.total_value,
                net_cash_flow=composite.net_cash_flow,
            )
            for composite in self.get_composite_snapshots(history)
        ]

    def get_dashboard(
        self, history: PortfolioHistory, goal: Optional[Decimal] = None
    ) -> DashboardSummary:
        """Headline metrics, performance and history series."""
        summary = DashboardSummary(display_currency=self.display_currency)
        if not history.snapshots:
            summary.goal = goal_progress(ZERO, goal)
            return summary

        composites = self.get_composite_snapshots(history)
        points = [
            ValuationPoint(date=c.date, total_value=c.total_value, net_cash_flow=c.net_cash_flow)
            for c in composites
        ]
        latest = composites[-1]
        performance = summarize(points)

        summary.total_value = latest.total_value
        summary.latest_snapshot_date = latest.date
        summary.snapshot_count = len(composites)
        summary.asset_count = len(latest.values)
        summary.cumulative_twr = performance.cumulative_twr
        summary.cagr = performance.cagr
        summary.goal = goal_progress(latest.total_value, goal)
        summary.periods = performance.periods
        summary.category_allocations = latest.category_allocations
        summary.value_history = points
        summary.twr_history = performance.twr_history
        summary.category_value_history = [
            CategoryValuePoint(
                date=c.date,
                values={a.name: a.value for a in c.category_allocations},
            )
            for c in composites
        ]

        logger.info(
            "Dashboard: %d snapshots, total %s %s",
            summary.snapshot_count, summary.total_value, self.display_currency,
        )
        return summary

    def get_rebalancing(self, history: PortfolioHistory) -> RebalancingResult:
        """Rebalancing actions for the latest snapshot against category targets."""
        result = RebalancingResult(display_currency=self.display_currency)
        latest = history.latest
        if latest is None:
            return result

        composite = self.get_composite_snapshot(history, latest)
        result.total_value = composite.total_value
        if composite.total_value <= 0:
            return result

        values = composite.category_values
        targets = [
            CategoryTarget(
                name=category.name,
                current_value=values.get(category.name, ZERO),
                target_percentage=category.target_allocation_percentage,
            )
            for category in history.categories
        ]
        result.actions = calculate_adjustments(targets, composite.total_value)
        result.transfers = suggest_transfers(result.actions)

        result.no_target_categories = sorted(
            (
                CategoryAllocationData(
                    name=t.name,
                    value=t.current_value,
                    percentage=category_allocation(t.current_value, composite.total_value),
                )
                for t in targets
                if t.target_percentage is None
            ),
            key=lambda row: row.name.casefold(),
        )

        uncategorized_value = values.get(None, ZERO)
        if uncategorized_value > 0:
            result.uncategorized = CategoryAllocationData(
                name=UNCATEGORIZED,
                value=uncategorized_value,
                percentage=category_allocation(uncategorized_value, composite.total_value),
                is_uncategorized=True,
            )
        return result
