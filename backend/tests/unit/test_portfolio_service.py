"""Unit tests for PortfolioService."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from services.currency_conversion_service import MissingExchangeRateError
from services.portfolio_service import PortfolioService
from tests.fixtures import (
    add_cash_flow,
    add_value,
    attach_rates,
    create_asset,
    create_category,
    create_snapshot,
)


# ---------------------------------------------------------------------------
# TestLoadHistory
# ---------------------------------------------------------------------------
class TestLoadHistory:
    def test_snapshots_are_ascending(self, db: Session):
        create_snapshot(db, date(2025, 3, 1))
        create_snapshot(db, date(2025, 1, 1))
        create_snapshot(db, date(2025, 2, 1))
        db.commit()

        history = PortfolioService("USD").load_history(db)

        assert [s.date for s in history.snapshots] == [
            date(2025, 1, 1),
            date(2025, 2, 1),
            date(2025, 3, 1),
        ]
        assert history.latest.date == date(2025, 3, 1)

    def test_empty_history(self, db: Session):
        history = PortfolioService("USD").load_history(db)
        assert history.snapshots == []
        assert history.latest is None


# ---------------------------------------------------------------------------
# TestCompositeSnapshot
# ---------------------------------------------------------------------------
class TestCompositeSnapshot:
    def test_carried_platform_and_totals(self, db: Session, two_platform_history):
        service = PortfolioService("USD")
        history = service.load_history(db)

        composite = service.get_composite_snapshot(history, two_platform_history["feb"])

        assert composite.total_value == Decimal("11000")
        assert composite.direct_count == 1
        assert composite.carried_count == 1
        assert composite.net_cash_flow == Decimal("500")
        assert [(p.platform, p.total_value) for p in composite.platform_totals] == [
            ("Broker", Decimal("7000")),
            ("Bank", Decimal("4000")),
        ]
        by_name = {a.name: a for a in composite.category_allocations}
        assert by_name["Equities"].value == Decimal("7000")
        assert by_name["Bonds"].value == Decimal("4000")

    def test_values_converted_with_snapshot_rates(self, db: Session):
        etf = create_asset(db, "Euro ETF", platform="Broker", currency="EUR")
        cash = create_asset(db, "Cash", platform="Bank")
        snapshot = create_snapshot(db, date(2025, 1, 1))
        add_value(db, snapshot, etf, "80")
        add_value(db, snapshot, cash, "100")
        attach_rates(db, snapshot, {"EUR": "0.8", "JPY": "150"}, base_currency="USD")
        db.commit()

        service = PortfolioService("JPY")
        history = service.load_history(db)
        composite = service.get_composite_snapshot(history, history.latest)

        converted = {v.composite.asset.name: v.converted_value for v in composite.values}
        # Empty asset currency means the display currency
        assert converted["Cash"] == Decimal("100")
        assert converted["Euro ETF"] == Decimal("15000")

    def test_carried_values_use_target_snapshot_rates(self, db: Session):
        etf = create_asset(db, "Euro ETF", platform="Broker", currency="EUR")
        cash = create_asset(db, "Cash", platform="Bank", currency="USD")
        jan = create_snapshot(db, date(2025, 1, 1))
        add_value(db, jan, etf, "100")
        attach_rates(db, jan, {"EUR": "0.5"})
        feb = create_snapshot(db, date(2025, 2, 1))
        add_value(db, feb, cash, "10")
        attach_rates(db, feb, {"EUR": "0.8"})
        db.commit()

        service = PortfolioService("USD")
        history = service.load_history(db)
        composite = service.get_composite_snapshot(history, history.latest)

        assert composite.total_value == Decimal("135")

    def test_missing_rate_raises(self, db: Session):
        etf = create_asset(db, "Euro ETF", platform="Broker", currency="EUR")
        snapshot = create_snapshot(db, date(2025, 1, 1))
        add_value(db, snapshot, etf, "80")
        db.commit()

        service = PortfolioService("USD")
        history = service.load_history(db)

        with pytest.raises(MissingExchangeRateError) as exc_info:
            service.get_composite_snapshot(history, history.latest)
        assert exc_info.value.currency == "EUR"

    def test_foreign_cash_flow_is_converted(self, db: Session):
        cash = create_asset(db, "Cash", platform="Bank")
        snapshot = create_snapshot(db, date(2025, 1, 1))
        add_value(db, snapshot, cash, "1000")
        add_cash_flow(db, snapshot, "40", currency="EUR")
        attach_rates(db, snapshot, {"EUR": "0.8"})
        db.commit()

        service = PortfolioService("USD")
        history = service.load_history(db)
        composite = service.get_composite_snapshot(history, history.latest)

        assert composite.net_cash_flow == Decimal("50")


# ---------------------------------------------------------------------------
# TestDashboard
# ---------------------------------------------------------------------------
class TestDashboard:
    def test_empty_history(self, db: Session):
        service = PortfolioService("USD")
        summary = service.get_dashboard(service.load_history(db), goal=Decimal("1000"))

        assert summary.total_value == Decimal("0")
        assert summary.latest_snapshot_date is None
        assert summary.cumulative_twr is None
        assert summary.cagr is None
        assert summary.goal.achievement_rate == Decimal("0")
        assert summary.goal.distance_to_goal == Decimal("1000")

    def test_summary_from_history(self, db: Session, two_platform_history):
        service = PortfolioService("USD")
        summary = service.get_dashboard(service.load_history(db), goal=Decimal("22000"))

        assert summary.total_value == Decimal("11000")
        assert summary.latest_snapshot_date == date(2025, 2, 1)
        assert summary.snapshot_count == 2
        assert summary.asset_count == 2
        # 10000 -> 11000 with 500 added at the end: 500 / 10000
        assert summary.cumulative_twr == Decimal("0.05")
        assert summary.goal.achievement_rate == Decimal("50")
        assert summary.goal.is_goal_reached is False
        assert [p.total_value for p in summary.value_history] == [
            Decimal("10000"),
            Decimal("11000"),
        ]
        assert [p.value for p in summary.twr_history] == [Decimal("0"), Decimal("0.05")]
        assert summary.category_value_history[1].values == {
            "Equities": Decimal("7000"),
            "Bonds": Decimal("4000"),
        }

        one_month = next(p for p in summary.periods if p.period == "1M")
        assert one_month.begin_date == date(2025, 1, 1)
        assert one_month.growth_rate == Decimal("0.1")
        assert one_month.return_rate == Decimal("0.05")

    def test_single_snapshot_has_undefined_performance(self, db: Session):
        cash = create_asset(db, "Cash", platform="Bank")
        snapshot = create_snapshot(db, date(2025, 1, 1))
        add_value(db, snapshot, cash, "500")
        db.commit()

        service = PortfolioService("USD")
        summary = service.get_dashboard(service.load_history(db))

        assert summary.total_value == Decimal("500")
        assert summary.cumulative_twr is None
        assert summary.cagr is None
        assert all(not p.has_sufficient_data for p in summary.periods)
        assert summary.goal.is_goal_reached is False


# ---------------------------------------------------------------------------
# TestRebalancing
# ---------------------------------------------------------------------------
class TestRebalancing:
    def test_actions_against_targets(self, db: Session, equities, bonds):
        collectibles = create_category(db, "Collectibles")
        stocks = create_asset(db, "Stocks", platform="Broker", category=equities)
        bond_fund = create_asset(db, "Bond Fund", platform="Broker", category=bonds)
        art = create_asset(db, "Painting", platform="Home", category=collectibles)
        loose = create_asset(db, "Wallet", platform="Home")
        snapshot = create_snapshot(db, date(2025, 1, 1))
        add_value(db, snapshot, stocks, "40000")
        add_value(db, snapshot, bond_fund, "40000")
        add_value(db, snapshot, art, "15000")
        add_value(db, snapshot, loose, "5000")
        db.commit()

        service = PortfolioService("USD")
        result = service.get_rebalancing(service.load_history(db))

        assert result.total_value == Decimal("100000")
        actions = {a.category_name: a for a in result.actions}
        assert actions["Equities"].adjustment_amount == Decimal("20000")
        assert actions["Equities"].action == "buy"
        assert actions["Bonds"].adjustment_amount == Decimal("0")
        assert actions["Bonds"].action == "none"
        assert result.transfers == []
        assert [c.name for c in result.no_target_categories] == ["Collectibles"]
        assert result.no_target_categories[0].percentage == Decimal("15")
        assert result.uncategorized.value == Decimal("5000")
        assert result.uncategorized.percentage == Decimal("5")

    def test_transfers_between_categories(self, db: Session, two_platform_history):
        service = PortfolioService("USD")
        result = service.get_rebalancing(service.load_history(db))

        # 11000 total: Equities 7000 vs 6600 target, Bonds 4000 vs 4400
        assert len(result.transfers) == 1
        assert result.transfers[0].from_category == "Equities"
        assert result.transfers[0].to_category == "Bonds"
        assert result.transfers[0].amount == Decimal("400")
        assert result.uncategorized is None

    def test_empty_history(self, db: Session):
        service = PortfolioService("USD")
        result = service.get_rebalancing(service.load_history(db))
        assert result.actions == []
        assert result.total_value == Decimal("0")
