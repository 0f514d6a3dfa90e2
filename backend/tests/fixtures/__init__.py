"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from models import Asset, CashFlowOperation, Category, ExchangeRate, Snapshot, SnapshotAssetValue
from sqlalchemy.orm import Session


def create_category(
    db: Session,
    name: str,
    target: Decimal | None = None,
    display_order: int = 0,
) -> Category:
    """Create a Category with an optional target allocation percentage."""
    category = Category(
        name=name,
        target_allocation_percentage=target,
        display_order=display_order,
    )
    db.add(category)
    db.flush()
    return category


def create_asset(
    db: Session,
    name: str,
    platform: str = "",
    currency: str = "",
    category: Category | None = None,
) -> Asset:
    """Create an Asset on a platform."""
    asset = Asset(
        name=name,
        platform=platform,
        currency=currency,
        category_id=category.id if category else None,
    )
    db.add(asset)
    db.flush()
    return asset


def create_snapshot(db: Session, snapshot_date: date) -> Snapshot:
    """Create an empty Snapshot for a date."""
    snapshot = Snapshot(date=snapshot_date)
    db.add(snapshot)
    db.flush()
    return snapshot


def add_value(
    db: Session, snapshot: Snapshot, asset: Asset, market_value: Decimal | str
) -> SnapshotAssetValue:
    """Record an asset's market value in a snapshot."""
    sav = SnapshotAssetValue(
        snapshot_id=snapshot.id,
        asset_id=asset.id,
        market_value=Decimal(market_value),
    )
    db.add(sav)
    db.flush()
    return sav


def add_cash_flow(
    db: Session,
    snapshot: Snapshot,
    amount: Decimal | str,
    description: str = "Deposit",
    currency: str = "",
) -> CashFlowOperation:
    """Record an external cash flow (positive = contribution) on a snapshot."""
    cf = CashFlowOperation(
        snapshot_id=snapshot.id,
        description=description,
        amount=Decimal(amount),
        currency=currency,
    )
    db.add(cf)
    db.flush()
    return cf


def attach_rates(
    db: Session,
    snapshot: Snapshot,
    rates: dict[str, Decimal | str],
    base_currency: str = "USD",
) -> ExchangeRate:
    """Store a rate table on a snapshot."""
    exchange_rate = ExchangeRate(
        snapshot_id=snapshot.id,
        base_currency=base_currency,
        fetch_date=snapshot.date,
    )
    exchange_rate.set_rates({code: Decimal(rate) for code, rate in rates.items()})
    db.add(exchange_rate)
    db.flush()
    db.refresh(snapshot)
    return exchange_rate


# Pytest fixtures that use the helper functions above


@pytest.fixture
def equities(db: Session) -> Category:
    """Equities category with a 60% target."""
    category = create_category(db, "Equities", target=Decimal("60"), display_order=1)
    db.commit()
    return category


@pytest.fixture
def bonds(db: Session) -> Category:
    """Bonds category with a 40% target."""
    category = create_category(db, "Bonds", target=Decimal("40"), display_order=2)
    db.commit()
    return category


@pytest.fixture
def two_platform_history(db: Session, equities: Category, bonds: Category) -> dict:
    """Two platforms where the second snapshot only updates Broker.

    - 2025-01-01: Broker/Stocks 6000, Bank/Bond Fund 4000
    - 2025-02-01: Broker/Stocks 7000 (Bank carried forward), +500 deposit
    """
    stocks = create_asset(db, "Stocks", platform="Broker", category=equities)
    bond_fund = create_asset(db, "Bond Fund", platform="Bank", category=bonds)

    jan = create_snapshot(db, date(2025, 1, 1))
    add_value(db, jan, stocks, "6000")
    add_value(db, jan, bond_fund, "4000")

    feb = create_snapshot(db, date(2025, 2, 1))
    add_value(db, feb, stocks, "7000")
    add_cash_flow(db, feb, "500")

    db.commit()
    return {
        "stocks": stocks,
        "bond_fund": bond_fund,
        "jan": jan,
        "feb": feb,
    }
