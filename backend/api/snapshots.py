"""Snapshot API endpoints — history list, composite breakdown, rate tables."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_exchange_rate_service, get_or_404, provider_http_error
from config import settings
from database import get_db
from integrations.exceptions import ProviderError
from models import ExchangeRate, Snapshot
from schemas.snapshot import (
    CategoryAllocationResponse,
    CompositeSnapshotResponse,
    CompositeValueResponse,
    ExchangeRateResponse,
    PlatformTotalResponse,
    SnapshotListResponse,
    SnapshotSummary,
)
from services.exchange_rate_service import ExchangeRateService
from services.portfolio_service import CompositeSnapshot, PortfolioService
from utils.query_params import parse_currency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/snapshots", tags=["snapshots"])


def _composite_response(composite: CompositeSnapshot) -> CompositeSnapshotResponse:
    return CompositeSnapshotResponse(
        snapshot_id=composite.snapshot_id,
        date=composite.date,
        display_currency=composite.display_currency,
        total_value=composite.total_value,
        net_cash_flow=composite.net_cash_flow,
        values=[
            CompositeValueResponse(
                asset_id=v.composite.asset.id,
                asset_name=v.composite.asset.name,
                platform=v.composite.asset.platform,
                category_name=(
                    v.composite.asset.category.name if v.composite.asset.category else None
                ),
                currency=v.currency,
                market_value=v.composite.market_value,
                converted_value=v.converted_value,
                is_carried_forward=v.composite.is_carried_forward,
                source_date=v.composite.source_date,
            )
            for v in composite.values
        ],
        platforms=[
            PlatformTotalResponse(
                platform=p.platform,
                total_value=p.total_value,
                asset_count=p.asset_count,
            )
            for p in composite.platform_totals
        ],
        categories=[
            CategoryAllocationResponse(
                name=a.name,
                value=a.value,
                percentage=a.percentage,
                is_uncategorized=a.is_uncategorized,
            )
            for a in composite.category_allocations
        ],
    )


@router.get("", response_model=SnapshotListResponse)
def list_snapshots(
    currency: Optional[str] = Query(None, description="Display currency (default from settings)"),
    db: Session = Depends(get_db),
):
    """List snapshots newest first with their composite totals."""
    service = PortfolioService(parse_currency(currency, settings.DISPLAY_CURRENCY))
    history = service.load_history(db)

    summaries = [
        SnapshotSummary(
            id=composite.snapshot_id,
            date=composite.date,
            total_value=composite.total_value,
            direct_count=composite.direct_count,
            carried_count=composite.carried_count,
            has_exchange_rate=snapshot.exchange_rate is not None,
        )
        for snapshot, composite in zip(
            history.snapshots, service.get_composite_snapshots(history)
        )
    ]
    summaries.reverse()
    return SnapshotListResponse(display_currency=service.display_currency, snapshots=summaries)


@router.get("/{snapshot_id}/composite", response_model=CompositeSnapshotResponse)
def get_composite_snapshot(
    snapshot_id: str,
    currency: Optional[str] = Query(None, description="Display currency (default from settings)"),
    db: Session = Depends(get_db),
):
    """Get a snapshot with platforms missing from it carried forward."""
    service = PortfolioService(parse_currency(currency, settings.DISPLAY_CURRENCY))
    history = service.load_history(db)

    snapshot = history.get_snapshot(snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found")

    return _composite_response(service.get_composite_snapshot(history, snapshot))


@router.post("/{snapshot_id}/exchange-rate", response_model=ExchangeRateResponse)
async def fetch_exchange_rate(
    snapshot_id: str,
    base: Optional[str] = Query(None, description="Base currency (default from settings)"),
    db: Session = Depends(get_db),
    rate_service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """Fetch the rate table for the snapshot's date and store it on the snapshot.

    Replaces any table already stored for the snapshot.
    """
    snapshot = get_or_404(db, Snapshot, snapshot_id, "Snapshot not found")
    base_currency = parse_currency(base, settings.DISPLAY_CURRENCY)

    try:
        rates = await rate_service.fetch_rates(snapshot.date, base_currency)
    except ProviderError as e:
        raise provider_http_error(e)

    exchange_rate = snapshot.exchange_rate
    if exchange_rate is None:
        exchange_rate = ExchangeRate()
        snapshot.exchange_rate = exchange_rate
    exchange_rate.base_currency = base_currency
    exchange_rate.fetch_date = snapshot.date
    exchange_rate.is_fallback = False
    exchange_rate.set_rates(rates)
    db.commit()
    db.refresh(exchange_rate)

    logger.info(
        "Stored %d %s rates for snapshot %s (%s)",
        len(rates), base_currency, snapshot.id, snapshot.date,
    )
    return ExchangeRateResponse(
        snapshot_id=snapshot.id,
        base_currency=exchange_rate.base_currency,
        fetch_date=exchange_rate.fetch_date,
        is_fallback=exchange_rate.is_fallback,
        rates=exchange_rate.rate_table,
    )
