"""Carry-forward service — composite snapshot valuations.

A snapshot only records the platforms the user updated that period.
The composite view of a snapshot fills every missing platform with that
platform's values from the most recent prior snapshot that recorded it.

Resolution works per platform, never per asset: a platform present in
the target snapshot is represented only by its direct values, and a
missing platform is carried forward as a whole from exactly one source
snapshot.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from models import Asset, Snapshot, SnapshotAssetValue

logger = logging.getLogger(__name__)


class SnapshotNotInHistoryError(ValueError):
    """The target snapshot is not part of the history it is resolved against."""

    def __init__(self, snapshot_id: str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot {snapshot_id} is not in the provided history")


@dataclass(frozen=True)
class CompositeValue:
    """An asset's resolved value for a snapshot, in the asset's own currency."""

    asset: Asset
    market_value: Decimal
    is_carried_forward: bool
    source_date: Optional[date] = None  # Date of the source snapshot when carried


def composite_values(
    target: Snapshot,
    all_snapshots: Iterable[Snapshot],
    all_asset_values: Iterable[SnapshotAssetValue],
) -> list[CompositeValue]:
    """Return direct plus carried-forward values for ``target``.

    Args:
        target: Snapshot to resolve. Must be one of ``all_snapshots``.
        all_snapshots: Every snapshot of the portfolio, in any order.
        all_asset_values: Every SnapshotAssetValue across the history.

    Returns:
        One CompositeValue per asset that has a direct value in the target
        or belongs to a platform resolvable from an earlier snapshot.

    Raises:
        SnapshotNotInHistoryError: ``target`` is not in ``all_snapshots``.
    """
    snapshots = list(all_snapshots)
    known_ids = {s.id for s in snapshots}
    if target.id not in known_ids:
        raise SnapshotNotInHistoryError(target.id)

    values_by_snapshot: dict[str, list[SnapshotAssetValue]] = defaultdict(list)
    all_platforms: set[str] = set()
    for sav in all_asset_values:
        if sav.snapshot_id not in known_ids:
            continue
        values_by_snapshot[sav.snapshot_id].append(sav)
        all_platforms.add(sav.asset.platform)

    direct_values = values_by_snapshot.get(target.id, [])
    result = [
        CompositeValue(
            asset=sav.asset,
            market_value=sav.market_value,
            is_carried_forward=False,
        )
        for sav in direct_values
    ]

    direct_platforms = {sav.asset.platform for sav in direct_values}
    pending = all_platforms - direct_platforms
    if not pending:
        return result

    prior_snapshots = sorted(
        (s for s in snapshots if s.date < target.date),
        key=lambda s: s.date,
        reverse=True,
    )

    for prior in prior_snapshots:
        if not pending:
            break

        by_platform: dict[str, list[SnapshotAssetValue]] = defaultdict(list)
        for sav in values_by_snapshot.get(prior.id, []):
            by_platform[sav.asset.platform].append(sav)

        for platform in sorted(by_platform.keys() & pending):
            for sav in by_platform[platform]:
                result.append(
                    CompositeValue(
                        asset=sav.asset,
                        market_value=sav.market_value,
                        is_carried_forward=True,
                        source_date=prior.date,
                    )
                )
            pending.discard(platform)
            logger.debug(
                "Carried platform %r into %s from %s (%d values)",
                platform, target.date, prior.date, len(by_platform[platform]),
            )

    if pending:
        logger.debug(
            "No prior values for platforms %s before %s", sorted(pending), target.date
        )

    return result


def composite_total_value(
    target: Snapshot,
    all_snapshots: Iterable[Snapshot],
    all_asset_values: Iterable[SnapshotAssetValue],
) -> Decimal:
    """Sum of composite market values for ``target``, without currency conversion."""
    return sum(
        (v.market_value for v in composite_values(target, all_snapshots, all_asset_values)),
        Decimal("0"),
    )
