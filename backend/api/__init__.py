"""API route handlers."""
from . import currencies, dashboard, rebalancing, snapshots

__all__ = ["currencies", "dashboard", "rebalancing", "snapshots"]
