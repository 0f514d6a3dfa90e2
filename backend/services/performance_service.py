"""Performance calculations — Modified Dietz, chained TWR, CAGR, growth.

All functions are pure and operate on Decimal values. A result that is
mathematically undefined (insufficient history, zero denominator) is
returned as ``None``, never as zero.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from utils.dates import subtract_months, year_fraction

logger = logging.getLogger(__name__)

# Lookback windows in months, keyed by period code.
LOOKBACK_PERIODS: dict[str, int] = {"1M": 1, "3M": 3, "1Y": 12}

ONE = Decimal("1")
ZERO = Decimal("0")


@dataclass(frozen=True)
class CashFlow:
    """A signed external cash flow and its offset from the period start."""

    amount: Decimal  # positive = contribution, negative = withdrawal
    days_since_start: int


@dataclass(frozen=True)
class ValuationPoint:
    """Composite total value and net cash flow recorded at one snapshot."""

    date: date
    total_value: Decimal
    net_cash_flow: Decimal = ZERO


@dataclass(frozen=True)
class ReturnPoint:
    """Cumulative time-weighted return as of a snapshot date."""

    date: date
    value: Optional[Decimal]


@dataclass
class PeriodPerformance:
    """Growth and return over a lookback window ending at the latest snapshot."""

    period: str  # "1M", "3M", "1Y"
    begin_date: Optional[date] = None
    end_date: Optional[date] = None
    growth_rate: Optional[Decimal] = None
    return_rate: Optional[Decimal] = None

    @property
    def has_sufficient_data(self) -> bool:
        return self.begin_date is not None


@dataclass
class PerformanceSummary:
    """Whole-history performance figures."""

    cumulative_twr: Optional[Decimal] = None
    cagr: Optional[Decimal] = None
    periods: list[PeriodPerformance] = field(default_factory=list)
    twr_history: list[ReturnPoint] = field(default_factory=list)


# ------------------------------------------------------------------
# Scalar formulas
# ------------------------------------------------------------------

def modified_dietz_return(
    begin_value: Decimal,
    end_value: Decimal,
    cash_flows: Sequence[CashFlow],
    total_days: int,
) -> Optional[Decimal]:
    """Modified Dietz return for a single period.

    ``R = (E - B - sum(CF)) / (B + sum(CF_i * w_i))`` where
    ``w_i = (total_days - days_since_start_i) / total_days``.

    A flow on day 0 carries full weight and a flow on the last day carries
    none, so capital added without subsequent growth yields a negative
    return.

    Returns:
        The period return as a fraction (0.10 = 10%), or None when the
        period is empty, the beginning value is not positive, or the
        weighted capital base is not positive.
    """
    if total_days <= 0 or begin_value <= 0:
        return None

    days = Decimal(total_days)
    net_cash_flow = ZERO
    weighted_cash_flow = ZERO
    for cf in cash_flows:
        net_cash_flow += cf.amount
        weighted_cash_flow += cf.amount * (days - cf.days_since_start) / days

    denominator = begin_value + weighted_cash_flow
    if denominator <= 0:
        return None

    return (end_value - begin_value - net_cash_flow) / denominator


def chain_returns(period_returns: Sequence[Optional[Decimal]]) -> Optional[Decimal]:
    """Compound sub-period returns: ``prod(1 + R_k) - 1``.

    Undefined when there are no sub-periods or any sub-period is undefined.
    """
    if not period_returns:
        return None
    product = ONE
    for r in period_returns:
        if r is None:
            return None
        product *= ONE + r
    return product - ONE


def cagr(begin_value: Decimal, end_value: Decimal, years: Decimal) -> Optional[Decimal]:
    """Compound annual growth rate: ``(end / begin) ** (1 / years) - 1``."""
    if begin_value <= 0 or end_value < 0 or years <= 0:
        return None
    if end_value == 0:
        return -ONE
    return (end_value / begin_value) ** (ONE / years) - ONE


def growth_rate(begin_value: Decimal, end_value: Decimal) -> Optional[Decimal]:
    """Simple growth ``(end - begin) / begin``, ignoring cash flows."""
    if begin_value <= 0:
        return None
    return (end_value - begin_value) / begin_value


# ------------------------------------------------------------------
# History-based metrics
# ------------------------------------------------------------------

def period_returns(points: Sequence[ValuationPoint]) -> list[Optional[Decimal]]:
    """Modified Dietz return for each consecutive pair of points.

    Cash flows are recorded with the snapshot that closes a sub-period,
    so the end point's net flow lands on the last day (weight 0).
    """
    returns: list[Optional[Decimal]] = []
    for begin, end in zip(points, points[1:]):
        total_days = (end.date - begin.date).days
        flows = []
        if end.net_cash_flow != 0:
            flows.append(CashFlow(amount=end.net_cash_flow, days_since_start=total_days))
        returns.append(
            modified_dietz_return(begin.total_value, end.total_value, flows, total_days)
        )
    return returns


def cumulative_twr(points: Sequence[ValuationPoint]) -> Optional[Decimal]:
    """Chained time-weighted return from the first to the last point."""
    if len(points) < 2:
        return None
    return chain_returns(period_returns(points))


def twr_history(points: Sequence[ValuationPoint]) -> list[ReturnPoint]:
    """Cumulative TWR at every point, starting at zero on the first.

    Once a sub-period is undefined the chain is broken and every later
    point is None.
    """
    if len(points) < 2:
        return []

    history = [ReturnPoint(date=points[0].date, value=ZERO)]
    product: Optional[Decimal] = ONE
    for point, r in zip(points[1:], period_returns(points)):
        if product is not None:
            product = None if r is None else product * (ONE + r)
        history.append(
            ReturnPoint(date=point.date, value=None if product is None else product - ONE)
        )
    return history


def history_cagr(points: Sequence[ValuationPoint]) -> Optional[Decimal]:
    """CAGR between the first and the last point."""
    if len(points) < 2:
        return None
    first, last = points[0], points[-1]
    return cagr(first.total_value, last.total_value, year_fraction(first.date, last.date))


def find_lookback_index(points: Sequence[ValuationPoint], months: int) -> Optional[int]:
    """Index of the most recent point at least ``months`` before the latest one."""
    if len(points) < 2:
        return None
    cutoff = subtract_months(points[-1].date, months)
    for idx in range(len(points) - 2, -1, -1):
        if points[idx].date <= cutoff:
            return idx
    return None


def period_performance(points: Sequence[ValuationPoint], period: str) -> PeriodPerformance:
    """Growth and Modified Dietz return over a lookback window.

    Cash flows of every point strictly after the window start up to and
    including the latest point are weighted by their own day offset.

    Raises:
        ValueError: Unknown period code.
    """
    if period not in LOOKBACK_PERIODS:
        raise ValueError(f"Unknown period: {period}")

    result = PeriodPerformance(period=period)
    begin_idx = find_lookback_index(points, LOOKBACK_PERIODS[period])
    if begin_idx is None:
        return result

    begin, end = points[begin_idx], points[-1]
    total_days = (end.date - begin.date).days
    flows = [
        CashFlow(amount=p.net_cash_flow, days_since_start=(p.date - begin.date).days)
        for p in points[begin_idx + 1:]
        if p.net_cash_flow != 0
    ]

    result.begin_date = begin.date
    result.end_date = end.date
    result.growth_rate = growth_rate(begin.total_value, end.total_value)
    result.return_rate = modified_dietz_return(
        begin.total_value, end.total_value, flows, total_days
    )
    return result


def summarize(points: Sequence[ValuationPoint]) -> PerformanceSummary:
    """All history-based figures for an ascending list of points."""
    summary = PerformanceSummary(
        cumulative_twr=cumulative_twr(points),
        cagr=history_cagr(points),
        periods=[period_performance(points, p) for p in LOOKBACK_PERIODS],
        twr_history=twr_history(points),
    )
    logger.debug(
        "Performance over %d points: twr=%s cagr=%s",
        len(points), summary.cumulative_twr, summary.cagr,
    )
    return summary
