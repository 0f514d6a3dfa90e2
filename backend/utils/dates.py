"""Date helpers for snapshot lookback windows."""

import calendar
from datetime import date
from decimal import Decimal

DAYS_PER_YEAR = Decimal("365.25")


def subtract_months(d: date, months: int) -> date:
    """Subtract months from a date, clamping to valid day."""
    year = d.year
    month = d.month - months
    while month <= 0:
        month += 12
        year -= 1
    # Clamp day to max days in target month
    max_day = calendar.monthrange(year, month)[1]
    day = min(d.day, max_day)
    return date(year, month, day)


def year_fraction(start: date, end: date) -> Decimal:
    """Elapsed time between two dates in fractional years (365.25-day years)."""
    return Decimal((end - start).days) / DAYS_PER_YEAR
