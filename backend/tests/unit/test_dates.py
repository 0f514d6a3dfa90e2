"""Unit tests for date helpers."""

from datetime import date
from decimal import Decimal

from utils.dates import subtract_months, year_fraction


class TestSubtractMonths:
    def test_same_day_previous_month(self):
        assert subtract_months(date(2025, 3, 15), 1) == date(2025, 2, 15)

    def test_crosses_year_boundary(self):
        assert subtract_months(date(2025, 1, 10), 3) == date(2024, 10, 10)

    def test_clamps_to_month_end(self):
        assert subtract_months(date(2025, 3, 31), 1) == date(2025, 2, 28)
        assert subtract_months(date(2024, 3, 31), 1) == date(2024, 2, 29)

    def test_full_year(self):
        assert subtract_months(date(2025, 6, 30), 12) == date(2024, 6, 30)


class TestYearFraction:
    def test_uses_365_25_day_years(self):
        assert year_fraction(date(2024, 1, 1), date(2024, 1, 1)) == Decimal("0")
        assert year_fraction(date(2020, 1, 1), date(2024, 1, 1)) == Decimal("4")
