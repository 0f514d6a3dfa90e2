"""Exchange rate provider protocol definitions.

Defines the interface the valuation engine consumes for rate tables.
Implementations perform network I/O; caching and request coalescing
live in ``services.exchange_rate_service``.
"""

from datetime import date
from decimal import Decimal
from typing import Protocol


class RateProvider(Protocol):
    """Protocol for exchange rate providers."""

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'currency-api')."""
        ...

    async def fetch_rates(
        self, rate_date: date, base_currency: str
    ) -> dict[str, Decimal]:
        """Fetch the rate table for a date.

        Args:
            rate_date: Date the rates apply to.
            base_currency: Currency the rates are relative to.

        Returns:
            Dict mapping uppercase currency code to units of that currency
            per one unit of ``base_currency``.

        Raises:
            ProviderConnectionError: Network unavailable or timed out.
            RatesNotFoundError: No rates published for the date/base.
            ProviderDataError: Response could not be parsed.
        """
        ...

    async def fetch_currency_list(self) -> dict[str, str]:
        """Fetch all supported currencies as {uppercase code: display name}."""
        ...
