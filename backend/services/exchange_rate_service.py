"""Exchange rate service — cached, de-duplicated access to rate tables.

Wraps a RateProvider with a process-lifetime cache. Concurrent requests
for the same (date, base currency) share one in-flight fetch; failures
propagate to every waiter and are not cached. Nothing is retried here.
"""

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Awaitable, Callable, Hashable, Optional, TypeVar

from integrations.rate_provider_protocol import RateProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CURRENCY_LIST_KEY = ("currencies",)


class ExchangeRateService:
    """Fetches and caches rate tables and the supported currency list."""

    def __init__(self, provider: Optional[RateProvider] = None):
        """Initialize with an optional provider for dependency injection.

        Args:
            provider: Rate provider. If None, a CurrencyApiClient is
                     created on first use.
        """
        self._provider = provider
        self._rates_cache: dict[tuple[date, str], dict[str, Decimal]] = {}
        self._currency_list: Optional[dict[str, str]] = None
        self._in_flight: dict[Hashable, asyncio.Future] = {}
        self._generation = 0

    @property
    def provider(self) -> RateProvider:
        """Get the rate provider, creating if not provided."""
        if self._provider is None:
            from integrations.currency_api_client import CurrencyApiClient

            self._provider = CurrencyApiClient()
        return self._provider

    async def fetch_rates(self, rate_date: date, base_currency: str) -> dict[str, Decimal]:
        """Return the rate table for ``rate_date`` relative to ``base_currency``.

        Args:
            rate_date: Date the rates should apply to.
            base_currency: Base currency code (case-insensitive).

        Returns:
            Upper-case currency code -> units per one unit of the base.
            The caller receives its own copy.

        Raises:
            ProviderError: The provider failed. Not cached.
        """
        key = (rate_date, base_currency.strip().upper())
        cached = self._rates_cache.get(key)
        if cached is not None:
            logger.debug("Rate table cache hit for %s %s", key[1], rate_date)
            return dict(cached)

        rates = await self._single_flight(key, lambda: self._load_rates(key))
        return dict(rates)

    async def fetch_currency_list(self) -> dict[str, str]:
        """Return supported currency codes mapped to display names."""
        if self._currency_list is not None:
            return dict(self._currency_list)

        currencies = await self._single_flight(_CURRENCY_LIST_KEY, self._load_currency_list)
        return dict(currencies)

    def invalidate(self) -> None:
        """Drop every cached table and the currency list.

        Fetches already in flight still complete for their waiters but do
        not repopulate the cache.
        """
        self._rates_cache.clear()
        self._currency_list = None
        self._in_flight.clear()
        self._generation += 1
        logger.info("Exchange rate cache invalidated")

    async def _single_flight(
        self, key: Hashable, factory: Callable[[], Awaitable[T]]
    ) -> T:
        """Await the in-flight fetch for ``key``, starting one if needed.

        The shared task is shielded so that a cancelled caller does not
        cancel the fetch for the other waiters.
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task

            def _forget(done: asyncio.Future, key: Hashable = key) -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug("Joining in-flight fetch for %s", key)
        return await asyncio.shield(task)

    async def _load_rates(self, key: tuple[date, str]) -> dict[str, Decimal]:
        rate_date, base = key
        generation = self._generation
        try:
            rates = await self.provider.fetch_rates(rate_date, base)
        except Exception as e:
            logger.warning("Failed to fetch %s rates for %s: %s", base, rate_date, e)
            raise

        logger.info(
            "Fetched %d %s rates for %s from %s",
            len(rates), base, rate_date, self.provider.provider_name,
        )
        if generation == self._generation:
            self._rates_cache[key] = rates
        return rates

    async def _load_currency_list(self) -> dict[str, str]:
        generation = self._generation
        try:
            currencies = await self.provider.fetch_currency_list()
        except Exception as e:
            logger.warning("Failed to fetch currency list: %s", e)
            raise

        logger.info("Fetched %d currencies", len(currencies))
        if generation == self._generation:
            self._currency_list = currencies
        return currencies
