"""Currency API client for daily exchange rate tables.

Talks to the free, jsDelivr-hosted currency API
(``@fawazahmed0/currency-api``), which publishes one JSON file per
date and base currency::

    GET /npm/@fawazahmed0/currency-api@2024-03-06/v1/currencies/usd.json
    {"date": "2024-03-06", "usd": {"eur": 0.92, "jpy": 149.9, ...}}
"""

import json
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from config import settings
from integrations.exceptions import (
    ProviderAPIError,
    ProviderConnectionError,
    ProviderDataError,
    RatesNotFoundError,
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "currency-api"


class CurrencyApiClient:
    """Rate provider backed by the jsDelivr currency API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        package_path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: CDN origin. Defaults to settings.EXCHANGE_RATE_API_URL.
            package_path: Package path on the CDN. Defaults to
                settings.EXCHANGE_RATE_API_PACKAGE.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._package_path = (package_path or settings.EXCHANGE_RATE_API_PACKAGE).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.EXCHANGE_RATE_API_URL,
            timeout=timeout if timeout is not None else settings.EXCHANGE_RATE_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    async def fetch_rates(
        self, rate_date: date, base_currency: str
    ) -> dict[str, Decimal]:
        """Fetch the rate table for ``rate_date`` relative to ``base_currency``."""
        base = base_currency.strip().lower()
        path = f"{self._package_path}@{rate_date.isoformat()}/v1/currencies/{base}.json"

        logger.info(
            "Currency API: fetching %s rates for %s", base.upper(), rate_date
        )
        data = await self._get_json(path, what=f"{base.upper()} rates for {rate_date}")

        table = data.get(base) if isinstance(data, dict) else None
        if not isinstance(table, dict):
            raise ProviderDataError(
                f"Response has no '{base}' rate table", provider_name=PROVIDER_NAME
            )

        rates: dict[str, Decimal] = {}
        for code, rate in table.items():
            try:
                value = Decimal(str(rate))
            except (InvalidOperation, ValueError):
                logger.warning("Currency API: skipping unparseable rate for %s: %r", code, rate)
                continue
            if not value.is_finite() or value <= 0:
                logger.warning("Currency API: skipping invalid rate for %s: %r", code, rate)
                continue
            rates[code.upper()] = value
        return rates

    async def fetch_currency_list(self) -> dict[str, str]:
        """Fetch all supported currency codes and display names."""
        path = f"{self._package_path}@latest/v1/currencies.json"
        data = await self._get_json(path, what="currency list")
        if not isinstance(data, dict):
            raise ProviderDataError(
                "Currency list is not a JSON object", provider_name=PROVIDER_NAME
            )
        return {
            code.upper(): str(name)
            for code, name in data.items()
            if isinstance(name, str) and name
        }

    async def _get_json(self, path: str, what: str):
        """GET a JSON document, mapping transport and HTTP failures to typed errors."""
        try:
            response = await self._client.get(path)
        except httpx.TransportError as e:
            raise ProviderConnectionError(
                f"Currency API unreachable while fetching {what}: {e}",
                provider_name=PROVIDER_NAME,
            ) from e

        if response.status_code == 404:
            raise RatesNotFoundError(
                f"Currency API has no {what}", provider_name=PROVIDER_NAME
            )
        if response.status_code >= 400:
            raise ProviderAPIError(
                f"Currency API returned HTTP {response.status_code} for {what}",
                provider_name=PROVIDER_NAME,
                status_code=response.status_code,
            )

        try:
            return response.json(parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderDataError(
                f"Currency API returned invalid JSON for {what}",
                provider_name=PROVIDER_NAME,
            ) from e
