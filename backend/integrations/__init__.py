"""External integrations: exchange rate providers."""

from integrations.currency_api_client import CurrencyApiClient
from integrations.rate_provider_protocol import RateProvider

__all__ = [
    "CurrencyApiClient",
    "RateProvider",
]
