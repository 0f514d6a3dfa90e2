"""Currency API endpoints."""

from fastapi import APIRouter, Depends

from api.helpers import get_exchange_rate_service, provider_http_error
from integrations.exceptions import ProviderError
from schemas.currency import CurrencyInfo, CurrencyListResponse
from services.exchange_rate_service import ExchangeRateService

router = APIRouter(prefix="/api/currencies", tags=["currencies"])


@router.get("", response_model=CurrencyListResponse)
async def list_currencies(
    rate_service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    """List currencies supported by the exchange rate provider."""
    try:
        currencies = await rate_service.fetch_currency_list()
    except ProviderError as e:
        raise provider_http_error(e)

    return CurrencyListResponse(
        currencies=[
            CurrencyInfo(code=code, name=name) for code, name in sorted(currencies.items())
        ]
    )
