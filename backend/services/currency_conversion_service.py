"""Currency conversion using a cached rate table.

Rate tables map a currency code to the number of units of that currency
per one unit of the table's base currency. Converting between two
non-base currencies goes through the base::

    amount / rates[from] * rates[to]

Codes compare case-insensitively. A rate that is needed but missing is a
contract violation and raises ``MissingExchangeRateError``; amounts are
never passed through unconverted.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from services.carry_forward_service import CompositeValue

logger = logging.getLogger(__name__)


class MissingExchangeRateError(LookupError):
    """A conversion needed a rate that the rate table does not provide."""

    def __init__(self, currency: str, base_currency: str):
        self.currency = currency
        self.base_currency = base_currency
        super().__init__(
            f"No usable {currency} rate in rate table based on {base_currency}"
        )


@dataclass(frozen=True)
class ConvertedValue:
    """A composite value expressed in the display currency."""

    composite: CompositeValue
    currency: str  # Effective source currency (uppercase)
    converted_value: Decimal


def _rate_for(
    currency: str, rate_table: Mapping[str, Decimal], base_currency: str
) -> Decimal:
    """Look up a finite, positive rate for ``currency`` or raise."""
    rate = rate_table.get(currency)
    if rate is None:
        rate = rate_table.get(currency.lower())
    if rate is None:
        raise MissingExchangeRateError(currency, base_currency)
    rate = Decimal(rate)
    if not rate.is_finite() or rate <= 0:
        raise MissingExchangeRateError(currency, base_currency)
    return rate


def convert(
    amount: Decimal,
    from_currency: str,
    rate_table: Mapping[str, Decimal],
    rate_table_base_currency: str,
    to_currency: str,
) -> Decimal:
    """Convert ``amount`` from ``from_currency`` into ``to_currency``.

    Args:
        amount: Amount in ``from_currency``.
        from_currency: Source currency code.
        rate_table: Currency code -> units per one unit of the base currency.
        rate_table_base_currency: Base currency of ``rate_table``.
        to_currency: Target currency code.

    Returns:
        The converted amount (unchanged when the currencies match).

    Raises:
        MissingExchangeRateError: A required rate is absent or not positive.
    """
    source = from_currency.upper()
    target = to_currency.upper()
    base = rate_table_base_currency.upper()

    if source == target:
        return amount

    result = amount
    if source != base:
        result = result / _rate_for(source, rate_table, base)
    if target != base:
        result = result * _rate_for(target, rate_table, base)
    return result


def can_convert(
    from_currency: str,
    to_currency: str,
    rate_table: Mapping[str, Decimal],
    rate_table_base_currency: str,
) -> bool:
    """Check whether ``convert`` would succeed for this currency pair."""
    try:
        convert(Decimal("1"), from_currency, rate_table, rate_table_base_currency, to_currency)
    except MissingExchangeRateError:
        return False
    return True


def effective_currency(currency: Optional[str], display_currency: str) -> str:
    """An empty or missing currency means the display currency."""
    if not currency:
        return display_currency.upper()
    return currency.upper()


def convert_composite_values(
    values: Iterable[CompositeValue],
    display_currency: str,
    rate_table: Mapping[str, Decimal],
    rate_table_base_currency: str,
) -> list[ConvertedValue]:
    """Convert each composite value from its asset currency into ``display_currency``."""
    converted: list[ConvertedValue] = []
    for value in values:
        currency = effective_currency(value.asset.currency, display_currency)
        converted.append(
            ConvertedValue(
                composite=value,
                currency=currency,
                converted_value=convert(
                    value.market_value,
                    currency,
                    rate_table,
                    rate_table_base_currency,
                    display_currency,
                ),
            )
        )
    return converted
