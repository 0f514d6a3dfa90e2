"""Shared query parameter parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

from fastapi import HTTPException

_CURRENCY_CODE_RE = re.compile(r"^[A-Za-z]{3,5}$")


def parse_currency(currency: str | None, default: str) -> str:
    """Parse an optional currency query parameter into an uppercase code.

    Args:
        currency: Raw query value, or None.
        default: Code to use when the parameter is omitted or blank.

    Returns:
        Uppercase currency code.

    Raises:
        HTTPException: If the value is not a 3-5 letter code.
    """
    if currency is None or not currency.strip():
        return default.upper()
    code = currency.strip()
    if not _CURRENCY_CODE_RE.match(code):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid currency code: {code}",
        )
    return code.upper()


def parse_goal(goal: str | None, default: Decimal | None) -> Decimal | None:
    """Parse an optional financial goal query parameter as an exact decimal."""
    if goal is None or not goal.strip():
        return default
    try:
        value = Decimal(goal.strip())
    except InvalidOperation:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid goal amount: {goal}",
        )
    if not value.is_finite():
        raise HTTPException(
            status_code=400,
            detail=f"Invalid goal amount: {goal}",
        )
    return value
