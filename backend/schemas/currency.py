"""Pydantic schemas for currency endpoints."""

from pydantic import BaseModel


class CurrencyInfo(BaseModel):
    code: str
    name: str


class CurrencyListResponse(BaseModel):
    currencies: list[CurrencyInfo]  # Sorted by code
