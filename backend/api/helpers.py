"""Shared API helpers for route handlers.

Common lookups, dependencies and error mapping used across route files.
"""

import logging
from typing import Optional, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from database import Base
from integrations.exceptions import (
    ProviderConnectionError,
    ProviderError,
    RatesNotFoundError,
)
from services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)

# One service per process so its cache and in-flight fetches are shared.
_exchange_rate_service: Optional[ExchangeRateService] = None


def get_or_404(db: Session, model: type[T], entity_id: str, detail: str = "Not found") -> T:
    """Fetch a single entity by primary key or raise 404.

    Args:
        db: Database session.
        model: SQLAlchemy model class.
        entity_id: Primary key value.
        detail: Error message for the 404 response.

    Returns:
        The entity instance.

    Raises:
        HTTPException: 404 if the entity doesn't exist.
    """
    entity = db.query(model).filter(model.id == entity_id).first()
    if not entity:
        raise HTTPException(status_code=404, detail=detail)
    return entity


def get_exchange_rate_service() -> ExchangeRateService:
    """Get the process-wide ExchangeRateService, creating it on first use."""
    global _exchange_rate_service
    if _exchange_rate_service is None:
        _exchange_rate_service = ExchangeRateService()
    return _exchange_rate_service


def provider_http_error(e: ProviderError) -> HTTPException:
    """Translate a rate provider failure into an HTTP error response."""
    if isinstance(e, RatesNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ProviderConnectionError):
        logger.warning("Rate provider unreachable: %s", e)
        return HTTPException(
            status_code=503,
            detail=f"Exchange rate provider {e.provider_name} is unavailable. Try again later.",
        )
    logger.warning("Rate provider error: %s", e)
    return HTTPException(
        status_code=502,
        detail=f"Exchange rate provider {e.provider_name} returned an invalid response.",
    )
