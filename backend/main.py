"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import currencies, dashboard, rebalancing, snapshots
from database import init_db
from logging_config import setup_logging
from services.currency_conversion_service import MissingExchangeRateError

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="Carryfolio",
    description="Composite portfolio valuation and performance across platforms",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MissingExchangeRateError)
async def missing_exchange_rate_handler(request: Request, exc: MissingExchangeRateError):
    """A snapshot needs a rate its stored table does not have."""
    logger.warning("Missing exchange rate on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "currency": exc.currency,
            "base_currency": exc.base_currency,
        },
    )


# Include API routers
app.include_router(snapshots.router)
app.include_router(dashboard.router)
app.include_router(rebalancing.router)
app.include_router(currencies.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
