"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.helpers import get_exchange_rate_service
from database import Base, get_db
from main import app
from services.exchange_rate_service import ExchangeRateService
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    bonds,
    equities,
    two_platform_history,
)
from tests.fixtures.mocks import MockRateProvider


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mock_rate_provider")
def mock_rate_provider_fixture():
    """Mock rate provider returning SAMPLE_USD_RATES."""
    return MockRateProvider()


@pytest.fixture(name="client")
def client_fixture(db, mock_rate_provider):
    """Create a test client with the test database and a mock rate provider."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    rate_service = ExchangeRateService(provider=mock_rate_provider)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_exchange_rate_service] = lambda: rate_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="client_with_failing_rates")
def client_with_failing_rates_fixture(db):
    """Create a test client whose rate provider is unreachable."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    failing_provider = MockRateProvider(
        should_fail=True, failure_message="Currency API unreachable"
    )
    rate_service = ExchangeRateService(provider=failing_provider)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_exchange_rate_service] = lambda: rate_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
