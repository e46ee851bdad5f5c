"""
Pytest Configuration and Shared Fixtures

Provides an in-memory database, zero-delay settings, SERP doubles and an
API client with dependencies overridden.
"""

import random
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from solar_rank.business import BusinessConfig, TargetKeywords
from solar_rank.database.models import Base
from solar_rank.serp import SearchResult, SerpSource, SerpSourceError, SimulatedSerpSource
from solar_rank.utils.config import Settings


# ============================================================================
# SERP Doubles
# ============================================================================

class FailingSerpSource(SerpSource):
    """Every call raises SerpSourceError."""

    mode = "failing"

    def __init__(self):
        self.calls = 0

    async def search(self, query: str, location: Optional[str] = None) -> List[SearchResult]:
        self.calls += 1
        raise SerpSourceError("upstream unavailable", status_code=503, query=query)


class FlakySerpSource(SimulatedSerpSource):
    """Simulated roster, but fails for queries containing a marker."""

    def __init__(self, fail_marker: str):
        super().__init__()
        self.fail_marker = fail_marker

    async def search(self, query: str, location: Optional[str] = None) -> List[SearchResult]:
        if self.fail_marker in query:
            raise SerpSourceError(f"blocked: {query}", status_code=429, query=query)
        return await super().search(query, location)


# ============================================================================
# Settings & Randomness
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings with delays disabled and an in-memory database."""
    return Settings(
        DATABASE_URL="sqlite://",
        LIVE_SCRAPER_ENABLED=False,
        SERP_REQUEST_DELAY=0,
        SERP_AREA_DELAY=0,
        GOOGLE_CLIENT_ID="client-id",
        GOOGLE_CLIENT_SECRET="client-secret",
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def simulated_serp() -> SimulatedSerpSource:
    return SimulatedSerpSource()


@pytest.fixture
def failing_serp() -> FailingSerpSource:
    return FailingSerpSource()


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(db_engine):
    SessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Business Configuration
# ============================================================================

@pytest.fixture
def round_rock_config() -> BusinessConfig:
    """Operator in Round Rock with one manual competitor."""
    return BusinessConfig(
        business_name="Affordable Solar Round Rock",
        website="https://www.affordablesolar-rr.com/",
        service_areas=["Round Rock, TX", "Austin, TX"],
        target_keywords=TargetKeywords(
            global_keywords=["solar installation", "solar panels"],
            areas={
                "Round Rock, TX": ["tesla powerwall round rock"],
                "Austin, TX": ["solar rebates austin"],
            },
            competitors={"Round Rock, TX": ["https://www.hillcountrysolar.com/"]},
        ),
    )


# ============================================================================
# API Client
# ============================================================================

@pytest.fixture
def make_client(db, settings):
    """Build a TestClient with db, settings and SERP source overridden."""
    from api.dependencies import get_serp
    from api.main import app
    from solar_rank.database import get_db
    from solar_rank.utils.config import get_settings

    def _make(serp: SerpSource = None, settings_override: Settings = None):
        serp_source = serp or SimulatedSerpSource()

        def _get_db():
            yield db

        async def _get_serp():
            yield serp_source

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_settings] = lambda: settings_override or settings
        app.dependency_overrides[get_serp] = _get_serp
        return TestClient(app)

    yield _make

    from api.main import app
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
