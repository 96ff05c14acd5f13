"""
Shared fixtures: an in-memory database, an API client bound to it, and a
trip with a two-person roster.
"""
import httpx
import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.db.base import Base
from app.db.session import create_db_engine, get_db, init_db
from app.main import app
from app.schemas.trip import TripCreate
from app.services.trip_service import create_trip


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session on the in-memory database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """API client whose requests share the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def quote_unavailable(monkeypatch):
    """The external quote source is unreachable unless a test stubs it."""
    def fail(*args, **kwargs):
        raise httpx.ConnectError("quote source disabled in tests")

    monkeypatch.setattr(httpx, "get", fail)


@pytest.fixture
def trip(db):
    """Trip with Juan and Vale on the roster."""
    return create_trip(
        TripCreate(
            name="Orlando 2026",
            destination="Orlando",
            emoji="🎢",
            start_date=date(2026, 12, 1),
            end_date=date(2026, 12, 15),
            fallback_rate=Decimal("1200"),
            participants=["Juan", "Vale"],
        ),
        db,
    )


@pytest.fixture
def juan(trip):
    return trip.participants[0]


@pytest.fixture
def vale(trip):
    return trip.participants[1]
