"""
Shared fixtures. The environment is set before any project module is
imported so the engine is bound to a private in-memory database.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import date, time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from catalog import FlightCatalog
from database import SessionLocal, reset_db
from identity import IdentityStore
from main import app
from models import Flight


@pytest.fixture(autouse=True)
def seeded_db():
    """Fresh schema with the standard flight catalog for every test."""
    reset_db()
    session = SessionLocal()
    try:
        FlightCatalog(session).seed()
    finally:
        session.close()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def small_flight(db):
    """A 5-seat flight priced at 100."""
    flight = Flight(
        flight_number="TS100",
        origin="Girona",
        destination="Sevilla",
        departure_date=date(2024, 7, 1),
        departure_time=time(9, 0),
        arrival_time=time(10, 45),
        price=Decimal("100.00"),
        available_seats=5,
        airline="Test Air",
    )
    db.add(flight)
    db.commit()
    db.refresh(flight)
    return flight


@pytest.fixture
def users(db):
    """Two registered accounts: (alice, bob)."""
    store = IdentityStore(db)
    alice = store.register("Alice Garcia", "alice@example.com", "secret123")
    bob = store.register("Bob Puig", "bob@example.com", "secret456")
    return alice, bob


@pytest.fixture
def auth_headers(client):
    """Register a user through the API and return its Authorization header."""

    def _register(email="joan@example.com", name="Joan Garcia", password="password123"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register
