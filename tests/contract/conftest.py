"""Fixtures for API contract tests."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from rentledger.main import app
from rentledger.models import Base, Contract, Room
from rentledger.services import build_engine, get_db


@pytest.fixture
def api_session_factory():
    """In-memory database shared across the TestClient's worker threads."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def client(api_session_factory):
    """Create test client with database dependency override."""

    def override_get_db():
        db = api_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def contract_id(api_session_factory):
    """Active contract on room M100 with rent 4000."""
    session = api_session_factory()
    room = Room(room_number="M100")
    session.add(room)
    session.flush()
    contract = Contract(
        room_id=room.id,
        rent_amount_snapshot=Decimal("4000"),
        start_date=date(2024, 1, 1),
        is_active=True,
    )
    session.add(contract)
    session.commit()
    contract_id = contract.id
    session.close()
    return contract_id


@pytest.fixture
def invoice_id(client, contract_id):
    """March invoice: 4000 + 4 x 30 + 206 x 6.5 = 5459."""
    response = client.post(
        "/invoice/create",
        json={
            "contract_id": contract_id,
            "create_date": "2024-03-01",
            "water_unit": 4,
            "electricity_unit": 206,
            "water_rate": 30,
            "electricity_rate": "6.5",
        },
    )
    assert response.status_code == 201
    return response.json()["id"]
