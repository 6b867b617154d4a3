"""Pytest configuration and shared fixtures."""

import os
from datetime import date
from decimal import Decimal

# Set test database URL BEFORE any imports from rentledger
# This keeps the module-level engine away from the working-directory database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from rentledger.models import Base, Contract, Room  # noqa: E402


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def room(db_session):
    """Create room A101."""
    room = Room(room_number="A101", floor=1)
    db_session.add(room)
    db_session.commit()
    return room


@pytest.fixture
def contract(db_session, room):
    """Create an active contract on A101 with rent 4000."""
    contract = Contract(
        room_id=room.id,
        rent_amount_snapshot=Decimal("4000"),
        start_date=date(2024, 1, 1),
        is_active=True,
    )
    db_session.add(contract)
    db_session.commit()
    return contract


@pytest.fixture
def make_contract(db_session):
    """Factory: room plus active contract with the given rent."""

    def _make(room_number: str, rent="5000", is_active: bool = True) -> Contract:
        room = db_session.query(Room).filter_by(room_number=room_number).first()
        if room is None:
            room = Room(room_number=room_number)
            db_session.add(room)
            db_session.flush()
        contract = Contract(
            room_id=room.id,
            rent_amount_snapshot=Decimal(rent),
            start_date=date(2024, 1, 1),
            is_active=is_active,
        )
        db_session.add(contract)
        db_session.commit()
        return contract

    return _make
