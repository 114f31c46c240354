import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.main as main_module
from app.db.base import Base
from app.db.models import Booking


# Wednesday: earliest bookable day is Friday 2025-11-07, horizon ends 2025-12-05.
TODAY = date(2025, 11, 5)

RULE_ENV_VARS = (
    "BOOKING_HORIZON_DAYS",
    "SLOT_CAPACITY",
    "MIN_LEAD_BUSINESS_DAYS",
    "JWT_EXPIRES_HOURS",
)


@pytest.fixture
def session_factory(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False)

    for name in RULE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.setattr(main_module, "SessionLocal", factory)
    monkeypatch.setattr(main_module, "current_local_date", lambda: TODAY)

    yield factory
    engine.dispose()


@pytest.fixture
def add_booking(session_factory):
    def _add(
        note_number: str,
        day: date,
        period: str = "manha",
        locality: str = "Criciuma",
        status: str = "agendado",
        reschedule_count: int = 0,
    ) -> None:
        db = session_factory()
        try:
            db.add(
                Booking(
                    note_number=note_number,
                    installation_number="98765",
                    responsible_party="Maria Souza",
                    locality=locality,
                    original_date=day,
                    original_period=period,
                    current_date=day,
                    current_period=period,
                    status=status,
                    reschedule_count=reschedule_count,
                )
            )
            db.commit()
        finally:
            db.close()

    return _add


@pytest.fixture
def load_booking(session_factory):
    def _load(note_number: str) -> Booking | None:
        db = session_factory()
        try:
            booking = db.query(Booking).filter(Booking.note_number == note_number).first()
            if booking is not None:
                db.expunge(booking)
            return booking
        finally:
            db.close()

    return _load
