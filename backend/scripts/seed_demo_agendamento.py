from datetime import date

from app.db.models import Booking, BookingStatus, Period
from app.db.session import SessionLocal


def seed_demo_agendamento() -> None:
    session = SessionLocal()
    try:
        existing = (
            session.query(Booking)
            .filter(Booking.note_number == "12345")
            .first()
        )
        if existing is not None:
            print(f"Demo agendamento already exists with id={existing.id}")
            return

        demo = Booking(
            note_number="12345",
            installation_number="98765",
            responsible_party="João da Silva Teste",
            locality="Criciuma",
            original_date=date(2025, 10, 25),
            original_period=Period.MORNING.value,
            current_date=date(2025, 10, 25),
            current_period=Period.MORNING.value,
            status=BookingStatus.SCHEDULED.value,
            reschedule_count=0,
        )
        session.add(demo)
        session.commit()
        session.refresh(demo)
        print(f"Created demo agendamento with id={demo.id}")
    finally:
        session.close()


if __name__ == "__main__":
    seed_demo_agendamento()
