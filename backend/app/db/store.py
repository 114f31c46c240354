from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import Booking, BookingStatus
from app.errors import BookingConflictError, StoreError


logger = logging.getLogger("agendamentos.store")

T = TypeVar("T")


class BookingStore:
    """Persistence for agendamento rows, one instance per request session.

    SQLAlchemy failures are logged and re-raised as ``StoreError``, writes are
    rolled back first. Each mutating method issues a single statement and commits it.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_note(self, note_number: str) -> Booking | None:
        return self._run(
            "find_by_note",
            lambda: self.db.query(Booking).filter(Booking.note_number == note_number).first(),
        )

    def note_exists(self, note_number: str) -> bool:
        return self.find_by_note(note_number) is not None

    def count_slot_occupancy(
        self,
        day: date,
        period: str,
        locality: str,
        exclude_note: str | None = None,
    ) -> int:
        def _count() -> int:
            query = (
                self.db.query(func.count(Booking.id))
                .filter(Booking.current_date == day)
                .filter(Booking.current_period == period)
                .filter(Booking.locality == locality)
                .filter(Booking.status != BookingStatus.COMPLETED.value)
            )
            if exclude_note is not None:
                query = query.filter(Booking.note_number != exclude_note)
            return int(query.scalar() or 0)

        return self._run("count_slot_occupancy", _count)

    def list_full_slots(
        self,
        locality: str,
        from_date: date,
        capacity: int,
    ) -> list[tuple[date, str]]:
        def _list() -> list[tuple[date, str]]:
            rows = (
                self.db.query(Booking.current_date, Booking.current_period, func.count(Booking.id))
                .filter(Booking.locality == locality)
                .filter(Booking.status != BookingStatus.COMPLETED.value)
                .filter(Booking.current_date >= from_date)
                .group_by(Booking.current_date, Booking.current_period)
                .having(func.count(Booking.id) >= capacity)
                .all()
            )
            return [(row[0], row[1]) for row in rows]

        return self._run("list_full_slots", _list)

    def insert(
        self,
        note_number: str,
        installation_number: str,
        responsible_party: str,
        locality: str,
        day: date,
        period: str,
    ) -> Booking:
        booking = Booking(
            note_number=note_number,
            installation_number=installation_number,
            responsible_party=responsible_party,
            locality=locality,
            original_date=day,
            original_period=period,
            current_date=day,
            current_period=period,
            status=BookingStatus.SCHEDULED.value,
            reschedule_count=0,
        )
        self.db.add(booking)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if "numero_nota" in str(exc).lower():
                raise BookingConflictError(
                    "Já existe um agendamento com este Número de Nota.",
                    error_code="DUPLICATE_NOTE_NUMBER",
                ) from exc
            logger.exception("Store insert violated a constraint for note=%s", note_number)
            raise StoreError("Erro interno do servidor.") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Store insert failed for note=%s", note_number)
            raise StoreError("Erro interno do servidor.") from exc
        self._run("refresh", lambda: self.db.refresh(booking))
        return booking

    def mark_rescheduled(
        self,
        booking: Booking,
        day: date,
        period: str,
        rescheduled_at: datetime,
    ) -> Booking:
        booking.current_date = day
        booking.current_period = period
        booking.status = BookingStatus.RESCHEDULED.value
        booking.reschedule_count = 1
        booking.rescheduled_at = rescheduled_at
        self._commit("mark_rescheduled")
        return booking

    def mark_completed(self, booking: Booking) -> Booking:
        booking.status = BookingStatus.COMPLETED.value
        self._commit("mark_completed")
        return booking

    def delete(self, note_number: str) -> int:
        def _delete() -> int:
            deleted = (
                self.db.query(Booking)
                .filter(Booking.note_number == note_number)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return int(deleted)

        return self._run("delete", _delete, rollback=True)

    def delete_many(self, note_numbers: list[str]) -> int:
        def _delete_many() -> int:
            deleted = (
                self.db.query(Booking)
                .filter(Booking.note_number.in_(note_numbers))
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return int(deleted)

        return self._run("delete_many", _delete_many, rollback=True)

    def list_bookings(
        self,
        locality: str | None = None,
        status: str | None = None,
        day: date | None = None,
    ) -> list[Booking]:
        def _list() -> list[Booking]:
            query = self.db.query(Booking)
            if locality:
                query = query.filter(Booking.locality == locality)
            if status:
                query = query.filter(Booking.status == status)
            if day is not None:
                query = query.filter(Booking.current_date == day)
            return query.order_by(Booking.current_date.desc(), Booking.id.desc()).all()

        return self._run("list_bookings", _list)

    def _commit(self, operation: str) -> None:
        self._run(operation, self.db.commit, rollback=True)

    def _run(self, operation: str, fn: Callable[[], T], rollback: bool = False) -> T:
        try:
            return fn()
        except SQLAlchemyError as exc:
            if rollback:
                self.db.rollback()
            logger.exception("Store operation failed: %s", operation)
            raise StoreError("Erro interno do servidor.") from exc
