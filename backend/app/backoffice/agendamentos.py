from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.agendamentos.find_booking import get_booking_or_404
from app.db.models import Booking, BookingStatus
from app.db.store import BookingStore
from app.errors import BookingNotFoundError

logger = logging.getLogger("agendamentos.backoffice")


class ListBookingsArgs(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    locality: str | None = Field(default=None, validation_alias=AliasChoices("localidade", "locality"))
    status: BookingStatus | None = None
    day: date | None = Field(default=None, validation_alias=AliasChoices("data", "date"))

    @field_validator("locality", "status", "day", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BulkDeleteArgs(BaseModel):
    note_numbers: list[str] = Field(
        min_length=1,
        validation_alias=AliasChoices("notas", "note_numbers", "noteNumbers"),
    )


def parse_list_bookings_args(raw_args: dict[str, Any]) -> ListBookingsArgs:
    return ListBookingsArgs.model_validate(raw_args)


def parse_bulk_delete_args(raw_args: dict[str, Any]) -> BulkDeleteArgs:
    return BulkDeleteArgs.model_validate(raw_args)


def list_bookings(store: BookingStore, args: ListBookingsArgs) -> list[Booking]:
    return store.list_bookings(
        locality=args.locality,
        status=args.status.value if args.status else None,
        day=args.day,
    )


def complete_booking(store: BookingStore, note_number: str) -> Booking:
    booking = get_booking_or_404(store, note_number)
    if booking.status == BookingStatus.COMPLETED.value:
        return booking

    store.mark_completed(booking)
    logger.info(json.dumps({"event": "booking_completed", "note_number": note_number}))
    return booking


def delete_booking(store: BookingStore, note_number: str) -> None:
    if store.delete(note_number) == 0:
        raise BookingNotFoundError("Agendamento não encontrado para exclusão.")
    logger.info(json.dumps({"event": "booking_deleted", "note_number": note_number}))


def bulk_delete_bookings(store: BookingStore, args: BulkDeleteArgs) -> int:
    deleted = store.delete_many(args.note_numbers)
    logger.info(
        json.dumps(
            {
                "event": "bookings_bulk_deleted",
                "requested": len(args.note_numbers),
                "deleted": deleted,
            }
        )
    )
    return deleted
