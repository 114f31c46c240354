from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from app.agendamentos.check_availability import raise_for_slot_rejection
from app.agendamentos.find_booking import get_booking_or_404, reschedule_block_message
from app.agendamentos.slot_rules import (
    BLOCKING_RESCHEDULE_REASONS,
    SlotPolicy,
    reschedule_block_reason,
    validate_candidate_date,
    validate_candidate_slot,
)
from app.db.models import Booking, Period
from app.db.store import BookingStore
from app.errors import RescheduleNotAllowedError

logger = logging.getLogger("agendamentos.manage_booking")


class RescheduleBookingArgs(BaseModel):
    requested_date: date = Field(validation_alias=AliasChoices("data", "date"))
    period: Period = Field(validation_alias=AliasChoices("periodo", "period"))


def parse_reschedule_booking_args(raw_args: dict[str, Any]) -> RescheduleBookingArgs:
    return RescheduleBookingArgs.model_validate(raw_args)


def reschedule_booking(
    store: BookingStore,
    note_number: str,
    args: RescheduleBookingArgs,
    today: date,
    now: datetime,
    policy: SlotPolicy,
) -> Booking:
    booking = get_booking_or_404(store, note_number)

    reason = reschedule_block_reason(
        status=booking.status,
        reschedule_count=booking.reschedule_count,
        current_date=booking.current_date,
        today=today,
        policy=policy,
    )
    if reason in BLOCKING_RESCHEDULE_REASONS:
        raise RescheduleNotAllowedError(
            reschedule_block_message(reason, policy),
            error_code=reason.value,
        )

    raise_for_slot_rejection(
        validate_candidate_date(args.requested_date, today=today, policy=policy),
        policy=policy,
        reschedule=True,
    )

    # The booking being moved never counts against its own target slot.
    occupancy = store.count_slot_occupancy(
        day=args.requested_date,
        period=args.period.value,
        locality=booking.locality,
        exclude_note=booking.note_number,
    )
    raise_for_slot_rejection(
        validate_candidate_slot(
            requested_date=args.requested_date,
            period=args.period,
            today=today,
            occupancy_count=occupancy,
            policy=policy,
        ),
        policy=policy,
        reschedule=True,
    )

    previous_date = booking.current_date
    previous_period = booking.current_period
    store.mark_rescheduled(
        booking,
        day=args.requested_date,
        period=args.period.value,
        rescheduled_at=now,
    )
    logger.info(
        json.dumps(
            {
                "event": "booking_rescheduled",
                "note_number": booking.note_number,
                "from": f"{previous_date.isoformat()}/{previous_period}",
                "to": f"{booking.current_date.isoformat()}/{booking.current_period}",
            }
        )
    )
    return booking
