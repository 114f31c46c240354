from app.agendamentos.check_availability import (
    get_locality_availability,
    map_validation_error,
    raise_for_slot_rejection,
    slot_rejection_error,
)
from app.agendamentos.create_booking import (
    CreateBookingArgs,
    create_booking,
    is_valid_note_number,
    parse_create_booking_args,
)
from app.agendamentos.find_booking import (
    find_booking_with_eligibility,
    get_booking_or_404,
    serialize_booking,
)
from app.agendamentos.manage_booking import (
    RescheduleBookingArgs,
    parse_reschedule_booking_args,
    reschedule_booking,
)

__all__ = [
    "get_locality_availability",
    "map_validation_error",
    "raise_for_slot_rejection",
    "slot_rejection_error",
    "CreateBookingArgs",
    "create_booking",
    "is_valid_note_number",
    "parse_create_booking_args",
    "find_booking_with_eligibility",
    "get_booking_or_404",
    "serialize_booking",
    "RescheduleBookingArgs",
    "parse_reschedule_booking_args",
    "reschedule_booking",
]
