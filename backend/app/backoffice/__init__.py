from app.backoffice.agendamentos import (
    BulkDeleteArgs,
    ListBookingsArgs,
    bulk_delete_bookings,
    complete_booking,
    delete_booking,
    list_bookings,
    parse_bulk_delete_args,
    parse_list_bookings_args,
)

__all__ = [
    "BulkDeleteArgs",
    "ListBookingsArgs",
    "bulk_delete_bookings",
    "complete_booking",
    "delete_booking",
    "list_bookings",
    "parse_bulk_delete_args",
    "parse_list_bookings_args",
]
