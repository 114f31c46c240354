from __future__ import annotations

from typing import Any


class BookingError(Exception):
    """Base for failures that map to a JSON error envelope."""

    status_code = 500
    error_code = "SYSTEM_DOWN"

    def __init__(self, human_message: str, error_code: str | None = None) -> None:
        super().__init__(human_message)
        self.human_message = human_message
        if error_code is not None:
            self.error_code = error_code

    def to_payload(self) -> dict[str, Any]:
        return {
            "ok": False,
            "error_code": self.error_code,
            "human_message": self.human_message,
        }


class BookingValidationError(BookingError):
    status_code = 400
    error_code = "INVALID_ARGS"


class BookingConflictError(BookingError):
    status_code = 409
    error_code = "CONFLICT"


class BookingNotFoundError(BookingError):
    status_code = 404
    error_code = "BOOKING_NOT_FOUND"


class RescheduleNotAllowedError(BookingError):
    status_code = 403
    error_code = "RESCHEDULE_NOT_ALLOWED"


class AuthError(BookingError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(
        self,
        human_message: str,
        error_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(human_message, error_code=error_code)
        if status_code is not None:
            self.status_code = status_code


class StoreError(BookingError):
    status_code = 500
    error_code = "SYSTEM_DOWN"
