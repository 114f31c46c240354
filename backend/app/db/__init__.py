from app.db.base import Base
from app.db.models import Booking, BookingStatus, Period

__all__ = [
    "Base",
    "Booking",
    "BookingStatus",
    "Period",
]
