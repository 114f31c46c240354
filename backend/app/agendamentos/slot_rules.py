"""Slot admission and reschedule eligibility rules.

Everything here is pure: the caller supplies ``today`` and the current slot
occupancy, so the same inputs always give the same decision.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from app import config
from app.db.models import BookingStatus, Period


SATURDAY = 5


class SlotRejection(str, Enum):
    NON_BUSINESS_DAY = "NON_BUSINESS_DAY"
    HORIZON_EXCEEDED = "HORIZON_EXCEEDED"
    INSUFFICIENT_LEAD_TIME = "INSUFFICIENT_LEAD_TIME"
    SLOT_FULL = "SLOT_FULL"


class RescheduleBlock(str, Enum):
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    LIMIT_REACHED = "RESCHEDULE_LIMIT_REACHED"
    LEAD_TIME_EXPIRED = "LEAD_TIME_EXPIRED"


# Reasons that stop the reschedule write. LEAD_TIME_EXPIRED is only reported.
BLOCKING_RESCHEDULE_REASONS = frozenset(
    {RescheduleBlock.ALREADY_COMPLETED, RescheduleBlock.LIMIT_REACHED}
)


class SlotPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    capacity: int = Field(default=config.DEFAULT_SLOT_CAPACITY, gt=0)
    min_lead_business_days: int = Field(default=config.DEFAULT_MIN_LEAD_BUSINESS_DAYS, ge=0)
    horizon_days: int | None = Field(default=config.DEFAULT_BOOKING_HORIZON_DAYS, ge=0)


def load_slot_policy() -> SlotPolicy:
    return SlotPolicy(
        capacity=config.slot_capacity(),
        min_lead_business_days=config.min_lead_business_days(),
        horizon_days=config.booking_horizon_days(),
    )


def current_local_date(tz_name: str | None = None) -> date:
    return datetime.now(ZoneInfo(tz_name or config.BUSINESS_TIMEZONE)).date()


def is_business_day(day: date) -> bool:
    return day.weekday() < SATURDAY


def add_business_days(base: date, days: int) -> date:
    """Step forward one calendar day at a time, counting only weekdays.

    Holidays are not skipped. A Saturday and a Sunday base land on the same
    date because neither weekend step is counted.
    """
    cursor = base
    added = 0
    while added < days:
        cursor += timedelta(days=1)
        if is_business_day(cursor):
            added += 1
    return cursor


def earliest_bookable_date(today: date, policy: SlotPolicy) -> date:
    return add_business_days(today, policy.min_lead_business_days)


def latest_bookable_date(today: date, policy: SlotPolicy) -> date | None:
    if policy.horizon_days is None:
        return None
    return today + timedelta(days=policy.horizon_days)


def validate_candidate_slot(
    requested_date: date,
    period: Period,
    today: date,
    occupancy_count: int,
    policy: SlotPolicy,
) -> SlotRejection | None:
    """Return the first rule the requested slot breaks, or None when admissible."""
    if not is_business_day(requested_date):
        return SlotRejection.NON_BUSINESS_DAY

    latest = latest_bookable_date(today, policy)
    if latest is not None and requested_date > latest:
        return SlotRejection.HORIZON_EXCEEDED

    if requested_date < earliest_bookable_date(today, policy):
        return SlotRejection.INSUFFICIENT_LEAD_TIME

    if occupancy_count >= policy.capacity:
        return SlotRejection.SLOT_FULL

    return None


def validate_candidate_date(
    requested_date: date,
    today: date,
    policy: SlotPolicy,
) -> SlotRejection | None:
    # Calendar rules only; run before the store is asked for occupancy.
    return validate_candidate_slot(
        requested_date=requested_date,
        period=Period.MORNING,
        today=today,
        occupancy_count=0,
        policy=policy,
    )


def reschedule_block_reason(
    status: str,
    reschedule_count: int,
    current_date: date,
    today: date,
    policy: SlotPolicy,
) -> RescheduleBlock | None:
    if status == BookingStatus.COMPLETED.value:
        return RescheduleBlock.ALREADY_COMPLETED
    if reschedule_count > 0:
        return RescheduleBlock.LIMIT_REACHED
    if current_date < earliest_bookable_date(today, policy):
        return RescheduleBlock.LEAD_TIME_EXPIRED
    return None


def can_reschedule(
    status: str,
    reschedule_count: int,
    current_date: date,
    today: date,
    policy: SlotPolicy,
) -> bool:
    return (
        reschedule_block_reason(
            status=status,
            reschedule_count=reschedule_count,
            current_date=current_date,
            today=today,
            policy=policy,
        )
        is None
    )


def group_full_slots(full_slots: Iterable[tuple[date, str]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for day, period in sorted(full_slots, key=lambda item: (item[0], item[1])):
        grouped.setdefault(day.isoformat(), []).append(str(period))
    return grouped


def fully_booked_dates(grouped: dict[str, list[str]]) -> list[str]:
    all_periods = {period.value for period in Period}
    return sorted(day for day, periods in grouped.items() if all_periods <= set(periods))
