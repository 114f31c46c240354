from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import ValidationError

from app.agendamentos.slot_rules import (
    SlotPolicy,
    SlotRejection,
    fully_booked_dates,
    group_full_slots,
)
from app.db.store import BookingStore
from app.errors import BookingConflictError, BookingError, BookingValidationError


REQUIRED_FIELDS_MESSAGE = "Todos os campos são obrigatórios."
MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def get_locality_availability(
    store: BookingStore,
    locality: str,
    today: date,
    policy: SlotPolicy,
) -> dict[str, Any]:
    full_slots = store.list_full_slots(
        locality=locality,
        from_date=today,
        capacity=policy.capacity,
    )
    grouped = group_full_slots(full_slots)
    return {
        "localidade": locality,
        "periodos_lotados": grouped,
        "datas_lotadas": fully_booked_dates(grouped),
    }


def slot_rejection_error(
    rejection: SlotRejection,
    policy: SlotPolicy,
    reschedule: bool = False,
) -> BookingError:
    noun = "reagendamento" if reschedule else "agendamento"
    if rejection is SlotRejection.NON_BUSINESS_DAY:
        plural = "Reagendamentos" if reschedule else "Agendamentos"
        return BookingValidationError(
            f"{plural} são permitidos apenas em dias úteis.",
            error_code=rejection.value,
        )
    if rejection is SlotRejection.HORIZON_EXCEEDED:
        return BookingValidationError(
            f"O {noun} não pode ser feito com mais de {policy.horizon_days} dias de antecedência.",
            error_code=rejection.value,
        )
    if rejection is SlotRejection.INSUFFICIENT_LEAD_TIME:
        return BookingValidationError(
            f"O {noun} deve ter no mínimo {policy.min_lead_business_days + 1} "
            "dias úteis de antecedência.",
            error_code=rejection.value,
        )
    return BookingConflictError(
        "Período indisponível. O limite de vagas foi atingido.",
        error_code=rejection.value,
    )


def raise_for_slot_rejection(
    rejection: SlotRejection | None,
    policy: SlotPolicy,
    reschedule: bool = False,
) -> None:
    if rejection is not None:
        raise slot_rejection_error(rejection, policy=policy, reschedule=reschedule)


def map_validation_error(error: ValidationError) -> dict[str, str]:
    errors = error.errors()
    if any(item.get("type") in MISSING_ERROR_TYPES for item in errors):
        return {
            "error_code": "INVALID_ARGS",
            "human_message": REQUIRED_FIELDS_MESSAGE,
        }
    return {
        "error_code": "INVALID_ARGS",
        "human_message": f"Dados inválidos: {errors[0]['msg']}",
    }
