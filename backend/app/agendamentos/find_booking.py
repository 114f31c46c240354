from __future__ import annotations

from datetime import date, datetime
from typing import Any

from app.agendamentos.slot_rules import RescheduleBlock, SlotPolicy, reschedule_block_reason
from app.db.models import Booking
from app.db.store import BookingStore
from app.errors import BookingNotFoundError


def reschedule_block_message(reason: RescheduleBlock, policy: SlotPolicy) -> str:
    if reason is RescheduleBlock.ALREADY_COMPLETED:
        return "Este agendamento já foi concluído."
    if reason is RescheduleBlock.LIMIT_REACHED:
        return "O limite de 1 reagendamento por nota já foi atingido."
    return (
        f"O prazo para reagendamento ({policy.min_lead_business_days + 1} dias úteis "
        "de antecedência) expirou."
    )


def get_booking_or_404(store: BookingStore, note_number: str) -> Booking:
    booking = store.find_by_note(note_number)
    if booking is None:
        raise BookingNotFoundError("Nenhum agendamento encontrado para a nota informada.")
    return booking


def find_booking_with_eligibility(
    store: BookingStore,
    note_number: str,
    today: date,
    policy: SlotPolicy,
) -> dict[str, Any]:
    booking = get_booking_or_404(store, note_number)
    reason = reschedule_block_reason(
        status=booking.status,
        reschedule_count=booking.reschedule_count,
        current_date=booking.current_date,
        today=today,
        policy=policy,
    )
    return {
        "agendamento": serialize_booking(booking),
        "pode_reagendar": reason is None,
        "motivo_bloqueio": reschedule_block_message(reason, policy) if reason is not None else "",
        "codigo_bloqueio": reason.value if reason is not None else None,
    }


def serialize_booking(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "numero_nota": booking.note_number,
        "numero_instalacao": booking.installation_number,
        "responsavel_pelo_agendamento": booking.responsible_party,
        "localidade": booking.locality,
        "data_original": _iso(booking.original_date),
        "periodo_original": booking.original_period,
        "data_atual": _iso(booking.current_date),
        "periodo_atual": booking.current_period,
        "status": booking.status,
        "quantidade_reagendamentos": booking.reschedule_count,
        "reagendado_em": _iso(booking.rescheduled_at),
        "criado_em": _iso(booking.created_at),
    }


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
