from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.agendamentos.check_availability import raise_for_slot_rejection
from app.agendamentos.slot_rules import (
    SlotPolicy,
    validate_candidate_date,
    validate_candidate_slot,
)
from app.db.models import Booking, Period
from app.db.store import BookingStore
from app.errors import BookingConflictError, BookingValidationError


NOTE_NUMBER_PATTERN = re.compile(r"^(?:709\d{8}|0709\d{7})$")
logger = logging.getLogger("agendamentos.create_booking")


class CreateBookingArgs(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)

    note_number: str = Field(
        min_length=1,
        validation_alias=AliasChoices("numero_nota", "note_number", "noteNumber"),
    )
    installation_number: str = Field(
        min_length=1,
        validation_alias=AliasChoices(
            "numero_instalacao", "installation_number", "installationNumber"
        ),
    )
    responsible_party: str = Field(
        min_length=1,
        validation_alias=AliasChoices(
            "responsavel_pelo_agendamento", "responsible_party", "responsibleParty"
        ),
    )
    locality: str = Field(
        min_length=1,
        max_length=50,
        validation_alias=AliasChoices("localidade", "locality"),
    )
    requested_date: date = Field(validation_alias=AliasChoices("data", "date"))
    period: Period = Field(validation_alias=AliasChoices("periodo", "period"))


def parse_create_booking_args(raw_args: dict[str, Any]) -> CreateBookingArgs:
    return CreateBookingArgs.model_validate(raw_args)


def is_valid_note_number(note_number: str) -> bool:
    return bool(NOTE_NUMBER_PATTERN.match(note_number or ""))


def create_booking(
    store: BookingStore,
    args: CreateBookingArgs,
    today: date,
    policy: SlotPolicy,
) -> Booking:
    if not is_valid_note_number(args.note_number):
        raise BookingValidationError(
            "Número de nota inválido. Informe os 11 dígitos iniciados por 709.",
            error_code="INVALID_NOTE_NUMBER",
        )

    raise_for_slot_rejection(
        validate_candidate_date(args.requested_date, today=today, policy=policy),
        policy=policy,
    )

    if store.note_exists(args.note_number):
        raise BookingConflictError(
            "Já existe um agendamento com este Número de Nota.",
            error_code="DUPLICATE_NOTE_NUMBER",
        )

    occupancy = store.count_slot_occupancy(
        day=args.requested_date,
        period=args.period.value,
        locality=args.locality,
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
    )

    booking = store.insert(
        note_number=args.note_number,
        installation_number=args.installation_number,
        responsible_party=args.responsible_party,
        locality=args.locality,
        day=args.requested_date,
        period=args.period.value,
    )
    logger.info(
        json.dumps(
            {
                "event": "booking_created",
                "note_number": booking.note_number,
                "locality": booking.locality,
                "date": booking.current_date.isoformat(),
                "period": booking.current_period,
            }
        )
    )
    return booking
