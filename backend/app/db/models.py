from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class BookingStatus(str, Enum):
    SCHEDULED = "agendado"
    RESCHEDULED = "reagendado"
    COMPLETED = "concluido"


class Period(str, Enum):
    MORNING = "manha"
    AFTERNOON = "tarde"


class Booking(Base):
    __tablename__ = "agendamentos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    note_number: Mapped[str] = mapped_column(
        "numero_nota", String(255), nullable=False, unique=True, index=True
    )
    installation_number: Mapped[str] = mapped_column(
        "numero_instalacao", String(255), nullable=False
    )
    responsible_party: Mapped[str] = mapped_column(
        "responsavel_pelo_agendamento", String(255), nullable=False
    )
    locality: Mapped[str] = mapped_column("localidade", String(50), nullable=False)
    original_date: Mapped[date] = mapped_column("data_original", Date, nullable=False)
    original_period: Mapped[str] = mapped_column("periodo_original", String(10), nullable=False)
    current_date: Mapped[date] = mapped_column("data_atual", Date, nullable=False)
    current_period: Mapped[str] = mapped_column("periodo_atual", String(10), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.SCHEDULED.value,
        server_default=BookingStatus.SCHEDULED.value,
    )
    reschedule_count: Mapped[int] = mapped_column(
        "quantidade_reagendamentos",
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    rescheduled_at: Mapped[datetime | None] = mapped_column(
        "reagendado_em", DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime | None] = mapped_column(
        "criado_em", DateTime(timezone=True), server_default=func.now(), nullable=True
    )


Index(
    "ix_agendamentos_slot",
    Booking.locality,
    Booking.current_date,
    Booking.current_period,
)
