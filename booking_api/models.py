# booking_api/models.py
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, Text, UniqueConstraint
from datetime import datetime
import enum
from .database import Base


def _now() -> datetime:
    return datetime.now()


class ReminderStatus(str, enum.Enum):
    pending = "pending"
    sent = "sent"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("phone", name="uq_appointments_phone"),
        # Sin reutilizar ids borrados: los recordatorios apuntan por id
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Una sola cita activa por teléfono: ÚNICO y NO NULO
    phone: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    service: Mapped[str] = mapped_column(String(120), nullable=False)
    # Fecha y hora tal como las manda el cliente (hora local de pared)
    date: Mapped[str] = mapped_column(String(20), nullable=False)
    time: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now, nullable=False)


class Reminder(Base):
    __tablename__ = "reminders"
    __table_args__ = (
        UniqueConstraint("appointment_id", name="uq_reminders_appointment"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Referencia débil: el recordatorio no controla la vida de la cita
    appointment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Naive: hora local, sin conversión de zona
    alert_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[ReminderStatus] = mapped_column(
        Enum(ReminderStatus, name="reminder_status"),
        default=ReminderStatus.pending,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now, nullable=False)
