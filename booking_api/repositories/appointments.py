# booking_api/repositories/appointments.py
from __future__ import annotations
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Appointment

# Campos que reemplaza un upsert (el teléfono es la llave)
REPLACEABLE_FIELDS = ("name", "service", "date", "time", "notes")


class AppointmentRepository:
    """
    Una cita por teléfono. Las escrituras hacen flush pero nunca commit:
    la transacción la controla quien llama (BookingService).
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_phone(self, phone: str, for_update: bool = False) -> Optional[Appointment]:
        stmt = select(Appointment).where(Appointment.phone == phone)
        if for_update:
            # Bloqueo de fila en Postgres; SQLite ya serializa escrituras
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(self, phone: str, fields: Mapping[str, Any]) -> Appointment:
        """Crea o reemplaza completa la cita de `phone`. Conserva el id."""
        appt = self.find_by_phone(phone, for_update=True)
        if appt is None:
            appt = Appointment(phone=phone)
            self.db.add(appt)
        for name in REPLACEABLE_FIELDS:
            setattr(appt, name, fields.get(name))
        self.db.flush()
        return appt

    def update_by_phone(self, phone: str, fields: Mapping[str, Any]) -> Optional[Appointment]:
        """Reemplaza sólo los campos presentes en `fields`. None si no existe."""
        appt = self.find_by_phone(phone, for_update=True)
        if appt is None:
            return None
        for name in REPLACEABLE_FIELDS:
            if name in fields:
                setattr(appt, name, fields[name])
        self.db.flush()
        return appt

    def delete_by_phone(self, phone: str) -> Optional[Appointment]:
        appt = self.find_by_phone(phone, for_update=True)
        if appt is None:
            return None
        self.db.delete(appt)
        self.db.flush()
        return appt
