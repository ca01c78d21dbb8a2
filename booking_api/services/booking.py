# booking_api/services/booking.py
from __future__ import annotations
import logging
import re
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Optional

from dateutil.parser import isoparse
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import NotFound, ValidationError
from ..models import Appointment, Reminder
from ..repositories.appointments import AppointmentRepository, REPLACEABLE_FIELDS
from ..repositories.reminders import ReminderRepository

logger = logging.getLogger(__name__)

MSG_REQUIRED = "All fields are required!"
MSG_PHONE_REQUIRED = "Phone number is required!"
MSG_NOT_FOUND = "Appointment not found!"
MSG_BAD_DATETIME = "Invalid date or time format"

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_RE = re.compile(r"\d{2}:\d{2}(:\d{2})?")


def default_lead() -> timedelta:
    return timedelta(minutes=settings.REMINDER_LEAD_MINUTES)


# ====== Hora de alerta ======
def compute_alert_time(date: str, time: str, lead: Optional[timedelta] = None) -> datetime:
    """
    Junta `date` + "T" + `time` como hora local de pared (naive) y le resta
    la antelación (1 h por defecto). Sin conversión de zona horaria.

    Sólo acepta `YYYY-MM-DD` y `HH:MM[:SS]`; lo demás (semanas ISO, horas
    sueltas, offsets) es ValidationError.
    """
    if lead is None:
        lead = default_lead()
    if not DATE_RE.fullmatch(date.strip()) or not TIME_RE.fullmatch(time.strip()):
        raise ValidationError(MSG_BAD_DATETIME)
    try:
        when = isoparse(f"{date.strip()}T{time.strip()}")
    except (ValueError, OverflowError) as e:
        raise ValidationError(MSG_BAD_DATETIME) from e
    if when.tzinfo is not None:
        raise ValidationError(MSG_BAD_DATETIME)
    try:
        return when - lead
    except OverflowError as e:
        raise ValidationError(MSG_BAD_DATETIME) from e


class BookingService:
    """
    Orquesta cita + recordatorio. Cada operación es UNA transacción:
    la cita y su recordatorio se confirman juntos o no se confirma nada.
    """

    def __init__(self, db: Session, lead: Optional[timedelta] = None):
        self.db = db
        self.lead = lead if lead is not None else default_lead()
        self.appointments = AppointmentRepository(db)
        self.reminders = ReminderRepository(db)

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _sync_reminder(self, appointment_id: int, alert_time: datetime) -> Reminder:
        # Reinicia a pending; si faltaba (datos viejos, reenvío) se crea
        reminder = self.reminders.update_by_appointment_id(appointment_id, alert_time)
        if reminder is None:
            reminder = self.reminders.create(appointment_id, alert_time)
        return reminder

    # ------------------ lecturas ------------------

    def find(self, phone: str) -> Optional[Appointment]:
        return self.appointments.find_by_phone(phone)

    def get(self, phone: str) -> Appointment:
        appt = self.appointments.find_by_phone(phone)
        if appt is None:
            raise NotFound(MSG_NOT_FOUND)
        return appt

    def reminder_for(self, phone: str) -> Optional[Reminder]:
        appt = self.appointments.find_by_phone(phone)
        if appt is None:
            return None
        return self.reminders.find_by_appointment_id(appt.id)

    # ------------------ escrituras ------------------

    def submit(self, name: Optional[str], phone: Optional[str], service: Optional[str],
               time: Optional[str], date: Optional[str], notes: Optional[str] = None) -> Appointment:
        """
        Alta o reemplazo completo de la cita del teléfono (upsert) y su
        recordatorio. Reenviar para el mismo teléfono no duplica nada.
        """
        if not all([name, phone, service, time, date]):
            raise ValidationError(MSG_REQUIRED)
        alert_time = compute_alert_time(date, time, self.lead)

        fields = {"name": name, "service": service, "time": time, "date": date, "notes": notes}
        with self._transaction():
            appt = self.appointments.upsert(phone, fields)
            self._sync_reminder(appt.id, alert_time)

        logger.info("Cita guardada: phone=%s date=%s time=%s alert=%s", phone, date, time, alert_time.isoformat())
        return appt

    def modify(self, phone: Optional[str], **fields: Optional[str]) -> Appointment:
        """
        Reemplaza sólo los campos recibidos (los ausentes se conservan),
        recalcula la alerta y deja el recordatorio en pending.

        `notes=None` borra las notas; los obligatorios no pueden ir vacíos.
        """
        if not phone:
            raise ValidationError(MSG_PHONE_REQUIRED)
        changes = {k: v for k, v in fields.items() if k in REPLACEABLE_FIELDS}
        if any(not changes[k] for k in ("name", "service", "time", "date") if k in changes):
            raise ValidationError(MSG_REQUIRED)

        with self._transaction():
            current = self.appointments.find_by_phone(phone, for_update=True)
            if current is None:
                raise NotFound(MSG_NOT_FOUND)
            alert_time = compute_alert_time(
                changes.get("date", current.date),
                changes.get("time", current.time),
                self.lead,
            )
            appt = self.appointments.update_by_phone(phone, changes)
            self._sync_reminder(appt.id, alert_time)

        logger.info("Cita modificada: phone=%s campos=%s alert=%s", phone, sorted(changes), alert_time.isoformat())
        return appt

    def cancel(self, phone: Optional[str]) -> None:
        """Borra la cita y su recordatorio antes de reportar éxito."""
        if not phone:
            raise ValidationError(MSG_PHONE_REQUIRED)
        with self._transaction():
            removed = self.appointments.delete_by_phone(phone)
            if removed is None:
                raise NotFound(MSG_NOT_FOUND)
            appointment_id = removed.id
            self.reminders.delete_by_appointment_id(appointment_id)

        logger.info("Cita cancelada: phone=%s appointment_id=%s", phone, appointment_id)

    # ------------------ mantenimiento ------------------

    def reconcile(self) -> tuple[int, int]:
        """
        Repara el invariante cita ↔ recordatorio para filas escritas por
        fuera del servicio. Devuelve (creados, borrados).
        """
        created = removed = 0
        with self._transaction():
            for orphan in self.reminders.list_orphans():
                self.db.delete(orphan)
                removed += 1
            for appt in self.reminders.appointments_without_reminder():
                try:
                    alert_time = compute_alert_time(appt.date, appt.time, self.lead)
                except ValidationError:
                    logger.warning("Cita con fecha/hora inválida, sin recordatorio: phone=%s date=%r time=%r",
                                   appt.phone, appt.date, appt.time)
                    continue
                self.reminders.create(appt.id, alert_time)
                created += 1
            self.db.flush()

        if created or removed:
            logger.info("Reconciliación de recordatorios: creados=%s borrados=%s", created, removed)
        return created, removed
