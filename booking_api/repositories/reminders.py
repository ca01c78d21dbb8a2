# booking_api/repositories/reminders.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..models import Appointment, Reminder, ReminderStatus


class ReminderRepository:
    """Un recordatorio por cita, ligado por appointment_id."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_appointment_id(self, appointment_id: int) -> Optional[Reminder]:
        stmt = select(Reminder).where(Reminder.appointment_id == appointment_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, appointment_id: int, alert_time: datetime) -> Reminder:
        reminder = Reminder(
            appointment_id=appointment_id,
            alert_time=alert_time,
            status=ReminderStatus.pending,
        )
        self.db.add(reminder)
        self.db.flush()
        return reminder

    def update_by_appointment_id(self, appointment_id: int, alert_time: datetime) -> Optional[Reminder]:
        reminder = self.find_by_appointment_id(appointment_id)
        if reminder is None:
            return None
        reminder.alert_time = alert_time
        reminder.status = ReminderStatus.pending
        self.db.flush()
        return reminder

    def delete_by_appointment_id(self, appointment_id: int) -> None:
        self.db.execute(delete(Reminder).where(Reminder.appointment_id == appointment_id))
        self.db.flush()

    # ------------------ reconciliación ------------------

    def list_orphans(self) -> list[Reminder]:
        """Recordatorios cuya cita ya no existe."""
        stmt = (
            select(Reminder)
            .outerjoin(Appointment, Appointment.id == Reminder.appointment_id)
            .where(Appointment.id.is_(None))
        )
        return list(self.db.execute(stmt).scalars())

    def appointments_without_reminder(self) -> list[Appointment]:
        stmt = (
            select(Appointment)
            .outerjoin(Reminder, Reminder.appointment_id == Appointment.id)
            .where(Reminder.id.is_(None))
            .order_by(Appointment.id)
        )
        return list(self.db.execute(stmt).scalars())
