from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session
import logging

from ..database import SessionLocal
from ..config import settings
from ..services.booking import BookingService
from ..services.tokens import token_store

logger = logging.getLogger(__name__)


def token_sweep_job():
    token_store.sweep_expired()


def reminder_reconcile_job():
    db: Session = SessionLocal()
    try:
        BookingService(db).reconcile()
    except Exception:
        logger.exception("Falló la reconciliación de recordatorios")
    finally:
        db.close()


def start_scheduler():
    scheduler = BackgroundScheduler()
    scheduler.add_job(token_sweep_job, IntervalTrigger(seconds=settings.TOKEN_SWEEP_SECONDS),
                      id="token_sweep", coalesce=True, max_instances=1)
    scheduler.add_job(reminder_reconcile_job, IntervalTrigger(minutes=settings.RECONCILE_MINUTES),
                      id="reminder_reconcile", coalesce=True, max_instances=1)
    scheduler.start()
    return scheduler
