# booking_api/database.py
from __future__ import annotations
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings


def engine_options(url: str) -> Dict[str, Any]:
    """Opciones de engine: SQLite comparte conexión entre hilos, el resto usa pool."""
    options: Dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL no está configurada (revisa tu .env).")

engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

Base = declarative_base()


def get_db():
    """Una sesión por request; se cierra siempre."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Importa modelos para registrar metadatos antes de crear tablas
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
