# booking_api/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== App =====
    APP_NAME: str = "booking_api"
    ENV: str = "dev"

    # ===== DB =====
    # En producción define DATABASE_URL con tu Postgres. Local cae a SQLite.
    DATABASE_URL: str = "sqlite:///./booking.db"

    # Opciones de pool (sólo aplican fuera de SQLite)
    DB_POOL_SIZE: int = 2
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 min

    # ===== CORS =====
    # Lista separada por comas, "*" = cualquier origen
    CORS_ORIGINS: str = "*"

    # ===== Tokens de verificación =====
    TOKEN_TTL_MINUTES: int = 15
    TOKEN_LENGTH: int = 8
    TOKEN_SWEEP_SECONDS: int = 60

    # ===== Recordatorios =====
    # Antelación de la alerta respecto a la cita
    REMINDER_LEAD_MINUTES: int = 60
    # Cada cuánto se reconcilian citas ↔ recordatorios
    RECONCILE_MINUTES: int = 60

    SCHEDULER_ENABLED: bool = True

    def model_post_init(self, __context) -> None:
        """
        Normaliza valores que no deben bajar de un mínimo:
          - TOKEN_LENGTH nunca menor a 8 caracteres
          - intervalos de jobs al menos 1
        """
        if self.TOKEN_LENGTH < 8:
            self.TOKEN_LENGTH = 8
        if self.TOKEN_SWEEP_SECONDS < 1:
            self.TOKEN_SWEEP_SECONDS = 1
        if self.RECONCILE_MINUTES < 1:
            self.RECONCILE_MINUTES = 1

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
