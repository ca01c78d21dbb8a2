# booking_api/services/tokens.py
from __future__ import annotations
import logging
import secrets
import string
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, Optional, Tuple

from ..config import settings
from ..errors import InvalidToken, ValidationError

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class VerifiedIdentity:
    phone: str
    name: str


class TokenStore(ABC):
    """Emite y canjea tokens que prueban que una petición es de un teléfono."""

    @abstractmethod
    def issue(self, phone: Optional[str], name: Optional[str]) -> str: ...

    @abstractmethod
    def redeem(self, token: Optional[str]) -> VerifiedIdentity: ...


def generate_token(length: int = 8) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(max(length, 8)))


class InMemoryTokenStore(TokenStore):
    """
    Mapa token → identidad en memoria del proceso, con vencimiento.

    - Los tokens NO son de un solo uso: valen hasta vencer (o reiniciar el proceso).
    - Un token vencido se descarta al consultarlo; `sweep_expired` limpia el resto.
    - `clock` debe ser monótono (segundos); inyectable para pruebas.
    """

    def __init__(self, ttl: Optional[timedelta] = None, length: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl if ttl is not None else timedelta(minutes=settings.TOKEN_TTL_MINUTES)
        self.length = length or settings.TOKEN_LENGTH
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[VerifiedIdentity, float]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def issue(self, phone: Optional[str], name: Optional[str]) -> str:
        if not phone or not name:
            raise ValidationError("Phone and Name are required")
        identity = VerifiedIdentity(phone=phone, name=name)
        expires_at = self._clock() + self.ttl.total_seconds()
        with self._lock:
            token = generate_token(self.length)
            while token in self._entries:
                token = generate_token(self.length)
            self._entries[token] = (identity, expires_at)
        logger.info("Token emitido: phone=%s ttl=%ss", phone, int(self.ttl.total_seconds()))
        return token

    def redeem(self, token: Optional[str]) -> VerifiedIdentity:
        if not token:
            raise ValidationError("Token is required")
        now = self._clock()
        with self._lock:
            entry = self._entries.get(token)
            if entry is not None and entry[1] <= now:
                del self._entries[token]
                entry = None
        if entry is None:
            logger.warning("Token inválido o vencido")
            raise InvalidToken("Invalid or expired token")
        return entry[0]

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [t for t, (_, exp) in self._entries.items() if exp <= now]
            for t in expired:
                del self._entries[t]
        if expired:
            logger.info("Tokens vencidos eliminados: %s", len(expired))
        return len(expired)


# Instancia del proceso (la usan routers y el job de limpieza)
token_store = InMemoryTokenStore()


def get_token_store() -> TokenStore:
    return token_store
