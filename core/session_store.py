# core/session_store.py
"""
Almacén de sesión inyectable para la capa de autenticación.

Reemplaza el singleton global (localStorage del navegador) por una
capacidad explícita con load/save/clear y verificación de TTL.
El motor de evaluaciones nunca lo utiliza.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from core.config import settings

logger = logging.getLogger("SessionStore")


class SessionStore:
    """Sesiones en memoria: {key: (timestamp, value)}."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time
    ):
        self._ttl = float(ttl_seconds if ttl_seconds is not None else settings.SESSION_TTL_SECONDS)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def is_expired(self, saved_at: float) -> bool:
        """True si el registro guardado en `saved_at` superó el TTL."""
        return self._clock() - saved_at >= self._ttl

    def load(self, key: str) -> Optional[Any]:
        """Recupera la sesión si existe y no expiró. Las expiradas se eliminan."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        saved_at, value = entry
        if self.is_expired(saved_at):
            logger.info(f"Sesión expirada para {key}, se elimina")
            del self._entries[key]
            return None
        return value

    def save(self, key: str, value: Any) -> None:
        """Guarda la sesión con el timestamp actual."""
        self._entries[key] = (self._clock(), value)

    def clear(self, key: str) -> None:
        self._entries.pop(key, None)


_session_store = SessionStore()


def get_session_store() -> SessionStore:
    return _session_store
