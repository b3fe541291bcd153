"""
Cache del selector de empresas

La lista de empresas del usuario se pide en cada página. Se guarda por
token durante `COMPANY_CACHE_TTL_SECONDS` y se invalida antes si se publica
`companies.changed` en el bus. Los cambios hechos desde otra sesión (una
empresa eliminada, una invitación aceptada) aparecen al vencer la entrada.
Con más de `COMPANY_CACHE_MAX_ENTRIES` tokens se descartan los más viejos.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple
import hashlib
import logging
import time

from payto.core.config import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _key(token: Optional[str]) -> str:
    return hashlib.sha256((token or "").encode("utf-8")).hexdigest()


class CompanyListCache:

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Clock = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.COMPANY_CACHE_TTL_SECONDS
        self.max_entries = max_entries if max_entries is not None else settings.COMPANY_CACHE_MAX_ENTRIES
        self._clock = clock
        # Orden de inserción = antigüedad
        self._entries: Dict[str, Tuple[float, List[Dict[str, Any]]]] = {}

    def get(self, token: Optional[str]) -> Optional[List[Dict[str, Any]]]:
        key = _key(token)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, companies = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return companies

    def set(self, token: Optional[str], companies: List[Dict[str, Any]]) -> None:
        key = _key(token)
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), companies)
        self._evict()

    def _evict(self) -> None:
        now = self._clock()
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at >= self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        while len(self._entries) > self.max_entries:
            del self._entries[next(iter(self._entries))]

    def invalidate(self, **payload: Any) -> None:
        """Suscriptor de `companies.changed`: descarta todas las listas"""
        if self._entries:
            logger.debug(f"Company list cache cleared ({len(self._entries)} entries)")
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
