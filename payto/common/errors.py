"""
Catálogo de errores compartido

- Códigos de error que devuelve la API de PayTo
- Mensajes amigables en español para cada código
- Traducción de mensajes comunes del backend
- Registro en memoria de los últimos errores (para diagnóstico)
"""
from collections import Counter, deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVER_ERROR = "SERVER_ERROR"
    MAINTENANCE_MODE = "MAINTENANCE_MODE"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_LOCKED = "RESOURCE_LOCKED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Hay errores en los datos ingresados",
    ErrorCode.AUTHENTICATION_ERROR: "Error de autenticación",
    ErrorCode.AUTHORIZATION_ERROR: "No tienes permisos para realizar esta acción",
    ErrorCode.NOT_FOUND: "Recurso no encontrado",
    ErrorCode.CONFLICT: "Conflicto con los datos existentes",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Demasiadas solicitudes. Por favor, intenta más tarde",
    ErrorCode.SERVER_ERROR: "Error del servidor. Por favor, intenta más tarde",
    ErrorCode.MAINTENANCE_MODE: "El sistema está en mantenimiento",
    ErrorCode.INVALID_REQUEST: "Solicitud inválida",
    ErrorCode.RESOURCE_LOCKED: "El recurso está bloqueado temporalmente",
    ErrorCode.NETWORK_ERROR: "No se pudo conectar con el servidor",
    ErrorCode.TIMEOUT: "Tiempo de espera agotado. Por favor, intente nuevamente.",
}

# Mensajes en inglés que el backend devuelve tal cual
UPSTREAM_TRANSLATIONS: Dict[str, str] = {
    "This action is unauthorized.": "No tienes permisos para realizar esta acción",
    "Unauthenticated.": "No autenticado",
    "The given data was invalid.": "Los datos proporcionados son inválidos",
    "Server Error": "Error del servidor",
    "Not Found": "No encontrado",
}

GENERIC_ERROR_MESSAGE = "Ocurrió un error inesperado"


def translate_message(message: str) -> str:
    """Traducir un mensaje del backend si está en la tabla de traducciones"""
    return UPSTREAM_TRANSLATIONS.get(message, message)


def code_for_status(status_code: Optional[int]) -> ErrorCode:
    """Mapear un status HTTP a un código de error"""
    if status_code is None:
        return ErrorCode.NETWORK_ERROR
    if status_code in (400, 422):
        return ErrorCode.VALIDATION_ERROR if status_code == 422 else ErrorCode.INVALID_REQUEST
    if status_code == 401:
        return ErrorCode.AUTHENTICATION_ERROR
    if status_code == 403:
        return ErrorCode.AUTHORIZATION_ERROR
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code == 409:
        return ErrorCode.CONFLICT
    if status_code == 423:
        return ErrorCode.RESOURCE_LOCKED
    if status_code == 429:
        return ErrorCode.RATE_LIMIT_EXCEEDED
    if status_code == 503:
        return ErrorCode.MAINTENANCE_MODE
    return ErrorCode.SERVER_ERROR


def friendly_message(code: Optional[str], fallback: Optional[str] = None) -> str:
    try:
        return ERROR_MESSAGES[ErrorCode(code)]
    except ValueError:
        return fallback or GENERIC_ERROR_MESSAGE


class ValidationError(BaseModel):
    """Error de validación de un campo de formulario"""
    field: str
    message: str


class ErrorLogEntry(BaseModel):
    timestamp: datetime
    code: str
    message: str
    context: Optional[str] = None


class ErrorLog:
    """
    Registro en memoria de los últimos errores.

    Solo guarda los últimos `max_entries` errores; se usa para estadísticas
    de diagnóstico, no como auditoría.
    """

    def __init__(self, max_entries: int = 100):
        self._entries: Deque[ErrorLogEntry] = deque(maxlen=max_entries)

    def record(self, code: str, message: str, context: Optional[str] = None) -> ErrorLogEntry:
        entry = ErrorLogEntry(
            timestamp=datetime.now(timezone.utc),
            code=code,
            message=message,
            context=context
        )
        self._entries.append(entry)
        logger.debug(f"[{context or '-'}] {code}: {message}")
        return entry

    def stats(self) -> Dict[str, int]:
        """Cantidad de errores registrados por código"""
        return dict(Counter(entry.code for entry in self._entries))

    def recent(self, limit: int = 10) -> List[ErrorLogEntry]:
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
