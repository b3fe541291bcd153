"""
Cliente HTTP para la API de PayTo

Todas las llamadas al backend pasan por aquí. El cliente:
- Agrega el token Bearer del usuario y los headers JSON
- Normaliza las respuestas (sobre `{data: ...}` o cuerpo directo) en un ApiResult
- Extrae el mensaje de error del backend y lo traduce si es un mensaje común
- No reintenta: cada fallo se devuelve como ApiResult con ok=False
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

import httpx
from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from payto.core.config import settings
from payto.common.errors import (
    ErrorCode, ValidationError, code_for_status, friendly_message,
    translate_message, GENERIC_ERROR_MESSAGE
)

logger = logging.getLogger(__name__)

# Claves que acompañan a `data` en un sobre de respuesta
ENVELOPE_KEYS = {
    "success", "data", "message", "meta", "errors", "pagination", "links",
    "current_page", "last_page", "per_page", "total", "from", "to",
    "total_pages", "total_items",
}


class ApiError(BaseModel):
    """Error normalizado de la API"""
    message: str
    status_code: Optional[int] = None
    code: str = ErrorCode.SERVER_ERROR.value
    errors: List[ValidationError] = Field(default_factory=list)


class ApiResult(BaseModel):
    """
    Resultado de una llamada a la API: éxito con `data` o error con `error`.

    Los servicios nunca inspeccionan la forma de la respuesta original;
    trabajan siempre con este objeto.
    """
    ok: bool
    data: Any = None
    error: Optional[ApiError] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, data: Any, meta: Optional[Dict[str, Any]] = None) -> "ApiResult":
        return cls(ok=True, data=data, meta=meta or {})

    @classmethod
    def failure(cls, error: ApiError) -> "ApiResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> Any:
        """
        Devolver `data` o lanzar HTTPException con el mensaje del backend.

        Los errores 4xx conservan su status; errores 5xx y de red se
        reportan como 502 (el fallo es del servicio externo).
        """
        if self.ok:
            return self.data
        error = self.error
        upstream_status = error.status_code
        if upstream_status is not None and 400 <= upstream_status < 500:
            status_code = upstream_status
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=status_code, detail=error.message)

    def unwrap_or(self, default: Any) -> Any:
        return self.data if self.ok else default


def normalize_payload(payload: Any) -> Tuple[Any, Dict[str, Any]]:
    """
    Quitar los sobres `{data: ...}` y devolver (datos, metadatos).

    Se desenvuelve mientras el objeto tenga `data` y solo claves de sobre,
    así `{success, data: {data: [...], pagination}}` queda en la lista interna.
    """
    meta: Dict[str, Any] = {}
    while isinstance(payload, dict) and "data" in payload and set(payload) <= ENVELOPE_KEYS:
        for key, value in payload.items():
            if key != "data":
                meta.setdefault(key, value)
        payload = payload["data"]
    return payload, meta


def jsonable(value: Any) -> Any:
    """Convertir Decimal (como texto, sin perder precisión) y fechas para el cuerpo JSON"""
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude_none=True)
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _parse_errors(raw: Any) -> List[ValidationError]:
    """Normalizar errores de campo: lista de {field, message} o dict campo -> [mensajes]"""
    errors: List[ValidationError] = []
    if isinstance(raw, dict):
        for field, messages in raw.items():
            if isinstance(messages, (list, tuple)):
                errors.extend(ValidationError(field=field, message=str(m)) for m in messages)
            else:
                errors.append(ValidationError(field=field, message=str(messages)))
    elif isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict) and "message" in item:
                errors.append(ValidationError(field=str(item.get("field", "")), message=str(item["message"])))
    return errors


def error_from_response(response: httpx.Response) -> ApiError:
    """Construir un ApiError a partir de una respuesta HTTP fallida"""
    code = code_for_status(response.status_code)
    try:
        body = response.json()
    except ValueError:
        body = None

    message = None
    errors: List[ValidationError] = []
    if isinstance(body, dict):
        raw_message = body.get("message") or body.get("detail") or body.get("error")
        if isinstance(raw_message, str) and raw_message.strip():
            message = translate_message(raw_message)
        if isinstance(body.get("code"), str):
            code = body["code"]
        errors = _parse_errors(body.get("errors"))

    code_value = code.value if isinstance(code, ErrorCode) else code
    return ApiError(
        message=message or friendly_message(code_value),
        status_code=response.status_code,
        code=code_value,
        errors=errors
    )


class PaytoAPIClient:
    """Cliente asíncrono para la API REST de PayTo"""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if settings.PAYTO_API_KEY:
            headers["X-Api-Key"] = settings.PAYTO_API_KEY

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.PAYTO_API_TIMEOUT,
            headers=headers,
            transport=transport
        )

    async def __aenter__(self) -> "PaytoAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        raw: bool = False
    ) -> ApiResult:
        """
        Ejecutar una llamada y normalizar el resultado.

        Con raw=True devuelve el cuerpo en bytes (exportaciones CSV, PDF o TXT).
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(
                method, path, params=params, json=jsonable(json) if json is not None else None
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timeout: {e}")
            return ApiResult.failure(ApiError(
                message=friendly_message(ErrorCode.TIMEOUT.value),
                code=ErrorCode.TIMEOUT.value
            ))
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} network error: {e}")
            return ApiResult.failure(ApiError(
                message=friendly_message(ErrorCode.NETWORK_ERROR.value),
                code=ErrorCode.NETWORK_ERROR.value
            ))

        if response.is_error:
            error = error_from_response(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {error.message}")
            return ApiResult.failure(error)

        if raw:
            return ApiResult.success(response.content, {"content_type": response.headers.get("content-type")})

        if not response.content:
            return ApiResult.success(None)

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"{method} {path} returned a non-JSON body")
            return ApiResult.failure(ApiError(
                message=GENERIC_ERROR_MESSAGE,
                status_code=response.status_code,
                code=ErrorCode.SERVER_ERROR.value
            ))

        # `{success: false, message}` con status 200
        if isinstance(payload, dict) and payload.get("success") is False:
            return ApiResult.failure(ApiError(
                message=translate_message(str(payload.get("message") or GENERIC_ERROR_MESSAGE)),
                status_code=response.status_code,
                code=str(payload.get("code") or ErrorCode.SERVER_ERROR.value),
                errors=_parse_errors(payload.get("errors"))
            ))

        data, meta = normalize_payload(payload)
        return ApiResult.success(data, meta)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, raw: bool = False) -> ApiResult:
        return await self.request("GET", path, params=params, raw=raw)

    async def post(
        self,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        raw: bool = False
    ) -> ApiResult:
        return await self.request("POST", path, params=params, json=json, raw=raw)

    async def put(self, path: str, json: Any = None) -> ApiResult:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> ApiResult:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> ApiResult:
        return await self.request("DELETE", path)
