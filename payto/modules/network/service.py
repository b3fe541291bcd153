"""
Servicio de la red de empresas

- Vista general: conexiones, solicitudes recibidas/enviadas y estadísticas,
  cargadas en paralelo con aislamiento de errores por fuente
- Envío, aceptación y rechazo de solicitudes de conexión
- Baja de conexiones
"""

from typing import Any, Dict, List, Optional
import asyncio
import logging

from payto.api.client import PaytoAPIClient, ApiResult
from payto.common.filters import filter_items
from payto.modules.network.schemas import NetworkOverview, NetworkStats, ConnectRequest

logger = logging.getLogger(__name__)


def _pick(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def connected_company_name(connection: Dict[str, Any]) -> Any:
    return _pick(connection, "connected_company_name", "connectedCompanyName")


def connected_company_unique_id(connection: Dict[str, Any]) -> Any:
    return _pick(connection, "connected_company_unique_id", "connectedCompanyUniqueId")


CONNECTION_SEARCH_FIELDS = [connected_company_name, connected_company_unique_id]


def _as_list(result: ApiResult, key: str) -> List[Dict[str, Any]]:
    data = result.data
    if isinstance(data, dict):
        data = data.get(key) or []
    return data or []


def _stats(result: ApiResult) -> NetworkStats:
    data = result.data or {}
    return NetworkStats(
        total_connections=_pick(data, "total_connections", "totalConnections") or 0,
        pending_received=_pick(data, "pending_received", "pendingReceived") or 0,
        pending_sent=_pick(data, "pending_sent", "pendingSent") or 0
    )


class NetworkService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/network{suffix}"

    async def get_overview(self, company_id: str, search: Optional[str] = None) -> NetworkOverview:
        connections, received, sent, stats = await asyncio.gather(
            self.api.get(self._path(company_id)),
            self.api.get(self._path(company_id, "/requests")),
            self.api.get(self._path(company_id, "/sent")),
            self.api.get(self._path(company_id, "/stats")),
        )

        errors: Dict[str, str] = {}
        for source, result in (
            ("connections", connections),
            ("pending_requests", received),
            ("sent_requests", sent),
            ("stats", stats),
        ):
            if not result.ok:
                errors[source] = result.error.message
                logger.warning(f"Network overview for company {company_id}: {source} failed")

        return NetworkOverview(
            connections=filter_items(
                _as_list(connections, "connections") if connections.ok else [],
                search,
                CONNECTION_SEARCH_FIELDS
            ),
            pending_requests=_as_list(received, "requests") if received.ok else [],
            sent_requests=_as_list(sent, "requests") if sent.ok else [],
            stats=_stats(stats) if stats.ok else NetworkStats(),
            errors=errors
        )

    async def send_request(self, company_id: str, request: ConnectRequest) -> Dict[str, Any]:
        return (await self.api.post(
            self._path(company_id, "/connect"), json=request.model_dump(exclude_none=True)
        )).unwrap()

    async def accept_request(self, company_id: str, request_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, f"/requests/{request_id}/accept"))).unwrap()

    async def reject_request(self, company_id: str, request_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, f"/requests/{request_id}/reject"))).unwrap()

    async def remove_connection(self, company_id: str, connection_id: str) -> None:
        (await self.api.delete(self._path(company_id, f"/{connection_id}"))).unwrap()
