"""
Servicio de registros de auditoría

La API devuelve `{data: [...], pagination: {currentPage, lastPage, total, perPage}}`.
Si la empresa todavía no tiene registros la API responde 404; en ese caso se
devuelve una página o estadísticas vacías en lugar de un error.
"""

from fastapi import status
from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient, ApiResult
from payto.api.pagination import collect_all
from payto.common.csv_export import build_csv
from payto.common.filters import filter_items
from payto.modules.audit.schemas import AuditFilters, AuditLogsPage, AuditStats

logger = logging.getLogger(__name__)

AUDIT_SEARCH_FIELDS = ["description", "entity_id", "entityId", "user.name", "user.email"]

AUDIT_CSV_COLUMNS = {
    "created_at": "Fecha",
    "user.name": "Usuario",
    "user.email": "Email",
    "action": "Acción",
    "entity_type": "Entidad",
    "entity_id": "ID Entidad",
    "description": "Descripción",
    "ip_address": "IP",
}


def _is_not_found(result: ApiResult) -> bool:
    return not result.ok and result.error.status_code == status.HTTP_404_NOT_FOUND


def to_page(result: ApiResult, per_page: int) -> AuditLogsPage:
    if _is_not_found(result):
        return AuditLogsPage(per_page=per_page)

    data = result.unwrap()
    meta = dict(result.meta)
    if isinstance(data, dict) and "data" in data:
        meta.update({k: v for k, v in data.items() if k != "data"})
        data = data["data"]
    pagination = meta.get("pagination") or {}
    items = data or []
    return AuditLogsPage(
        data=items,
        current_page=pagination.get("currentPage") or meta.get("current_page") or 1,
        total_pages=pagination.get("lastPage") or meta.get("total_pages") or 1,
        total_items=pagination.get("total") or meta.get("total_items") or len(items),
        per_page=pagination.get("perPage") or meta.get("per_page") or per_page
    )


class AuditService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/audit-logs{suffix}"

    async def get_logs(
        self,
        company_id: str,
        page: int = 1,
        filters: Optional[AuditFilters] = None,
        search: Optional[str] = None
    ) -> AuditLogsPage:
        filters = filters or AuditFilters()
        params = {"page": page, **filters.model_dump(exclude_none=True, mode="json")}
        result = await self.api.get(self._path(company_id), params=params)
        audit_page = to_page(result, filters.per_page)
        if search:
            audit_page.data = filter_items(audit_page.data, search, AUDIT_SEARCH_FIELDS)
        return audit_page

    async def get_all_logs(self, company_id: str, filters: Optional[AuditFilters] = None) -> List[Dict[str, Any]]:
        """Todas las páginas, para exportar o buscar sobre el total"""
        filters = filters or AuditFilters()
        params = filters.model_dump(exclude_none=True, mode="json")

        async def fetch_page(page: int) -> ApiResult:
            result = await self.api.get(self._path(company_id), params={"page": page, **params})
            if _is_not_found(result):
                return ApiResult.success([])
            return result

        return await collect_all(fetch_page)

    async def get_stats(self, company_id: str, filters: Optional[AuditFilters] = None) -> AuditStats:
        params = (filters or AuditFilters()).model_dump(exclude_none=True, exclude={"per_page"}, mode="json")
        result = await self.api.get(self._path(company_id, "/stats"), params=params)
        if _is_not_found(result):
            return AuditStats()
        return AuditStats(**(result.unwrap() or {}))

    async def get_recent(self, company_id: str, limit: int = 10) -> List[Dict[str, Any]]:
        result = await self.api.get(self._path(company_id, "/recent"), params={"limit": limit})
        if _is_not_found(result):
            return []
        return result.unwrap() or []

    async def get_entity_logs(
        self,
        company_id: str,
        entity_type: str,
        entity_id: str,
        page: int = 1,
        per_page: int = 50
    ) -> AuditLogsPage:
        result = await self.api.get(
            self._path(company_id, f"/entity/{entity_type}/{entity_id}"),
            params={"page": page, "per_page": per_page}
        )
        return to_page(result, per_page)

    async def export_csv(self, company_id: str, filters: Optional[AuditFilters] = None) -> str:
        """CSV con todos los registros que cumplen los filtros, de todas las páginas"""
        logs = await self.get_all_logs(company_id, filters)
        logger.info(f"Exporting {len(logs)} audit log(s) for company {company_id}")
        return build_csv(logs, AUDIT_CSV_COLUMNS)
