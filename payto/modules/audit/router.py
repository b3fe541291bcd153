from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from typing import Optional

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.audit.service import AuditService
from payto.modules.audit.schemas import AuditFilters, AuditLogsPage, AuditStats

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("/", response_model=AuditLogsPage)
async def list_audit_logs(
    company_id: CompanyId,
    api: api_client_dependency,
    filters: AuditFilters = Depends(),
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None, description="Buscar en descripción, entidad o usuario")
):
    """
    Registros de auditoría paginados

    Los filtros se aplican en la API; `search` filtra la página recibida.
    """
    return await AuditService(api).get_logs(company_id, page, filters, search)


@router.get("/stats", response_model=AuditStats)
async def get_audit_stats(company_id: CompanyId, api: api_client_dependency, filters: AuditFilters = Depends()):
    return await AuditService(api).get_stats(company_id, filters)


@router.get("/recent")
async def get_recent_activity(
    company_id: CompanyId,
    api: api_client_dependency,
    limit: int = Query(10, ge=1, le=100)
):
    return {"data": await AuditService(api).get_recent(company_id, limit)}


@router.get("/export")
async def export_audit_logs(company_id: CompanyId, api: api_client_dependency, filters: AuditFilters = Depends()):
    """Exportar a CSV"""
    content = await AuditService(api).export_csv(company_id, filters)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="audit-logs-{company_id}.csv"'}
    )


@router.get("/entity/{entity_type}/{entity_id}", response_model=AuditLogsPage)
async def get_entity_audit_logs(
    entity_type: str,
    entity_id: str,
    company_id: CompanyId,
    api: api_client_dependency,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200)
):
    """Historial de cambios de una entidad"""
    return await AuditService(api).get_entity_logs(company_id, entity_type, entity_id, page, per_page)
