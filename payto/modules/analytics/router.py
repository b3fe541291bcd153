from fastapi import APIRouter, Depends
from fastapi.responses import Response

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.analytics.service import AnalyticsService
from payto.modules.analytics.schemas import AnalyticsFilters, AnalyticsOverview

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/", response_model=AnalyticsOverview)
async def get_analytics(company_id: CompanyId, api: api_client_dependency, filters: AnalyticsFilters = Depends()):
    """
    Estadísticas del período

    - **period**: month, quarter, year o custom (con start_date y end_date)
    - **errors**: fuentes que no se pudieron cargar (el resto se devuelve igual)
    """
    return await AnalyticsService(api).get_overview(company_id, filters)


@router.get("/export")
async def export_analytics(company_id: CompanyId, api: api_client_dependency, filters: AnalyticsFilters = Depends()):
    """Exportar el reporte a CSV"""
    content = await AnalyticsService(api).export_csv(company_id, filters)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="analytics-{filters.period.value}.csv"'}
    )
