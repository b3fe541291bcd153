from fastapi import APIRouter, status, Query
from typing import Optional

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.network.service import NetworkService
from payto.modules.network.schemas import NetworkOverview, ConnectRequest

router = APIRouter(prefix="/network", tags=["Network"])


@router.get("/", response_model=NetworkOverview)
async def get_network(
    company_id: CompanyId,
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar conexión por nombre o ID público")
):
    """
    Vista general de la red

    Si alguna fuente falla se devuelve vacía y su mensaje en `errors`.
    """
    return await NetworkService(api).get_overview(company_id, search)


@router.post("/connect", status_code=status.HTTP_201_CREATED)
async def send_connection_request(request: ConnectRequest, company_id: CompanyId, api: api_client_dependency):
    return await NetworkService(api).send_request(company_id, request)


@router.post("/requests/{request_id}/accept")
async def accept_connection_request(request_id: str, company_id: CompanyId, api: api_client_dependency):
    return await NetworkService(api).accept_request(company_id, request_id)


@router.post("/requests/{request_id}/reject")
async def reject_connection_request(request_id: str, company_id: CompanyId, api: api_client_dependency):
    return await NetworkService(api).reject_request(company_id, request_id)


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_connection(connection_id: str, company_id: CompanyId, api: api_client_dependency):
    await NetworkService(api).remove_connection(company_id, connection_id)
