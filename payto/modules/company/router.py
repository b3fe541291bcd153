from fastapi import APIRouter, Request, status

from payto.dependencies.apiDependencies import (
    api_client_dependency, refresh_bus_dependency, get_bearer_token
)
from payto.modules.company.dependencies import company_cache_dependency
from payto.modules.company.service import CompanyService
from payto.modules.company.schemas import (
    CompanyCreate, CompanyUpdate, CompanyDelete, CompanyList, CompanyDashboard, JoinCompany,
    PerceptionConfig
)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/", response_model=CompanyList)
async def list_companies(
    request: Request,
    api: api_client_dependency,
    bus: refresh_bus_dependency,
    cache: company_cache_dependency
):
    """Empresas del usuario para el selector de empresas"""
    return await CompanyService(api, bus, cache).get_companies(get_bearer_token(request))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_company(company: CompanyCreate, api: api_client_dependency, bus: refresh_bus_dependency):
    """
    Crear una empresa

    - **national_id**: CUIT de 11 dígitos con dígito verificador válido
    - **deletion_code**: mínimo 8 caracteres con mayúsculas, minúsculas, números y caracteres especiales
    """
    return await CompanyService(api, bus).create_company(company)


@router.post("/join")
async def join_company(join_data: JoinCompany, api: api_client_dependency, bus: refresh_bus_dependency):
    """Unirse a una empresa con un código de invitación"""
    return await CompanyService(api, bus).join_company(join_data)


@router.get("/{company_id}")
async def get_company(company_id: str, api: api_client_dependency, bus: refresh_bus_dependency):
    return await CompanyService(api, bus).get_company(company_id)


@router.put("/{company_id}")
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    return await CompanyService(api, bus).update_company(company_id, company_data)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: str,
    delete_data: CompanyDelete,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """Eliminar la empresa; requiere el código de eliminación"""
    await CompanyService(api, bus).delete_company(company_id, delete_data.deletion_code)


@router.post("/{company_id}/regenerate-invite")
async def regenerate_invite(company_id: str, api: api_client_dependency, bus: refresh_bus_dependency):
    """Generar un nuevo código de invitación"""
    return await CompanyService(api, bus).regenerate_invite(company_id)


@router.get("/{company_id}/dashboard", response_model=CompanyDashboard)
async def get_company_dashboard(company_id: str, api: api_client_dependency, bus: refresh_bus_dependency):
    """
    Perfil de la empresa

    - **badges**: pagos, cobros y aprobaciones pendientes
    - **certificate_status**: estado del certificado AFIP
    - **errors**: partes que no se pudieron cargar (el resto se devuelve igual)
    """
    return await CompanyService(api, bus).get_dashboard(company_id)


@router.get("/{company_id}/perception-config", response_model=PerceptionConfig)
async def get_perception_config(company_id: str, api: api_client_dependency, bus: refresh_bus_dependency):
    return await CompanyService(api, bus).get_perception_config(company_id)


@router.put("/{company_id}/perception-config", response_model=PerceptionConfig)
async def update_perception_config(
    company_id: str,
    config: PerceptionConfig,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """
    Configurar la empresa como agente de percepción

    - **auto_perceptions**: se vacía si la empresa deja de ser agente
    - **base_type**: net, total o vat
    """
    return await CompanyService(api, bus).update_perception_config(company_id, config)
