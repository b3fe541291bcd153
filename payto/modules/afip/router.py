from fastapi import APIRouter, status

from payto.core.events import COMPANIES_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.afip.service import AfipService
from payto.modules.afip.schemas import (
    CertificateUpload, ManualCertificateUpload, CertificateStatus, CuitSearch, PadronResult
)

router = APIRouter(prefix="/afip", tags=["AFIP"])


# ===== CERTIFICADO =====

@router.get("/certificate", response_model=CertificateStatus)
async def get_certificate(company_id: CompanyId, api: api_client_dependency):
    """Certificado AFIP de la empresa (o estado "Sin certificado")"""
    return await AfipService(api).get_certificate(company_id)


@router.post("/certificate/generate-csr")
async def generate_csr(company_id: CompanyId, api: api_client_dependency):
    return await AfipService(api).generate_csr(company_id)


@router.post("/certificate/upload", status_code=status.HTTP_201_CREATED)
async def upload_certificate(upload: CertificateUpload, company_id: CompanyId, api: api_client_dependency):
    """Subir el certificado firmado por AFIP para el CSR generado"""
    return await AfipService(api).upload_certificate(company_id, upload)


@router.post("/certificate/upload-manual", status_code=status.HTTP_201_CREATED)
async def upload_manual_certificate(
    upload: ManualCertificateUpload,
    company_id: CompanyId,
    api: api_client_dependency
):
    """Subir certificado y clave privada generados fuera de PayTo"""
    return await AfipService(api).upload_manual_certificate(company_id, upload)


@router.post("/certificate/test")
async def test_connection(company_id: CompanyId, api: api_client_dependency):
    return await AfipService(api).test_connection(company_id)


@router.delete("/certificate", status_code=status.HTTP_204_NO_CONTENT)
async def delete_certificate(company_id: CompanyId, api: api_client_dependency):
    await AfipService(api).delete_certificate(company_id)


# ===== PADRÓN =====

@router.get("/fiscal-data", response_model=PadronResult)
async def get_fiscal_data(company_id: CompanyId, api: api_client_dependency):
    """Datos fiscales de la empresa según el padrón de AFIP"""
    return await AfipService(api).get_fiscal_data(company_id)


@router.post("/search-cuit", response_model=PadronResult)
async def search_cuit(search: CuitSearch, company_id: CompanyId, api: api_client_dependency):
    """Buscar un contribuyente por CUIT (se valida el dígito verificador antes de consultar)"""
    return await AfipService(api).search_cuit(company_id, search.cuit)


@router.post("/sync-tax-condition")
async def sync_tax_condition(company_id: CompanyId, api: api_client_dependency, bus: refresh_bus_dependency):
    """Actualizar la condición fiscal de la empresa desde el padrón"""
    result = await AfipService(api).sync_tax_condition(company_id)
    await bus.publish(COMPANIES_CHANGED, company_id=company_id)
    return result
