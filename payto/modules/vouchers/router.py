from fastapi import APIRouter, status, Query
from typing import List

from payto.core.events import INVOICES_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.vouchers.service import VoucherService
from payto.modules.vouchers.schemas import VoucherType, VoucherCreate, VoucherResult

router = APIRouter(prefix="/vouchers", tags=["Vouchers"])


@router.get("/types", response_model=List[VoucherType])
async def list_voucher_types(company_id: CompanyId, api: api_client_dependency):
    """Tipos de comprobante que la empresa puede emitir"""
    return await VoucherService(api).get_available_types(company_id)


@router.get("/compatible-invoices")
async def list_compatible_invoices(
    company_id: CompanyId,
    api: api_client_dependency,
    voucher_type: str = Query(..., description="Código del comprobante")
):
    """Facturas que se pueden asociar al tipo de comprobante"""
    return {"invoices": await VoucherService(api).get_compatible_invoices(company_id, voucher_type)}


@router.post("/", response_model=VoucherResult, status_code=status.HTTP_201_CREATED)
async def create_voucher(
    voucher_data: VoucherCreate,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """
    Emitir una nota de crédito o débito

    - Requiere factura asociada
    - El total no puede superar el saldo disponible de esa factura
    """
    result = await VoucherService(api).create_voucher(company_id, voucher_data)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return result
