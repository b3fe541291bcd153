from fastapi import APIRouter, status, Query
from typing import List, Optional

from payto.core.events import INVOICES_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.invoices.calculator import get_standard_argentine_rates
from payto.modules.invoices.service import InvoiceService, calculate_request_totals
from payto.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceFilters, InvoiceTotals, TotalsRequest,
    TaxRateOption, ApprovalRequest, RejectionRequest, PendingApprovalsResult,
    BulkDeleteRequest
)

# Router principal del módulo de facturas
router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("/totals", response_model=InvoiceTotals)
async def calculate_totals(request: TotalsRequest):
    """
    Calcular totales de una factura o comprobante sin enviarla

    - **subtotal**: suma de cantidad x precio
    - **total_taxes**: IVA por ítem (Exento y No Gravado no suman)
    - **total_perceptions**: cada percepción sobre subtotal + IVA
    - **exceeds_available_balance**: solo si se informa el saldo de la factura asociada
    """
    return calculate_request_totals(request)


@router.get("/tax-rates", response_model=List[TaxRateOption])
async def list_tax_rates():
    """Alícuotas de IVA disponibles para los ítems"""
    return get_standard_argentine_rates()


@router.get("/")
async def list_invoices(
    company_id: CompanyId,
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar por número o receptor"),
    status_filter: Optional[str] = Query("all", alias="status", description="Estado de la factura"),
    type: Optional[str] = Query("all", description="Tipo de comprobante (A, B, C, E)")
):
    """Listar las facturas de la empresa (todas las páginas) con búsqueda y filtros"""
    filters = InvoiceFilters(search=search, status=status_filter, type=type)
    return await InvoiceService(api).get_invoices(company_id, filters)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_data: InvoiceCreate,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """
    Emitir una factura

    Los ítems deben tener descripción, cantidad y precio mayores a 0;
    si no, se responde 422 sin llamar a la API.
    """
    result = await InvoiceService(api).create_invoice(company_id, invoice_data)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return result


@router.get("/pending-approvals")
async def list_pending_approvals(company_id: CompanyId, api: api_client_dependency):
    """Facturas recibidas pendientes de aprobación"""
    return {"invoices": await InvoiceService(api).get_pending_approvals(company_id)}


@router.post("/bulk-delete")
async def bulk_delete_invoices(
    request: BulkDeleteRequest,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """Eliminar varias facturas a la vez; un fallo se informa como un único error"""
    deleted = await InvoiceService(api).bulk_delete(company_id, request.invoice_ids)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return {"deleted": deleted}


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str, company_id: CompanyId, api: api_client_dependency):
    return await InvoiceService(api).get_invoice(company_id, invoice_id)


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    invoice_data: InvoiceUpdate,
    company_id: CompanyId,
    api: api_client_dependency
):
    return await InvoiceService(api).update_invoice(company_id, invoice_id, invoice_data)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: str,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    await InvoiceService(api).delete_invoice(company_id, invoice_id)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)


@router.post("/{invoice_id}/approve", response_model=PendingApprovalsResult)
async def approve_invoice(
    invoice_id: str,
    request: ApprovalRequest,
    company_id: CompanyId,
    api: api_client_dependency
):
    """
    Aprobar una factura

    Devuelve la lista pendiente actualizada: la factura sale de la lista si
    alcanzó las aprobaciones requeridas, si no queda con el nuevo contador.
    """
    return await InvoiceService(api).approve_invoice(company_id, invoice_id, request.pending, request.notes)


@router.post("/{invoice_id}/reject", response_model=PendingApprovalsResult)
async def reject_invoice(
    invoice_id: str,
    request: RejectionRequest,
    company_id: CompanyId,
    api: api_client_dependency
):
    """Rechazar una factura; sale de la lista pendiente"""
    return await InvoiceService(api).reject_invoice(company_id, invoice_id, request.pending, request.reason)


@router.get("/{invoice_id}/available-balance")
async def get_available_balance(invoice_id: str, company_id: CompanyId, api: api_client_dependency):
    """Saldo disponible de una factura para notas de crédito/débito"""
    return await InvoiceService(api).get_available_balance(company_id, invoice_id)
