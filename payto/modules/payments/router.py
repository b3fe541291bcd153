from fastapi import APIRouter, status, Query
from typing import Optional

from payto.core.events import INVOICES_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.payments.service import PaymentService, CollectionService
from payto.modules.payments.schemas import (
    PaymentCreate, PaymentOut, PaymentSummary, RejectRequest,
    CollectionCreate, CollectionUpdate, ConfirmationList
)

payments_router = APIRouter(prefix="/payments", tags=["Payments"])
collections_router = APIRouter(prefix="/collections", tags=["Collections"])


# ===== PAGOS =====

@payments_router.get("/", response_model=ConfirmationList)
async def list_payments(
    company_id: CompanyId,
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar por referencia o número de factura"),
    status_filter: Optional[str] = Query("all", alias="status")
):
    """Pagos de la empresa, con cantidad y monto pendientes de confirmar"""
    return await PaymentService(api).get_payments(company_id, search, status_filter)


@payments_router.get("/invoice/{invoice_id}", response_model=PaymentSummary)
async def list_invoice_payments(invoice_id: str, company_id: CompanyId, api: api_client_dependency):
    """Pagos registrados sobre una factura, con total pagado y saldo"""
    return await PaymentService(api).get_invoice_payments(company_id, invoice_id)


@payments_router.post("/invoice/{invoice_id}", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def create_payment(
    invoice_id: str,
    payment_data: PaymentCreate,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    payment = await PaymentService(api).create_payment(company_id, invoice_id, payment_data)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return payment


@payments_router.delete("/invoice/{invoice_id}/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(invoice_id: str, payment_id: str, company_id: CompanyId, api: api_client_dependency):
    await PaymentService(api).delete_payment(company_id, invoice_id, payment_id)


@payments_router.post("/{payment_id}/confirm")
async def confirm_payment(payment_id: str, company_id: CompanyId, api: api_client_dependency):
    """Confirmar un pago informado por un proveedor de la red"""
    return await PaymentService(api).confirm_payment(company_id, payment_id)


@payments_router.post("/{payment_id}/reject")
async def reject_payment(payment_id: str, request: RejectRequest, company_id: CompanyId, api: api_client_dependency):
    return await PaymentService(api).reject_payment(company_id, payment_id, request.notes)


# ===== COBROS =====

@collections_router.get("/", response_model=ConfirmationList)
async def list_collections(
    company_id: CompanyId,
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar por referencia o número de factura"),
    status_filter: Optional[str] = Query("all", alias="status"),
    from_network: Optional[bool] = Query(None, description="Solo cobros informados por la red")
):
    return await CollectionService(api).get_collections(company_id, search, status_filter, from_network)


@collections_router.post("/", status_code=status.HTTP_201_CREATED)
async def create_collection(
    collection_data: CollectionCreate,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    collection = await CollectionService(api).create_collection(company_id, collection_data)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return collection


@collections_router.put("/{collection_id}")
async def update_collection(
    collection_id: str,
    collection_data: CollectionUpdate,
    company_id: CompanyId,
    api: api_client_dependency
):
    return await CollectionService(api).update_collection(company_id, collection_id, collection_data)


@collections_router.post("/{collection_id}/confirm")
async def confirm_collection(collection_id: str, company_id: CompanyId, api: api_client_dependency):
    return await CollectionService(api).confirm_collection(company_id, collection_id)


@collections_router.post("/{collection_id}/reject")
async def reject_collection(
    collection_id: str,
    request: RejectRequest,
    company_id: CompanyId,
    api: api_client_dependency
):
    return await CollectionService(api).reject_collection(company_id, collection_id, request.notes)
