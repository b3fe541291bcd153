from fastapi import APIRouter, Depends, Query, Response, status

from payto.core.events import INVOICES_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.accounts.service import AccountsPayableService, AccountsReceivableService
from payto.modules.accounts.schemas import (
    PayableDashboard, PayableFilters, SupplierPaymentFilters, PagedList, SupplierPaymentCreate,
    RetentionCalculation, PaymentTxtRequest, ReceivableBalances
)

payable_router = APIRouter(prefix="/accounts-payable", tags=["Accounts Payable"])
receivable_router = APIRouter(prefix="/accounts-receivable", tags=["Accounts Receivable"])


# ===== CUENTAS POR PAGAR =====

@payable_router.get("/dashboard", response_model=PayableDashboard)
async def get_payable_dashboard(company_id: CompanyId, api: api_client_dependency):
    """Deuda total, vencidas, próximas a vencer, deuda por proveedor y últimos pagos"""
    return await AccountsPayableService(api).get_dashboard(company_id)


@payable_router.get("/invoices", response_model=PagedList)
async def list_payable_invoices(
    company_id: CompanyId,
    api: api_client_dependency,
    filters: PayableFilters = Depends(),
    page: int = Query(1, ge=1)
):
    return await AccountsPayableService(api).get_invoices(company_id, filters, page)


@payable_router.get("/suppliers/{supplier_id}")
async def get_supplier_summary(supplier_id: str, company_id: CompanyId, api: api_client_dependency):
    """Facturas y pagos de un proveedor"""
    return await AccountsPayableService(api).get_supplier_summary(company_id, supplier_id)


@payable_router.get("/default-retentions")
async def get_default_retentions(company_id: CompanyId, api: api_client_dependency):
    """Retenciones que la empresa aplica automáticamente como agente de retención"""
    return await AccountsPayableService(api).get_default_retentions(company_id)


@payable_router.post("/generate-txt")
async def generate_payment_txt(request: PaymentTxtRequest, company_id: CompanyId, api: api_client_dependency):
    content = await AccountsPayableService(api).generate_txt(company_id, request.invoice_ids)
    return Response(
        content=content,
        media_type="text/plain",
        headers={"Content-Disposition": f'attachment; filename="pagos-{company_id}.txt"'}
    )


@payable_router.get("/payments", response_model=PagedList)
async def list_supplier_payments(
    company_id: CompanyId,
    api: api_client_dependency,
    filters: SupplierPaymentFilters = Depends(),
    page: int = Query(1, ge=1)
):
    return await AccountsPayableService(api).get_payments(company_id, filters, page)


@payable_router.post("/payments", status_code=status.HTTP_201_CREATED)
async def register_supplier_payment(
    payment: SupplierPaymentCreate,
    company_id: CompanyId,
    api: api_client_dependency,
    bus: refresh_bus_dependency
):
    """
    Registrar un pago a proveedor

    - **retentions**: retenciones aplicadas; su suma no puede superar el monto
    """
    created = await AccountsPayableService(api).register_payment(company_id, payment)
    await bus.publish(INVOICES_CHANGED, company_id=company_id)
    return created


@payable_router.get("/payments/invoices/{invoice_id}/retentions", response_model=RetentionCalculation)
async def calculate_retentions(invoice_id: str, company_id: CompanyId, api: api_client_dependency):
    return await AccountsPayableService(api).calculate_retentions(company_id, invoice_id)


@payable_router.post("/payments/{payment_id}/confirm")
async def confirm_supplier_payment(payment_id: str, company_id: CompanyId, api: api_client_dependency):
    return await AccountsPayableService(api).confirm_payment(company_id, payment_id)


# ===== CUENTAS POR COBRAR =====

@receivable_router.get("/balances", response_model=ReceivableBalances)
async def get_receivable_balances(company_id: CompanyId, api: api_client_dependency):
    """Notas de crédito y débito de clientes con saldo pendiente"""
    return await AccountsReceivableService(api).get_balances(company_id)
