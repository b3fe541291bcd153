"""
Servicios de cuentas por pagar y por cobrar

- Tablero de cuentas por pagar: vencidas, próximas a vencer, deuda por
  proveedor y últimos pagos
- Facturas de proveedores pendientes de pago y resumen por proveedor
- Pagos a proveedores con retenciones, confirmación y archivo TXT para el banco
- Saldos de notas de crédito y débito de clientes
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient, ApiResult
from payto.api.pagination import page_items, last_page_number
from payto.common.formatting import format_date, to_decimal
from payto.modules.accounts.schemas import (
    PayableDashboard, PayableSummary, PayableFilters, SupplierPaymentFilters, PagedList,
    SupplierPaymentCreate, RetentionCalculation, BalanceSummary, BalanceType, ReceivableBalances
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _decimal(value: Any) -> Decimal:
    return to_decimal(value) if value not in (None, "") else ZERO


def _with_due_date(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**item, "due_date_formatted": format_date(item.get("due_date"))} for item in items]


def to_paged_list(result: ApiResult, page: int) -> PagedList:
    items, meta = page_items(result)
    return PagedList(
        data=items,
        current_page=page,
        total_pages=last_page_number(meta) or page
    )


def balance_summary(credit_notes: List[Dict[str, Any]], debit_notes: List[Dict[str, Any]]) -> BalanceSummary:
    total_credits = sum((_decimal(note.get("pending_amount")) for note in credit_notes), ZERO)
    total_debits = sum((_decimal(note.get("pending_amount")) for note in debit_notes), ZERO)
    net = total_debits - total_credits
    return BalanceSummary(
        total_credits=total_credits,
        total_debits=total_debits,
        net_balance=abs(net),
        net_balance_type=BalanceType.CREDIT if net < 0 else BalanceType.DEBIT
    )


class AccountsPayableService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/accounts-payable{suffix}"

    def _payments_path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/supplier-payments{suffix}"

    async def get_dashboard(self, company_id: str) -> PayableDashboard:
        data = (await self.api.get(self._path(company_id, "/dashboard"))).unwrap() or {}
        return PayableDashboard(
            summary=PayableSummary(**(data.get("summary") or {})),
            overdue_invoices=_with_due_date(data.get("overdue_invoices") or []),
            upcoming_invoices=_with_due_date(data.get("upcoming_invoices") or []),
            by_supplier=data.get("by_supplier") or [],
            recent_payments=data.get("recent_payments") or []
        )

    async def get_invoices(self, company_id: str, filters: PayableFilters, page: int = 1) -> PagedList:
        params = {"page": page, **filters.model_dump(exclude_none=True, mode="json")}
        result = await self.api.get(self._path(company_id, "/invoices"), params=params)
        result.unwrap()
        invoices = to_paged_list(result, page)
        invoices.data = _with_due_date(invoices.data)
        return invoices

    async def get_supplier_summary(self, company_id: str, supplier_id: str) -> Dict[str, Any]:
        return (await self.api.get(self._path(company_id, f"/suppliers/{supplier_id}"))).unwrap()

    async def get_payments(self, company_id: str, filters: SupplierPaymentFilters, page: int = 1) -> PagedList:
        params = {"page": page, **filters.model_dump(exclude_none=True, mode="json")}
        result = await self.api.get(self._payments_path(company_id), params=params)
        result.unwrap()
        return to_paged_list(result, page)

    async def register_payment(self, company_id: str, payment: SupplierPaymentCreate) -> Dict[str, Any]:
        created = (await self.api.post(
            self._payments_path(company_id), json=payment.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(
            f"Supplier payment registered on invoice {payment.invoice_id} for company {company_id} "
            f"({len(payment.retentions)} retentions)"
        )
        return created

    async def calculate_retentions(self, company_id: str, invoice_id: str) -> RetentionCalculation:
        data = (await self.api.get(
            self._payments_path(company_id, f"/invoices/{invoice_id}/calculate-retentions")
        )).unwrap() or {}
        retentions = data.get("retentions") or []
        total = data.get("total_retentions")
        return RetentionCalculation(
            retentions=retentions,
            total_retentions=_decimal(total) if total is not None
            else sum((_decimal(r.get("amount")) for r in retentions), ZERO),
            is_retention_agent=bool(data.get("is_retention_agent"))
        )

    async def confirm_payment(self, company_id: str, payment_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._payments_path(company_id, f"/{payment_id}/confirm"))).unwrap()

    async def generate_txt(self, company_id: str, invoice_ids: List[str]) -> bytes:
        """Archivo TXT de transferencias para el banco"""
        content = (await self.api.post(
            self._path(company_id, "/generate-txt"), json={"invoice_ids": invoice_ids}, raw=True
        )).unwrap()
        logger.info(f"Payment TXT generated for company {company_id} ({len(invoice_ids)} invoices)")
        return content

    async def get_default_retentions(self, company_id: str) -> Dict[str, Any]:
        data = (await self.api.get(self._path(company_id, "/default-retentions"))).unwrap() or {}
        return {
            "is_retention_agent": bool(data.get("is_retention_agent")),
            "auto_retentions": data.get("auto_retentions") or []
        }


class AccountsReceivableService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    async def get_balances(self, company_id: str) -> ReceivableBalances:
        data = (await self.api.get(f"/companies/{company_id}/accounts-receivable/balances")).unwrap() or {}
        credit_notes = data.get("credit_notes") or []
        debit_notes = data.get("debit_notes") or []
        summary = data.get("summary")
        return ReceivableBalances(
            credit_notes=credit_notes,
            debit_notes=debit_notes,
            summary=BalanceSummary(**summary) if summary else balance_summary(credit_notes, debit_notes)
        )
