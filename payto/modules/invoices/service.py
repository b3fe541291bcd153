"""
Servicios de negocio para el módulo de Facturas

- Listado con búsqueda y filtros por estado/tipo
- Emisión con validación de ítems y cálculo de totales
- Aprobación/rechazo combinando la respuesta con la lista pendiente
- Saldo disponible para notas de crédito/débito
- Eliminación masiva
"""

from fastapi import HTTPException, status
from typing import Any, Dict, List, Optional, Sequence
import logging

from payto.api.client import PaytoAPIClient
from payto.api.bulk import gather_all
from payto.api.pagination import collect_all
from payto.common.filters import filter_items
from payto.common.formatting import format_date, invoice_status_label, is_overdue
from payto.modules.invoices.approvals import merge_approval, merge_rejection, is_fully_approved
from payto.modules.invoices.calculator import TotalsCalculator, validate_items
from payto.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceFilters, InvoiceTotals, TotalsRequest,
    ApprovalResponse, PendingApprovalsResult
)

logger = logging.getLogger(__name__)


def receiver_name(invoice: Dict[str, Any]) -> str:
    """Nombre del receptor: cliente, proveedor o empresa conectada"""
    for key in ("client", "supplier", "receiver_company", "receiverCompany"):
        entity = invoice.get(key)
        if isinstance(entity, dict):
            name = entity.get("business_name") or entity.get("name")
            if not name:
                name = f"{entity.get('first_name') or ''} {entity.get('last_name') or ''}".strip()
            if name:
                return name
    return invoice.get("receiver_name") or ""


INVOICE_SEARCH_FIELDS = ["number", receiver_name]


def calculate_request_totals(request: TotalsRequest, calculator: Optional[TotalsCalculator] = None) -> InvoiceTotals:
    calculator = calculator or TotalsCalculator()
    return calculator.calculate_invoice_totals(
        request.items,
        request.perceptions,
        available_balance=request.available_balance,
        currency=request.currency.value
    )


class InvoiceService:
    """Servicio principal para facturas"""

    def __init__(self, api: PaytoAPIClient, calculator: Optional[TotalsCalculator] = None):
        self.api = api
        self.calculator = calculator or TotalsCalculator()

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/invoices{suffix}"

    # ===== LISTADO =====

    async def get_all_invoices(self, company_id: str) -> List[Dict[str, Any]]:
        """Todas las páginas de facturas de la empresa"""
        async def fetch_page(page: int):
            return await self.api.get(self._path(company_id), params={"page": page})

        return await collect_all(fetch_page)

    async def get_invoices(self, company_id: str, filters: InvoiceFilters) -> Dict[str, Any]:
        invoices = await self.get_all_invoices(company_id)
        filtered = filter_items(
            invoices,
            filters.search,
            INVOICE_SEARCH_FIELDS,
            {"status": filters.status, "type": filters.type}
        )
        decorated = [
            {
                **invoice,
                "status_label": invoice_status_label(invoice),
                "is_overdue": is_overdue(invoice),
                "issue_date_formatted": format_date(invoice.get("issue_date")),
                "due_date_formatted": format_date(invoice.get("due_date")),
            }
            for invoice in filtered
        ]
        return {"invoices": decorated, "total": len(decorated)}

    async def get_invoice(self, company_id: str, invoice_id: str) -> Dict[str, Any]:
        return (await self.api.get(self._path(company_id, f"/{invoice_id}"))).unwrap()

    # ===== EMISIÓN =====

    def build_payload(self, invoice_data: InvoiceCreate) -> Dict[str, Any]:
        payload = invoice_data.model_dump(exclude_none=True)
        payload["items"] = [
            {**item.model_dump(exclude_none=True), "tax_rate": self.calculator.effective_rate(item)}
            for item in invoice_data.items
        ]
        return payload

    def validate_for_submit(self, items) -> None:
        """Bloquear el envío si algún ítem está incompleto (sin llamar a la API)"""
        error = validate_items(items)
        if error:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=error
            )

    async def create_invoice(self, company_id: str, invoice_data: InvoiceCreate) -> Dict[str, Any]:
        self.validate_for_submit(invoice_data.items)

        totals = self.calculator.calculate_invoice_totals(
            invoice_data.items, invoice_data.perceptions, currency=invoice_data.currency.value
        )
        result = await self.api.post(self._path(company_id), json=self.build_payload(invoice_data))
        invoice = result.unwrap()
        logger.info(f"Invoice created for company {company_id}: total {totals.total}")
        return {"invoice": invoice, "totals": totals}

    async def update_invoice(self, company_id: str, invoice_id: str, invoice_data: InvoiceUpdate) -> Dict[str, Any]:
        if invoice_data.items is not None:
            self.validate_for_submit(invoice_data.items)
        payload = invoice_data.model_dump(exclude_none=True)
        return (await self.api.put(self._path(company_id, f"/{invoice_id}"), json=payload)).unwrap()

    async def delete_invoice(self, company_id: str, invoice_id: str) -> None:
        (await self.api.delete(self._path(company_id, f"/{invoice_id}"))).unwrap()

    async def bulk_delete(self, company_id: str, invoice_ids: Sequence[str]) -> int:
        await gather_all(
            (self.api.delete(self._path(company_id, f"/{invoice_id}")) for invoice_id in invoice_ids),
            "Error al eliminar las facturas"
        )
        return len(invoice_ids)

    # ===== APROBACIONES =====

    async def get_pending_approvals(self, company_id: str) -> List[Dict[str, Any]]:
        data = (await self.api.get(self._path(company_id, "/pending-approvals"))).unwrap()
        if isinstance(data, dict):
            data = data.get("invoices") or []
        return data or []

    async def approve_invoice(
        self,
        company_id: str,
        invoice_id: str,
        pending: Sequence[Dict[str, Any]],
        notes: Optional[str] = None
    ) -> PendingApprovalsResult:
        data = (await self.api.post(
            self._path(company_id, f"/{invoice_id}/approve"),
            json={"notes": notes} if notes else {}
        )).unwrap() or {}

        invoice = data.get("invoice", data) if isinstance(data, dict) else {}
        response = ApprovalResponse(
            id=str(invoice.get("id") or invoice_id),
            status=invoice.get("status"),
            approvals_received=invoice.get("approvals_received"),
            approvals_required=invoice.get("approvals_required", 1)
        )
        return PendingApprovalsResult(
            invoice=invoice,
            pending=merge_approval(pending, response),
            fully_approved=is_fully_approved(response)
        )

    async def reject_invoice(
        self,
        company_id: str,
        invoice_id: str,
        pending: Sequence[Dict[str, Any]],
        reason: str
    ) -> PendingApprovalsResult:
        data = (await self.api.post(
            self._path(company_id, f"/{invoice_id}/reject"),
            json={"reason": reason}
        )).unwrap()
        invoice = data if isinstance(data, dict) else None
        return PendingApprovalsResult(invoice=invoice, pending=merge_rejection(pending, invoice_id))

    # ===== SALDO =====

    async def get_available_balance(self, company_id: str, invoice_id: str) -> Dict[str, Any]:
        return (await self.api.get(self._path(company_id, f"/{invoice_id}/available-balance"))).unwrap()
