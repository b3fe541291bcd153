"""
Servicios para pagos (a proveedores) y cobros (de clientes)

- Pagos registrados sobre una factura, con total pagado y saldo
- Listado de pagos/cobros de la empresa con filtro por estado
- Confirmación y rechazo de pagos/cobros informados por la red
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.common.filters import filter_items
from payto.modules.payments.schemas import (
    PaymentCreate, PaymentOut, PaymentSummary, CollectionCreate, CollectionUpdate,
    ConfirmationList, ConfirmationStatus
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["reference", "reference_number", "invoice.number", "notes"]


def _as_list(data: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get(key) or []
    return data or []


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value not in (None, "") else Decimal("0")


def confirmation_list(items: List[Dict[str, Any]], search: Optional[str], status: Optional[str]) -> ConfirmationList:
    filtered = filter_items(items, search, SEARCH_FIELDS, {"status": status})
    pending = [item for item in filtered if item.get("status") == ConfirmationStatus.PENDING_CONFIRMATION.value]
    return ConfirmationList(
        items=filtered,
        total=len(filtered),
        pending_count=len(pending),
        pending_amount=sum((_decimal(item.get("amount")) for item in pending), Decimal("0"))
    )


class PaymentService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _invoice_path(self, company_id: str, invoice_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/invoices/{invoice_id}/payments{suffix}"

    @staticmethod
    def _payment(raw: Dict[str, Any]) -> PaymentOut:
        creator = raw.get("creator") or {}
        return PaymentOut(**{**raw, "creator_name": creator.get("name")})

    async def get_invoice_payments(self, company_id: str, invoice_id: str) -> PaymentSummary:
        data = (await self.api.get(self._invoice_path(company_id, invoice_id))).unwrap() or {}
        return PaymentSummary(
            payments=[self._payment(p) for p in data.get("payments") or []],
            total_paid=_decimal(data.get("total_paid")),
            remaining_amount=_decimal(data.get("remaining_amount"))
        )

    async def create_payment(self, company_id: str, invoice_id: str, payment_data: PaymentCreate) -> PaymentOut:
        raw = (await self.api.post(
            self._invoice_path(company_id, invoice_id),
            json=payment_data.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(f"Payment registered on invoice {invoice_id} for company {company_id}")
        return self._payment(raw)

    async def delete_payment(self, company_id: str, invoice_id: str, payment_id: str) -> None:
        (await self.api.delete(self._invoice_path(company_id, invoice_id, f"/{payment_id}"))).unwrap()

    async def get_payments(
        self,
        company_id: str,
        search: Optional[str] = None,
        status: Optional[str] = "all"
    ) -> ConfirmationList:
        data = (await self.api.get(f"/companies/{company_id}/payments")).unwrap()
        return confirmation_list(_as_list(data, "payments"), search, status)

    async def confirm_payment(self, company_id: str, payment_id: str) -> Dict[str, Any]:
        return (await self.api.post(f"/companies/{company_id}/payments/{payment_id}/confirm")).unwrap()

    async def reject_payment(self, company_id: str, payment_id: str, notes: Optional[str] = None) -> Dict[str, Any]:
        return (await self.api.post(
            f"/companies/{company_id}/payments/{payment_id}/reject", json={"notes": notes}
        )).unwrap()


class CollectionService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/collections{suffix}"

    async def get_collections(
        self,
        company_id: str,
        search: Optional[str] = None,
        status: Optional[str] = "all",
        from_network: Optional[bool] = None
    ) -> ConfirmationList:
        params: Dict[str, Any] = {"from_network": from_network}
        if status and status != "all":
            params["status"] = status
        data = (await self.api.get(self._path(company_id), params=params)).unwrap()
        return confirmation_list(_as_list(data, "collections"), search, status)

    async def create_collection(self, company_id: str, collection_data: CollectionCreate) -> Dict[str, Any]:
        collection = (await self.api.post(
            self._path(company_id), json=collection_data.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(f"Collection registered on invoice {collection_data.invoice_id} for company {company_id}")
        return collection

    async def update_collection(
        self,
        company_id: str,
        collection_id: str,
        collection_data: CollectionUpdate
    ) -> Dict[str, Any]:
        return (await self.api.put(
            self._path(company_id, f"/{collection_id}"), json=collection_data.model_dump(exclude_none=True)
        )).unwrap()

    async def confirm_collection(self, company_id: str, collection_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, f"/{collection_id}/confirm"))).unwrap()

    async def reject_collection(self, company_id: str, collection_id: str, notes: Optional[str] = None) -> Dict[str, Any]:
        return (await self.api.post(
            self._path(company_id, f"/{collection_id}/reject"), json={"notes": notes}
        )).unwrap()
