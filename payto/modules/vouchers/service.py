"""
Servicios para emisión de notas de crédito y débito

Reutiliza el cálculo de totales de facturas. Antes de enviar se valida:
- que el comprobante que lo requiere tenga factura asociada
- que los ítems estén completos
- que el total no supere el saldo disponible de la factura asociada
"""

from fastapi import HTTPException, status
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.common.formatting import format_number_es_ar
from payto.modules.invoices.calculator import TotalsCalculator, validate_items
from payto.modules.vouchers.schemas import VoucherType, VoucherCreate, VoucherResult

logger = logging.getLogger(__name__)


class VoucherService:

    def __init__(self, api: PaytoAPIClient, calculator: Optional[TotalsCalculator] = None):
        self.api = api
        self.calculator = calculator or TotalsCalculator()

    async def get_available_types(self, company_id: str) -> List[VoucherType]:
        data = (await self.api.get(f"/companies/{company_id}/vouchers/types")).unwrap()
        if isinstance(data, dict):
            data = data.get("types") or []
        return [VoucherType(**item) for item in data or []]

    async def get_compatible_invoices(self, company_id: str, voucher_type: str) -> List[Dict[str, Any]]:
        data = (await self.api.get(
            f"/companies/{company_id}/vouchers/compatible-invoices",
            params={"voucher_type": voucher_type}
        )).unwrap()
        if isinstance(data, dict):
            data = data.get("invoices") or []
        return data or []

    async def get_available_balance(self, company_id: str, invoice_id: str) -> Decimal:
        data = (await self.api.get(
            f"/companies/{company_id}/invoices/{invoice_id}/available-balance"
        )).unwrap() or {}
        return Decimal(str(data.get("available_balance", 0)))

    async def create_voucher(
        self,
        company_id: str,
        voucher_data: VoucherCreate,
        requires_association: bool = True
    ) -> VoucherResult:
        if requires_association and not voucher_data.related_invoice_id:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Seleccione la factura a asociar"
            )

        error = validate_items(voucher_data.items)
        if error:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error)

        available_balance = None
        if voucher_data.related_invoice_id:
            available_balance = await self.get_available_balance(company_id, voucher_data.related_invoice_id)

        totals = self.calculator.calculate_invoice_totals(
            voucher_data.items,
            voucher_data.perceptions,
            available_balance=available_balance,
            currency=voucher_data.currency.value
        )
        if totals.exceeds_available_balance:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"El monto no puede exceder el saldo disponible (${format_number_es_ar(available_balance)})"
            )

        payload = voucher_data.model_dump(exclude_none=True)
        payload["items"] = [
            {**item.model_dump(exclude_none=True), "tax_rate": self.calculator.effective_rate(item)}
            for item in voucher_data.items
        ]
        voucher = (await self.api.post(f"/companies/{company_id}/vouchers", json=payload)).unwrap() or {}

        afip_status = voucher.get("afip_status")
        if afip_status == "error":
            message = "Comprobante creado pero con error en AFIP"
            logger.warning(f"Voucher {voucher.get('id')} AFIP error: {voucher.get('afip_error_message')}")
        else:
            message = "Comprobante emitido exitosamente"

        return VoucherResult(voucher=voucher, totals=totals, afip_status=afip_status, message=message)
