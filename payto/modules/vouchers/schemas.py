from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import date

from payto.modules.invoices.schemas import Currency, LineItem, Perception, InvoiceTotals


class VoucherType(BaseModel):
    code: str
    name: str
    category: Optional[str] = None
    requires_association: bool = False
    compatible_with: List[str] = Field(default_factory=list)


class VoucherCreate(BaseModel):
    """Nota de crédito o débito asociada a una factura"""
    voucher_type: str = Field(..., min_length=1, description="Código del comprobante (NCA, NDB, ...)")
    related_invoice_id: Optional[str] = None
    client_id: Optional[str] = None
    sales_point: int = Field(1, ge=1)
    issue_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    currency: Currency = Currency.ARS
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    items: List[LineItem] = Field(default_factory=list)
    perceptions: List[Perception] = Field(default_factory=list)


class VoucherResult(BaseModel):
    voucher: Dict[str, Any]
    totals: InvoiceTotals
    afip_status: Optional[str] = None
    message: str
