from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import date
from enum import Enum


class InvoiceType(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    E = "E"


class Currency(str, Enum):
    ARS = "ARS"
    USD = "USD"
    EUR = "EUR"


class PerceptionType(str, Enum):
    IVA = "percepcion_iva"
    IIBB = "percepcion_iibb"
    SUSS = "percepcion_suss"


# Line Item Schemas
class LineItem(BaseModel):
    """
    Ítem de factura o comprobante.

    Cantidad y precio no se validan acá: los totales se recalculan con
    ítems incompletos mientras se edita; la validación es al enviar.
    """
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    tax_rate: Optional[Decimal] = Field(None, description="Alícuota IVA en %; -1 Exento, -2 No Gravado")
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)


class Perception(BaseModel):
    type: PerceptionType = PerceptionType.IIBB
    name: str = "Percepción IIBB"
    rate: Decimal = Field(..., ge=0, le=100, description="Alícuota en %")
    jurisdiction: Optional[str] = None


# Totals Schemas
class TotalsRequest(BaseModel):
    items: List[LineItem] = Field(default_factory=list)
    perceptions: List[Perception] = Field(default_factory=list)
    currency: Currency = Currency.ARS
    available_balance: Optional[Decimal] = Field(None, description="Saldo disponible de la factura asociada")


class LineTotals(BaseModel):
    """Subtotal, IVA y total de un ítem"""
    index: int
    tax_rate: Decimal
    tax_label: str
    line_subtotal: Decimal
    line_tax: Decimal
    line_total: Decimal


class RateTotals(BaseModel):
    """Base imponible e IVA agrupados por alícuota"""
    tax_rate: Decimal
    label: str
    base_amount: Decimal
    tax_amount: Decimal


class PerceptionAmount(BaseModel):
    type: PerceptionType
    name: str
    rate: Decimal
    base_amount: Decimal
    amount: Decimal


class InvoiceTotals(BaseModel):
    """Totales calculados de la factura"""
    subtotal: Decimal
    total_taxes: Decimal
    total_perceptions: Decimal
    total: Decimal
    lines: List[LineTotals] = Field(default_factory=list)
    by_rate: List[RateTotals] = Field(default_factory=list)
    perceptions: List[PerceptionAmount] = Field(default_factory=list)
    exceeds_available_balance: bool = False
    formatted: Dict[str, str] = Field(default_factory=dict)


class TaxRateOption(BaseModel):
    value: Decimal
    label: str


# Invoice Schemas
class InvoiceCreate(BaseModel):
    client_id: Optional[str] = None
    supplier_id: Optional[str] = None
    receiver_company_id: Optional[str] = None
    invoice_type: InvoiceType = InvoiceType.B
    sales_point: int = Field(1, ge=1)
    issue_date: date = Field(default_factory=date.today)
    due_date: Optional[date] = None
    currency: Currency = Currency.ARS
    exchange_rate: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    items: List[LineItem] = Field(default_factory=list)
    perceptions: List[Perception] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_dates_and_currency(self):
        if self.due_date and self.issue_date and self.due_date < self.issue_date:
            raise ValueError('La fecha de vencimiento no puede ser anterior a la fecha de emisión')
        if self.currency != Currency.ARS and not self.exchange_rate:
            raise ValueError('Ingrese la cotización de la moneda')
        return self


class InvoiceUpdate(BaseModel):
    due_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[LineItem]] = None


class InvoiceFilters(BaseModel):
    """Filtros para el listado de facturas"""
    search: Optional[str] = Field(None, description="Buscar en número o receptor")
    status: Optional[str] = "all"
    type: Optional[str] = "all"


# Approval Schemas
class ApprovalResponse(BaseModel):
    """Respuesta del backend al aprobar una factura"""
    id: str
    status: Optional[str] = None
    approvals_received: int = 0
    approvals_required: int = 1

    @field_validator('approvals_received', mode='before')
    @classmethod
    def parse_received(cls, v):
        return 0 if v is None else int(v)

    @field_validator('approvals_required', mode='before')
    @classmethod
    def parse_required(cls, v):
        return 1 if v is None else int(v)


class ApprovalRequest(BaseModel):
    notes: Optional[str] = None
    pending: List[Dict[str, Any]] = Field(default_factory=list, description="Lista pendiente que se está mostrando")


class RejectionRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
    pending: List[Dict[str, Any]] = Field(default_factory=list, description="Lista pendiente que se está mostrando")


class PendingApprovalsResult(BaseModel):
    invoice: Optional[Dict[str, Any]] = None
    pending: List[Dict[str, Any]]
    fully_approved: bool = False


class BulkDeleteRequest(BaseModel):
    invoice_ids: List[str] = Field(..., min_length=1)
