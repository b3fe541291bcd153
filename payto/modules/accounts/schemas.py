from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import date
from enum import Enum

from payto.modules.payments.schemas import PaymentMethod


class PayableStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class BalanceType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


# ===== CUENTAS POR PAGAR =====

class PayableSummary(BaseModel):
    total_payable: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")
    overdue_count: int = 0
    overdue_amount: Decimal = Decimal("0")
    upcoming_count: int = 0
    upcoming_amount: Decimal = Decimal("0")


class PayableDashboard(BaseModel):
    summary: PayableSummary = Field(default_factory=PayableSummary)
    overdue_invoices: List[Dict[str, Any]] = Field(default_factory=list)
    upcoming_invoices: List[Dict[str, Any]] = Field(default_factory=list)
    by_supplier: List[Dict[str, Any]] = Field(default_factory=list)
    recent_payments: List[Dict[str, Any]] = Field(default_factory=list)


class PayableFilters(BaseModel):
    """Filtros que se envían a la API"""
    supplier_id: Optional[str] = None
    payment_status: Optional[PayableStatus] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    overdue: Optional[bool] = None
    search: Optional[str] = None


class SupplierPaymentFilters(BaseModel):
    status: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None


class PagedList(BaseModel):
    data: List[Dict[str, Any]] = Field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1


class Retention(BaseModel):
    type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    rate: Decimal = Field(..., ge=0, le=100, description="Alícuota en %")
    base_amount: Decimal = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)
    certificate_number: Optional[str] = None


class SupplierPaymentCreate(BaseModel):
    invoice_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    payment_date: date = Field(default_factory=date.today)
    payment_method: PaymentMethod = PaymentMethod.TRANSFER
    reference_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    retentions: List[Retention] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_retentions(self):
        if sum((r.amount for r in self.retentions), Decimal("0")) > self.amount:
            raise ValueError('Las retenciones no pueden superar el monto del pago')
        return self

    @property
    def net_amount(self) -> Decimal:
        return self.amount - sum((r.amount for r in self.retentions), Decimal("0"))


class RetentionCalculation(BaseModel):
    retentions: List[Dict[str, Any]] = Field(default_factory=list)
    total_retentions: Decimal = Decimal("0")
    is_retention_agent: bool = False


class PaymentTxtRequest(BaseModel):
    invoice_ids: List[str]

    @field_validator('invoice_ids')
    @classmethod
    def validate_invoice_ids(cls, v):
        if not v:
            raise ValueError('Seleccione al menos una factura')
        return v


# ===== CUENTAS POR COBRAR =====

class BalanceSummary(BaseModel):
    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")
    net_balance_type: BalanceType = BalanceType.DEBIT


class ReceivableBalances(BaseModel):
    """
    Notas de crédito y débito con saldo pendiente.

    `net_balance` es la diferencia entre débitos y créditos en valor absoluto;
    `net_balance_type` es `credit` cuando los créditos son mayores.
    """
    credit_notes: List[Dict[str, Any]] = Field(default_factory=list)
    debit_notes: List[Dict[str, Any]] = Field(default_factory=list)
    summary: BalanceSummary = Field(default_factory=BalanceSummary)
