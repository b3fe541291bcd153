from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import date
from enum import Enum


class PaymentMethod(str, Enum):
    TRANSFER = "transfer"
    CASH = "cash"
    CHECK = "check"
    CARD = "card"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    MERCADOPAGO = "mercadopago"
    OTHER = "other"


class ConfirmationStatus(str, Enum):
    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


# Payment Schemas
class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    payment_date: date = Field(default_factory=date.today)
    payment_method: PaymentMethod = PaymentMethod.TRANSFER
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError('El monto debe ser mayor a 0')
        return v


class PaymentOut(BaseModel):
    id: str
    invoice_id: Optional[str] = None
    amount: Decimal
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    creator_name: Optional[str] = None

    @field_validator('id', 'invoice_id', 'created_by', mode='before')
    @classmethod
    def to_str(cls, v):
        return None if v is None else str(v)


class PaymentSummary(BaseModel):
    payments: List[PaymentOut]
    total_paid: Decimal
    remaining_amount: Decimal


class RejectRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)


# Collection Schemas
class CollectionCreate(BaseModel):
    invoice_id: str
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    collection_date: date = Field(default_factory=date.today)
    collection_method: PaymentMethod = PaymentMethod.TRANSFER
    reference_number: Optional[str] = Field(None, max_length=100)
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[ConfirmationStatus] = None
    from_network: Optional[bool] = None


class CollectionUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    collection_date: Optional[date] = None
    collection_method: Optional[PaymentMethod] = None
    reference_number: Optional[str] = Field(None, max_length=100)
    attachment_url: Optional[str] = None
    notes: Optional[str] = None


class ConfirmationList(BaseModel):
    """Pagos o cobros con el total pendiente de confirmar"""
    items: List[Dict[str, Any]]
    total: int
    pending_count: int
    pending_amount: Decimal
