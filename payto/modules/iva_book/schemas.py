from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List, Dict, Any
from enum import Enum

from payto.modules.invoices.schemas import RateTotals


class BookType(str, Enum):
    SALES = "sales"
    PURCHASES = "purchases"


class IvaBookPeriod(BaseModel):
    month: int
    year: int
    month_name: str


class IvaBook(BaseModel):
    """
    Libro IVA de ventas o compras de un período.

    `totals` suma cada columna de importes de los registros; `by_rate`
    agrupa base imponible e IVA por alícuota (Exento con alícuota -1).
    """
    type: BookType
    period: IvaBookPeriod
    records: List[Dict[str, Any]] = Field(default_factory=list)
    totals: Dict[str, Decimal] = Field(default_factory=dict)
    by_rate: List[RateTotals] = Field(default_factory=list)


class IvaBookSummary(BaseModel):
    debito_fiscal: Decimal = Decimal("0")
    credito_fiscal: Decimal = Decimal("0")
    saldo: Decimal = Decimal("0")
    saldo_label: str
    saldo_formatted: str


class IvaBookOverview(BaseModel):
    period: IvaBookPeriod
    sales: IvaBook
    purchases: IvaBook
    summary: IvaBookSummary


class IvaBookExport(BaseModel):
    filename: str
    content: bytes
    content_type: Optional[str] = None
