from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List, Dict, Any
from datetime import date
from enum import Enum


class AnalyticsPeriod(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    CUSTOM = "custom"


PERIOD_LABELS = {
    AnalyticsPeriod.MONTH: "Mes Actual",
    AnalyticsPeriod.QUARTER: "Trimestre",
    AnalyticsPeriod.YEAR: "Año Completo",
    AnalyticsPeriod.CUSTOM: "Personalizado",
}


class AnalyticsFilters(BaseModel):
    period: AnalyticsPeriod = AnalyticsPeriod.MONTH
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def range_error(self) -> Optional[str]:
        """Mensaje si el período personalizado no tiene un rango válido"""
        if self.period != AnalyticsPeriod.CUSTOM:
            return None
        if not self.start_date or not self.end_date:
            return "Seleccione fecha de inicio y fin"
        if self.end_date < self.start_date:
            return "La fecha de fin no puede ser anterior a la de inicio"
        return None

    def params(self) -> Dict[str, Any]:
        if self.period != AnalyticsPeriod.CUSTOM:
            return {"period": self.period.value}
        return {
            "period": self.period.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


class Totals(BaseModel):
    total: Decimal = Decimal("0")
    count: int = 0
    average: Decimal = Decimal("0")


class AnalyticsSummary(BaseModel):
    period: Dict[str, Any] = Field(default_factory=dict)
    sales: Totals = Field(default_factory=Totals)
    purchases: Totals = Field(default_factory=Totals)
    balance: Decimal = Decimal("0")


class PendingCounts(BaseModel):
    to_collect: int = 0
    to_pay: int = 0
    pending_approvals: int = 0


class AnalyticsOverview(BaseModel):
    """
    Resumen, tendencia mensual, mejores clientes y pendientes.

    Cada fuente se carga por separado; si una falla queda vacía y su error
    se informa en `errors`.
    """
    period_label: str
    summary: AnalyticsSummary = Field(default_factory=AnalyticsSummary)
    revenue_trend: List[Dict[str, Any]] = Field(default_factory=list)
    top_clients: List[Dict[str, Any]] = Field(default_factory=list)
    pending: PendingCounts = Field(default_factory=PendingCounts)
    errors: Dict[str, str] = Field(default_factory=dict)
