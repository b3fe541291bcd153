"""
Servicio de estadísticas

Resumen de ventas y compras, tendencia mensual, mejores clientes y
pendientes, cargados en paralelo con aislamiento de errores por fuente.
El reporte CSV se arma con las mismas fuentes.
"""

from datetime import date
from typing import Any, Dict, List
import asyncio
import logging

from fastapi import HTTPException, status

from payto.api.client import PaytoAPIClient, ApiResult
from payto.common.csv_export import build_csv
from payto.modules.analytics.schemas import (
    AnalyticsFilters, AnalyticsOverview, AnalyticsSummary, PendingCounts, PERIOD_LABELS
)

logger = logging.getLogger(__name__)

SUMMARY_CSV_COLUMNS = {"concept": "Concepto", "total": "Monto", "count": "Cantidad"}
TREND_CSV_COLUMNS = {"month": "Mes", "sales": "Ventas", "purchases": "Compras"}
CLIENTS_CSV_COLUMNS = {"client_name": "Cliente", "total_amount": "Monto Total", "invoice_count": "Cantidad Facturas"}


def _as_list(result: ApiResult) -> List[Dict[str, Any]]:
    data = result.data
    if isinstance(data, dict):
        data = data.get("data") or []
    return data or []


class AnalyticsService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str) -> str:
        return f"/companies/{company_id}/analytics{suffix}"

    async def get_overview(self, company_id: str, filters: AnalyticsFilters) -> AnalyticsOverview:
        message = filters.range_error()
        if message:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message)

        params = filters.params()
        summary, trend, clients, pending = await asyncio.gather(
            self.api.get(self._path(company_id, "/summary"), params=params),
            self.api.get(self._path(company_id, "/revenue-trend"), params=params),
            self.api.get(self._path(company_id, "/top-clients"), params=params),
            self.api.get(self._path(company_id, "/pending-invoices")),
        )

        errors: Dict[str, str] = {}
        for source, result in (
            ("summary", summary),
            ("revenue_trend", trend),
            ("top_clients", clients),
            ("pending", pending),
        ):
            if not result.ok:
                errors[source] = result.error.message
                logger.warning(f"Analytics for company {company_id}: {source} failed")

        return AnalyticsOverview(
            period_label=PERIOD_LABELS[filters.period],
            summary=AnalyticsSummary(**(summary.data or {})) if summary.ok else AnalyticsSummary(),
            revenue_trend=_as_list(trend) if trend.ok else [],
            top_clients=_as_list(clients) if clients.ok else [],
            pending=PendingCounts(**(pending.data or {})) if pending.ok else PendingCounts(),
            errors=errors
        )

    async def export_csv(self, company_id: str, filters: AnalyticsFilters) -> str:
        """Reporte con resumen, tendencia y mejores clientes; falla si falta alguna fuente"""
        overview = await self.get_overview(company_id, filters)
        if overview.errors:
            source = sorted(overview.errors)[0]
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=overview.errors[source])

        summary = overview.summary
        sections = [
            ("RESUMEN FINANCIERO", build_csv([
                {"concept": "Ventas", "total": summary.sales.total, "count": summary.sales.count},
                {"concept": "Compras", "total": summary.purchases.total, "count": summary.purchases.count},
                {"concept": "Balance", "total": summary.balance, "count": "-"},
            ], SUMMARY_CSV_COLUMNS)),
            ("TENDENCIA MENSUAL", build_csv(overview.revenue_trend, TREND_CSV_COLUMNS)),
            ("TOP CLIENTES", build_csv(overview.top_clients, CLIENTS_CSV_COLUMNS)),
        ]
        header = f"Periodo,{overview.period_label}\r\nGenerado,{date.today().isoformat()}\r\n"
        return header + "".join(f"\r\n{title}\r\n{content}" for title, content in sections)
