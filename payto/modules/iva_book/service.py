"""
Servicio del Libro IVA

- Libros de ventas y compras de un mes, con totales por columna y
  agrupación por alícuota
- Resumen del período: débito fiscal, crédito fiscal y saldo con AFIP
- Exportación TXT (REGINFO_CV) de cada libro

Solo disponible para empresas Responsables Inscriptas.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
import asyncio
import logging

from fastapi import HTTPException, status

from payto.api.client import PaytoAPIClient
from payto.common.formatting import format_currency, month_name, round_money, to_decimal
from payto.modules.invoices.calculator import TotalsCalculator, EXEMPT_RATE, tax_rate_label
from payto.modules.invoices.schemas import LineTotals
from payto.modules.iva_book.schemas import (
    BookType, IvaBook, IvaBookPeriod, IvaBookSummary, IvaBookOverview, IvaBookExport
)

logger = logging.getLogger(__name__)

REGISTERED_TAXPAYER = "registered_taxpayer"
NOT_AVAILABLE_MESSAGE = "El Libro IVA solo está disponible para Responsables Inscriptos"

# Columna de IVA -> alícuota
IVA_COLUMNS = {
    "iva_21": Decimal("21"),
    "iva_105": Decimal("10.5"),
    "iva_27": Decimal("27"),
    "iva_5": Decimal("5"),
    "iva_25": Decimal("2.5"),
}

AMOUNT_COLUMNS = {
    BookType.SALES: ["neto_gravado", *IVA_COLUMNS, "exento", "percepciones", "total"],
    BookType.PURCHASES: ["neto_gravado", *IVA_COLUMNS, "exento", "retenciones", "total"],
}

EXPORT_NAMES = {BookType.SALES: "VENTAS", BookType.PURCHASES: "COMPRAS"}

ZERO = Decimal("0")


def _amount(record: Dict[str, Any], column: str) -> Decimal:
    value = record.get(column)
    return to_decimal(value) if value not in (None, "") else ZERO


def column_totals(records: List[Dict[str, Any]], book_type: BookType) -> Dict[str, Decimal]:
    return {
        column: sum((_amount(record, column) for record in records), ZERO)
        for column in AMOUNT_COLUMNS[book_type]
    }


def record_lines(records: List[Dict[str, Any]]) -> List[LineTotals]:
    """
    Un renglón por cada columna con importe: la base de cada alícuota se
    deduce del IVA, lo exento va como alícuota Exento.
    """
    lines = []
    for record in records:
        for column, rate in IVA_COLUMNS.items():
            tax = _amount(record, column)
            if not tax:
                continue
            base = round_money(tax * 100 / rate)
            lines.append(LineTotals(
                index=len(lines),
                tax_rate=rate,
                tax_label=tax_rate_label(rate),
                line_subtotal=base,
                line_tax=tax,
                line_total=base + tax
            ))
        exempt = _amount(record, "exento")
        if exempt:
            lines.append(LineTotals(
                index=len(lines),
                tax_rate=EXEMPT_RATE,
                tax_label=tax_rate_label(EXEMPT_RATE),
                line_subtotal=exempt,
                line_tax=ZERO,
                line_total=exempt
            ))
    return lines


def build_summary(data: Optional[Dict[str, Any]], sales: IvaBook, purchases: IvaBook) -> IvaBookSummary:
    """Saldo positivo = a pagar a AFIP; negativo = a favor del contribuyente"""
    data = data if isinstance(data, dict) else {}
    debito = _amount(data, "debito_fiscal") if "debito_fiscal" in data else _vat(sales)
    credito = _amount(data, "credito_fiscal") if "credito_fiscal" in data else _vat(purchases)
    saldo = _amount(data, "saldo") if "saldo" in data else debito - credito
    return IvaBookSummary(
        debito_fiscal=debito,
        credito_fiscal=credito,
        saldo=saldo,
        saldo_label="Saldo a Pagar" if saldo >= 0 else "Saldo a Favor",
        saldo_formatted=format_currency(abs(saldo))
    )


def _vat(book: IvaBook) -> Decimal:
    return sum((book.totals.get(column, ZERO) for column in IVA_COLUMNS), ZERO)


def resolve_period(month: Optional[int], year: Optional[int], today: Optional[date] = None) -> IvaBookPeriod:
    today = today or date.today()
    month = month or today.month
    year = year or today.year
    return IvaBookPeriod(month=month, year=year, month_name=month_name(month))


class IvaBookService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api
        self.calculator = TotalsCalculator()

    def _path(self, company_id: str, suffix: str) -> str:
        return f"/companies/{company_id}/iva-book{suffix}"

    async def ensure_available(self, company_id: str) -> None:
        company = (await self.api.get(f"/companies/{company_id}")).unwrap() or {}
        tax_condition = company.get("tax_condition") or company.get("taxCondition")
        if tax_condition != REGISTERED_TAXPAYER:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_AVAILABLE_MESSAGE)

    def build_book(self, data: Any, book_type: BookType, period: IvaBookPeriod) -> IvaBook:
        if isinstance(data, dict):
            records = data.get("records") or []
            totals = data.get("totals")
        else:
            records, totals = data or [], None
        computed = column_totals(records, book_type)
        if totals:
            computed.update({column: _amount(totals, column) for column in totals if column in computed})
        return IvaBook(
            type=book_type,
            period=period,
            records=records,
            totals=computed,
            by_rate=self.calculator.group_by_rate(record_lines(records))
        )

    async def get_overview(
        self,
        company_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> IvaBookOverview:
        """Ventas, compras y resumen del mes, pedidos en paralelo"""
        await self.ensure_available(company_id)
        period = resolve_period(month, year)
        params = {"month": period.month, "year": period.year}

        sales, purchases, summary = await asyncio.gather(
            self.api.get(self._path(company_id, "/sales"), params=params),
            self.api.get(self._path(company_id, "/purchases"), params=params),
            self.api.get(self._path(company_id, "/summary"), params=params),
        )
        sales_book = self.build_book(sales.unwrap(), BookType.SALES, period)
        purchases_book = self.build_book(purchases.unwrap(), BookType.PURCHASES, period)

        return IvaBookOverview(
            period=period,
            sales=sales_book,
            purchases=purchases_book,
            summary=build_summary(summary.unwrap(), sales_book, purchases_book)
        )

    async def export_txt(
        self,
        company_id: str,
        book_type: BookType,
        month: Optional[int] = None,
        year: Optional[int] = None
    ) -> IvaBookExport:
        await self.ensure_available(company_id)
        period = resolve_period(month, year)
        result = await self.api.get(
            self._path(company_id, f"/export/{book_type.value}"),
            params={"month": period.month, "year": period.year},
            raw=True
        )
        content = result.unwrap()
        logger.info(f"IVA book {book_type.value} exported for company {company_id} ({period.month}/{period.year})")
        return IvaBookExport(
            filename=f"REGINFO_CV_{EXPORT_NAMES[book_type]}_{period.year}_{period.month}.txt",
            content=content,
            content_type=result.meta.get("content_type")
        )

