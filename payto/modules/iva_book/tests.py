"""
Tests para el Libro IVA
"""

from datetime import date
from decimal import Decimal

import pytest

from payto.modules.iva_book.schemas import BookType
from payto.modules.iva_book.service import IvaBookService, record_lines, resolve_period


SALES = [
    {"fecha": "2024-03-01", "tipo": "FA", "punto_venta": 1, "numero": 15, "cliente": "Globex SRL",
     "cuit": "30712345671", "neto_gravado": "1000", "iva_21": "210", "total": "1210"},
    {"fecha": "2024-03-04", "tipo": "FA", "punto_venta": 1, "numero": 16, "cliente": "Initech SA",
     "cuit": "30698765432", "neto_gravado": "200", "iva_105": "21", "exento": "50", "total": "271"},
]

PURCHASES = [
    {"fecha": "2024-03-10", "tipo": "FA", "proveedor": "Papelera Sur", "neto_gravado": "200", "iva_21": "42",
     "retenciones": "5", "total": "242"},
]


def registered_company(upstream, tax_condition="registered_taxpayer"):
    upstream.add("GET", "/companies/c1", {"data": {"id": "c1", "tax_condition": tax_condition}})


class TestIvaBookCalculations:

    def test_period_defaults_to_current_month(self):
        period = resolve_period(None, None, today=date(2024, 3, 15))
        assert (period.month, period.year, period.month_name) == (3, 2024, "Marzo")

    def test_lines_derive_base_from_vat_column(self):
        lines = record_lines(SALES)

        assert [line.tax_rate for line in lines] == [Decimal("21"), Decimal("10.5"), Decimal("-1")]
        assert lines[1].line_subtotal == Decimal("200.00")
        assert lines[2].line_tax == Decimal("0")

    def test_upstream_totals_win_over_computed(self, make_api):
        service = IvaBookService(make_api())
        period = resolve_period(3, 2024)

        book = service.build_book(
            {"records": SALES, "totals": {"total": "1500", "unknown": "1"}}, BookType.SALES, period
        )

        assert book.totals["total"] == Decimal("1500")
        assert book.totals["iva_21"] == Decimal("210")
        assert "unknown" not in book.totals

    def test_by_rate_groups_records(self, make_api):
        book = IvaBookService(make_api()).build_book(SALES + SALES, BookType.SALES, resolve_period(3, 2024))

        assert [group.label for group in book.by_rate] == ["21%", "10.5%", "Exento"]
        assert book.by_rate[0].tax_amount == Decimal("420")
        assert book.by_rate[2].base_amount == Decimal("100")


class TestIvaBookEndpoints:

    def test_overview_with_computed_summary(self, client, company_headers, upstream):
        registered_company(upstream)
        upstream.add("GET", "/companies/c1/iva-book/sales", {"data": {"records": SALES}})
        upstream.add("GET", "/companies/c1/iva-book/purchases", {"data": {"records": PURCHASES}})
        upstream.add("GET", "/companies/c1/iva-book/summary", {"data": {}})

        response = client.get("/iva-book/", headers=company_headers, params={"month": 3, "year": 2024})

        data = response.json()
        assert response.status_code == 200
        assert data["period"] == {"month": 3, "year": 2024, "month_name": "Marzo"}
        assert Decimal(str(data["sales"]["totals"]["total"])) == Decimal("1481")
        assert Decimal(str(data["purchases"]["totals"]["retenciones"])) == Decimal("5")
        assert Decimal(str(data["summary"]["debito_fiscal"])) == Decimal("231")
        assert Decimal(str(data["summary"]["credito_fiscal"])) == Decimal("42")
        assert data["summary"]["saldo_label"] == "Saldo a Pagar"
        assert data["summary"]["saldo_formatted"] == "$189.00"
        sales_call = upstream.calls_to("GET", "/companies/c1/iva-book/sales")[0]
        assert sales_call.url.params["month"] == "3"
        assert sales_call.url.params["year"] == "2024"

    def test_balance_in_favor(self, client, company_headers, upstream):
        registered_company(upstream)
        upstream.add("GET", "/companies/c1/iva-book/sales", {"data": {"records": []}})
        upstream.add("GET", "/companies/c1/iva-book/purchases", {"data": {"records": PURCHASES}})
        upstream.add("GET", "/companies/c1/iva-book/summary", {"data": {
            "debito_fiscal": 0, "credito_fiscal": 42, "saldo": -42
        }})

        data = client.get("/iva-book/", headers=company_headers, params={"month": 3, "year": 2024}).json()

        assert data["summary"]["saldo_label"] == "Saldo a Favor"
        assert data["summary"]["saldo_formatted"] == "$42.00"

    def test_only_for_registered_taxpayers(self, client, company_headers, upstream):
        registered_company(upstream, tax_condition="monotax")

        response = client.get("/iva-book/", headers=company_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "El Libro IVA solo está disponible para Responsables Inscriptos"
        assert upstream.calls_to("GET", "/companies/c1/iva-book/sales") == []

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, client, company_headers, month):
        response = client.get("/iva-book/", headers=company_headers, params={"month": month})
        assert response.status_code == 422

    def test_failed_book_is_reported(self, client, company_headers, upstream):
        registered_company(upstream)
        upstream.add("GET", "/companies/c1/iva-book/sales", {"message": "Server Error"}, status_code=500)
        upstream.add("GET", "/companies/c1/iva-book/purchases", {"data": {"records": []}})
        upstream.add("GET", "/companies/c1/iva-book/summary", {"data": {}})

        response = client.get("/iva-book/", headers=company_headers, params={"month": 3, "year": 2024})

        assert response.status_code == 502
        assert response.json()["detail"] == "Error del servidor"

    def test_export_sales_txt(self, client, company_headers, upstream):
        registered_company(upstream)
        upstream.add(
            "GET", "/companies/c1/iva-book/export/sales",
            content=b"20240301001000010000000000000015", headers={"content-type": "text/plain"}
        )

        response = client.get("/iva-book/export/sales", headers=company_headers, params={"month": 3, "year": 2024})

        assert response.status_code == 200
        assert response.content == b"20240301001000010000000000000015"
        assert 'filename="REGINFO_CV_VENTAS_2024_3.txt"' in response.headers["content-disposition"]

    def test_export_unknown_book(self, client, company_headers):
        response = client.get("/iva-book/export/inventory", headers=company_headers)
        assert response.status_code == 422
