"""
Tests para el módulo de Facturas

- Cálculo de totales (IVA por ítem, Exento/No Gravado, percepciones)
- Validación de ítems antes de enviar
- Combinación de aprobaciones/rechazos con la lista pendiente
- Endpoints de listado, emisión, aprobación y eliminación masiva
"""

from decimal import Decimal

import httpx
import pytest

from payto.modules.invoices.approvals import merge_approval, merge_rejection, is_fully_approved
from payto.modules.invoices.calculator import (
    TotalsCalculator, validate_items, tax_rate_label, get_standard_argentine_rates,
    EXEMPT_RATE, NOT_TAXED_RATE, ITEMS_INCOMPLETE_MESSAGE
)
from payto.modules.invoices.schemas import (
    LineItem, Perception, PerceptionType, ApprovalResponse, InvoiceCreate, Currency
)


# ===== FIXTURES =====

@pytest.fixture
def calculator():
    return TotalsCalculator(default_tax_rate=Decimal("21"))


@pytest.fixture
def pending_invoices():
    return [
        {"id": "i1", "number": "0001-00000001", "approvals_received": 0, "approvals_required": 2},
        {"id": "i2", "number": "0001-00000002", "approvals_received": 0, "approvals_required": 1},
    ]


def item(quantity="1", price="100", rate="21", description="Servicio"):
    return LineItem(
        description=description,
        quantity=Decimal(quantity),
        unit_price=Decimal(price),
        tax_rate=Decimal(rate) if rate is not None else None
    )


# ===== TESTS DE TOTALES =====

class TestTotalsCalculator:
    """Tests para el cálculo de totales"""

    def test_single_item_totals(self, calculator):
        totals = calculator.calculate_invoice_totals([item("2", "100", "21")])

        assert totals.subtotal == Decimal("200")
        assert totals.total_taxes == Decimal("42")
        assert totals.total == Decimal("242")
        assert totals.formatted["total"] == "$242.00"

    def test_total_is_sum_of_parts(self, calculator):
        items = [item("3", "19.99", "10.5"), item("1", "0.01", "27"), item("7", "3.33", "21")]
        perceptions = [Perception(rate=Decimal("1.5")), Perception(type=PerceptionType.IVA, name="Percepción IVA", rate=Decimal("3"))]

        totals = calculator.calculate_invoice_totals(items, perceptions)

        assert totals.total == totals.subtotal + totals.total_taxes + totals.total_perceptions

    def test_tax_per_line(self, calculator):
        lines = calculator.calculate_lines([item("4", "12.50", "10.5")])

        assert lines[0].line_tax == Decimal("4") * Decimal("12.50") * Decimal("10.5") / Decimal("100")

    @pytest.mark.parametrize("rate", [EXEMPT_RATE, NOT_TAXED_RATE])
    def test_exempt_and_not_taxed_have_no_tax(self, calculator, rate):
        totals = calculator.calculate_invoice_totals([item("2", "100", str(rate))])

        assert totals.total_taxes == Decimal("0")
        assert totals.total == Decimal("200")
        assert totals.lines[0].tax_label in ("Exento", "No Gravado")

    def test_default_rate_when_item_has_none(self, calculator):
        totals = calculator.calculate_invoice_totals([item("1", "100", None)])

        assert totals.lines[0].tax_rate == Decimal("21")
        assert totals.total_taxes == Decimal("21")

    def test_discount_reduces_line_subtotal(self, calculator):
        discounted = LineItem(
            description="Producto", quantity=Decimal("1"), unit_price=Decimal("200"),
            tax_rate=Decimal("21"), discount_percentage=Decimal("10")
        )
        totals = calculator.calculate_invoice_totals([discounted])

        assert totals.subtotal == Decimal("180")
        assert totals.total_taxes == Decimal("37.8")

    def test_perception_on_subtotal_plus_taxes(self, calculator):
        totals = calculator.calculate_invoice_totals(
            [item("2", "100", "21")],
            [Perception(type=PerceptionType.IIBB, name="Percepción IIBB", rate=Decimal("3"))]
        )

        assert totals.perceptions[0].base_amount == Decimal("242")
        assert totals.total_perceptions == Decimal("7.26")
        assert totals.total == Decimal("249.26")

    def test_perceptions_order_independent(self, calculator):
        items = [item("2", "100", "21")]
        first = Perception(rate=Decimal("3"))
        second = Perception(type=PerceptionType.SUSS, name="Percepción SUSS", rate=Decimal("2"))

        forward = calculator.calculate_invoice_totals(items, [first, second])
        backward = calculator.calculate_invoice_totals(items, [second, first])

        assert forward.total_perceptions == backward.total_perceptions
        assert forward.total == backward.total

    def test_group_by_rate_keeps_first_appearance_order(self, calculator):
        totals = calculator.calculate_invoice_totals([
            item("1", "100", "10.5"), item("1", "50", "21"), item("1", "100", "10.5")
        ])

        assert [group.tax_rate for group in totals.by_rate] == [Decimal("10.5"), Decimal("21")]
        assert totals.by_rate[0].base_amount == Decimal("200")

    def test_exceeds_available_balance(self, calculator):
        totals = calculator.calculate_invoice_totals([item("2", "100", "21")], available_balance=Decimal("200"))
        assert totals.exceeds_available_balance is True

        totals = calculator.calculate_invoice_totals([item("2", "100", "21")], available_balance=Decimal("242"))
        assert totals.exceeds_available_balance is False

    def test_empty_items(self, calculator):
        totals = calculator.calculate_invoice_totals([])

        assert totals.total == Decimal("0")
        assert totals.lines == []

    def test_tax_rate_labels(self):
        assert tax_rate_label(Decimal("10.5")) == "10.5%"
        assert tax_rate_label(Decimal("21.00")) == "21%"
        labels = [option.label for option in get_standard_argentine_rates()]
        assert labels[-2:] == ["Exento", "No Gravado"]


# ===== TESTS DE VALIDACIÓN DE ÍTEMS =====

class TestItemValidation:

    @pytest.mark.parametrize("bad_item", [
        LineItem(description="", quantity=Decimal("1"), unit_price=Decimal("10")),
        LineItem(description="   ", quantity=Decimal("1"), unit_price=Decimal("10")),
        LineItem(description="Servicio", quantity=Decimal("0"), unit_price=Decimal("10")),
        LineItem(description="Servicio", quantity=Decimal("1"), unit_price=Decimal("0")),
        LineItem(description="Servicio", quantity=Decimal("-1"), unit_price=Decimal("10")),
    ])
    def test_incomplete_item_blocks_submit(self, bad_item):
        assert validate_items([item(), bad_item]) == ITEMS_INCOMPLETE_MESSAGE

    def test_no_items_blocks_submit(self):
        assert validate_items([]) == ITEMS_INCOMPLETE_MESSAGE

    def test_complete_items(self):
        assert validate_items([item(), item("3", "9.99", "-1")]) is None

    def test_foreign_currency_requires_exchange_rate(self):
        with pytest.raises(ValueError):
            InvoiceCreate(currency=Currency.USD, items=[item()])

        invoice = InvoiceCreate(currency=Currency.USD, exchange_rate=Decimal("980.5"), items=[item()])
        assert invoice.exchange_rate == Decimal("980.5")


# ===== TESTS DE APROBACIONES =====

class TestApprovalMerge:

    def test_fully_approved_leaves_list(self, pending_invoices):
        response = ApprovalResponse(id="i2", approvals_received=1, approvals_required=1)

        merged = merge_approval(pending_invoices, response)

        assert [invoice["id"] for invoice in merged] == ["i1"]

    def test_partial_approval_updates_count(self, pending_invoices):
        response = ApprovalResponse(id="i1", approvals_received=1, approvals_required=2)

        merged = merge_approval(pending_invoices, response)

        assert [invoice["id"] for invoice in merged] == ["i1", "i2"]
        assert merged[0]["approvals_received"] == 1

    def test_merge_does_not_mutate_input(self, pending_invoices):
        response = ApprovalResponse(id="i1", approvals_received=1, approvals_required=2)

        merge_approval(pending_invoices, response)
        merge_rejection(pending_invoices, "i1")

        assert pending_invoices[0]["approvals_received"] == 0
        assert len(pending_invoices) == 2

    def test_missing_counts_default(self):
        response = ApprovalResponse(id="i1", approvals_received=None, approvals_required=None)

        assert response.approvals_received == 0
        assert response.approvals_required == 1
        assert is_fully_approved(response) is False

    def test_rejection_removes_invoice(self, pending_invoices):
        assert [invoice["id"] for invoice in merge_rejection(pending_invoices, "i1")] == ["i2"]


# ===== TESTS DE ENDPOINTS =====

class TestInvoiceEndpoints:
    """Tests de integración para los endpoints de facturas"""

    def test_totals_endpoint(self, client, company_headers, upstream):
        response = client.post("/invoices/totals", headers=company_headers, json={
            "items": [{"description": "Servicio", "quantity": 2, "unit_price": 100, "tax_rate": 21}],
            "perceptions": [{"type": "percepcion_iibb", "name": "IIBB", "rate": 3}]
        })

        assert response.status_code == 200
        data = response.json()
        assert Decimal(str(data["subtotal"])) == Decimal("200")
        assert Decimal(str(data["total_taxes"])) == Decimal("42")
        assert Decimal(str(data["total_perceptions"])) == Decimal("7.26")
        assert Decimal(str(data["total"])) == Decimal("249.26")
        assert upstream.calls == []

    def test_list_invoices_walks_all_pages(self, client, company_headers, upstream):
        pages = {
            "1": {"data": [
                {"id": "i1", "number": "0001-00000001", "status": "issued", "type": "A",
                 "client": {"business_name": "Acme SA"}},
                {"id": "i2", "number": "0001-00000002", "status": "pending_approval", "type": "B",
                 "client": {"business_name": "Globex SRL"}},
            ], "last_page": 2},
            "2": {"data": [
                {"id": "i3", "number": "0001-00000003", "status": "issued", "type": "B",
                 "client": {"first_name": "Ana", "last_name": "Acosta"}},
            ], "last_page": 2},
        }
        upstream.add_handler(
            "GET", "/companies/c1/invoices",
            lambda request: httpx.Response(200, json=pages[request.url.params["page"]])
        )

        response = client.get("/invoices/", headers=company_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 3
        assert len(upstream.calls) == 2

        response = client.get("/invoices/", headers=company_headers, params={"search": "acme", "status": "all"})
        assert [invoice["id"] for invoice in response.json()["invoices"]] == ["i1"]

        response = client.get("/invoices/", headers=company_headers, params={"status": "issued", "type": "B"})
        invoices = response.json()["invoices"]
        assert [invoice["id"] for invoice in invoices] == ["i3"]
        assert invoices[0]["status_label"] == "Emitida"

    def test_list_invoices_reports_upstream_failure(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/invoices", {"message": "Server Error"}, status_code=500)

        response = client.get("/invoices/", headers=company_headers)

        assert response.status_code == 502
        assert response.json() == {"detail": "Error del servidor"}

    def test_list_invoices_failure_on_later_page_is_not_a_short_list(self, client, company_headers, upstream):
        def pages(request):
            if request.url.params["page"] == "1":
                return httpx.Response(200, json={"data": [{"id": "i1", "due_date": "05/03/2024"}], "last_page": 2})
            return httpx.Response(503, json={"message": "Servicio en mantenimiento"})

        upstream.add_handler("GET", "/companies/c1/invoices", pages)

        response = client.get("/invoices/", headers=company_headers)

        assert response.status_code == 502
        assert response.json()["detail"] == "Servicio en mantenimiento"

    def test_list_invoices_with_unreadable_due_date(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/invoices", {"data": [
            {"id": "i1", "status": "issued", "issue_date": "2024-03-01", "due_date": "05/03/2024"},
        ], "last_page": 1})

        response = client.get("/invoices/", headers=company_headers)

        assert response.status_code == 200
        invoice = response.json()["invoices"][0]
        assert invoice["is_overdue"] is False
        assert invoice["issue_date_formatted"] == "01/03/2024"
        assert invoice["due_date_formatted"] == "05/03/2024"

    def test_create_invoice_with_incomplete_items_is_blocked(self, client, company_headers, upstream):
        response = client.post("/invoices/", headers=company_headers, json={
            "client_id": "cl1",
            "items": [{"description": "", "quantity": 1, "unit_price": 10}]
        })

        assert response.status_code == 422
        assert response.json()["detail"] == ITEMS_INCOMPLETE_MESSAGE
        assert upstream.calls == []

    def test_create_invoice_publishes_refresh(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/invoices", {"success": True, "data": {"id": "i9"}})
        received = []
        unsubscribe = client.app.state.refresh_bus.subscribe("invoices.changed", lambda **p: received.append(p))
        try:
            response = client.post("/invoices/", headers=company_headers, json={
                "client_id": "cl1",
                "items": [{"description": "Servicio", "quantity": 2, "unit_price": 100}]
            })
        finally:
            unsubscribe()

        assert response.status_code == 201
        assert response.json()["invoice"] == {"id": "i9"}
        assert received == [{"company_id": "c1"}]
        sent = upstream.body_of(upstream.calls_to("POST", "/companies/c1/invoices")[0])
        assert Decimal(sent["items"][0]["tax_rate"]) == Decimal("21")
        assert sent["items"][0]["unit_price"] == "100"

    def test_upstream_validation_message_is_surfaced(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/invoices", {"message": "El punto de venta no existe"}, status_code=422)

        response = client.post("/invoices/", headers=company_headers, json={
            "items": [{"description": "Servicio", "quantity": 1, "unit_price": 100}]
        })

        assert response.status_code == 422
        assert response.json()["detail"] == "El punto de venta no existe"

    def test_approve_keeps_partially_approved_invoice(self, client, company_headers, upstream, pending_invoices):
        upstream.add("POST", "/companies/c1/invoices/i1/approve", {
            "data": {"id": "i1", "status": "pending_approval", "approvals_received": 1, "approvals_required": 2}
        })

        response = client.post("/invoices/i1/approve", headers=company_headers, json={"pending": pending_invoices})

        assert response.status_code == 200
        data = response.json()
        assert data["fully_approved"] is False
        assert data["pending"][0]["approvals_received"] == 1
        assert len(data["pending"]) == 2

    def test_reject_removes_invoice(self, client, company_headers, upstream, pending_invoices):
        upstream.add("POST", "/companies/c1/invoices/i2/reject", {"data": {"id": "i2", "status": "rejected"}})

        response = client.post("/invoices/i2/reject", headers=company_headers, json={
            "reason": "Monto incorrecto", "pending": pending_invoices
        })

        assert response.status_code == 200
        assert [invoice["id"] for invoice in response.json()["pending"]] == ["i1"]
        assert upstream.body_of(upstream.calls[0]) == {"reason": "Monto incorrecto"}

    def test_bulk_delete_reports_single_generic_error(self, client, company_headers, upstream):
        upstream.add("DELETE", "/companies/c1/invoices/i1", status_code=204)
        upstream.add("DELETE", "/companies/c1/invoices/i2", {"message": "No se puede eliminar"}, status_code=409)

        response = client.post("/invoices/bulk-delete", headers=company_headers, json={"invoice_ids": ["i1", "i2"]})

        assert response.status_code == 409
        assert response.json()["detail"] == "Error al eliminar las facturas"
        assert len(upstream.calls) == 2

    def test_missing_company_header(self, client, auth_headers):
        response = client.get("/invoices/", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Falta el header X-Company-ID"
