"""
Tests para cuentas por pagar y por cobrar
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from payto.modules.accounts.schemas import SupplierPaymentCreate, Retention, BalanceType
from payto.modules.accounts.service import balance_summary


def retention(amount):
    return Retention(type="ganancias", name="Retención Ganancias", rate=Decimal("2"),
                     base_amount=Decimal("1000"), amount=Decimal(amount))


class TestSupplierPaymentValidation:

    def test_net_amount_discounts_retentions(self):
        payment = SupplierPaymentCreate(invoice_id="i1", amount=Decimal("1000"),
                                        retentions=[retention("20"), retention("30")])
        assert payment.net_amount == Decimal("950")

    def test_retentions_cannot_exceed_amount(self):
        with pytest.raises(ValidationError, match="Las retenciones no pueden superar el monto del pago"):
            SupplierPaymentCreate(invoice_id="i1", amount=Decimal("10"), retentions=[retention("20")])

    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            SupplierPaymentCreate(invoice_id="i1", amount=Decimal("0"))


class TestBalanceSummary:

    def test_debits_greater_than_credits(self):
        summary = balance_summary([{"pending_amount": "100"}], [{"pending_amount": "250.50"}])

        assert summary.net_balance == Decimal("150.50")
        assert summary.net_balance_type == BalanceType.DEBIT

    def test_credits_greater_than_debits(self):
        summary = balance_summary([{"pending_amount": "300"}, {"pending_amount": None}], [])

        assert summary.total_credits == Decimal("300")
        assert summary.net_balance == Decimal("300")
        assert summary.net_balance_type == BalanceType.CREDIT


class TestAccountsPayableEndpoints:

    def test_dashboard(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-payable/dashboard", {"data": {
            "summary": {"total_payable": "5000", "total_pending": "3000", "overdue_count": 1, "overdue_amount": "1200"},
            "overdue_invoices": [{"id": "i1", "supplier": "Papelera Sur", "due_date": "2024-02-10",
                                  "days_overdue": 12, "pending_amount": "1200"}],
            "upcoming_invoices": [],
        }})

        response = client.get("/accounts-payable/dashboard", headers=company_headers)

        data = response.json()
        assert response.status_code == 200
        assert data["summary"]["overdue_count"] == 1
        assert Decimal(str(data["summary"]["total_paid"])) == Decimal("0")
        assert data["overdue_invoices"][0]["due_date_formatted"] == "10/02/2024"
        assert data["by_supplier"] == []

    def test_invoices_with_filters(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-payable/invoices", {
            "data": [{"id": "i1", "due_date": "2024-03-20"}],
            "pagination": {"lastPage": 3}
        })

        response = client.get("/accounts-payable/invoices", headers=company_headers, params={
            "supplier_id": "s1", "payment_status": "partial", "overdue": "true", "page": 2
        })

        data = response.json()
        assert data["current_page"] == 2
        assert data["total_pages"] == 3
        assert data["data"][0]["due_date_formatted"] == "20/03/2024"
        params = upstream.calls[0].url.params
        assert params["supplier_id"] == "s1"
        assert params["payment_status"] == "partial"
        assert params["overdue"] == "true"
        assert params["page"] == "2"

    def test_invoices_unknown_status(self, client, company_headers):
        response = client.get("/accounts-payable/invoices", headers=company_headers,
                              params={"payment_status": "forgotten"})
        assert response.status_code == 422

    def test_register_payment_with_retentions(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/supplier-payments", {"data": {"id": "sp1", "net_paid": "980"}},
                     status_code=201)
        events = []
        unsubscribe = client.app.state.refresh_bus.subscribe("invoices.changed", lambda **p: events.append(p))
        try:
            response = client.post("/accounts-payable/payments", headers=company_headers, json={
                "invoice_id": "i1", "amount": "1000", "payment_date": "2024-03-15",
                "retentions": [{"type": "ganancias", "name": "Retención Ganancias", "rate": "2",
                                "base_amount": "1000", "amount": "20"}]
            })
        finally:
            unsubscribe()

        assert response.status_code == 201
        assert response.json()["id"] == "sp1"
        sent = upstream.body_of(upstream.calls[0])
        assert sent["amount"] == "1000"
        assert sent["retentions"][0]["amount"] == "20"
        assert events == [{"company_id": "c1"}]

    def test_register_payment_rejects_excess_retentions(self, client, company_headers, upstream):
        response = client.post("/accounts-payable/payments", headers=company_headers, json={
            "invoice_id": "i1", "amount": "10",
            "retentions": [{"type": "iva", "name": "Retención IVA", "rate": "50", "base_amount": "40", "amount": "20"}]
        })

        assert response.status_code == 422
        assert "Las retenciones no pueden superar el monto del pago" in response.text
        assert upstream.calls == []

    def test_calculate_retentions_totals_when_missing(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/supplier-payments/invoices/i1/calculate-retentions", {"data": {
            "retentions": [{"type": "ganancias", "amount": "20"}, {"type": "iibb_bsas", "amount": "15.5"}],
            "is_retention_agent": True
        }})

        data = client.get("/accounts-payable/payments/invoices/i1/retentions", headers=company_headers).json()

        assert Decimal(str(data["total_retentions"])) == Decimal("35.5")
        assert data["is_retention_agent"] is True

    def test_confirm_payment(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/supplier-payments/sp1/confirm", {"data": {"id": "sp1", "status": "confirmed"}})

        response = client.post("/accounts-payable/payments/sp1/confirm", headers=company_headers)

        assert response.json()["status"] == "confirmed"

    def test_payments_list(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/supplier-payments", {"data": [{"id": "sp1"}]})

        response = client.get("/accounts-payable/payments", headers=company_headers, params={"status": "pending"})

        assert response.json() == {"data": [{"id": "sp1"}], "current_page": 1, "total_pages": 1}
        assert upstream.calls[0].url.params["status"] == "pending"

    def test_generate_txt(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/accounts-payable/generate-txt",
                     content=b"0000001;CBU;1000.00\n", headers={"content-type": "text/plain"})

        response = client.post("/accounts-payable/generate-txt", headers=company_headers,
                               json={"invoice_ids": ["i1", "i2"]})

        assert response.status_code == 200
        assert response.content == b"0000001;CBU;1000.00\n"
        assert upstream.body_of(upstream.calls[0]) == {"invoice_ids": ["i1", "i2"]}

    def test_generate_txt_needs_invoices(self, client, company_headers, upstream):
        response = client.post("/accounts-payable/generate-txt", headers=company_headers, json={"invoice_ids": []})

        assert response.status_code == 422
        assert "Seleccione al menos una factura" in response.text
        assert upstream.calls == []

    def test_default_retentions_when_not_agent(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-payable/default-retentions", {"data": {}})

        response = client.get("/accounts-payable/default-retentions", headers=company_headers)

        assert response.json() == {"is_retention_agent": False, "auto_retentions": []}

    def test_supplier_summary_not_found(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-payable/suppliers/s9", {"message": "Proveedor no encontrado"},
                     status_code=404)

        response = client.get("/accounts-payable/suppliers/s9", headers=company_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Proveedor no encontrado"


class TestAccountsReceivableEndpoints:

    def test_balances_summary_computed(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-receivable/balances", {"data": {
            "credit_notes": [{"id": "nc1", "pending_amount": "400"}],
            "debit_notes": [{"id": "nd1", "pending_amount": "100"}],
        }})

        data = client.get("/accounts-receivable/balances", headers=company_headers).json()

        assert Decimal(str(data["summary"]["net_balance"])) == Decimal("300")
        assert data["summary"]["net_balance_type"] == "credit"

    def test_balances_summary_from_api(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/accounts-receivable/balances", {"data": {
            "credit_notes": [], "debit_notes": [],
            "summary": {"total_credits": 0, "total_debits": 50, "net_balance": 50, "net_balance_type": "debit"}
        }})

        data = client.get("/accounts-receivable/balances", headers=company_headers).json()

        assert data["summary"]["net_balance_type"] == "debit"
        assert Decimal(str(data["summary"]["total_debits"])) == Decimal("50")
