"""
Tests para notas de crédito y débito
"""

from decimal import Decimal

import pytest


@pytest.fixture
def voucher_payload():
    return {
        "voucher_type": "NCA",
        "related_invoice_id": "i1",
        "items": [{"description": "Devolución", "quantity": 1, "unit_price": 100, "tax_rate": 21}]
    }


class TestVoucherEndpoints:

    def test_requires_related_invoice(self, client, company_headers, upstream, voucher_payload):
        voucher_payload.pop("related_invoice_id")

        response = client.post("/vouchers/", headers=company_headers, json=voucher_payload)

        assert response.status_code == 422
        assert response.json()["detail"] == "Seleccione la factura a asociar"
        assert upstream.calls == []

    def test_incomplete_items(self, client, company_headers, upstream, voucher_payload):
        voucher_payload["items"][0]["unit_price"] = 0

        response = client.post("/vouchers/", headers=company_headers, json=voucher_payload)

        assert response.status_code == 422
        assert response.json()["detail"] == "Complete todos los ítems correctamente"
        assert upstream.calls == []

    def test_total_cannot_exceed_available_balance(self, client, company_headers, upstream, voucher_payload):
        upstream.add("GET", "/companies/c1/invoices/i1/available-balance", {"data": {"available_balance": 100}})

        response = client.post("/vouchers/", headers=company_headers, json=voucher_payload)

        assert response.status_code == 422
        assert response.json()["detail"] == "El monto no puede exceder el saldo disponible ($100,00)"
        assert upstream.calls_to("POST", "/companies/c1/vouchers") == []

    def test_voucher_issued(self, client, company_headers, upstream, voucher_payload):
        upstream.add("GET", "/companies/c1/invoices/i1/available-balance", {"available_balance": "500.00"})
        upstream.add("POST", "/companies/c1/vouchers", {"data": {"id": "v1", "afip_status": "approved"}})

        response = client.post("/vouchers/", headers=company_headers, json=voucher_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Comprobante emitido exitosamente"
        assert Decimal(str(data["totals"]["total"])) == Decimal("121")

    def test_voucher_with_afip_error(self, client, company_headers, upstream, voucher_payload):
        upstream.add("GET", "/companies/c1/invoices/i1/available-balance", {"available_balance": 500})
        upstream.add("POST", "/companies/c1/vouchers", {"id": "v1", "afip_status": "error", "afip_error_message": "CAE rechazado"})

        response = client.post("/vouchers/", headers=company_headers, json=voucher_payload)

        assert response.status_code == 201
        assert response.json()["message"] == "Comprobante creado pero con error en AFIP"

    def test_list_types_and_compatible_invoices(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/vouchers/types", {"data": [
            {"code": "NCA", "name": "Nota de Crédito A", "requires_association": True, "compatible_with": ["A"]}
        ]})
        upstream.add("GET", "/companies/c1/vouchers/compatible-invoices", {"data": {"invoices": [{"id": "i1"}]}})

        types = client.get("/vouchers/types", headers=company_headers)
        invoices = client.get("/vouchers/compatible-invoices", headers=company_headers, params={"voucher_type": "NCA"})

        assert types.json()[0]["code"] == "NCA"
        assert invoices.json() == {"invoices": [{"id": "i1"}]}
        assert upstream.calls[-1].url.params["voucher_type"] == "NCA"
