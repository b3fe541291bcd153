"""
Tests para pagos y cobros
"""

from decimal import Decimal
import asyncio

import pytest

from payto.modules.payments.service import PaymentService, confirmation_list


@pytest.fixture
def network_payments():
    return [
        {"id": "p1", "amount": "1500.50", "status": "pending_confirmation", "reference": "TRF-001"},
        {"id": "p2", "amount": 300, "status": "confirmed", "reference": "TRF-002"},
        {"id": "p3", "amount": "99.50", "status": "pending_confirmation", "reference": "EFT-003",
         "invoice": {"number": "0002-00000010"}},
    ]


class TestConfirmationList:

    def test_pending_totals(self, network_payments):
        result = confirmation_list(network_payments, None, "all")

        assert result.total == 3
        assert result.pending_count == 2
        assert result.pending_amount == Decimal("1600.00")

    def test_search_in_nested_invoice_number(self, network_payments):
        result = confirmation_list(network_payments, "00000010", None)

        assert [item["id"] for item in result.items] == ["p3"]

    def test_status_filter(self, network_payments):
        result = confirmation_list(network_payments, "", "confirmed")

        assert [item["id"] for item in result.items] == ["p2"]
        assert result.pending_count == 0


class TestPaymentService:

    def test_invoice_payments_summary(self, make_api, upstream):
        upstream.add("GET", "/companies/c1/invoices/i1/payments", {"data": {
            "payments": [{"id": 7, "amount": "100.00", "creator": {"name": "Laura"}}],
            "total_paid": "100.00",
            "remaining_amount": "142.00"
        }})

        async def run():
            async with make_api() as api:
                return await PaymentService(api).get_invoice_payments("c1", "i1")

        summary = asyncio.run(run())

        assert summary.payments[0].id == "7"
        assert summary.payments[0].creator_name == "Laura"
        assert summary.remaining_amount == Decimal("142.00")

    def test_missing_totals_default_to_zero(self, make_api, upstream):
        upstream.add("GET", "/companies/c1/invoices/i1/payments", {"data": {"payments": []}})

        async def run():
            async with make_api() as api:
                return await PaymentService(api).get_invoice_payments("c1", "i1")

        summary = asyncio.run(run())

        assert summary.total_paid == Decimal("0")


class TestPaymentEndpoints:

    def test_create_payment_rejects_non_positive_amount(self, client, company_headers, upstream):
        response = client.post("/payments/invoice/i1", headers=company_headers, json={"amount": 0})

        assert response.status_code == 422
        assert upstream.calls == []

    def test_create_payment(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/invoices/i1/payments", {"data": {"id": "p1", "amount": 50}}, status_code=201)

        response = client.post("/payments/invoice/i1", headers=company_headers, json={
            "amount": "50", "payment_method": "transfer", "payment_date": "2024-03-01"
        })

        assert response.status_code == 201
        sent = upstream.body_of(upstream.calls[0])
        assert sent["amount"] == "50"
        assert sent["payment_date"] == "2024-03-01"

    def test_list_collections_forwards_filters(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/collections", {"data": [
            {"id": "k1", "amount": 10, "status": "pending_confirmation"}
        ]})

        response = client.get("/collections/", headers=company_headers, params={
            "status": "pending_confirmation", "from_network": "true"
        })

        assert response.status_code == 200
        assert response.json()["pending_count"] == 1
        params = upstream.calls[0].url.params
        assert params["status"] == "pending_confirmation"
        assert params["from_network"] == "true"

    def test_confirm_and_reject_payment(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/payments/p1/confirm", {"data": {"id": "p1", "status": "confirmed"}})
        upstream.add("POST", "/companies/c1/payments/p2/reject", {"data": {"id": "p2", "status": "rejected"}})

        confirmed = client.post("/payments/p1/confirm", headers=company_headers)
        rejected = client.post("/payments/p2/reject", headers=company_headers, json={"notes": "Monto distinto"})

        assert confirmed.json()["status"] == "confirmed"
        assert rejected.json()["status"] == "rejected"
        assert upstream.body_of(upstream.calls[1]) == {"notes": "Monto distinto"}
