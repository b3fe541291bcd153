"""
Tests para validadores, formato, filtros y catálogo de errores
"""

from datetime import date
from decimal import Decimal

import pytest

from payto.common.errors import ErrorLog, ErrorCode, code_for_status, friendly_message, translate_message
from payto.common.filters import filter_items, matches_search, full_name
from payto.common.formatting import (
    format_currency, format_number_es_ar, format_date, round_money,
    invoice_status_label, is_overdue, translate_tax_condition, translate_role,
    parse_date, month_name
)
from payto.common.validators import (
    validate_cuit, validate_dni, validate_cbu, validate_invoice_number, validate_email,
    format_cuit, format_invoice_number, format_phone, max_length_for_document_type
)


# ===== VALIDADORES =====

class TestValidators:

    @pytest.mark.parametrize("cuit", ["20-12345678-6", "30712345671", "30 71234567 1"])
    def test_valid_cuit(self, cuit):
        assert validate_cuit(cuit)

    @pytest.mark.parametrize("cuit", ["20-12345678-5", "2012345678", "", "abc"])
    def test_invalid_cuit(self, cuit):
        assert not validate_cuit(cuit)

    def test_other_documents(self):
        assert validate_dni("1.234.567")
        assert not validate_dni("123456")
        assert validate_cbu("0" * 22)
        assert not validate_cbu("0" * 21)
        assert validate_invoice_number("0001-00000123")
        assert not validate_invoice_number("0001-12")
        assert validate_email("ventas@acme.com.ar")
        assert not validate_email("ventas@acme")

    def test_formatters(self):
        assert format_cuit("20123456786") == "20-12345678-6"
        assert format_cuit("201") == "20-1"
        assert format_invoice_number("000100000123") == "0001-00000123"
        assert format_phone("11 4567 8901") == "+54 11 4567-8901"
        assert format_phone("+54 11 4567 8901") == "+54 11 4567-8901"
        assert max_length_for_document_type("CUIT") == 11
        assert max_length_for_document_type("DNI") == 8


# ===== FORMATO =====

class TestFormatting:

    def test_currency(self):
        assert format_currency(Decimal("242")) == "$242.00"
        assert format_currency(Decimal("1234567.891"), "USD") == "US$1,234,567.89"
        assert format_currency(Decimal("-5.5")) == "-$5.50"

    def test_rounding_half_up(self):
        assert round_money(Decimal("7.265")) == Decimal("7.27")
        assert round_money("0.005") == Decimal("0.01")

    def test_es_ar_number(self):
        assert format_number_es_ar(Decimal("1234.5")) == "1.234,50"

    def test_date(self):
        assert format_date("2024-03-05") == "05/03/2024"
        assert format_date(date(2024, 12, 31)) == "31/12/2024"
        assert format_date(None) == ""

    def test_unreadable_date_is_shown_as_received(self):
        assert parse_date("05/03/2024") is None
        assert format_date("05/03/2024") == "05/03/2024"
        assert parse_date("2024-03-05T10:30:00Z") == date(2024, 3, 5)

    def test_month_name(self):
        assert month_name(1) == "Enero"
        assert month_name(12) == "Diciembre"

    def test_labels(self):
        assert translate_tax_condition("monotax") == "Monotributo"
        assert translate_tax_condition("otra") == "otra"
        assert translate_role("financial_director") == "Director Financiero"

    def test_status_label(self):
        assert invoice_status_label({"status": "issued"}) == "Emitida"
        assert invoice_status_label({"status": "issued", "payment_status": "paid"}) == "Cobrada"
        assert invoice_status_label({"status": "issued", "payment_status": "paid"}, is_receiver=True) == "Pagada"
        assert invoice_status_label({"status": "cancelled"}) == "Anulada"
        assert invoice_status_label({"status": "unknown"}) is None

    def test_credit_note_shows_related_invoice_status(self):
        credit_note = {
            "type": "NCA", "status": "issued", "related_invoice_id": "i1",
            "related_invoice": {"status": "cancelled"}
        }
        assert invoice_status_label(credit_note) == "Anulada"

    def test_overdue(self):
        today = date(2024, 6, 15)
        assert is_overdue({"due_date": "2024-06-01", "status": "issued"}, today)
        assert not is_overdue({"due_date": "2024-06-01", "payment_status": "paid"}, today)
        assert not is_overdue({"due_date": "2024-07-01"}, today)
        assert not is_overdue({"status": "issued"}, today)
        assert not is_overdue({"due_date": "pronto", "status": "issued"}, today)


# ===== FILTROS =====

class TestFilters:

    @pytest.fixture
    def items(self):
        return [
            {"id": 1, "number": "0001-00000001", "status": "issued", "client": {"name": "Acme SA"}},
            {"id": 2, "number": "0001-00000002", "status": "pending_approval", "client": {"name": "Globex"}},
        ]

    def test_empty_search_and_all_returns_everything(self, items):
        assert filter_items(items, "", ["number"], {"status": "all"}) == items
        assert filter_items(items, None, ["number"], {"status": None}) == items

    def test_non_matching_term(self, items):
        assert filter_items(items, "zzz", ["number", "client.name"]) == []

    def test_case_insensitive_nested_search(self, items):
        assert [item["id"] for item in filter_items(items, "ACME", ["client.name"])] == [1]

    def test_categorical_filter(self, items):
        assert [item["id"] for item in filter_items(items, "", ["number"], {"status": "pending_approval"})] == [2]

    def test_callable_field(self):
        person = {"first_name": "Ana", "last_name": "Acosta"}
        assert matches_search(person, "ana acosta", [full_name])
        assert full_name({"first_name": "Ana"}) == "Ana"


# ===== ERRORES =====

class TestErrors:

    def test_status_codes(self):
        assert code_for_status(401) == ErrorCode.AUTHENTICATION_ERROR
        assert code_for_status(422) == ErrorCode.VALIDATION_ERROR
        assert code_for_status(503) == ErrorCode.MAINTENANCE_MODE
        assert code_for_status(None) == ErrorCode.NETWORK_ERROR

    def test_messages(self):
        assert translate_message("Unauthenticated.") == "No autenticado"
        assert translate_message("Mensaje propio") == "Mensaje propio"
        assert friendly_message("NOT_FOUND") == "Recurso no encontrado"
        assert friendly_message("OTRO") == "Ocurrió un error inesperado"

    def test_error_log_keeps_last_entries(self):
        log = ErrorLog(max_entries=3)
        for code in ["NOT_FOUND", "NOT_FOUND", "CONFLICT", "SERVER_ERROR"]:
            log.record(code, "error")

        assert len(log) == 3
        assert log.stats() == {"NOT_FOUND": 1, "CONFLICT": 1, "SERVER_ERROR": 1}
        assert [entry.code for entry in log.recent(2)] == ["CONFLICT", "SERVER_ERROR"]
        assert log.recent(0) == []

        log.clear()
        assert len(log) == 0


# ===== MIDDLEWARE =====

class TestMiddleware:

    def test_company_header_is_required(self, client, auth_headers):
        response = client.get("/members/", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"detail": "Falta el header X-Company-ID"}

    def test_company_header_is_echoed(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/members", {"data": []})

        response = client.get("/members/", headers=company_headers)

        assert response.headers["X-Company-ID"] == "c1"
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_exempt_paths(self, client):
        assert client.get("/health").status_code == 200
        assert client.get("/").json()["message"] == "PayTo API is running"

    def test_errors_are_recorded(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/invoices/i1", {"message": "Not Found"}, status_code=404)

        client.get("/invoices/i1", headers=company_headers)

        assert client.get("/health").json()["errors"] == {"NOT_FOUND": 1}
