"""
Tests para el módulo de Clientes y Proveedores

Tests que cubren:
- Validaciones del formulario (Consumidor Final, CUIT, CBU)
- Fábrica de formularios por tipo de entidad
- Listado con búsqueda y filtro por condición fiscal
- Alta con errores por campo, sin llamar a la API
"""

import pytest
from fastapi import HTTPException

from payto.modules.contacts.forms import (
    ClientForm, SupplierForm, EntityFormFactory, build_form_factory
)
from payto.modules.contacts.schemas import EntityData, EntityKind, TaxCondition


# ===== FIXTURES =====

@pytest.fixture
def company_client_data():
    """Cliente Responsable Inscripto con CUIT válido"""
    return {
        "document_type": "CUIT",
        "document_number": "30-71234567-1",
        "business_name": "Acme SA",
        "email": "compras@acme.com.ar",
        "address": "Av. Corrientes 1234",
        "tax_condition": "registered_taxpayer"
    }


@pytest.fixture
def final_consumer_data():
    return {
        "document_type": "DNI",
        "document_number": "12345678",
        "first_name": "Ana",
        "last_name": "Acosta",
        "tax_condition": "final_consumer"
    }


def fields(errors):
    return [error.field for error in errors]


# ===== TESTS DE VALIDACIONES =====

class TestEntityFormValidation:

    def test_valid_company_client(self, company_client_data):
        assert ClientForm().validate(EntityData(**company_client_data)) == []

    def test_final_consumer_requires_name_and_dni(self):
        errors = ClientForm().validate(EntityData(tax_condition=TaxCondition.FINAL_CONSUMER))

        assert fields(errors) == ["first_name", "document_number"]
        assert errors[1].message == "El DNI es obligatorio para Consumidor Final"

    def test_final_consumer_short_dni(self, final_consumer_data):
        final_consumer_data["document_number"] = "123456"

        errors = ClientForm().validate(EntityData(**final_consumer_data))

        assert errors[0].message == "El DNI debe tener al menos 7 dígitos"

    def test_client_defaults_to_final_consumer(self, final_consumer_data):
        final_consumer_data.pop("tax_condition")
        data = EntityData(**final_consumer_data)

        assert ClientForm().validate(data) == []
        assert ClientForm().to_payload(data)["tax_condition"] == "final_consumer"

    def test_supplier_defaults_to_registered_taxpayer(self, final_consumer_data):
        final_consumer_data.pop("tax_condition")

        errors = SupplierForm().validate(EntityData(**final_consumer_data))

        assert "business_name" in fields(errors)
        assert "address" in fields(errors)

    def test_invalid_cuit_check_digit(self, company_client_data):
        company_client_data["document_number"] = "30-71234567-2"

        errors = ClientForm().validate(EntityData(**company_client_data))

        assert errors[0].message == "El CUIT no es válido"

    def test_cuit_length(self, company_client_data):
        company_client_data["document_number"] = "3071234"

        errors = ClientForm().validate(EntityData(**company_client_data))

        assert errors[0].message == "El CUIT debe tener 11 dígitos"

    def test_non_final_consumer_must_use_cuit(self, company_client_data):
        company_client_data["document_type"] = "DNI"

        errors = ClientForm().validate(EntityData(**company_client_data))

        assert errors[0].message == "Debe usar CUIT"

    def test_email_and_phone(self, company_client_data):
        company_client_data.update(email="no-es-email", phone="1234")

        errors = ClientForm().validate(EntityData(**company_client_data))

        assert fields(errors) == ["email", "phone"]

    def test_supplier_bank_fields(self, company_client_data):
        company_client_data["bank_cbu"] = "123"
        data = EntityData(**company_client_data)

        assert fields(SupplierForm().validate(data)) == ["bank_cbu"]
        assert ClientForm().validate(data) == []

    def test_final_consumer_payload_drops_address(self, final_consumer_data):
        final_consumer_data["address"] = "Calle Falsa 123"

        payload = ClientForm().to_payload(EntityData(**final_consumer_data))

        assert "address" not in payload

    def test_supplier_payload_includes_bank_fields(self, company_client_data):
        company_client_data.update(bank_cbu="0" * 22, bank_account_type="CA")

        payload = SupplierForm().to_payload(EntityData(**company_client_data))
        client_payload = ClientForm().to_payload(EntityData(**company_client_data))

        assert payload["bank_cbu"] == "0" * 22
        assert payload["bank_account_type"] == "CA"
        assert "bank_cbu" not in client_payload


class TestEntityFormFactory:

    def test_creates_form_per_kind(self):
        factory = build_form_factory()

        assert isinstance(factory.create(EntityKind.CLIENT), ClientForm)
        assert isinstance(factory.create("supplier"), SupplierForm)
        assert factory.kinds() == [EntityKind.CLIENT, EntityKind.SUPPLIER]

    def test_unknown_kind(self):
        with pytest.raises(HTTPException) as exc_info:
            build_form_factory().create("employee")

        assert exc_info.value.status_code == 400

    def test_unregistered_kind(self):
        factory = EntityFormFactory()
        factory.register(EntityKind.CLIENT, ClientForm)

        with pytest.raises(HTTPException):
            factory.create(EntityKind.SUPPLIER)


# ===== TESTS DE ENDPOINTS =====

class TestContactEndpoints:

    def test_list_with_search_and_tax_condition(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/clients", {"data": [
            {"id": "1", "business_name": "Acme SA", "document_number": "30712345671", "tax_condition": "registered_taxpayer"},
            {"id": "2", "first_name": "Ana", "last_name": "Acosta", "document_number": "12345678", "tax_condition": "final_consumer"},
        ]})

        everything = client.get("/clients/", headers=company_headers, params={"search": "", "tax_condition": "all"})
        by_name = client.get("/clients/", headers=company_headers, params={"search": "ana ACO"})
        by_condition = client.get("/clients/", headers=company_headers, params={"tax_condition": "registered_taxpayer"})
        nothing = client.get("/clients/", headers=company_headers, params={"search": "zzz"})

        assert everything.json()["total"] == 2
        assert [item["id"] for item in by_name.json()["items"]] == ["2"]
        assert by_name.json()["items"][0]["display_name"] == "Ana Acosta"
        assert by_name.json()["items"][0]["tax_condition_label"] == "Consumidor Final"
        assert [item["id"] for item in by_condition.json()["items"]] == ["1"]
        assert nothing.json() == {"items": [], "total": 0}

    def test_create_with_errors_does_not_call_api(self, client, company_headers, upstream):
        response = client.post("/suppliers/", headers=company_headers, json={"business_name": "Proveedor SRL"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert {"field": "document_number", "message": "CUIT es obligatorio"} in detail
        assert upstream.calls == []

    def test_create_publishes_refresh(self, client, company_headers, upstream, company_client_data):
        upstream.add("POST", "/companies/c1/clients", {"data": {"id": "10"}})
        received = []
        unsubscribe = client.app.state.refresh_bus.subscribe("contacts.changed", lambda **p: received.append(p))
        try:
            response = client.post("/clients/", headers=company_headers, json=company_client_data)
        finally:
            unsubscribe()

        assert response.status_code == 201
        assert received == [{"company_id": "c1", "kind": "client"}]
        assert upstream.body_of(upstream.calls[0])["tax_condition"] == "registered_taxpayer"

    def test_validate_endpoint(self, client, company_headers, upstream):
        response = client.post("/clients/validate", headers=company_headers, json={"tax_condition": "final_consumer"})

        assert response.status_code == 200
        assert response.json()["valid"] is False
        assert upstream.calls == []

    def test_archive_and_restore(self, client, company_headers, upstream):
        upstream.add("DELETE", "/companies/c1/suppliers/5", status_code=204)
        upstream.add("POST", "/companies/c1/suppliers/5/restore", {"data": {"id": "5"}})

        assert client.delete("/suppliers/5", headers=company_headers).status_code == 204
        assert client.post("/suppliers/5/restore", headers=company_headers).json() == {"id": "5"}
