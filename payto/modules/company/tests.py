"""
Tests para el módulo de Empresas

- Validaciones del alta (CUIT, código de eliminación, invitación)
- Selector de empresas con cache invalidada por el bus de refresco
"""

from decimal import Decimal

import httpx
import pytest
from pydantic import ValidationError

from payto.modules.company.cache import CompanyListCache
from payto.modules.company.schemas import CompanyCreate, JoinCompany, PerceptionConfig, AutoPerception


# ===== FIXTURES =====

@pytest.fixture
def company_data():
    return {
        "name": "Acme SA",
        "national_id": "30-71234567-1",
        "tax_condition": "registered_taxpayer",
        "deletion_code": "Borrar#2024",
        "street": "Av. Corrientes",
        "street_number": "1234",
        "postal_code": "C1043",
        "province": "CABA"
    }


# ===== TESTS DE VALIDACIONES =====

class TestCompanyValidation:

    def test_valid_company(self, company_data):
        company = CompanyCreate(**company_data)

        assert company.national_id == "30712345671"

    @pytest.mark.parametrize("national_id, message", [
        ("3071234567", "El CUIT/CUIL debe tener 11 dígitos"),
        ("30-71234567-2", "El CUIT/CUIL no es válido"),
    ])
    def test_invalid_national_id(self, company_data, national_id, message):
        company_data["national_id"] = national_id

        with pytest.raises(ValidationError) as exc_info:
            CompanyCreate(**company_data)

        assert message in str(exc_info.value)

    @pytest.mark.parametrize("code, message", [
        ("Ab1#", "El código debe tener al menos 8 caracteres"),
        ("borrar#2024", "El código debe incluir mayúsculas, minúsculas, números y caracteres especiales"),
        ("BorrarEmpresa", "El código debe incluir mayúsculas, minúsculas, números y caracteres especiales"),
    ])
    def test_weak_deletion_code(self, company_data, code, message):
        company_data["deletion_code"] = code

        with pytest.raises(ValidationError) as exc_info:
            CompanyCreate(**company_data)

        assert message in str(exc_info.value)

    def test_deletion_code_confirmation(self, company_data):
        company_data["confirm_deletion_code"] = "Otro#2024"

        with pytest.raises(ValidationError) as exc_info:
            CompanyCreate(**company_data)

        assert "Los códigos de eliminación no coinciden" in str(exc_info.value)

    def test_empty_invite_code(self):
        with pytest.raises(ValidationError) as exc_info:
            JoinCompany(invite_code="   ")

        assert "Ingresa un código de invitación" in str(exc_info.value)


class TestCompanyListCache:

    def test_cached_per_token(self):
        cache = CompanyListCache()
        cache.set("token-a", [{"id": "c1"}])

        assert cache.get("token-a") == [{"id": "c1"}]
        assert cache.get("token-b") is None

    def test_invalidate(self):
        cache = CompanyListCache()
        cache.set("token-a", [{"id": "c1"}])

        cache.invalidate(company_id="c1")

        assert len(cache) == 0

    def test_entries_expire(self):
        now = [1000.0]
        cache = CompanyListCache(ttl_seconds=60, clock=lambda: now[0])
        cache.set("token-a", [{"id": "c1"}])

        now[0] += 59
        assert cache.get("token-a") == [{"id": "c1"}]

        now[0] += 1
        assert cache.get("token-a") is None
        assert len(cache) == 0

    def test_oldest_tokens_are_dropped_over_the_limit(self):
        cache = CompanyListCache(max_entries=2)
        for token in ["token-a", "token-b", "token-c"]:
            cache.set(token, [])

        assert len(cache) == 2
        assert cache.get("token-a") is None
        assert cache.get("token-c") == []

    def test_setting_again_refreshes_position(self):
        cache = CompanyListCache(max_entries=2)
        cache.set("token-a", [])
        cache.set("token-b", [])
        cache.set("token-a", [{"id": "c1"}])
        cache.set("token-c", [])

        assert cache.get("token-a") == [{"id": "c1"}]
        assert cache.get("token-b") is None


# ===== TESTS DE ENDPOINTS =====

class TestCompanyEndpoints:

    def test_list_does_not_need_company_header(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies", {"success": True, "data": [{"id": "c1", "name": "Acme SA", "national_id": "30712345671"}]})

        response = client.get("/companies/", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["companies"][0]["national_id_formatted"] == "30-71234567-1"

    def test_list_is_cached_until_companies_change(self, client, auth_headers, upstream, company_data):
        upstream.add("GET", "/companies", {"data": [{"id": "c1"}]})
        upstream.add("POST", "/companies/join", {"data": {"id": "c2"}})

        client.get("/companies/", headers=auth_headers)
        client.get("/companies/", headers=auth_headers)
        assert len(upstream.calls_to("GET", "/companies")) == 1

        response = client.post("/companies/join", headers=auth_headers, json={"invite_code": "ABC123"})
        assert response.status_code == 200

        client.get("/companies/", headers=auth_headers)
        assert len(upstream.calls_to("GET", "/companies")) == 2

    def test_list_picks_up_changes_from_other_sessions_after_expiry(self, client, auth_headers, upstream, monkeypatch):
        now = [0.0]
        cache = client.app.state.company_cache
        monkeypatch.setattr(cache, "_clock", lambda: now[0])
        companies = [{"id": "c1"}]
        upstream.add_handler("GET", "/companies", lambda request: httpx.Response(200, json={"data": list(companies)}))

        assert client.get("/companies/", headers=auth_headers).json()["total"] == 1

        companies.append({"id": "c2"})
        assert client.get("/companies/", headers=auth_headers).json()["total"] == 1

        now[0] += cache.ttl_seconds
        response = client.get("/companies/", headers=auth_headers)

        assert [company["id"] for company in response.json()["companies"]] == ["c1", "c2"]
        assert len(upstream.calls_to("GET", "/companies")) == 2

    def test_create_company(self, client, auth_headers, upstream, company_data):
        upstream.add("POST", "/companies", {"success": True, "data": {"id": "c9", "name": "Acme SA"}}, status_code=201)
        received = []
        unsubscribe = client.app.state.refresh_bus.subscribe("companies.changed", lambda **p: received.append(p))
        try:
            response = client.post("/companies/", headers=auth_headers, json=company_data)
        finally:
            unsubscribe()

        assert response.status_code == 201
        assert received == [{"company_id": "c9"}]
        sent = upstream.body_of(upstream.calls[0])
        assert sent["national_id"] == "30712345671"
        assert "confirm_deletion_code" not in sent

    def test_create_company_invalid_does_not_call_api(self, client, auth_headers, upstream, company_data):
        company_data["deletion_code"] = "simple"

        response = client.post("/companies/", headers=auth_headers, json=company_data)

        assert response.status_code == 422
        assert upstream.calls == []

    def test_delete_company_sends_code(self, client, auth_headers, upstream):
        upstream.add("DELETE", "/companies/c1", status_code=204)

        response = client.request("DELETE", "/companies/c1", headers=auth_headers, json={"deletion_code": "Borrar#2024"})

        assert response.status_code == 204
        assert upstream.body_of(upstream.calls[0]) == {"deletion_code": "Borrar#2024"}

    def test_join_with_wrong_code(self, client, auth_headers, upstream):
        upstream.add("POST", "/companies/join", {"message": "Código de invitación inválido"}, status_code=404)

        response = client.post("/companies/join", headers=auth_headers, json={"invite_code": "NOPE"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Código de invitación inválido"

    def test_dashboard_isolates_failures(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"data": {"id": "c1", "name": "Acme SA", "national_id": "30712345671"}})
        upstream.add("GET", "/companies/c1/analytics/pending-invoices", {"message": "Server Error"}, status_code=500)
        upstream.add("GET", "/companies/c1/afip/certificate", {"message": "Sin certificado"}, status_code=404)

        response = client.get("/companies/c1/dashboard", headers=auth_headers)

        data = response.json()
        assert response.status_code == 200
        assert data["company"]["national_id_formatted"] == "30-71234567-1"
        assert data["badges"] == {"pending_payments": 0, "pending_collections": 0, "pending_approvals": 0}
        assert data["certificate_status"] == "missing"
        assert data["errors"] == {"badges": "Error del servidor"}

    def test_dashboard_badges(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"data": {"id": "c1"}})
        upstream.add("GET", "/companies/c1/analytics/pending-invoices", {"to_pay": 3, "to_collect": 2, "pending_approvals": 1})
        upstream.add("GET", "/companies/c1/afip/certificate", {"data": {"id": 5, "is_active": True}})

        data = client.get("/companies/c1/dashboard", headers=auth_headers).json()

        assert data["badges"] == {"pending_payments": 3, "pending_collections": 2, "pending_approvals": 1}
        assert data["certificate_label"] == "Activo"
        assert data["errors"] == {}

    def test_dashboard_shortcuts_follow_role(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"data": {"id": "c1", "role": "operator", "tax_condition": "monotax"}})
        upstream.add("GET", "/companies/c1/analytics/pending-invoices", {"to_pay": 3, "to_collect": 2, "pending_approvals": 1})
        upstream.add("GET", "/companies/c1/afip/certificate", {"data": {"id": 5, "is_active": True}})

        data = client.get("/companies/c1/dashboard", headers=auth_headers).json()

        keys = [shortcut["key"] for shortcut in data["shortcuts"]]
        assert data["role"] == "operator"
        assert data["role_label"] == "Operador"
        assert "invoices.create" not in data["permissions"]
        assert "invoices" in keys and "accounts_receivable" in keys
        assert "emit_invoice" not in keys
        assert "approve_invoices" not in keys
        assert "settings" not in keys
        assert "iva_book" not in keys

    def test_dashboard_shortcuts_for_owner(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"data": {"id": "c1", "role": "owner", "tax_condition": "registered_taxpayer"}})
        upstream.add("GET", "/companies/c1/analytics/pending-invoices", {"to_pay": 3, "to_collect": 2, "pending_approvals": 1})
        upstream.add("GET", "/companies/c1/afip/certificate", {"data": {"id": 5, "is_active": True}})

        data = client.get("/companies/c1/dashboard", headers=auth_headers).json()

        shortcuts = {shortcut["key"]: shortcut for shortcut in data["shortcuts"]}
        assert "company.delete" in data["permissions"]
        assert shortcuts["approve_invoices"]["badge"] == 1
        assert shortcuts["accounts_payable"]["badge"] == 3
        assert shortcuts["iva_book"]["title"] == "Libro IVA"
        assert "settings" in shortcuts

    def test_dashboard_without_profile_keeps_open_shortcuts(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"message": "Server Error"}, status_code=500)
        upstream.add("GET", "/companies/c1/analytics/pending-invoices", {})
        upstream.add("GET", "/companies/c1/afip/certificate", {"data": None})

        data = client.get("/companies/c1/dashboard", headers=auth_headers).json()

        assert data["role"] is None
        assert data["permissions"] == []
        assert [s["key"] for s in data["shortcuts"]] == ["analytics", "clients", "suppliers", "network"]


class TestPerceptionConfig:

    def test_disabled_agent_drops_perceptions(self):
        config = PerceptionConfig(is_perception_agent=False, auto_perceptions=[{"type": "iibb_caba", "rate": "2.5"}])
        assert config.auto_perceptions == []

    def test_default_name_from_type(self):
        perception = AutoPerception(type="iibb_cordoba", rate=Decimal("4"))
        assert perception.name == "IIBB Córdoba"

    @pytest.mark.parametrize("field, value", [("type", "iibb_atlantis"), ("rate", "101"), ("base_type", "gross")])
    def test_invalid_perception(self, field, value):
        with pytest.raises(ValidationError):
            AutoPerception(**{field: value})

    def test_read_from_company(self, client, auth_headers, upstream):
        upstream.add("GET", "/companies/c1", {"data": {
            "id": "c1", "isPerceptionAgent": True,
            "autoPerceptions": [{"type": "iibb_bsas", "name": "IIBB Bs As", "rate": 3, "base_type": "net"}]
        }})

        data = client.get("/companies/c1/perception-config", headers=auth_headers).json()

        assert data["is_perception_agent"] is True
        assert data["auto_perceptions"][0]["name"] == "IIBB Bs As"

    def test_update_publishes_change(self, client, auth_headers, upstream):
        upstream.add("PUT", "/companies/c1/perception-config", {"success": True})
        received = []
        unsubscribe = client.app.state.refresh_bus.subscribe("companies.changed", lambda **p: received.append(p))
        try:
            response = client.put("/companies/c1/perception-config", headers=auth_headers, json={
                "is_perception_agent": True,
                "auto_perceptions": [{"type": "iva", "rate": "3", "base_type": "vat"}]
            })
        finally:
            unsubscribe()

        assert response.status_code == 200
        assert received == [{"company_id": "c1"}]
        assert upstream.body_of(upstream.calls[0]) == {
            "is_perception_agent": True,
            "auto_perceptions": [{"type": "iva", "name": "Percepción IVA", "rate": "3", "base_type": "vat"}]
        }

    def test_update_rejects_unknown_type(self, client, auth_headers, upstream):
        response = client.put("/companies/c1/perception-config", headers=auth_headers, json={
            "is_perception_agent": True, "auto_perceptions": [{"type": "iibb_atlantis", "rate": "3"}]
        })

        assert response.status_code == 422
        assert upstream.calls == []
