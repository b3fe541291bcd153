"""
Tests para el certificado AFIP y las consultas al padrón
"""

import pytest

from payto.modules.afip.service import certificate_status


class TestCertificateStatus:

    @pytest.mark.parametrize("certificate, expected", [
        (None, "missing"),
        ({}, "missing"),
        ({"id": 1, "is_expired": True}, "expired"),
        ({"id": 1, "isExpiringSoon": True}, "expiring_soon"),
        ({"id": 1, "is_active": False}, "inactive"),
        ({"id": 1}, "active"),
    ])
    def test_status(self, certificate, expected):
        assert certificate_status(certificate) == expected


class TestAfipEndpoints:

    def test_missing_certificate_is_not_an_error(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/afip/certificate", {"message": "Certificado no encontrado"}, status_code=404)

        response = client.get("/afip/certificate", headers=company_headers)

        assert response.status_code == 200
        assert response.json() == {"certificate": None, "status": "missing", "label": "Sin certificado"}

    def test_certificate_server_error(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/afip/certificate", {"message": "Server Error"}, status_code=500)

        response = client.get("/afip/certificate", headers=company_headers)

        assert response.status_code == 502
        assert response.json()["detail"] == "Error del servidor"

    def test_search_cuit_validates_before_calling(self, client, company_headers, upstream):
        response = client.post("/afip/search-cuit", headers=company_headers, json={"cuit": "20-12345678-0"})

        assert response.status_code == 422
        assert response.json()["detail"] == "El CUIT no es válido"
        assert upstream.calls == []

    def test_search_cuit(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/afip/search-cuit", {
            "success": True,
            "mock_mode": True,
            "data": {
                "cuit": 20123456786,
                "name": "Juan Pérez",
                "tax_condition": "monotax",
                "activities": [{"code": 620100, "description": "Servicios de consultoría informática"}]
            }
        })

        response = client.post("/afip/search-cuit", headers=company_headers, json={"cuit": "20-12345678-6"})

        data = response.json()
        assert response.status_code == 200
        assert data["mock_mode"] is True
        assert data["data"]["cuit"] == "20123456786"
        assert data["data"]["tax_condition_label"] == "Monotributo"
        assert data["data"]["activities"][0]["code"] == "620100"
        assert upstream.body_of(upstream.calls[0]) == {"cuit": "20123456786"}

    def test_sync_tax_condition_publishes_company_change(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/afip/sync-tax-condition", {"data": {"tax_condition": "registered_taxpayer"}})
        received = []
        unsubscribe = client.app.state.refresh_bus.subscribe("companies.changed", lambda **p: received.append(p))
        try:
            response = client.post("/afip/sync-tax-condition", headers=company_headers)
        finally:
            unsubscribe()

        assert response.json()["tax_condition_label"] == "Responsable Inscripto"
        assert received == [{"company_id": "c1"}]
