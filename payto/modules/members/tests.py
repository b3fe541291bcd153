"""
Tests para miembros de la empresa y permisos por rol
"""

import pytest

from payto.modules.members.permissions import has_permission, permissions_for


@pytest.fixture
def members():
    return [
        {"id": "m1", "name": "Laura Gómez", "email": "laura@acme.com.ar", "role": "owner"},
        {"id": "m2", "name": "Pedro Díaz", "email": "pedro@acme.com.ar", "role": "accountant"},
        {"id": "m3", "name": "Sofía Ruiz", "email": "sofia@estudio.com", "role": "accountant"},
    ]


class TestPermissions:

    def test_owner_has_everything(self):
        assert has_permission("owner", "company.delete")
        assert has_permission("owner", "audit.view")

    def test_administrator_cannot_delete_company(self):
        assert not has_permission("administrator", "company.delete")
        assert has_permission("administrator", "members.remove")

    def test_operator_is_read_only(self):
        assert permissions_for("operator") == ["bank_accounts.view", "invoices.view", "members.view", "payments.view"]
        assert not has_permission("operator", "invoices.create")

    def test_unknown_or_missing_role(self):
        assert not has_permission(None, "invoices.view")
        assert not has_permission("guest", "invoices.view")
        assert permissions_for(None) == []


class TestMemberEndpoints:

    def test_list_with_search_and_role(self, client, company_headers, upstream, members):
        upstream.add("GET", "/companies/c1/members", {"data": members})

        response = client.get("/members/", headers=company_headers, params={"search": "acme", "role": "accountant"})

        data = response.json()
        assert [member["id"] for member in data["members"]] == ["m2"]
        assert data["members"][0]["role_label"] == "Contador"
        assert data["counts_by_role"] == {"owner": 1, "accountant": 2}

    def test_roles_catalog(self, client, company_headers):
        response = client.get("/members/roles", headers=company_headers)

        roles = {role["role"]: role for role in response.json()}
        assert roles["approver"]["label"] == "Aprobador"
        assert "invoices.approve" in roles["approver"]["permissions"]

    def test_cannot_remove_last_admin(self, client, company_headers, upstream, members):
        upstream.add("GET", "/companies/c1/members", {"data": members})

        response = client.delete("/members/m1", headers=company_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "La empresa debe tener al menos un administrador"
        assert upstream.calls_to("DELETE", "/companies/c1/members/m1") == []

    def test_remove_member(self, client, company_headers, upstream, members):
        upstream.add("GET", "/companies/c1/members", {"data": members})
        upstream.add("DELETE", "/companies/c1/members/m3", status_code=204)

        response = client.delete("/members/m3", headers=company_headers)

        assert response.status_code == 204
        assert len(upstream.calls_to("DELETE", "/companies/c1/members/m3")) == 1

    def test_remove_unknown_member(self, client, company_headers, upstream, members):
        upstream.add("GET", "/companies/c1/members", {"data": members})

        response = client.delete("/members/m9", headers=company_headers)

        assert response.status_code == 404

    def test_change_role_forwards_upstream_error(self, client, company_headers, upstream):
        upstream.add("PUT", "/companies/c1/members/m2/role", {"message": "This action is unauthorized."}, status_code=403)

        response = client.put("/members/m2/role", headers=company_headers, json={"role": "administrator"})

        assert response.status_code == 403
        assert response.json()["detail"] == "No tienes permisos para realizar esta acción"
