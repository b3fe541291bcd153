"""
Tests para cuentas bancarias
"""

import pytest
from pydantic import ValidationError

from payto.modules.bank_accounts.schemas import BankAccountCreate

CBU = "2850590940090418135201"


class TestBankAccountValidation:

    def test_valid_account(self):
        account = BankAccountCreate(bank_name=" Banco Nación ", account_type="caja_ahorro", cbu=CBU, alias="  ")

        assert account.bank_name == "Banco Nación"
        assert account.alias is None

    @pytest.mark.parametrize("cbu", ["123", "28505909400904181352AB", "28505909400904181352011"])
    def test_cbu_must_have_22_digits(self, cbu):
        with pytest.raises(ValidationError, match="El CBU debe tener 22 dígitos"):
            BankAccountCreate(bank_name="Banco Nación", account_type="corriente", cbu=cbu)

    def test_unknown_account_type(self):
        with pytest.raises(ValidationError):
            BankAccountCreate(bank_name="Banco Nación", account_type="plazo_fijo", cbu=CBU)

    def test_bank_name_required(self):
        with pytest.raises(ValidationError, match="Ingrese el nombre del banco"):
            BankAccountCreate(bank_name="   ", account_type="corriente", cbu=CBU)


class TestBankAccountEndpoints:

    def test_list_with_labels_and_primary(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/bank-accounts", {"success": True, "data": [
            {"id": 1, "bankName": "Banco Nación", "accountType": "corriente", "isPrimary": False},
            {"id": 2, "bank_name": "Galicia", "account_type": "caja_ahorro", "is_primary": True},
        ]})

        data = client.get("/bank-accounts/", headers=company_headers).json()

        assert [a["account_type_label"] for a in data["accounts"]] == ["Cuenta Corriente", "Caja de Ahorro"]
        assert data["primary_account_id"] == "2"

    def test_create(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/bank-accounts", {"success": True, "data": {
            "id": 3, "bank_name": "Santander", "account_type": "cuenta_sueldo"
        }}, status_code=201)

        response = client.post("/bank-accounts/", headers=company_headers, json={
            "bank_name": "Santander", "account_type": "cuenta_sueldo", "cbu": CBU
        })

        assert response.status_code == 201
        assert response.json()["account_type_label"] == "Cuenta Sueldo"
        assert upstream.body_of(upstream.calls[0]) == {
            "bank_name": "Santander", "account_type": "cuenta_sueldo", "cbu": CBU, "is_primary": False
        }

    def test_create_with_invalid_cbu_never_reaches_api(self, client, company_headers, upstream):
        response = client.post("/bank-accounts/", headers=company_headers, json={
            "bank_name": "Santander", "account_type": "corriente", "cbu": "12345"
        })

        assert response.status_code == 422
        assert upstream.calls == []

    def test_update(self, client, company_headers, upstream):
        upstream.add("PUT", "/companies/c1/bank-accounts/3", {"data": {"id": 3, "account_type": "corriente"}})

        response = client.put("/bank-accounts/3", headers=company_headers, json={
            "bank_name": "Santander", "account_type": "corriente", "cbu": CBU, "alias": "acme.pagos"
        })

        assert response.status_code == 200
        assert upstream.body_of(upstream.calls[0])["alias"] == "acme.pagos"

    def test_delete_forbidden(self, client, company_headers, upstream):
        upstream.add("DELETE", "/companies/c1/bank-accounts/3", {"message": "This action is unauthorized."}, status_code=403)

        response = client.delete("/bank-accounts/3", headers=company_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "No tienes permisos para realizar esta acción"
