from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum

from payto.common.validators import validate_cbu


class AccountType(str, Enum):
    CORRIENTE = "corriente"
    CAJA_AHORRO = "caja_ahorro"
    CUENTA_SUELDO = "cuenta_sueldo"


ACCOUNT_TYPE_LABELS = {
    AccountType.CORRIENTE: "Cuenta Corriente",
    AccountType.CAJA_AHORRO: "Caja de Ahorro",
    AccountType.CUENTA_SUELDO: "Cuenta Sueldo",
}


class BankAccountCreate(BaseModel):
    bank_name: str = Field(..., min_length=1, max_length=100)
    account_type: AccountType
    cbu: str
    alias: Optional[str] = Field(None, max_length=50)
    is_primary: bool = False

    @field_validator('bank_name')
    @classmethod
    def validate_bank_name(cls, v):
        if not v.strip():
            raise ValueError('Ingrese el nombre del banco')
        return v.strip()

    @field_validator('cbu')
    @classmethod
    def validate_cbu_digits(cls, v):
        v = v.strip()
        if not validate_cbu(v):
            raise ValueError('El CBU debe tener 22 dígitos')
        return v

    @field_validator('alias')
    @classmethod
    def empty_alias(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class BankAccountList(BaseModel):
    accounts: List[Dict[str, Any]] = Field(default_factory=list)
    primary_account_id: Optional[str] = None
