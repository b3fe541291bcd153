from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum


class EntityKind(str, Enum):
    CLIENT = "client"
    SUPPLIER = "supplier"


class DocumentType(str, Enum):
    CUIT = "CUIT"
    CUIL = "CUIL"
    DNI = "DNI"
    PASAPORTE = "Pasaporte"
    CDI = "CDI"


class TaxCondition(str, Enum):
    REGISTERED_TAXPAYER = "registered_taxpayer"
    MONOTAX = "monotax"
    EXEMPT = "exempt"
    FINAL_CONSUMER = "final_consumer"


class BankAccountType(str, Enum):
    CAJA_AHORRO = "CA"
    CUENTA_CORRIENTE = "CC"


class EntityData(BaseModel):
    """
    Datos del formulario de cliente o proveedor.

    Los campos son permisivos; las reglas de negocio las aplica
    el formulario (EntityForm.validate) y devuelven errores por campo.
    """
    document_type: Optional[DocumentType] = DocumentType.CUIT
    document_number: Optional[str] = None
    business_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    tax_condition: Optional[TaxCondition] = None

    # Datos bancarios (solo proveedores)
    bank_name: Optional[str] = None
    bank_account_type: Optional[BankAccountType] = None
    bank_account_number: Optional[str] = None
    bank_cbu: Optional[str] = None
    bank_alias: Optional[str] = None

    @field_validator('*', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ContactFilters(BaseModel):
    search: Optional[str] = Field(None, description="Buscar por documento, razón social, nombre o email")
    tax_condition: Optional[str] = "all"


class ContactList(BaseModel):
    items: List[Dict[str, Any]]
    total: int
