from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from decimal import Decimal
from enum import Enum
import re

from payto.common.validators import (
    validate_cuit, validate_phone, validate_cbu, format_cuit, format_phone
)
from payto.modules.contacts.schemas import TaxCondition

DELETION_CODE_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*#?&])[A-Za-z\d@$!%*#?&]{8,}$')


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Nombre o razón social")
    business_name: Optional[str] = None
    national_id: str = Field(..., description="CUIT/CUIL de la empresa (11 dígitos)")
    phone: Optional[str] = None
    tax_condition: TaxCondition = TaxCondition.REGISTERED_TAXPAYER
    default_sales_point: int = Field(1, ge=1)
    deletion_code: str = Field(..., description="Código requerido para eliminar la empresa")
    confirm_deletion_code: Optional[str] = None
    street: str = Field(..., min_length=1)
    street_number: str = Field(..., min_length=1)
    floor: Optional[str] = None
    apartment: Optional[str] = None
    postal_code: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)

    # Cuenta bancaria inicial (opcional)
    bank_name: Optional[str] = None
    bank_cbu: Optional[str] = None

    @field_validator('national_id')
    @classmethod
    def validate_national_id(cls, v):
        digits = re.sub(r'\D', '', v)
        if len(digits) != 11:
            raise ValueError('El CUIT/CUIL debe tener 11 dígitos')
        if not validate_cuit(digits):
            raise ValueError('El CUIT/CUIL no es válido')
        return digits

    @field_validator('phone')
    @classmethod
    def validate_phone_number(cls, v):
        if v is None or not v.strip():
            return None
        if not validate_phone(v):
            raise ValueError('Teléfono debe tener al menos 8 dígitos')
        return format_phone(v)

    @field_validator('deletion_code')
    @classmethod
    def validate_deletion_code(cls, v):
        if len(v) < 8:
            raise ValueError('El código debe tener al menos 8 caracteres')
        if not DELETION_CODE_PATTERN.match(v):
            raise ValueError('El código debe incluir mayúsculas, minúsculas, números y caracteres especiales')
        return v

    @model_validator(mode='after')
    def validate_confirmation_and_bank(self):
        if self.confirm_deletion_code is not None and self.confirm_deletion_code != self.deletion_code:
            raise ValueError('Los códigos de eliminación no coinciden')
        if self.bank_cbu:
            if not self.bank_name:
                raise ValueError('El nombre del banco es obligatorio')
            if not validate_cbu(self.bank_cbu):
                raise ValueError('El CBU debe tener 22 dígitos')
        return self


class CompanyUpdate(BaseModel):
    """National ID cannot be updated."""
    name: Optional[str] = Field(None, min_length=1)
    business_name: Optional[str] = None
    phone: Optional[str] = None
    tax_condition: Optional[TaxCondition] = None
    default_sales_point: Optional[int] = Field(None, ge=1)
    street: Optional[str] = None
    street_number: Optional[str] = None
    floor: Optional[str] = None
    apartment: Optional[str] = None
    postal_code: Optional[str] = None
    province: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone_number(cls, v):
        if v is None:
            return v
        if not validate_phone(v):
            raise ValueError('Teléfono debe tener al menos 8 dígitos')
        return format_phone(v)


class CompanyDelete(BaseModel):
    deletion_code: str = Field(..., min_length=1)


class JoinCompany(BaseModel):
    invite_code: str

    @field_validator('invite_code')
    @classmethod
    def validate_invite_code(cls, v):
        if not v.strip():
            raise ValueError('Ingresa un código de invitación')
        return v.strip()


class CompanyList(BaseModel):
    companies: List[Dict[str, Any]]
    total: int


def decorate_company(company: Dict[str, Any]) -> Dict[str, Any]:
    national_id = company.get("national_id") or company.get("nationalId")
    return {**company, "national_id_formatted": format_cuit(national_id) if national_id else None}


class PendingBadges(BaseModel):
    pending_payments: int = 0
    pending_collections: int = 0
    pending_approvals: int = 0


class DashboardShortcut(BaseModel):
    key: str
    title: str
    description: str
    badge: Optional[int] = None


class CompanyDashboard(BaseModel):
    """
    Perfil de la empresa con los contadores de pendientes y el estado del
    certificado AFIP. Cada parte se carga por separado; si una falla queda
    con su valor vacío y el mensaje en `errors`.

    Los accesos directos dependen de los permisos del rol del usuario en la
    empresa; sin perfil no hay rol y solo quedan los accesos sin permiso.
    """
    company: Optional[Dict[str, Any]] = None
    role: Optional[str] = None
    role_label: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)
    shortcuts: List[DashboardShortcut] = Field(default_factory=list)
    badges: PendingBadges = Field(default_factory=PendingBadges)
    certificate_status: Optional[str] = None
    certificate_label: Optional[str] = None
    errors: Dict[str, str] = Field(default_factory=dict)


# ===== PERCEPTION AGENT =====

IIBB_JURISDICTIONS = {
    "bsas": "Buenos Aires", "caba": "CABA", "catamarca": "Catamarca", "chaco": "Chaco",
    "chubut": "Chubut", "cordoba": "Córdoba", "corrientes": "Corrientes", "entrerios": "Entre Ríos",
    "formosa": "Formosa", "jujuy": "Jujuy", "lapampa": "La Pampa", "larioja": "La Rioja",
    "mendoza": "Mendoza", "misiones": "Misiones", "neuquen": "Neuquén", "rionegro": "Río Negro",
    "salta": "Salta", "sanjuan": "San Juan", "sanluis": "San Luis", "santacruz": "Santa Cruz",
    "santafe": "Santa Fe", "sgo_estero": "Santiago del Estero", "tdf": "Tierra del Fuego",
    "tucuman": "Tucumán",
}

PERCEPTION_TYPE_LABELS = {
    "iva": "Percepción IVA",
    "ganancias": "Percepción Ganancias",
    "impuestos_internos": "Impuestos Internos",
    **{f"iibb_{code}": f"IIBB {name}" for code, name in IIBB_JURISDICTIONS.items()},
}


class PerceptionBase(str, Enum):
    NET = "net"
    TOTAL = "total"
    VAT = "vat"


class AutoPerception(BaseModel):
    type: str = "iibb_bsas"
    name: Optional[str] = None
    rate: Decimal = Field(Decimal("3"), ge=0, le=100, description="Alícuota en %")
    base_type: PerceptionBase = PerceptionBase.NET

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        if v not in PERCEPTION_TYPE_LABELS:
            raise ValueError('Tipo de percepción inválido')
        return v

    @model_validator(mode='after')
    def default_name(self):
        if not self.name or not self.name.strip():
            self.name = PERCEPTION_TYPE_LABELS[self.type]
        return self


class PerceptionConfig(BaseModel):
    """Percepciones que se aplican automáticamente al emitir facturas"""
    is_perception_agent: bool = False
    auto_perceptions: List[AutoPerception] = Field(default_factory=list)

    @model_validator(mode='after')
    def clear_when_disabled(self):
        if not self.is_perception_agent:
            self.auto_perceptions = []
        return self
