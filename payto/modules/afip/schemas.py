from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum


class AfipEnvironment(str, Enum):
    TESTING = "testing"
    PRODUCTION = "production"


class CertificateUpload(BaseModel):
    certificate: str = Field(..., min_length=1, description="Certificado en formato PEM")
    password: Optional[str] = None
    environment: AfipEnvironment = AfipEnvironment.TESTING


class ManualCertificateUpload(CertificateUpload):
    private_key: str = Field(..., min_length=1, description="Clave privada en formato PEM")


class CertificateStatus(BaseModel):
    """Certificado AFIP de la empresa con una etiqueta de estado para mostrar"""
    certificate: Optional[Dict[str, Any]] = None
    status: str
    label: str


class CuitSearch(BaseModel):
    cuit: str = Field(..., min_length=11, max_length=13)


class TaxpayerActivity(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def code_to_str(cls, v):
        return None if v is None else str(v)


class TaxpayerData(BaseModel):
    cuit: str
    person_type: Optional[str] = None
    tax_condition: Optional[str] = None
    tax_condition_label: Optional[str] = None
    name: Optional[str] = None
    business_name: Optional[str] = None
    address: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    activities: List[TaxpayerActivity] = Field(default_factory=list)
    taxes: List[TaxpayerActivity] = Field(default_factory=list)

    @field_validator('cuit', mode='before')
    @classmethod
    def cuit_to_str(cls, v):
        return str(v)


class PadronResult(BaseModel):
    success: bool = True
    data: Optional[TaxpayerData] = None
    mock_mode: bool = False
    message: Optional[str] = None
