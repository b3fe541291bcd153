"""
Servicio AFIP: certificado de la empresa y consultas al padrón

La firma, el almacenamiento del certificado y la comunicación con AFIP los
hace la API; acá solo se reenvían las operaciones y se normalizan respuestas.
"""

from fastapi import HTTPException, status
from typing import Any, Dict, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.common.formatting import translate_tax_condition
from payto.common.validators import validate_cuit
from payto.modules.afip.schemas import (
    CertificateUpload, ManualCertificateUpload, CertificateStatus, PadronResult, TaxpayerData
)

logger = logging.getLogger(__name__)

CERTIFICATE_LABELS = {
    "missing": "Sin certificado",
    "expired": "Vencido",
    "expiring_soon": "Por vencer",
    "inactive": "Inactivo",
    "active": "Activo",
}


def certificate_status(certificate: Optional[Dict[str, Any]]) -> str:
    if not certificate:
        return "missing"
    if certificate.get("is_expired") or certificate.get("isExpired"):
        return "expired"
    if certificate.get("is_expiring_soon") or certificate.get("isExpiringSoon"):
        return "expiring_soon"
    active = certificate.get("is_active", certificate.get("isActive", True))
    return "active" if active else "inactive"


def _padron(data: Any) -> PadronResult:
    if not isinstance(data, dict):
        return PadronResult(success=False, message="Respuesta inválida del padrón")
    taxpayer = data.get("data")
    if taxpayer is None and "cuit" in data:
        taxpayer = data
    parsed = None
    if isinstance(taxpayer, dict):
        parsed = TaxpayerData(**{
            **taxpayer,
            "tax_condition_label": translate_tax_condition(taxpayer.get("tax_condition") or "not_specified")
        })
    return PadronResult(
        success=data.get("success", True),
        data=parsed,
        mock_mode=bool(data.get("mock_mode")),
        message=data.get("message")
    )


class AfipService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/afip{suffix}"

    # ===== CERTIFICADO =====

    async def get_certificate(self, company_id: str) -> CertificateStatus:
        result = await self.api.get(self._path(company_id, "/certificate"))
        if not result.ok and result.error.status_code == status.HTTP_404_NOT_FOUND:
            certificate = None
        else:
            certificate = result.unwrap()
        state = certificate_status(certificate)
        return CertificateStatus(certificate=certificate, status=state, label=CERTIFICATE_LABELS[state])

    async def generate_csr(self, company_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, "/certificate/generate-csr"))).unwrap()

    async def upload_certificate(self, company_id: str, upload: CertificateUpload) -> Dict[str, Any]:
        certificate = (await self.api.post(
            self._path(company_id, "/certificate/upload"), json=upload.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(f"AFIP certificate uploaded for company {company_id} ({upload.environment.value})")
        return certificate

    async def upload_manual_certificate(self, company_id: str, upload: ManualCertificateUpload) -> Dict[str, Any]:
        certificate = (await self.api.post(
            self._path(company_id, "/certificate/upload-manual"), json=upload.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(f"AFIP certificate uploaded manually for company {company_id} ({upload.environment.value})")
        return certificate

    async def test_connection(self, company_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, "/certificate/test"))).unwrap()

    async def delete_certificate(self, company_id: str) -> None:
        (await self.api.delete(self._path(company_id, "/certificate"))).unwrap()

    # ===== PADRÓN =====

    async def get_fiscal_data(self, company_id: str) -> PadronResult:
        return _padron((await self.api.get(self._path(company_id, "/fiscal-data"))).unwrap())

    async def search_cuit(self, company_id: str, cuit: str) -> PadronResult:
        if not validate_cuit(cuit):
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="El CUIT no es válido")
        digits = "".join(ch for ch in cuit if ch.isdigit())
        return _padron((await self.api.post(self._path(company_id, "/search-cuit"), json={"cuit": digits})).unwrap())

    async def sync_tax_condition(self, company_id: str) -> Dict[str, Any]:
        data = (await self.api.post(self._path(company_id, "/sync-tax-condition"))).unwrap() or {}
        condition = data.get("tax_condition")
        if condition:
            data = {**data, "tax_condition_label": translate_tax_condition(condition)}
        return data
