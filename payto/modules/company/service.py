"""
Servicio de empresas del usuario

Crear, unirse, editar o eliminar una empresa publica `companies.changed`
para que el selector de empresas se recargue.
"""

from typing import Any, Dict, List, Optional
import asyncio
import logging

from payto.api.client import PaytoAPIClient
from payto.core.events import RefreshBus, COMPANIES_CHANGED
from payto.modules.afip.service import certificate_status, CERTIFICATE_LABELS
from payto.common.formatting import translate_role
from payto.modules.members.permissions import has_permission, permissions_for
from payto.modules.company.cache import CompanyListCache
from payto.modules.company.schemas import (
    CompanyCreate, CompanyUpdate, CompanyList, JoinCompany, CompanyDashboard, DashboardShortcut,
    PendingBadges, PerceptionConfig, decorate_company
)

logger = logging.getLogger(__name__)

# (clave, título, descripción, permiso requerido, contador)
SHORTCUTS = [
    ("emit_invoice", "Emitir Comprobante", "Facturas, NC, ND, Recibos, etc.", "invoices.create", None),
    ("load_invoice", "Cargar Factura Recibida", "Registrar factura de empresa externa", "invoices.create", None),
    ("invoices", "Ver Facturas", "Gestionar todas las facturas", "invoices.view", None),
    ("accounts_payable", "Cuentas por Pagar", "Gestionar pagos a proveedores", "payments.create", "pending_payments"),
    ("accounts_receivable", "Cuentas por Cobrar", "Gestionar cobros de clientes", "payments.view", "pending_collections"),
    ("approve_invoices", "Aprobar Facturas", "Revisar facturas de proveedores", "invoices.approve", "pending_approvals"),
    ("audit_log", "Registro de Auditoría", "Historial de actividades del sistema", "audit.view", None),
    ("members", "Miembros", "Gestionar miembros y roles", "members.view", None),
    ("settings", "Configuración", "Datos de la empresa, cuentas bancarias y percepciones", "company.view_settings", None),
    ("analytics", "Estadísticas", "Reportes y análisis financiero", None, None),
    ("iva_book", "Libro IVA", "Registro de operaciones con IVA", None, None),
    ("clients", "Mis Clientes", "Gestionar clientes externos", None, None),
    ("suppliers", "Mis Proveedores", "Gestionar proveedores externos", None, None),
    ("network", "Red Empresarial", "Conectar con otras empresas", None, None),
]


def build_shortcuts(company: Optional[Dict[str, Any]], badges: PendingBadges) -> List[DashboardShortcut]:
    """Accesos directos que el rol del usuario puede usar"""
    company = company or {}
    role = company.get("role")
    tax_condition = company.get("tax_condition") or company.get("taxCondition")
    shortcuts = []
    for key, title, description, permission, badge in SHORTCUTS:
        if permission and not has_permission(role, permission):
            continue
        # El Libro IVA es solo para Responsables Inscriptos
        if key == "iva_book" and tax_condition != "registered_taxpayer":
            continue
        shortcuts.append(DashboardShortcut(
            key=key,
            title=title,
            description=description,
            badge=getattr(badges, badge) if badge else None
        ))
    return shortcuts


class CompanyService:

    def __init__(self, api: PaytoAPIClient, bus: RefreshBus, cache: Optional[CompanyListCache] = None):
        self.api = api
        self.bus = bus
        self.cache = cache

    async def get_companies(self, token: Optional[str] = None) -> CompanyList:
        companies = self.cache.get(token) if self.cache is not None else None
        if companies is None:
            data = (await self.api.get("/companies")).unwrap()
            if isinstance(data, dict):
                data = data.get("companies") or []
            companies = [decorate_company(company) for company in data or []]
            if self.cache is not None:
                self.cache.set(token, companies)
        return CompanyList(companies=companies, total=len(companies))

    async def get_company(self, company_id: str) -> Dict[str, Any]:
        return decorate_company((await self.api.get(f"/companies/{company_id}")).unwrap())

    async def create_company(self, company_data: CompanyCreate) -> Dict[str, Any]:
        payload = company_data.model_dump(exclude_none=True, exclude={"confirm_deletion_code"})
        company = (await self.api.post("/companies", json=payload)).unwrap()
        logger.info(f"Company created: {company.get('id')}")
        await self.bus.publish(COMPANIES_CHANGED, company_id=str(company.get("id")))
        return decorate_company(company)

    async def join_company(self, join_data: JoinCompany) -> Dict[str, Any]:
        company = (await self.api.post("/companies/join", json=join_data.model_dump())).unwrap()
        logger.info(f"Joined company: {company.get('id')}")
        await self.bus.publish(COMPANIES_CHANGED, company_id=str(company.get("id")))
        return decorate_company(company)

    async def update_company(self, company_id: str, company_data: CompanyUpdate) -> Dict[str, Any]:
        company = (await self.api.put(
            f"/companies/{company_id}", json=company_data.model_dump(exclude_none=True)
        )).unwrap()
        await self.bus.publish(COMPANIES_CHANGED, company_id=company_id)
        return decorate_company(company)

    async def delete_company(self, company_id: str, deletion_code: str) -> None:
        (await self.api.request(
            "DELETE", f"/companies/{company_id}", json={"deletion_code": deletion_code}
        )).unwrap()
        logger.info(f"Company deleted: {company_id}")
        await self.bus.publish(COMPANIES_CHANGED, company_id=company_id)

    async def regenerate_invite(self, company_id: str) -> Dict[str, Any]:
        return (await self.api.post(f"/companies/{company_id}/regenerate-invite")).unwrap()

    async def get_perception_config(self, company_id: str) -> PerceptionConfig:
        company = (await self.api.get(f"/companies/{company_id}")).unwrap() or {}
        is_agent = company.get("is_perception_agent", company.get("isPerceptionAgent"))
        perceptions = company.get("auto_perceptions", company.get("autoPerceptions"))
        return PerceptionConfig(is_perception_agent=bool(is_agent), auto_perceptions=perceptions or [])

    async def update_perception_config(self, company_id: str, config: PerceptionConfig) -> PerceptionConfig:
        (await self.api.put(f"/companies/{company_id}/perception-config", json=config.model_dump())).unwrap()
        logger.info(
            f"Perception config updated for company {company_id}: "
            f"agent={config.is_perception_agent}, {len(config.auto_perceptions)} perceptions"
        )
        await self.bus.publish(COMPANIES_CHANGED, company_id=company_id)
        return config

    async def get_dashboard(self, company_id: str) -> CompanyDashboard:
        """Empresa, contadores de pendientes y certificado, cargados en paralelo"""
        company, pending, certificate = await asyncio.gather(
            self.api.get(f"/companies/{company_id}"),
            self.api.get(f"/companies/{company_id}/analytics/pending-invoices"),
            self.api.get(f"/companies/{company_id}/afip/certificate"),
        )

        dashboard = CompanyDashboard()
        if company.ok:
            dashboard.company = decorate_company(company.data or {})
        else:
            dashboard.errors["company"] = company.error.message

        if pending.ok:
            counts = pending.data or {}
            dashboard.badges = PendingBadges(
                pending_payments=counts.get("to_pay") or 0,
                pending_collections=counts.get("to_collect") or 0,
                pending_approvals=counts.get("pending_approvals") or 0
            )
        else:
            dashboard.errors["badges"] = pending.error.message

        # Sin certificado la API responde 404
        if certificate.ok or certificate.error.status_code == 404:
            state = certificate_status(certificate.data if certificate.ok else None)
            dashboard.certificate_status = state
            dashboard.certificate_label = CERTIFICATE_LABELS[state]
        else:
            dashboard.errors["certificate"] = certificate.error.message

        role = (dashboard.company or {}).get("role")
        if role:
            dashboard.role = role
            dashboard.role_label = translate_role(role)
            dashboard.permissions = permissions_for(role)
        dashboard.shortcuts = build_shortcuts(dashboard.company, dashboard.badges)

        if dashboard.errors:
            logger.warning(f"Dashboard for company {company_id} partially loaded: {sorted(dashboard.errors)}")
        return dashboard
