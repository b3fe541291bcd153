"""
Servicios de negocio para Clientes y Proveedores

Clientes y proveedores comparten el mismo flujo contra la API, solo cambia
el recurso (`/clients` o `/suppliers`):
- Listado con búsqueda y filtro por condición fiscal
- Alta, edición y baja
- Archivados y restauración
"""

from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.common.filters import filter_items, full_name
from payto.common.formatting import translate_tax_condition
from payto.modules.contacts.schemas import EntityKind, ContactFilters, ContactList

logger = logging.getLogger(__name__)

CONTACT_SEARCH_FIELDS = ["document_number", "business_name", full_name, "email"]

RESOURCES = {
    EntityKind.CLIENT: "clients",
    EntityKind.SUPPLIER: "suppliers",
}


def _as_list(data: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get(key) or []
    return data or []


class ContactService:
    """Servicio para clientes o proveedores de una empresa"""

    def __init__(self, api: PaytoAPIClient, kind: EntityKind):
        self.api = api
        self.kind = EntityKind(kind)
        self.resource = RESOURCES[self.kind]

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/{self.resource}{suffix}"

    def _decorate(self, contact: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **contact,
            "display_name": contact.get("business_name") or full_name(contact),
            "tax_condition_label": translate_tax_condition(contact.get("tax_condition") or "not_specified"),
        }

    async def get_contacts(self, company_id: str, filters: Optional[ContactFilters] = None) -> ContactList:
        filters = filters or ContactFilters()
        data = (await self.api.get(self._path(company_id))).unwrap()
        contacts = filter_items(
            _as_list(data, self.resource),
            filters.search,
            CONTACT_SEARCH_FIELDS,
            {"tax_condition": filters.tax_condition}
        )
        items = [self._decorate(contact) for contact in contacts]
        return ContactList(items=items, total=len(items))

    async def get_archived(self, company_id: str) -> List[Dict[str, Any]]:
        data = (await self.api.get(self._path(company_id, "/archived"))).unwrap()
        return [self._decorate(contact) for contact in _as_list(data, self.resource)]

    async def get_contact(self, company_id: str, contact_id: str) -> Dict[str, Any]:
        return self._decorate((await self.api.get(self._path(company_id, f"/{contact_id}"))).unwrap())

    async def create_contact(self, company_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        contact = (await self.api.post(self._path(company_id), json=payload)).unwrap()
        logger.info(f"{self.kind.value} created for company {company_id}")
        return contact

    async def update_contact(self, company_id: str, contact_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return (await self.api.put(self._path(company_id, f"/{contact_id}"), json=payload)).unwrap()

    async def delete_contact(self, company_id: str, contact_id: str) -> None:
        """Archivar (el backend conserva el registro para poder restaurarlo)"""
        (await self.api.delete(self._path(company_id, f"/{contact_id}"))).unwrap()

    async def restore_contact(self, company_id: str, contact_id: str) -> Dict[str, Any]:
        return (await self.api.post(self._path(company_id, f"/{contact_id}/restore"))).unwrap()
