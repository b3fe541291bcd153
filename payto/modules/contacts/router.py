"""
Router para Clientes y Proveedores

Los dos recursos exponen los mismos endpoints:
- Listado con búsqueda y filtro por condición fiscal
- Validación del formulario sin enviar
- Alta y edición validadas por el formulario de la entidad
- Baja (archivo) y restauración

Todos los endpoints están scoped por la empresa del header X-Company-ID.
"""

from fastapi import APIRouter, status, Query
from typing import Optional

from payto.core.events import CONTACTS_CHANGED
from payto.dependencies.apiDependencies import api_client_dependency, refresh_bus_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.contacts.dependencies import form_factory_dependency
from payto.modules.contacts.service import ContactService
from payto.modules.contacts.schemas import EntityData, EntityKind, ContactFilters, ContactList


def build_contacts_router(kind: EntityKind) -> APIRouter:
    resource = "clients" if kind == EntityKind.CLIENT else "suppliers"
    router = APIRouter(
        prefix=f"/{resource}",
        tags=["Clients" if kind == EntityKind.CLIENT else "Suppliers"],
        responses={404: {"description": "Not found"}}
    )

    # ===== ENDPOINTS PRINCIPALES =====

    @router.get("/", response_model=ContactList)
    async def list_contacts(
        company_id: CompanyId,
        api: api_client_dependency,
        search: Optional[str] = Query(None, description="Búsqueda por documento, razón social, nombre o email"),
        tax_condition: Optional[str] = Query("all", description="Filtrar por condición fiscal")
    ):
        """Listar con búsqueda de texto libre y filtro por condición fiscal"""
        filters = ContactFilters(search=search, tax_condition=tax_condition)
        return await ContactService(api, kind).get_contacts(company_id, filters)

    @router.get("/archived")
    async def list_archived(company_id: CompanyId, api: api_client_dependency):
        return {"items": await ContactService(api, kind).get_archived(company_id)}

    @router.post("/validate")
    async def validate_contact(data: EntityData, factory: form_factory_dependency):
        """Validar el formulario sin enviarlo; devuelve los errores por campo"""
        errors = factory.create(kind).validate(data)
        return {"valid": not errors, "errors": errors}

    @router.post("/", status_code=status.HTTP_201_CREATED)
    async def create_contact(
        data: EntityData,
        company_id: CompanyId,
        api: api_client_dependency,
        factory: form_factory_dependency,
        bus: refresh_bus_dependency
    ):
        """
        Crear un cliente o proveedor

        - **Consumidor Final**: nombre, apellido y DNI (7 dígitos o más)
        - **Resto**: CUIT válido, razón social y domicilio fiscal
        """
        form = factory.create(kind)
        contact = await form.submit(ContactService(api, kind), company_id, data)
        await bus.publish(CONTACTS_CHANGED, company_id=company_id, kind=kind.value)
        return contact

    @router.get("/{contact_id}")
    async def get_contact(contact_id: str, company_id: CompanyId, api: api_client_dependency):
        return await ContactService(api, kind).get_contact(company_id, contact_id)

    @router.put("/{contact_id}")
    async def update_contact(
        contact_id: str,
        data: EntityData,
        company_id: CompanyId,
        api: api_client_dependency,
        factory: form_factory_dependency
    ):
        """Actualizar; se aplican las mismas validaciones que en el alta"""
        form = factory.create(kind)
        return await form.submit(ContactService(api, kind), company_id, data, entity_id=contact_id)

    @router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_contact(contact_id: str, company_id: CompanyId, api: api_client_dependency):
        """Archivar; se puede restaurar desde archivados"""
        await ContactService(api, kind).delete_contact(company_id, contact_id)

    @router.post("/{contact_id}/restore")
    async def restore_contact(contact_id: str, company_id: CompanyId, api: api_client_dependency):
        return await ContactService(api, kind).restore_contact(company_id, contact_id)

    return router


clients_router = build_contacts_router(EntityKind.CLIENT)
suppliers_router = build_contacts_router(EntityKind.SUPPLIER)
