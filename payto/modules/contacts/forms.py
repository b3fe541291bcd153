"""
Formularios de alta/edición de clientes y proveedores

Los dos formularios comparten la interfaz EntityForm. Quien necesite el
formulario de la otra entidad (por ejemplo, el selector de clientes que
permite dar de alta un proveedor) lo pide a EntityFormFactory por tipo;
ningún formulario importa al otro.
"""

from fastapi import HTTPException, status
from typing import Any, Callable, Dict, List, Optional
import logging

from payto.common.errors import ValidationError
from payto.common.validators import (
    validate_cuit, validate_cbu, validate_email, validate_phone
)
from payto.modules.contacts.schemas import EntityData, EntityKind, TaxCondition
from payto.modules.contacts.service import ContactService

logger = logging.getLogger(__name__)

BANK_FIELDS = ("bank_name", "bank_account_type", "bank_account_number", "bank_cbu", "bank_alias")


class EntityForm:
    """Reglas de validación y armado del payload comunes a clientes y proveedores"""

    kind: EntityKind
    entity_name: str
    default_tax_condition: TaxCondition
    show_bank_fields = False

    def tax_condition(self, data: EntityData) -> TaxCondition:
        return data.tax_condition or self.default_tax_condition

    def validate(self, data: EntityData) -> List[ValidationError]:
        errors: List[ValidationError] = []

        if data.email and not validate_email(data.email):
            errors.append(ValidationError(field="email", message="Email no válido"))

        if data.phone and not validate_phone(data.phone):
            errors.append(ValidationError(field="phone", message="Teléfono debe tener al menos 8 dígitos"))

        document = "".join(ch for ch in data.document_number or "" if ch.isdigit())

        if self.tax_condition(data) == TaxCondition.FINAL_CONSUMER:
            if not data.first_name or not data.last_name:
                errors.append(ValidationError(
                    field="first_name", message="Nombre y Apellido son obligatorios para Consumidor Final"
                ))
            if not document:
                errors.append(ValidationError(
                    field="document_number", message="El DNI es obligatorio para Consumidor Final"
                ))
            elif len(document) < 7:
                errors.append(ValidationError(
                    field="document_number", message="El DNI debe tener al menos 7 dígitos"
                ))
        else:
            if not data.business_name:
                errors.append(ValidationError(field="business_name", message="La Razón Social es obligatoria"))
            if not document:
                errors.append(ValidationError(field="document_number", message="CUIT es obligatorio"))
            elif data.document_type is not None and data.document_type.value not in ("CUIT", "CUIL"):
                errors.append(ValidationError(field="document_type", message="Debe usar CUIT"))
            elif len(document) != 11:
                errors.append(ValidationError(field="document_number", message="El CUIT debe tener 11 dígitos"))
            elif not validate_cuit(document):
                errors.append(ValidationError(field="document_number", message="El CUIT no es válido"))
            if not data.address:
                errors.append(ValidationError(field="address", message="El domicilio fiscal es obligatorio"))

        if self.show_bank_fields and data.bank_cbu and not validate_cbu(data.bank_cbu):
            errors.append(ValidationError(field="bank_cbu", message="El CBU debe tener 22 dígitos"))

        return errors

    def to_payload(self, data: EntityData) -> Dict[str, Any]:
        """Armar el cuerpo de la request; el domicilio solo se envía si no es Consumidor Final"""
        tax_condition = self.tax_condition(data)
        payload = data.model_dump(exclude_none=True, exclude=set(BANK_FIELDS))
        payload["tax_condition"] = tax_condition.value
        payload["document_number"] = data.document_number
        if tax_condition == TaxCondition.FINAL_CONSUMER:
            payload.pop("address", None)
        if self.show_bank_fields:
            for field in BANK_FIELDS:
                value = getattr(data, field)
                if value is not None:
                    payload[field] = value.value if hasattr(value, "value") else value
        return payload

    async def submit(
        self,
        service: ContactService,
        company_id: str,
        data: EntityData,
        entity_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Validar y crear (o actualizar si hay entity_id); 422 con los errores por campo"""
        errors = self.validate(data)
        if errors:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=[error.model_dump() for error in errors]
            )

        payload = self.to_payload(data)
        if entity_id:
            return await service.update_contact(company_id, entity_id, payload)
        return await service.create_contact(company_id, payload)


class ClientForm(EntityForm):
    kind = EntityKind.CLIENT
    entity_name = "Cliente"
    default_tax_condition = TaxCondition.FINAL_CONSUMER


class SupplierForm(EntityForm):
    kind = EntityKind.SUPPLIER
    entity_name = "Proveedor"
    default_tax_condition = TaxCondition.REGISTERED_TAXPAYER
    show_bank_fields = True


class EntityFormFactory:
    """Registro de formularios por tipo de entidad"""

    def __init__(self):
        self._registry: Dict[EntityKind, Callable[[], EntityForm]] = {}

    def register(self, kind: EntityKind, builder: Callable[[], EntityForm]) -> None:
        self._registry[EntityKind(kind)] = builder

    def create(self, kind) -> EntityForm:
        try:
            builder = self._registry[EntityKind(kind)]
        except (KeyError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Tipo de entidad inválido: {kind}. Valores permitidos: client, supplier"
            )
        return builder()

    def kinds(self) -> List[EntityKind]:
        return list(self._registry)


def build_form_factory() -> EntityFormFactory:
    factory = EntityFormFactory()
    factory.register(EntityKind.CLIENT, ClientForm)
    factory.register(EntityKind.SUPPLIER, SupplierForm)
    return factory
