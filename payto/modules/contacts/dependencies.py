"""
Dependencias específicas para el módulo de Clientes y Proveedores

- Fábrica de formularios compartida por la aplicación
- Servicio por tipo de entidad
"""

from typing import Annotated
from fastapi import Depends, Request

from payto.modules.contacts.forms import EntityFormFactory, build_form_factory


def get_form_factory(request: Request) -> EntityFormFactory:
    """Fábrica de formularios registrada en la aplicación (o la estándar si no hay)"""
    factory = getattr(request.app.state, "form_factory", None)
    if factory is None:
        factory = build_form_factory()
        request.app.state.form_factory = factory
    return factory


form_factory_dependency = Annotated[EntityFormFactory, Depends(get_form_factory)]
