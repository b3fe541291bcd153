"""
Búsqueda y filtros de listados

Todas las vistas de listado filtran igual: un término libre que se busca
(sin distinguir mayúsculas) en algunos campos del registro, más filtros por
categoría donde "all" o vacío significa sin filtro.
"""
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

ALL = "all"

FieldGetter = Union[str, Callable[[Mapping[str, Any]], Any]]


def field_value(item: Mapping[str, Any], field: FieldGetter) -> Any:
    """Leer un campo; admite rutas con punto ("receiver.name") o una función"""
    if callable(field):
        return field(item)
    value: Any = item
    for part in field.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def is_unset(value: Optional[str]) -> bool:
    return value is None or value == "" or value == ALL


def matches_search(item: Mapping[str, Any], term: Optional[str], fields: Sequence[FieldGetter]) -> bool:
    if term is None or not term.strip():
        return True
    needle = term.strip().lower()
    for field in fields:
        value = field_value(item, field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def matches_filters(item: Mapping[str, Any], filters: Mapping[str, Optional[str]]) -> bool:
    for field, expected in filters.items():
        if is_unset(expected):
            continue
        if str(field_value(item, field)) != str(expected):
            return False
    return True


def filter_items(
    items: Iterable[Mapping[str, Any]],
    search: Optional[str] = None,
    fields: Sequence[FieldGetter] = (),
    filters: Optional[Mapping[str, Optional[str]]] = None
) -> List[Mapping[str, Any]]:
    """
    Filtrar un listado por término de búsqueda y filtros por categoría.

    filter_items(items, "", fields, {"status": "all"}) devuelve todo.
    """
    filters = filters or {}
    return [
        item for item in items
        if matches_search(item, search, fields) and matches_filters(item, filters)
    ]


def full_name(item: Mapping[str, Any]) -> str:
    """Nombre y apellido de un contacto persona"""
    return f"{item.get('first_name') or ''} {item.get('last_name') or ''}".strip()
