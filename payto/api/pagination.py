"""
Recorrido de listados paginados de la API

La API devuelve una página por llamada (`?page=N`). `iter_pages` pide las
páginas en orden, una a la vez, y se detiene con la primera página vacía
o cuando los metadatos indican que era la última. Un error en cualquier
página se propaga como HTTPException: un listado incompleto nunca se
entrega como si fuera el total.
"""
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple
import logging

from payto.api.client import ApiResult
from payto.core.config import settings

logger = logging.getLogger(__name__)

FetchPage = Callable[[int], Awaitable[ApiResult]]


def last_page_number(meta: Dict[str, Any]) -> Optional[int]:
    """Leer el número de la última página de los metadatos, si viene"""
    pagination = meta.get("pagination")
    candidates = [meta.get("last_page"), meta.get("total_pages")]
    if isinstance(pagination, dict):
        candidates += [pagination.get("lastPage"), pagination.get("last_page")]
    for value in candidates:
        if value is not None:
            try:
                return int(value)
            except (TypeError, ValueError):
                continue
    return None


def page_items(result: ApiResult) -> Tuple[List[Any], Dict[str, Any]]:
    """
    Separar los ítems de una página y sus metadatos.

    Acepta tanto una lista directa como un objeto `{data: [...], pagination}`
    que no haya sido desenvuelto por el cliente.
    """
    data = result.data
    meta = dict(result.meta)
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        for key, value in data.items():
            if key != "data":
                meta.setdefault(key, value)
        data = data["data"]
    if data is None:
        return [], meta
    if not isinstance(data, list):
        return [data], meta
    return data, meta


async def iter_pages(
    fetch_page: FetchPage,
    start: int = 1,
    max_pages: Optional[int] = None
) -> AsyncIterator[List[Any]]:
    """
    Generar los ítems de cada página en orden secuencial.

    Raises:
        HTTPException: con el estado y el mensaje de la API si una página falla
    """
    limit = max_pages or settings.MAX_PAGES
    page = start
    fetched = 0
    while fetched < limit:
        result = await fetch_page(page)
        fetched += 1
        if not result.ok:
            logger.warning(f"Pagination failed at page {page}: {result.error.message}")
            result.unwrap()

        items, meta = page_items(result)
        if not items:
            return
        yield items

        last_page = last_page_number(meta)
        if last_page is not None and page >= last_page:
            return
        page += 1

    logger.warning(f"Pagination stopped after {limit} pages")


async def collect_all(
    fetch_page: FetchPage,
    start: int = 1,
    max_pages: Optional[int] = None
) -> List[Any]:
    """Juntar todas las páginas en una sola lista"""
    items: List[Any] = []
    async for page in iter_pages(fetch_page, start=start, max_pages=max_pages):
        items.extend(page)
    return items
