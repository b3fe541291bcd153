from typing import Annotated
from fastapi import Depends, Request

from payto.core.events import COMPANIES_CHANGED
from payto.modules.company.cache import CompanyListCache


def get_company_cache(request: Request) -> CompanyListCache:
    """Cache de la aplicación; si no hay una se crea y se suscribe a companies.changed"""
    cache = getattr(request.app.state, "company_cache", None)
    if cache is None:
        cache = CompanyListCache()
        request.app.state.refresh_bus.subscribe(COMPANIES_CHANGED, cache.invalidate)
        request.app.state.company_cache = cache
    return cache


company_cache_dependency = Annotated[CompanyListCache, Depends(get_company_cache)]
