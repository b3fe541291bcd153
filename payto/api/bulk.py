"""
Operaciones masivas contra la API

Las llamadas se lanzan juntas con asyncio.gather. Si alguna falla se
informa un único error genérico; las que ya se aplicaron no se revierten.
"""
from typing import Awaitable, Iterable, List
import asyncio
import logging

from fastapi import HTTPException

from payto.api.client import ApiResult

logger = logging.getLogger(__name__)


async def gather_all(calls: Iterable[Awaitable[ApiResult]], error_message: str) -> List[ApiResult]:
    results = await asyncio.gather(*calls)
    failed = [result for result in results if not result.ok]
    if failed:
        logger.warning(f"Bulk operation: {len(failed)} of {len(results)} call(s) failed")
        try:
            failed[0].unwrap()
        except HTTPException as e:
            raise HTTPException(status_code=e.status_code, detail=error_message)
    return list(results)
