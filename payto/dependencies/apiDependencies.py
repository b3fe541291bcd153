from typing import Annotated, AsyncIterator, Optional
from fastapi import Depends, Request

from payto.api.client import PaytoAPIClient
from payto.core.events import RefreshBus


def get_bearer_token(request: Request) -> Optional[str]:
    """Token Bearer del navegador, reenviado tal cual a la API"""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_api_client(request: Request) -> AsyncIterator[PaytoAPIClient]:
    """Cliente de la API por request; se cierra al terminar"""
    client = PaytoAPIClient(token=get_bearer_token(request))
    try:
        yield client
    finally:
        await client.aclose()


def get_refresh_bus(request: Request) -> RefreshBus:
    return request.app.state.refresh_bus


api_client_dependency = Annotated[PaytoAPIClient, Depends(get_api_client)]
refresh_bus_dependency = Annotated[RefreshBus, Depends(get_refresh_bus)]
