"""
Fixtures compartidas para los tests

La API de PayTo se reemplaza por un `FakeUpstream` montado sobre
httpx.MockTransport: cada test registra las respuestas que necesita y
después revisa las llamadas recibidas.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from payto.api.client import PaytoAPIClient
from payto.dependencies.apiDependencies import get_api_client
from payto.main import app

BASE_URL = "http://payto.test/api/v1"
BASE_PATH = "/api/v1"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """API de PayTo falsa: rutas (método, path) -> respuesta"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Responder] = {}
        self.calls: List[httpx.Request] = []

    def add(self, method: str, path: str, json: Any = None, status_code: int = 200, content: Optional[bytes] = None,
            headers: Optional[Dict[str, str]] = None):
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            return httpx.Response(status_code, json=json)

        self.routes[(method.upper(), path)] = respond
        return self

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.routes[(method.upper(), path)] = handler
        return self

    def calls_to(self, method: str, path: str) -> List[httpx.Request]:
        return [call for call in self.calls if call.method == method.upper() and self.path_of(call) == path]

    @staticmethod
    def path_of(request: httpx.Request) -> str:
        path = request.url.path
        return path[len(BASE_PATH):] if path.startswith(BASE_PATH) else path

    @staticmethod
    def body_of(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, self.path_of(request)))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return route(request)


# ===== FIXTURES =====

@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_api(upstream):
    """Fábrica de PaytoAPIClient contra la API falsa (para tests de servicios)"""
    def factory(token: Optional[str] = "test-token") -> PaytoAPIClient:
        return PaytoAPIClient(token=token, base_url=BASE_URL, transport=httpx.MockTransport(upstream))
    return factory


@pytest.fixture
def client(upstream):
    """TestClient de la aplicación con el cliente de la API apuntando a la API falsa"""
    async def override_api_client():
        api = PaytoAPIClient(token="test-token", base_url=BASE_URL, transport=httpx.MockTransport(upstream))
        try:
            yield api
        finally:
            await api.aclose()

    app.dependency_overrides[get_api_client] = override_api_client
    app.state.company_cache.invalidate()
    app.state.error_log.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def company_headers():
    return {"X-Company-ID": "c1", "Authorization": "Bearer test-token"}


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token"}
