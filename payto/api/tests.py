"""
Tests para el cliente de la API, la paginación y las operaciones masivas
"""

from decimal import Decimal
import asyncio

import httpx
import pytest
from fastapi import HTTPException

from payto.api.bulk import gather_all
from payto.api.client import ApiResult, ApiError, normalize_payload, jsonable
from payto.api.pagination import iter_pages, collect_all


def run(coro):
    return asyncio.run(coro)


# ===== NORMALIZACIÓN =====

class TestNormalizePayload:

    def test_bare_body(self):
        assert normalize_payload([1, 2]) == ([1, 2], {})
        assert normalize_payload({"id": 1}) == ({"id": 1}, {})

    def test_envelope(self):
        data, meta = normalize_payload({"success": True, "data": [1], "message": "ok"})

        assert data == [1]
        assert meta == {"success": True, "message": "ok"}

    def test_nested_envelope(self):
        data, meta = normalize_payload({
            "success": True,
            "data": {"data": [{"id": 1}], "pagination": {"lastPage": 3}}
        })

        assert data == [{"id": 1}]
        assert meta["pagination"] == {"lastPage": 3}

    def test_entity_with_data_field_is_kept(self):
        payload = {"id": 1, "data": "valor"}

        assert normalize_payload(payload) == (payload, {})

    def test_jsonable(self):
        assert jsonable({"amount": Decimal("10.5"), "items": [Decimal("1")]}) == {"amount": "10.5", "items": ["1"]}

    def test_jsonable_keeps_money_precision(self):
        assert jsonable({"amount": Decimal("12345678901234.57")}) == {"amount": "12345678901234.57"}


# ===== CLIENTE =====

class TestPaytoAPIClient:

    def call(self, make_api, method="GET", path="/ping", **kwargs):
        async def go():
            async with make_api() as api:
                return await api.request(method, path, **kwargs)
        return run(go())

    def test_headers_and_success(self, make_api, upstream):
        upstream.add("GET", "/ping", {"data": {"pong": True}})

        result = self.call(make_api)

        assert result.ok
        assert result.data == {"pong": True}
        request = upstream.calls[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/json"

    def test_none_params_are_dropped(self, make_api, upstream):
        upstream.add("GET", "/ping", [])

        self.call(make_api, params={"page": 1, "status": None})

        assert dict(upstream.calls[0].url.params) == {"page": "1"}

    def test_error_message_from_body(self, make_api, upstream):
        upstream.add("POST", "/ping", {
            "message": "The given data was invalid.",
            "errors": {"email": ["El email ya existe"]}
        }, status_code=422)

        result = self.call(make_api, method="POST", json={"email": "x@y.com"})

        assert not result.ok
        assert result.error.message == "Los datos proporcionados son inválidos"
        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.errors[0].field == "email"

    def test_error_without_message_uses_catalog(self, make_api, upstream):
        upstream.add("GET", "/ping", content=b"<html>boom</html>", status_code=503)

        result = self.call(make_api)

        assert result.error.message == "El sistema está en mantenimiento"
        assert result.error.status_code == 503

    def test_success_false_is_an_error(self, make_api, upstream):
        upstream.add("GET", "/ping", {"success": False, "message": "Empresa inactiva"})

        result = self.call(make_api)

        assert not result.ok
        assert result.error.message == "Empresa inactiva"

    def test_empty_body(self, make_api, upstream):
        upstream.add("DELETE", "/ping", status_code=204)

        result = self.call(make_api, method="DELETE")

        assert result.ok
        assert result.data is None

    def test_non_json_body(self, make_api, upstream):
        upstream.add("GET", "/ping", content=b"not json")

        result = self.call(make_api)

        assert not result.ok
        assert result.error.message == "Ocurrió un error inesperado"

    def test_network_error(self, make_api, upstream):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.add_handler("GET", "/ping", refuse)

        result = self.call(make_api)

        assert result.error.code == "NETWORK_ERROR"
        assert result.error.status_code is None

    def test_timeout(self, make_api, upstream):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        upstream.add_handler("GET", "/ping", slow)

        result = self.call(make_api)

        assert result.error.code == "TIMEOUT"
        assert result.error.message == "Tiempo de espera agotado. Por favor, intente nuevamente."

    def test_raw_body(self, make_api, upstream):
        upstream.add("GET", "/ping", content=b"%PDF-1.4", headers={"content-type": "application/pdf"})

        result = self.call(make_api, raw=True)

        assert result.data == b"%PDF-1.4"
        assert result.meta["content_type"] == "application/pdf"


class TestApiResult:

    def test_unwrap_keeps_client_errors(self):
        result = ApiResult.failure(ApiError(message="No encontrado", status_code=404))

        with pytest.raises(HTTPException) as exc_info:
            result.unwrap()

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "No encontrado"

    @pytest.mark.parametrize("status_code", [500, 503, None])
    def test_unwrap_maps_server_and_network_errors_to_502(self, status_code):
        result = ApiResult.failure(ApiError(message="Error", status_code=status_code))

        with pytest.raises(HTTPException) as exc_info:
            result.unwrap()

        assert exc_info.value.status_code == 502

    def test_unwrap_or(self):
        assert ApiResult.failure(ApiError(message="x")).unwrap_or([]) == []
        assert ApiResult.success([1]).unwrap_or([]) == [1]


# ===== PAGINACIÓN =====

class TestPagination:

    def fetcher(self, pages, calls):
        async def fetch_page(page):
            calls.append(page)
            return pages[page - 1] if page <= len(pages) else ApiResult.success([])
        return fetch_page

    def test_stops_on_empty_page(self):
        calls = []
        pages = [ApiResult.success([1, 2]), ApiResult.success([3])]

        assert run(collect_all(self.fetcher(pages, calls))) == [1, 2, 3]
        assert calls == [1, 2, 3]

    def test_stops_on_last_page_metadata(self):
        calls = []
        pages = [
            ApiResult.success([1], {"pagination": {"lastPage": 2}}),
            ApiResult.success([2], {"pagination": {"lastPage": 2}}),
        ]

        assert run(collect_all(self.fetcher(pages, calls))) == [1, 2]
        assert calls == [1, 2]

    def test_failed_page_raises_instead_of_truncating(self):
        calls = []
        pages = [ApiResult.success([1]), ApiResult.failure(ApiError(message="Error del servidor", status_code=503))]

        with pytest.raises(HTTPException) as exc_info:
            run(collect_all(self.fetcher(pages, calls)))

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "Error del servidor"
        assert calls == [1, 2]

    def test_failed_first_page_keeps_client_error_status(self):
        pages = [ApiResult.failure(ApiError(message="No tienes permisos para realizar esta acción", status_code=403))]

        with pytest.raises(HTTPException) as exc_info:
            run(collect_all(self.fetcher(pages, [])))

        assert exc_info.value.status_code == 403

    def test_max_pages(self):
        async def endless(page):
            return ApiResult.success([page])

        assert run(collect_all(endless, max_pages=3)) == [1, 2, 3]

    def test_pages_are_yielded_in_order(self):
        calls = []
        pages = [ApiResult.success({"data": ["a"], "last_page": 2}), ApiResult.success({"data": ["b"]})]

        async def consume():
            return [page async for page in iter_pages(self.fetcher(pages, calls))]

        assert run(consume()) == [["a"], ["b"]]


# ===== OPERACIONES MASIVAS =====

class TestGatherAll:

    def test_all_succeed(self):
        async def ok(value):
            return ApiResult.success(value)

        results = run(gather_all([ok(1), ok(2)], "Error al completar las tareas"))

        assert [result.data for result in results] == [1, 2]

    def test_single_generic_error(self):
        async def ok():
            return ApiResult.success(None)

        async def failed():
            return ApiResult.failure(ApiError(message="Tarea no encontrada", status_code=404))

        with pytest.raises(HTTPException) as exc_info:
            run(gather_all([ok(), failed(), failed()], "Error al completar las tareas"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Error al completar las tareas"
