"""
Tests para registros de auditoría
"""

import asyncio

import httpx

from payto.modules.audit.service import AuditService


LOGS = [
    {"id": 1, "action": "invoice.created", "description": "Factura 0001-00000001 creada", "entity_id": "i1",
     "user": {"name": "Laura Gómez", "email": "laura@acme.com.ar"}},
    {"id": 2, "action": "member.removed", "description": "Miembro quitado", "entity_id": "m3",
     "user": {"name": "Pedro Díaz", "email": "pedro@acme.com.ar"}},
]


class TestAuditEndpoints:

    def test_page_with_pagination_metadata(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/audit-logs", {
            "data": LOGS,
            "pagination": {"currentPage": 2, "lastPage": 5, "total": 230, "perPage": 50}
        })

        response = client.get("/audit-logs/", headers=company_headers, params={"page": 2, "action": "invoice.created"})

        data = response.json()
        assert data["current_page"] == 2
        assert data["total_pages"] == 5
        assert data["total_items"] == 230
        params = upstream.calls[0].url.params
        assert params["page"] == "2"
        assert params["action"] == "invoice.created"
        assert params["per_page"] == "50"

    def test_search_filters_received_page(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/audit-logs", {"data": LOGS})

        response = client.get("/audit-logs/", headers=company_headers, params={"search": "pedro"})

        assert [log["id"] for log in response.json()["data"]] == [2]

    def test_not_found_means_empty(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/audit-logs", {"message": "No hay registros"}, status_code=404)
        upstream.add("GET", "/companies/c1/audit-logs/stats", {"message": "No hay registros"}, status_code=404)
        upstream.add("GET", "/companies/c1/audit-logs/recent", {"message": "No hay registros"}, status_code=404)

        logs = client.get("/audit-logs/", headers=company_headers)
        stats = client.get("/audit-logs/stats", headers=company_headers)
        recent = client.get("/audit-logs/recent", headers=company_headers)

        assert logs.status_code == 200
        assert logs.json() == {"data": [], "current_page": 1, "total_pages": 1, "total_items": 0, "per_page": 50}
        assert stats.json()["total_logs"] == 0
        assert recent.json() == {"data": []}

    def test_other_errors_are_reported(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/audit-logs", {"message": "This action is unauthorized."}, status_code=403)

        response = client.get("/audit-logs/", headers=company_headers)

        assert response.status_code == 403

    def test_export_csv_includes_every_page(self, client, company_headers, upstream):
        def pages(request):
            page = int(request.url.params["page"])
            return httpx.Response(200, json={
                "data": [{**LOGS[page - 1], "created_at": f"2024-03-0{page}T10:00:00Z"}],
                "pagination": {"currentPage": page, "lastPage": 2}
            })

        upstream.add_handler("GET", "/companies/c1/audit-logs", pages)

        response = client.get("/audit-logs/export", headers=company_headers, params={"action": "invoice.created"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0] == "Fecha,Usuario,Email,Acción,Entidad,ID Entidad,Descripción,IP"
        assert len(lines) == 3
        assert "Laura Gómez" in lines[1]
        assert "Pedro Díaz" in lines[2]
        assert all(call.url.params["action"] == "invoice.created" for call in upstream.calls)

    def test_export_without_logs(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/audit-logs", {"message": "No hay registros"}, status_code=404)

        response = client.get("/audit-logs/export", headers=company_headers)

        assert response.status_code == 200
        assert response.text.splitlines() == ["Fecha,Usuario,Email,Acción,Entidad,ID Entidad,Descripción,IP"]

    def test_export_fails_when_a_page_fails(self, client, company_headers, upstream):
        def pages(request):
            if request.url.params["page"] == "1":
                return httpx.Response(200, json={"data": LOGS[:1], "pagination": {"lastPage": 2}})
            return httpx.Response(500, json={"message": "Server Error"})

        upstream.add_handler("GET", "/companies/c1/audit-logs", pages)

        response = client.get("/audit-logs/export", headers=company_headers)

        assert response.status_code == 502


class TestAuditService:

    def test_get_all_logs_walks_pages(self, make_api, upstream):
        def pages(request):
            page = int(request.url.params["page"])
            return httpx.Response(200, json={
                "data": [LOGS[page - 1]],
                "pagination": {"currentPage": page, "lastPage": 2}
            })

        upstream.add_handler("GET", "/companies/c1/audit-logs", pages)

        async def run():
            async with make_api() as api:
                return await AuditService(api).get_all_logs("c1")

        logs = asyncio.run(run())

        assert [log["id"] for log in logs] == [1, 2]
        assert len(upstream.calls) == 2
