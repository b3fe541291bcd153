"""
Tests para la red de empresas
"""

import httpx


class TestNetworkOverview:

    def test_all_sources_loaded(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/network", {"data": [
            {"id": "n1", "connected_company_name": "Acme SA", "connected_company_unique_id": "ACM123"},
            {"id": "n2", "connectedCompanyName": "Globex SRL", "connectedCompanyUniqueId": "GLX999"},
        ]})
        upstream.add("GET", "/companies/c1/network/requests", {"data": [{"id": "r1"}]})
        upstream.add("GET", "/companies/c1/network/sent", {"data": []})
        upstream.add("GET", "/companies/c1/network/stats", {"data": {"totalConnections": 2, "pendingReceived": 1}})

        response = client.get("/network/", headers=company_headers)

        data = response.json()
        assert response.status_code == 200
        assert len(data["connections"]) == 2
        assert data["pending_requests"] == [{"id": "r1"}]
        assert data["stats"] == {"total_connections": 2, "pending_received": 1, "pending_sent": 0}
        assert data["errors"] == {}

    def test_failing_source_is_isolated(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/network", {"data": [{"id": "n1", "connected_company_name": "Acme SA"}]})
        upstream.add("GET", "/companies/c1/network/requests", {"message": "Server Error"}, status_code=500)
        upstream.add("GET", "/companies/c1/network/sent", {"data": [{"id": "s1"}]})

        def broken(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.add_handler("GET", "/companies/c1/network/stats", broken)

        response = client.get("/network/", headers=company_headers)

        data = response.json()
        assert response.status_code == 200
        assert data["connections"][0]["id"] == "n1"
        assert data["sent_requests"] == [{"id": "s1"}]
        assert data["pending_requests"] == []
        assert data["stats"]["total_connections"] == 0
        assert data["errors"] == {
            "pending_requests": "Error del servidor",
            "stats": "No se pudo conectar con el servidor",
        }

    def test_search_connections(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/network", {"data": [
            {"id": "n1", "connected_company_name": "Acme SA", "connected_company_unique_id": "ACM123"},
            {"id": "n2", "connectedCompanyName": "Globex SRL", "connectedCompanyUniqueId": "GLX999"},
        ]})

        response = client.get("/network/", headers=company_headers, params={"search": "glx"})

        assert [c["id"] for c in response.json()["connections"]] == ["n2"]


class TestConnectionRequests:

    def test_send_request(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/network/connect", {"data": {"id": "r2", "status": "pending"}})

        response = client.post("/network/connect", headers=company_headers, json={"company_unique_id": "GLX999"})

        assert response.status_code == 201
        assert upstream.body_of(upstream.calls[0]) == {"company_unique_id": "GLX999"}

    def test_accept_unknown_request(self, client, company_headers, upstream):
        response = client.post("/network/requests/r404/accept", headers=company_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "No encontrado"
