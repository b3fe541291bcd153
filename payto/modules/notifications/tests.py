"""
Tests para notificaciones
"""

import asyncio

import httpx

from payto.modules.notifications.service import NotificationService, decorate_notification


class TestNotificationDecoration:

    def test_known_type(self):
        notification = decorate_notification({"id": "n1", "type": "invoice_overdue", "createdAt": "2024-03-05T10:00:00Z"})

        assert notification["type_label"] == "Factura vencida"
        assert notification["category"] == "invoice"
        assert notification["created_at_formatted"] == "05/03/2024"

    def test_unknown_type_uses_title(self):
        notification = decorate_notification({"id": "n2", "type": "tax_deadline", "title": "Vence IVA"})

        assert notification["type_label"] == "Vence IVA"
        assert notification["category"] == "system"
        assert notification["created_at_formatted"] == ""


class TestNotificationEndpoints:

    def test_list_counts_unread(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/notifications", {"data": [
            {"id": "n1", "type": "payment_received", "read": False},
            {"id": "n2", "type": "connection_request", "read": True},
        ]})

        response = client.get("/notifications/", headers=company_headers)

        data = response.json()
        assert data["unread_count"] == 1
        assert [n["category"] for n in data["notifications"]] == ["payment", "connection"]
        assert "unread_only" not in upstream.calls[0].url.params

    def test_list_unread_only(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/notifications", {"data": []})

        client.get("/notifications/", headers=company_headers, params={"unread_only": True})

        assert upstream.calls[0].url.params["unread_only"] == "true"

    def test_unread_count(self, client, company_headers, upstream):
        upstream.add("GET", "/companies/c1/notifications/unread", {"data": {"count": 7}})

        assert client.get("/notifications/unread", headers=company_headers).json() == {"count": 7}

    def test_unread_count_degrades_to_zero(self, make_api, upstream, caplog):
        def broken(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream.add_handler("GET", "/companies/c1/notifications/unread", broken)

        result = asyncio.run(NotificationService(make_api()).get_unread_count("c1"))

        assert result.count == 0
        assert "Unread notifications for company c1 unavailable" in caplog.text

    def test_mark_as_read(self, client, company_headers, upstream):
        upstream.add("PATCH", "/notifications/n1/read", {"success": True})

        response = client.patch("/notifications/n1/read", headers=company_headers)

        assert response.status_code == 204
        assert upstream.calls[0].method == "PATCH"

    def test_mark_all_as_read_failure(self, client, company_headers, upstream):
        upstream.add("POST", "/companies/c1/notifications/read-all", {"message": "Server Error"}, status_code=500)

        response = client.post("/notifications/read-all", headers=company_headers)

        assert response.status_code == 502
