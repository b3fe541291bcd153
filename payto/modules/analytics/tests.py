"""
Tests para estadísticas
"""

from decimal import Decimal


def add_sources(upstream, summary_status=200):
    upstream.add("GET", "/companies/c1/analytics/summary", {
        "period": {"start": "2024-03-01", "end": "2024-03-31", "month": "Marzo"},
        "sales": {"total": "15000", "count": 3, "average": "5000"},
        "purchases": {"total": "4000", "count": 2, "average": "2000"},
        "balance": "11000",
    } if summary_status == 200 else {"message": "Server Error"}, status_code=summary_status)
    upstream.add("GET", "/companies/c1/analytics/revenue-trend", [
        {"month": "2024-02", "sales": "9000", "purchases": "3000", "balance": "6000"},
        {"month": "2024-03", "sales": "15000", "purchases": "4000", "balance": "11000"},
    ])
    upstream.add("GET", "/companies/c1/analytics/top-clients", [
        {"client_id": "cl1", "client_name": "Globex, SRL", "total_amount": "12000", "invoice_count": 2},
    ])
    upstream.add("GET", "/companies/c1/analytics/pending-invoices", {"to_collect": 4, "to_pay": 1, "pending_approvals": 2})


class TestAnalyticsEndpoints:

    def test_all_sources_loaded(self, client, company_headers, upstream):
        add_sources(upstream)

        response = client.get("/analytics/", headers=company_headers, params={"period": "quarter"})

        data = response.json()
        assert response.status_code == 200
        assert data["period_label"] == "Trimestre"
        assert Decimal(str(data["summary"]["balance"])) == Decimal("11000")
        assert data["summary"]["sales"]["count"] == 3
        assert len(data["revenue_trend"]) == 2
        assert data["pending"] == {"to_collect": 4, "to_pay": 1, "pending_approvals": 2}
        assert data["errors"] == {}
        assert upstream.calls_to("GET", "/companies/c1/analytics/summary")[0].url.params["period"] == "quarter"

    def test_failing_source_is_isolated(self, client, company_headers, upstream):
        add_sources(upstream, summary_status=500)

        data = client.get("/analytics/", headers=company_headers).json()

        assert data["errors"] == {"summary": "Error del servidor"}
        assert Decimal(str(data["summary"]["balance"])) == Decimal("0")
        assert data["top_clients"][0]["client_name"] == "Globex, SRL"

    def test_custom_period_sends_range(self, client, company_headers, upstream):
        add_sources(upstream)

        client.get("/analytics/", headers=company_headers, params={
            "period": "custom", "start_date": "2024-01-01", "end_date": "2024-03-31"
        })

        params = upstream.calls_to("GET", "/companies/c1/analytics/top-clients")[0].url.params
        assert params["start_date"] == "2024-01-01"
        assert params["end_date"] == "2024-03-31"

    def test_custom_period_needs_range(self, client, company_headers, upstream):
        response = client.get("/analytics/", headers=company_headers, params={"period": "custom", "start_date": "2024-01-01"})

        assert response.status_code == 422
        assert response.json()["detail"] == "Seleccione fecha de inicio y fin"
        assert upstream.calls == []

    def test_custom_period_with_inverted_range(self, client, company_headers):
        response = client.get("/analytics/", headers=company_headers, params={
            "period": "custom", "start_date": "2024-03-31", "end_date": "2024-01-01"
        })

        assert response.status_code == 422

    def test_export_csv(self, client, company_headers, upstream):
        add_sources(upstream)

        response = client.get("/analytics/export", headers=company_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0] == "Periodo,Mes Actual"
        assert "Ventas,15000,3" in lines
        assert "2024-03,15000,4000" in lines
        assert '"Globex, SRL",12000,2' in lines

    def test_export_fails_with_missing_source(self, client, company_headers, upstream):
        add_sources(upstream, summary_status=500)

        response = client.get("/analytics/export", headers=company_headers)

        assert response.status_code == 502
        assert response.json()["detail"] == "Error del servidor"
