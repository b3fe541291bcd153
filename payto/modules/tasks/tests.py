"""
Tests para el centro de tareas
"""

from datetime import date

import pytest

from payto.modules.tasks.service import is_task_overdue, task_stats, BULK_COMPLETE_ERROR

TODAY = date(2024, 6, 15)


@pytest.fixture
def tasks():
    return [
        {"id": "t1", "title": "Cargar facturas de proveedores", "priority": "high", "is_completed": False,
         "due_date": "2024-06-10"},
        {"id": "t2", "title": "Conciliar cobros", "description": "Banco Nación", "priority": "medium",
         "is_completed": True, "due_date": "2024-06-01"},
        {"id": "t3", "title": "Renovar certificado AFIP", "priority": "high", "is_completed": False},
    ]


class TestTaskHelpers:

    def test_overdue_only_when_pending_and_past_due(self, tasks):
        assert is_task_overdue(tasks[0], TODAY) is True
        assert is_task_overdue(tasks[1], TODAY) is False
        assert is_task_overdue(tasks[2], TODAY) is False

    def test_unreadable_due_date_is_not_overdue(self):
        assert is_task_overdue({"id": "t4", "is_completed": False, "due_date": "fin de mes"}, TODAY) is False

    def test_stats(self, tasks):
        stats = task_stats(tasks, TODAY)

        assert (stats.total, stats.completed, stats.pending, stats.overdue) == (3, 1, 2, 1)


class TestTaskEndpoints:

    def test_tasks_do_not_need_company(self, client, auth_headers, upstream, tasks):
        upstream.add("GET", "/tasks", {"data": tasks})

        response = client.get("/tasks/", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["stats"]["total"] == 3
        assert response.json()["tasks"][0]["due_date_formatted"] == "10/06/2024"

    def test_filters(self, client, auth_headers, upstream, tasks):
        upstream.add("GET", "/tasks", {"data": tasks})

        pending_high = client.get("/tasks/", headers=auth_headers, params={"state": "pending", "priority": "high"})
        by_text = client.get("/tasks/", headers=auth_headers, params={"search": "nación"})

        assert [task["id"] for task in pending_high.json()["tasks"]] == ["t1", "t3"]
        assert [task["id"] for task in by_text.json()["tasks"]] == ["t2"]
        assert pending_high.json()["stats"]["total"] == 3

    def test_complete_many(self, client, auth_headers, upstream):
        upstream.add("PUT", "/tasks/t1", {"data": {"id": "t1", "is_completed": True}})
        upstream.add("PUT", "/tasks/t3", {"data": {"id": "t3", "is_completed": True}})

        response = client.post("/tasks/complete", headers=auth_headers, json={"task_ids": ["t1", "t3"]})

        assert response.status_code == 200
        assert [task["id"] for task in response.json()["tasks"]] == ["t1", "t3"]
        assert all(upstream.body_of(call) == {"is_completed": True} for call in upstream.calls)

    def test_complete_many_single_error(self, client, auth_headers, upstream):
        upstream.add("PUT", "/tasks/t1", {"data": {"id": "t1", "is_completed": True}})
        upstream.add("PUT", "/tasks/t3", {"message": "Server Error"}, status_code=500)

        response = client.post("/tasks/complete", headers=auth_headers, json={"task_ids": ["t1", "t3"]})

        assert response.status_code == 502
        assert response.json()["detail"] == BULK_COMPLETE_ERROR
        assert len(upstream.calls) == 2
