"""
Servicio del centro de tareas del usuario

Las tareas son del usuario, no de la empresa. Completar varias a la vez
lanza las actualizaciones juntas; si alguna falla se informa un único error.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence
import logging

from payto.api.client import PaytoAPIClient
from payto.api.bulk import gather_all
from payto.common.filters import filter_items, is_unset
from payto.common.formatting import format_date, parse_date
from payto.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskList, TaskStats

logger = logging.getLogger(__name__)

TASK_SEARCH_FIELDS = ["title", "description"]

BULK_COMPLETE_ERROR = "Error al completar las tareas"


def is_task_overdue(task: Dict[str, Any], today: Optional[date] = None) -> bool:
    due = parse_date(task.get("due_date"))
    if task.get("is_completed") or due is None:
        return False
    return due < (today or date.today())


def task_stats(tasks: Sequence[Dict[str, Any]], today: Optional[date] = None) -> TaskStats:
    completed = sum(1 for task in tasks if task.get("is_completed"))
    return TaskStats(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=sum(1 for task in tasks if is_task_overdue(task, today))
    )


class TaskService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    async def get_tasks(
        self,
        search: Optional[str] = None,
        state: Optional[str] = "all",
        priority: Optional[str] = "all"
    ) -> TaskList:
        data = (await self.api.get("/tasks")).unwrap()
        if isinstance(data, dict):
            data = data.get("tasks") or []
        tasks: List[Dict[str, Any]] = data or []

        filtered = filter_items(tasks, search, TASK_SEARCH_FIELDS, {"priority": priority})
        if not is_unset(state):
            completed = state == "completed"
            filtered = [task for task in filtered if bool(task.get("is_completed")) == completed]

        return TaskList(
            tasks=[
                {**task, "is_overdue": is_task_overdue(task), "due_date_formatted": format_date(task.get("due_date"))}
                for task in filtered
            ],
            stats=task_stats(tasks)
        )

    async def create_task(self, task_data: TaskCreate) -> Dict[str, Any]:
        return (await self.api.post("/tasks", json=task_data.model_dump(exclude_none=True))).unwrap()

    async def update_task(self, task_id: str, task_data: TaskUpdate) -> Dict[str, Any]:
        return (await self.api.put(f"/tasks/{task_id}", json=task_data.model_dump(exclude_none=True))).unwrap()

    async def delete_task(self, task_id: str) -> None:
        (await self.api.delete(f"/tasks/{task_id}")).unwrap()

    async def complete_tasks(self, task_ids: Sequence[str]) -> List[Dict[str, Any]]:
        results = await gather_all(
            (self.api.put(f"/tasks/{task_id}", json={"is_completed": True}) for task_id in task_ids),
            BULK_COMPLETE_ERROR
        )
        logger.info(f"{len(task_ids)} task(s) completed")
        return [result.data for result in results]
