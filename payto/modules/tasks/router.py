from fastapi import APIRouter, status, Query
from typing import Optional

from payto.dependencies.apiDependencies import api_client_dependency
from payto.modules.tasks.service import TaskService
from payto.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskList, BulkCompleteRequest

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("/", response_model=TaskList)
async def list_tasks(
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar en título o descripción"),
    state: Optional[str] = Query("all", description="all, pending o completed"),
    priority: Optional[str] = Query("all", description="low, medium o high")
):
    """Tareas del usuario con estadísticas (total, completadas, pendientes, vencidas)"""
    return await TaskService(api).get_tasks(search, state, priority)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(task_data: TaskCreate, api: api_client_dependency):
    return await TaskService(api).create_task(task_data)


@router.post("/complete")
async def complete_tasks(request: BulkCompleteRequest, api: api_client_dependency):
    """Marcar varias tareas como completadas"""
    return {"tasks": await TaskService(api).complete_tasks(request.task_ids)}


@router.put("/{task_id}")
async def update_task(task_id: str, task_data: TaskUpdate, api: api_client_dependency):
    return await TaskService(api).update_task(task_id, task_data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, api: api_client_dependency):
    await TaskService(api).delete_task(task_id)
