from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date
from enum import Enum


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    is_completed: Optional[bool] = None


class BulkCompleteRequest(BaseModel):
    task_ids: List[str] = Field(..., min_length=1)


class TaskStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0


class TaskList(BaseModel):
    tasks: List[Dict[str, Any]]
    stats: TaskStats
