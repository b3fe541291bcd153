from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date


class AuditFilters(BaseModel):
    """Filtros que se envían a la API"""
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    ip_address: Optional[str] = None
    description: Optional[str] = None
    per_page: int = Field(50, ge=1, le=200)


class AuditLogsPage(BaseModel):
    data: List[Dict[str, Any]] = Field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    per_page: int = 50


class AuditStats(BaseModel):
    total_logs: int = 0
    unique_actions: int = 0
    unique_users: int = 0
    action_breakdown: Dict[str, int] = Field(default_factory=dict)
