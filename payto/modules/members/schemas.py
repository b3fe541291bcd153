from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMINISTRATOR = "administrator"
    FINANCIAL_DIRECTOR = "financial_director"
    ACCOUNTANT = "accountant"
    APPROVER = "approver"
    OPERATOR = "operator"


class RoleUpdate(BaseModel):
    role: MemberRole
    confirmation_code: Optional[str] = Field(None, description="Requerido por la API para transferir la propiedad")


class MemberList(BaseModel):
    members: List[Dict[str, Any]]
    total: int
    counts_by_role: Dict[str, int]


class RolePermissions(BaseModel):
    role: MemberRole
    label: str
    description: str
    permissions: List[str]
