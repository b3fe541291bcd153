from fastapi import APIRouter, status, Query
from typing import List, Optional

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.common.formatting import translate_role, role_description
from payto.modules.members.permissions import permissions_for
from payto.modules.members.service import MemberService
from payto.modules.members.schemas import MemberList, MemberRole, RoleUpdate, RolePermissions

router = APIRouter(prefix="/members", tags=["Members"])


@router.get("/", response_model=MemberList)
async def list_members(
    company_id: CompanyId,
    api: api_client_dependency,
    search: Optional[str] = Query(None, description="Buscar por nombre o email"),
    role: Optional[str] = Query("all", description="Filtrar por rol")
):
    """Miembros de la empresa con cantidad por rol"""
    return await MemberService(api).get_members(company_id, search, role)


@router.get("/roles", response_model=List[RolePermissions])
async def list_roles():
    """Roles disponibles con su descripción y permisos"""
    return [
        RolePermissions(
            role=role,
            label=translate_role(role.value),
            description=role_description(role.value),
            permissions=permissions_for(role.value)
        )
        for role in MemberRole
    ]


@router.put("/{member_id}/role")
async def update_member_role(
    member_id: str,
    role_data: RoleUpdate,
    company_id: CompanyId,
    api: api_client_dependency
):
    return await MemberService(api).update_role(company_id, member_id, role_data)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(member_id: str, company_id: CompanyId, api: api_client_dependency):
    """Quitar un miembro; no se puede quitar al último administrador"""
    await MemberService(api).remove_member(company_id, member_id)
