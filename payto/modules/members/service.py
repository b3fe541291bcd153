"""
Servicio de miembros de la empresa

- Listado con búsqueda por nombre/email y filtro por rol
- Cambio de rol
- Baja de miembros, sin dejar a la empresa sin administradores
"""

from fastapi import HTTPException, status
from collections import Counter
from typing import Any, Dict, List, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.common.filters import filter_items
from payto.common.formatting import translate_role
from payto.modules.members.schemas import MemberList, RoleUpdate

logger = logging.getLogger(__name__)

MEMBER_SEARCH_FIELDS = ["name", "email"]

ADMIN_ROLES = ("owner", "administrator")


class MemberService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/members{suffix}"

    async def _fetch_members(self, company_id: str) -> List[Dict[str, Any]]:
        data = (await self.api.get(self._path(company_id))).unwrap()
        if isinstance(data, dict):
            data = data.get("members") or []
        return data or []

    async def get_members(
        self,
        company_id: str,
        search: Optional[str] = None,
        role: Optional[str] = "all"
    ) -> MemberList:
        members = await self._fetch_members(company_id)
        counts = Counter(member.get("role") for member in members)
        filtered = filter_items(members, search, MEMBER_SEARCH_FIELDS, {"role": role})
        return MemberList(
            members=[{**m, "role_label": translate_role(m.get("role") or "")} for m in filtered],
            total=len(filtered),
            counts_by_role={r: c for r, c in counts.items() if r}
        )

    async def update_role(self, company_id: str, member_id: str, role_data: RoleUpdate) -> Dict[str, Any]:
        member = (await self.api.put(
            self._path(company_id, f"/{member_id}/role"),
            json=role_data.model_dump(exclude_none=True)
        )).unwrap()
        logger.info(f"Member {member_id} of company {company_id} changed role to {role_data.role.value}")
        return member

    async def remove_member(self, company_id: str, member_id: str) -> None:
        members = await self._fetch_members(company_id)
        target = next((m for m in members if str(m.get("id")) == str(member_id)), None)
        if target is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Miembro no encontrado")

        if target.get("role") in ADMIN_ROLES:
            admins = [m for m in members if m.get("role") in ADMIN_ROLES]
            if len(admins) <= 1:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="La empresa debe tener al menos un administrador"
                )

        (await self.api.delete(self._path(company_id, f"/{member_id}"))).unwrap()
