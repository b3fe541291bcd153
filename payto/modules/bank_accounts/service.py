"""
Servicio de cuentas bancarias de la empresa
"""

from typing import Any, Dict, Optional
import logging

from payto.api.client import PaytoAPIClient
from payto.modules.bank_accounts.schemas import (
    AccountType, BankAccountCreate, BankAccountList, ACCOUNT_TYPE_LABELS
)

logger = logging.getLogger(__name__)


def decorate_account(account: Dict[str, Any]) -> Dict[str, Any]:
    raw_type = account.get("account_type") or account.get("accountType")
    try:
        label = ACCOUNT_TYPE_LABELS[AccountType(raw_type)]
    except ValueError:
        label = raw_type
    return {**account, "account_type_label": label}


def _is_primary(account: Dict[str, Any]) -> bool:
    return bool(account.get("is_primary") or account.get("isPrimary"))


class BankAccountService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/bank-accounts{suffix}"

    async def get_accounts(self, company_id: str) -> BankAccountList:
        data = (await self.api.get(self._path(company_id))).unwrap() or []
        accounts = [decorate_account(account) for account in data]
        primary: Optional[Dict[str, Any]] = next((a for a in accounts if _is_primary(a)), None)
        return BankAccountList(
            accounts=accounts,
            primary_account_id=str(primary["id"]) if primary and primary.get("id") is not None else None
        )

    async def create_account(self, company_id: str, account: BankAccountCreate) -> Dict[str, Any]:
        created = (await self.api.post(self._path(company_id), json=account.model_dump(exclude_none=True))).unwrap()
        logger.info(f"Bank account added for company {company_id}")
        return decorate_account(created or {})

    async def update_account(self, company_id: str, account_id: str, account: BankAccountCreate) -> Dict[str, Any]:
        updated = (await self.api.put(
            self._path(company_id, f"/{account_id}"), json=account.model_dump(exclude_none=True)
        )).unwrap()
        return decorate_account(updated or {})

    async def delete_account(self, company_id: str, account_id: str) -> None:
        (await self.api.delete(self._path(company_id, f"/{account_id}"))).unwrap()
        logger.info(f"Bank account {account_id} removed from company {company_id}")
