from fastapi import APIRouter, status

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.bank_accounts.service import BankAccountService
from payto.modules.bank_accounts.schemas import BankAccountCreate, BankAccountList

router = APIRouter(prefix="/bank-accounts", tags=["Bank Accounts"])


@router.get("/", response_model=BankAccountList)
async def list_bank_accounts(company_id: CompanyId, api: api_client_dependency):
    return await BankAccountService(api).get_accounts(company_id)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_bank_account(account: BankAccountCreate, company_id: CompanyId, api: api_client_dependency):
    """
    Agregar una cuenta bancaria

    - **cbu**: exactamente 22 dígitos
    - **account_type**: corriente, caja_ahorro o cuenta_sueldo
    """
    return await BankAccountService(api).create_account(company_id, account)


@router.put("/{account_id}")
async def update_bank_account(
    account_id: str,
    account: BankAccountCreate,
    company_id: CompanyId,
    api: api_client_dependency
):
    return await BankAccountService(api).update_account(company_id, account_id, account)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bank_account(account_id: str, company_id: CompanyId, api: api_client_dependency):
    await BankAccountService(api).delete_account(company_id, account_id)
