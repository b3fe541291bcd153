from typing import Annotated
from fastapi import Depends, Request, HTTPException, status


def get_company_id(request: Request) -> str:
    """Extract company_id from request state set by CompanyContextMiddleware"""
    company_id = getattr(request.state, "company_id", None)
    if not company_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empresa no seleccionada. Envíe el header X-Company-ID."
        )
    return company_id


CompanyId = Annotated[str, Depends(get_company_id)]
