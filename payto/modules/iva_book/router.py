from fastapi import APIRouter, Query, Response
from typing import Optional

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.iva_book.service import IvaBookService
from payto.modules.iva_book.schemas import BookType, IvaBookOverview

router = APIRouter(prefix="/iva-book", tags=["IVA Book"])


@router.get("/", response_model=IvaBookOverview)
async def get_iva_book(
    company_id: CompanyId,
    api: api_client_dependency,
    month: Optional[int] = Query(None, ge=1, le=12, description="Mes (por defecto el actual)"),
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Año (por defecto el actual)")
):
    """
    Libro IVA del período

    - **sales** / **purchases**: registros, totales por columna y agrupación por alícuota
    - **summary**: débito fiscal, crédito fiscal y saldo (a pagar o a favor)

    Solo para Responsables Inscriptos (403 en otro caso).
    """
    return await IvaBookService(api).get_overview(company_id, month, year)


@router.get("/export/{book_type}")
async def export_iva_book(
    book_type: BookType,
    company_id: CompanyId,
    api: api_client_dependency,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100)
):
    """Exportar el libro en formato TXT de AFIP"""
    export = await IvaBookService(api).export_txt(company_id, book_type, month, year)
    return Response(
        content=export.content,
        media_type=export.content_type or "text/plain",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
