from fastapi import APIRouter, Query, status

from payto.dependencies.apiDependencies import api_client_dependency
from payto.dependencies.companyDependencies import CompanyId
from payto.modules.notifications.service import NotificationService
from payto.modules.notifications.schemas import NotificationList, UnreadCount

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationList)
async def list_notifications(
    company_id: CompanyId,
    api: api_client_dependency,
    unread_only: bool = Query(False, description="Solo no leídas")
):
    return await NotificationService(api).get_notifications(company_id, unread_only)


@router.get("/unread", response_model=UnreadCount)
async def get_unread_count(company_id: CompanyId, api: api_client_dependency):
    """Cantidad de no leídas (0 si no se puede consultar)"""
    return await NotificationService(api).get_unread_count(company_id)


@router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_as_read(company_id: CompanyId, api: api_client_dependency):
    await NotificationService(api).mark_all_as_read(company_id)


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_as_read(notification_id: str, company_id: CompanyId, api: api_client_dependency):
    await NotificationService(api).mark_as_read(notification_id)
