"""
Servicio de notificaciones

El contador de no leídas alimenta la campana del encabezado y se pide en
cada página: si la API falla se informa 0 en lugar de un error.
"""

from typing import Any, Dict, List
import logging

from payto.api.client import PaytoAPIClient
from payto.common.formatting import format_date
from payto.modules.notifications.schemas import (
    NotificationList, NotificationType, UnreadCount, NOTIFICATION_LABELS
)

logger = logging.getLogger(__name__)


def notification_category(notification_type: str) -> str:
    """invoice, payment, connection o system, según el prefijo del tipo"""
    prefix = (notification_type or "").split("_", 1)[0]
    return prefix if prefix in ("invoice", "payment", "connection") else "system"


def decorate_notification(notification: Dict[str, Any]) -> Dict[str, Any]:
    notification_type = notification.get("type") or ""
    try:
        label = NOTIFICATION_LABELS[NotificationType(notification_type)]
    except ValueError:
        label = notification.get("title") or notification_type
    created_at = notification.get("created_at") or notification.get("createdAt")
    return {
        **notification,
        "type_label": label,
        "category": notification_category(notification_type),
        "created_at_formatted": format_date(created_at),
    }


class NotificationService:

    def __init__(self, api: PaytoAPIClient):
        self.api = api

    def _path(self, company_id: str, suffix: str = "") -> str:
        return f"/companies/{company_id}/notifications{suffix}"

    async def get_notifications(self, company_id: str, unread_only: bool = False) -> NotificationList:
        params = {"unread_only": "true"} if unread_only else None
        data = (await self.api.get(self._path(company_id), params=params)).unwrap() or []
        if isinstance(data, dict):
            data = data.get("notifications") or []
        notifications: List[Dict[str, Any]] = [decorate_notification(n) for n in data]
        return NotificationList(
            notifications=notifications,
            unread_count=sum(1 for n in notifications if not n.get("read"))
        )

    async def get_unread_count(self, company_id: str) -> UnreadCount:
        result = await self.api.get(self._path(company_id, "/unread"))
        if not result.ok:
            logger.warning(f"Unread notifications for company {company_id} unavailable: {result.error.message}")
            return UnreadCount()
        data = result.data or {}
        return UnreadCount(count=data.get("count") or 0)

    async def mark_as_read(self, notification_id: str) -> None:
        (await self.api.patch(f"/notifications/{notification_id}/read")).unwrap()

    async def mark_all_as_read(self, company_id: str) -> None:
        (await self.api.post(self._path(company_id, "/read-all"))).unwrap()
        logger.info(f"All notifications marked as read for company {company_id}")
