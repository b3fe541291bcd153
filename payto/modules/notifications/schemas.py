from pydantic import BaseModel, Field
from typing import List, Dict, Any
from enum import Enum


class NotificationType(str, Enum):
    INVOICE_RECEIVED = "invoice_received"
    INVOICE_PENDING_APPROVAL = "invoice_pending_approval"
    INVOICE_STATUS_CHANGED = "invoice_status_changed"
    INVOICE_DUE_SOON = "invoice_due_soon"
    INVOICE_OVERDUE = "invoice_overdue"
    INVOICE_DUE_REMINDER = "invoice_due_reminder"
    INVOICE_NEEDS_REVIEW = "invoice_needs_review"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_STATUS_CHANGED = "payment_status_changed"
    PAYMENT_REMINDER = "payment_reminder"
    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    CONNECTION_REJECTED = "connection_rejected"
    SYSTEM_ALERT = "system_alert"


NOTIFICATION_LABELS = {
    NotificationType.INVOICE_RECEIVED: "Factura recibida",
    NotificationType.INVOICE_PENDING_APPROVAL: "Factura pendiente de aprobación",
    NotificationType.INVOICE_STATUS_CHANGED: "Cambio de estado de factura",
    NotificationType.INVOICE_DUE_SOON: "Factura próxima a vencer",
    NotificationType.INVOICE_OVERDUE: "Factura vencida",
    NotificationType.INVOICE_DUE_REMINDER: "Recordatorio de vencimiento",
    NotificationType.INVOICE_NEEDS_REVIEW: "Factura para revisar",
    NotificationType.PAYMENT_RECEIVED: "Pago recibido",
    NotificationType.PAYMENT_STATUS_CHANGED: "Cambio de estado de pago",
    NotificationType.PAYMENT_REMINDER: "Recordatorio de pago",
    NotificationType.CONNECTION_REQUEST: "Solicitud de conexión",
    NotificationType.CONNECTION_ACCEPTED: "Conexión aceptada",
    NotificationType.CONNECTION_REJECTED: "Conexión rechazada",
    NotificationType.SYSTEM_ALERT: "Alerta del sistema",
}


class NotificationList(BaseModel):
    notifications: List[Dict[str, Any]] = Field(default_factory=list)
    unread_count: int = 0


class UnreadCount(BaseModel):
    count: int = 0
