"""
Lista de facturas pendientes de aprobación

El estado de aprobación lo maneja el backend. Acá solo se combina la
respuesta de aprobar/rechazar con la lista que ya se está mostrando; la
lista recibida nunca se modifica.
"""
from typing import Any, Dict, List, Mapping, Sequence

from payto.modules.invoices.schemas import ApprovalResponse


def is_fully_approved(response: ApprovalResponse) -> bool:
    return response.approvals_received >= response.approvals_required


def merge_approval(
    pending: Sequence[Mapping[str, Any]],
    response: ApprovalResponse
) -> List[Dict[str, Any]]:
    """
    Si la factura alcanzó las aprobaciones requeridas sale de la lista;
    si no, queda con el contador que informó el backend.
    """
    if is_fully_approved(response):
        return [dict(invoice) for invoice in pending if str(invoice.get("id")) != response.id]

    merged = []
    for invoice in pending:
        updated = dict(invoice)
        if str(invoice.get("id")) == response.id:
            updated["approvals_received"] = response.approvals_received
        merged.append(updated)
    return merged


def merge_rejection(pending: Sequence[Mapping[str, Any]], invoice_id: str) -> List[Dict[str, Any]]:
    return [dict(invoice) for invoice in pending if str(invoice.get("id")) != str(invoice_id)]
