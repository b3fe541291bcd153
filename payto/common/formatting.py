"""
Formato de montos, fechas y etiquetas para la interfaz
"""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional, Union

from payto.core.config import settings

Number = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "ARS": "$",
    "USD": "US$",
    "EUR": "€",
}


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Redondear a dos decimales (mitad hacia arriba)"""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_currency(amount: Number, currency: Optional[str] = None) -> str:
    """
    Formato de presentación de un monto: símbolo + dos decimales.

    format_currency(Decimal("242")) -> "$242.00"
    """
    code = currency or settings.DEFAULT_CURRENCY
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_number_es_ar(amount: Number) -> str:
    """Formato es-AR: punto de miles y coma decimal (1.234,56)"""
    value = round_money(amount)
    text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def parse_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """
    Fecha de un valor de la API (ISO, con o sin hora).

    Un texto que no es una fecha ISO devuelve None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def format_date(value: Union[date, datetime, str, None]) -> str:
    """Fecha en formato dd/mm/aaaa; lo que no se puede leer se muestra tal cual"""
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%d/%m/%Y")


MONTH_NAMES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


# ===== TAX CONDITIONS =====

TAX_CONDITION_LABELS = {
    "registered_taxpayer": "Responsable Inscripto",
    "RI": "Responsable Inscripto",
    "monotax": "Monotributo",
    "Monotributo": "Monotributo",
    "exempt": "Exento",
    "Exento": "Exento",
    "final_consumer": "Consumidor Final",
    "CF": "Consumidor Final",
    "not_specified": "No especificado",
}


def translate_tax_condition(tax_condition: str) -> str:
    return TAX_CONDITION_LABELS.get(tax_condition, tax_condition)


# ===== ROLES =====

ROLE_LABELS = {
    "owner": "Propietario",
    "administrator": "Administrador",
    "financial_director": "Director Financiero",
    "accountant": "Contador",
    "approver": "Aprobador",
    "operator": "Operador",
}

ROLE_DESCRIPTIONS = {
    "owner": "Control absoluto de la empresa, único con permisos para transferir propiedad",
    "administrator": "Control total, gestión de miembros y configuración",
    "financial_director": "Todas las operaciones financieras y aprobaciones",
    "accountant": "Crear facturas, procesar pagos y ver estadísticas",
    "approver": "Aprobar y rechazar facturas de proveedores",
    "operator": "Visualización y tareas básicas de carga",
}


def translate_role(role: str) -> str:
    return ROLE_LABELS.get(role, role)


def role_description(role: str) -> str:
    return ROLE_DESCRIPTIONS.get(role, "")


# ===== INVOICE STATUS =====

CREDIT_DEBIT_TYPES = {
    "NCA", "NCB", "NCC", "NCM", "NCE",
    "NDA", "NDB", "NDC", "NDM", "NDE",
}

INVOICE_STATUS_LABELS = {
    "pending_approval": "Pendiente Aprobación",
    "approved": "Aprobada",
    "rejected": "Rechazada",
    "issued": "Emitida",
}


def invoice_status_label(invoice: Mapping[str, Any], is_receiver: bool = False) -> Optional[str]:
    """
    Etiqueta de estado de una factura.

    Las notas de crédito/débito asociadas a una factura muestran el estado
    de la factura relacionada. Estados desconocidos no tienen etiqueta.
    """
    status = invoice.get("display_status") or invoice.get("status")

    related = invoice.get("related_invoice") or invoice.get("relatedInvoice")
    if invoice.get("type") in CREDIT_DEBIT_TYPES and invoice.get("related_invoice_id") and related:
        status = related.get("display_status") or related.get("status")

    payment_status = invoice.get("payment_status")
    if status == "cancelled" or payment_status == "cancelled":
        return "Anulada"
    if payment_status in ("paid", "collected"):
        return "Pagada" if is_receiver else "Cobrada"
    return INVOICE_STATUS_LABELS.get(status)


def is_overdue(invoice: Mapping[str, Any], today: Optional[date] = None) -> bool:
    """Vencida: tiene fecha de vencimiento pasada y no está pagada ni anulada"""
    due_date = parse_date(invoice.get("due_date"))
    if due_date is None:
        return False

    status = invoice.get("display_status") or invoice.get("status")
    payment_status = invoice.get("payment_status")
    if payment_status in ("paid", "collected"):
        return False
    if status == "cancelled" or payment_status == "cancelled":
        return False
    return due_date < (today or date.today())
