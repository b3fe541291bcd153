"""
Permisos por rol de miembro

La API es la que hace cumplir los permisos; esta tabla solo se consulta
para mostrar u ocultar acciones.
"""
from typing import Dict, List, Optional, Set

COMPANY_PERMISSIONS = {
    "company.update", "company.delete", "company.regenerate_invite", "company.view_settings",
}
MEMBER_PERMISSIONS = {"members.view", "members.manage", "members.change_role", "members.remove"}
BANK_ACCOUNT_PERMISSIONS = {
    "bank_accounts.view", "bank_accounts.create", "bank_accounts.update", "bank_accounts.delete",
}
INVOICE_PERMISSIONS = {
    "invoices.view", "invoices.create", "invoices.update", "invoices.delete", "invoices.approve",
}
PAYMENT_PERMISSIONS = {
    "payments.view", "payments.create", "payments.update", "payments.delete", "payments.approve",
}

ALL_PERMISSIONS = (
    COMPANY_PERMISSIONS | MEMBER_PERMISSIONS | BANK_ACCOUNT_PERMISSIONS
    | INVOICE_PERMISSIONS | PAYMENT_PERMISSIONS | {"audit.view"}
)

ROLE_PERMISSIONS: Dict[str, Set[str]] = {
    "owner": set(ALL_PERMISSIONS),
    "administrator": ALL_PERMISSIONS - {"company.delete"},
    "financial_director": {
        "members.view",
        "bank_accounts.view", "bank_accounts.create", "bank_accounts.update",
        "invoices.view", "invoices.create", "invoices.update", "invoices.approve",
        "payments.view", "payments.create", "payments.update", "payments.approve",
        "audit.view",
    },
    "accountant": {
        "members.view", "bank_accounts.view",
        "invoices.view", "invoices.create", "invoices.update", "invoices.approve",
        "payments.view", "payments.create", "payments.update", "payments.approve",
    },
    "approver": {
        "members.view", "bank_accounts.view",
        "invoices.view", "invoices.approve",
        "payments.view", "payments.approve",
    },
    "operator": {"members.view", "bank_accounts.view", "invoices.view", "payments.view"},
}


def permissions_for(role: Optional[str]) -> List[str]:
    """Permisos del rol, ordenados; un rol desconocido no tiene ninguno"""
    return sorted(ROLE_PERMISSIONS.get(role or "", set()))


def has_permission(role: Optional[str], permission: str) -> bool:
    if not role:
        return False
    return permission in ROLE_PERMISSIONS.get(role, set())
