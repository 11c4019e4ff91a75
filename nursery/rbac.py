"""RBAC module/action registry and per-role defaults."""
from __future__ import annotations

from typing import Literal

PermissionAction = Literal["view", "add", "edit", "delete"]

ACTION_BY_METHOD: dict[str, PermissionAction] = {
    "GET": "view",
    "HEAD": "view",
    "OPTIONS": "view",
    "POST": "add",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "delete",
}

SYSTEM_MODULES: list[dict[str, str]] = [
    {"key": "dashboard", "name": "Dashboard"},
    {"key": "children", "name": "Children"},
    {"key": "staff", "name": "Staff"},
    {"key": "attendance", "name": "Attendance"},
    {"key": "scan", "name": "QR Scanner"},
    {"key": "invoices", "name": "Invoicing"},
    {"key": "settings", "name": "Settings"},
    {"key": "portal", "name": "Portal"},
]


def _full_permissions() -> dict[str, bool]:
    return {"view": True, "add": True, "edit": True, "delete": True}


def _view_only() -> dict[str, bool]:
    return {"view": True, "add": False, "edit": False, "delete": False}


def _module_defaults(fill: dict[str, bool]) -> dict[str, dict[str, bool]]:
    return {module["key"]: dict(fill) for module in SYSTEM_MODULES}


DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "admin": _module_defaults(_full_permissions()),
    "staff": {
        **_module_defaults({"view": False, "add": False, "edit": False, "delete": False}),
        "scan": {"view": True, "add": True, "edit": False, "delete": False},
        "portal": _view_only(),
    },
    "parent": {
        **_module_defaults({"view": False, "add": False, "edit": False, "delete": False}),
        "portal": _view_only(),
    },
}


def has_permission(role: str | None, module: str, action: PermissionAction) -> bool:
    if not role:
        return False
    return DEFAULT_ROLE_PERMISSIONS.get(role, {}).get(module, {}).get(action, False)
