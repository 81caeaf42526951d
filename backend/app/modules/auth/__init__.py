# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    require_roles,
    get_gate_staff,
    get_current_admin,
    get_super_admin,
)

__all__ = [
    "get_current_user",
    "require_roles",
    "get_gate_staff",
    "get_current_admin",
    "get_super_admin",
]
