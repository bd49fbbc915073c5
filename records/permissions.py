"""
Role and ownership based access control.
"""
from rest_framework.permissions import BasePermission

from .models import Role

ADMIN_ROLES = {Role.ADMIN}
STAFF_ROLES = {Role.ADMIN, Role.DOCTOR}


def _principal(request):
    user = getattr(request, "user", None)
    if user is not None and getattr(user, "is_authenticated", False):
        return user
    return None


def require_role(*roles: str, methods=None):
    """Build a permission class allowing only ``roles``.

    With ``methods`` the check applies to those HTTP methods only, other
    methods fall through to the remaining permission classes.
    """
    allowed = frozenset(roles)
    gated = frozenset(m.upper() for m in methods) if methods else None

    class RoleRequired(BasePermission):
        message = "You do not have permission to perform this action"

        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            if gated is not None and request.method not in gated:
                return True
            user = _principal(request)
            return bool(user and getattr(user, "role_name", None) in allowed)

    RoleRequired.__name__ = "RoleRequired_" + "_".join(sorted(allowed))
    return RoleRequired


IsAdminRole = require_role(*ADMIN_ROLES)
IsStaffRole = require_role(*STAFF_ROLES)


class IsSelfOrAdmin(BasePermission):
    """The ``pk`` URL argument must be the caller's own user id, unless admin."""
    message = "You can only access your own account"

    def has_permission(self, request, view) -> bool:
        user = _principal(request)
        if not user:
            return False
        if getattr(user, "role_name", None) == Role.ADMIN:
            return True
        target = view.kwargs.get("pk") if hasattr(view, "kwargs") else None
        return target is not None and int(target) == user.id
