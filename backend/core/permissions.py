"""
Permission classes for role-based access control.

Roles carry named permissions; views check permission names, never role
names. The role always comes from request.user, never from the request body,
query parameters or headers.
"""

from rest_framework import permissions


def user_has_permission(user, permission_name):
    """True if the authenticated, active user's role grants permission_name."""
    if not user or not user.is_authenticated or not user.is_active:
        return False
    return hasattr(user, "has_permission") and user.has_permission(permission_name)


class PermissionRequired(permissions.BasePermission):
    """Allow users whose role grants `permission_name`."""

    permission_name = None

    def has_permission(self, request, view):
        return user_has_permission(request.user, self.permission_name)


class IsAuthenticatedReadOnly(permissions.BasePermission):
    """Any active user may read."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated or not user.is_active:
            return False
        return request.method in permissions.SAFE_METHODS


class CanManageRegistry(PermissionRequired):
    permission_name = "manage_registry"


class CanManageUsers(PermissionRequired):
    permission_name = "manage_users"


class CanViewActivityLogs(PermissionRequired):
    permission_name = "view_activity_logs"


class CanViewLiquidations(PermissionRequired):
    permission_name = "view_liquidation"


class CanManageRoles(PermissionRequired):
    permission_name = "manage_roles"
