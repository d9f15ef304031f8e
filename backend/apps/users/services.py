"""
Service-layer functions for the Users app.

This module exists to keep models passive:
- No business logic in models
- No permission logic in models
- Persistence orchestration (create/save) lives here
- Every account mutation is recorded in the activity log
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type

from django.db import transaction

from core.db import conflict_on_integrity_error
from core.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from apps.audit.context import AuditContext
from apps.audit.recorder import recorder, snapshot
from apps.audit.services import record_audit_entry

logger = logging.getLogger(__name__)

USER_MANAGEMENT_MODULE = "User Management"


def save_new_user(
    *,
    user_model: Type[Any],
    email: str,
    password: Optional[str] = None,
    name: Optional[str] = None,
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create and persist a user. Used by UserManager.create_user."""
    if not email:
        raise ValueError("The email field must be set")

    email = user_model.objects.normalize_email(email)
    user = user_model(email=email, name=name or email, **extra_fields)
    user.set_password(password)
    if using is None:
        user.save()
    else:
        user.save(using=using)
    return user


def save_new_superuser(
    *,
    user_model: Type[Any],
    email: str,
    password: Optional[str] = None,
    using: Optional[str] = None,
    **extra_fields: Any,
):
    """Create a user holding the Super Admin role."""
    from apps.users.models import Role
    from apps.users.roles import seed_default_roles
    from apps.users.models import Permission

    seed_default_roles(Role, Permission)
    extra_fields.setdefault("role", Role.objects.get(name=Role.SUPER_ADMIN))
    return save_new_user(
        user_model=user_model,
        email=email,
        password=password,
        using=using,
        **extra_fields,
    )


def role_has_permission(*, role: Any, permission_name: str) -> bool:
    return role.permissions.filter(name=permission_name).exists()


def user_has_permission(*, user: Any, permission_name: str) -> bool:
    if not user.is_active or not user.role_id:
        return False
    return user.role.has_permission(permission_name)


def user_is_staff(*, user: Any) -> bool:
    """Django admin compatibility predicate."""
    return user.is_active and user.is_super_admin


def user_is_superuser(*, user: Any) -> bool:
    """Django admin compatibility predicate."""
    return user.is_active and user.is_super_admin


def user_has_perm(*, user: Any, perm: str, obj: Any = None) -> bool:
    """Django admin compatibility predicate."""
    _ = (perm, obj)
    return user_is_superuser(user=user)


def user_has_module_perms(*, user: Any, app_label: str) -> bool:
    """Django admin compatibility predicate."""
    _ = app_label
    return user_is_superuser(user=user)


# -----------------------------
# Account management
# -----------------------------


def _duplicate_email_message(attrs):
    return f"User with email '{attrs.get('email')}' already exists"


def _get_user(user_id, lock=False):
    from apps.users.models import User

    queryset = User.objects.select_for_update() if lock else User.objects
    try:
        return queryset.get(id=user_id)
    except (User.DoesNotExist, ValueError):
        raise NotFoundError(f"User {user_id} does not exist")


def _get_user_manager(actor_id):
    actor = _get_user(actor_id)
    if not actor.has_permission("manage_users"):
        raise PermissionDeniedError("Only user managers can modify users")
    return actor


def _check_assignment(role, hei, region):
    """Regional coordinators need a region, HEI users need an HEI."""
    from apps.users.models import Role

    role_name = role.name if role else None
    if role_name == Role.REGIONAL_COORDINATOR and region is None:
        raise ValidationError(
            "Regional coordinators must be assigned a region",
            details={"regionId": ["This field is required for this role."]},
        )
    if role_name == Role.HEI and hei is None:
        raise ValidationError(
            "HEI users must be assigned an HEI",
            details={"heiId": ["This field is required for this role."]},
        )


def _check_super_admin_target(actor, role=None, target=None):
    from apps.users.models import Role

    if actor.is_super_admin:
        return
    if role is not None and role.name == Role.SUPER_ADMIN:
        raise PermissionDeniedError("Only a Super Admin can assign the Super Admin role")
    if target is not None and target.is_super_admin:
        raise PermissionDeniedError("You cannot modify the Super Admin")


def create_user(actor_id, attrs, context=None):
    """
    Create a user account.

    Args:
        actor_id: UUID of the acting user
        attrs: Validated attributes (name, email, password, role, hei, region, status)
        context: AuditContext (optional)

    Returns:
        User: Created user
    """
    from apps.users.models import User

    actor = _get_user_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    attrs = dict(attrs)
    password = attrs.pop("password")
    _check_assignment(attrs.get("role"), attrs.get("hei"), attrs.get("region"))
    _check_super_admin_target(actor, role=attrs.get("role"))

    with transaction.atomic():
        user = User(**attrs)
        user.email = User.objects.normalize_email(user.email)
        user.set_password(password)
        with conflict_on_integrity_error(_duplicate_email_message(attrs)):
            user.save()
        recorder.created(user, context=context)

    logger.info(
        "user_created",
        extra={"operation": "users.create", "entity_id": str(user.id)},
    )
    return user


def update_user(actor_id, user_id, attrs, context=None):
    """Update a user account. A blank password leaves the password unchanged."""
    actor = _get_user_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    attrs = dict(attrs)
    password = attrs.pop("password", None)
    if not attrs and not password:
        raise ValidationError("No fields to update")

    with transaction.atomic():
        user = _get_user(user_id, lock=True)
        _check_super_admin_target(actor, role=attrs.get("role"), target=user)
        _check_assignment(
            attrs.get("role", user.role),
            attrs.get("hei", user.hei),
            attrs.get("region", user.region),
        )

        before = snapshot(user)
        for name, value in attrs.items():
            setattr(user, name, value)
        if password:
            user.set_password(password)
        with conflict_on_integrity_error(_duplicate_email_message(attrs)):
            user.save()
        recorder.updated(user, before, context=context)

    logger.info(
        "user_updated",
        extra={"operation": "users.update", "entity_id": str(user.id)},
    )
    return user


def toggle_user_status(actor_id, user_id, context=None):
    """
    Flip a user between active and inactive.

    Writes the lifecycle update entry, a 'toggled_status' entry, and
    notifies the affected user.
    """
    from apps.users.models import UserStatus
    from apps.notifications import services as notifications

    actor = _get_user_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    if str(actor.id) == str(user_id):
        raise InvalidStateError("Cannot change your own status")

    with transaction.atomic():
        user = _get_user(user_id, lock=True)
        _check_super_admin_target(actor, target=user)

        before = snapshot(user)
        user.status = (
            UserStatus.INACTIVE if user.status == UserStatus.ACTIVE else UserStatus.ACTIVE
        )
        user.save()
        recorder.updated(user, before, context=context)

        description = f"Toggled user {user.name} status to {user.status}"
        if context.enabled:
            record_audit_entry(
                action="toggled_status",
                description=description,
                subject=user,
                module=USER_MANAGEMENT_MODULE,
                context=context,
            )
        notifications.dispatch(
            action="toggled_status",
            description=description,
            subject=user,
            module=USER_MANAGEMENT_MODULE,
            actor=actor,
        )

    logger.info(
        "user_status_toggled",
        extra={"operation": "users.toggle_status", "entity_id": str(user.id)},
    )
    return user


def delete_user(actor_id, user_id, context=None):
    """Delete a user account. Users cannot delete themselves."""
    actor = _get_user_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    if str(actor.id) == str(user_id):
        raise InvalidStateError("Cannot delete your own account")

    with transaction.atomic():
        user = _get_user(user_id, lock=True)
        _check_super_admin_target(actor, target=user)
        recorder.delete(user, context=context)

    logger.info(
        "user_deleted",
        extra={"operation": "users.delete", "entity_id": str(user_id)},
    )


# -----------------------------
# Role management
# -----------------------------

ROLE_MODULE = "Roles"


def _get_role_manager(actor_id):
    actor = _get_user(actor_id)
    if not actor.has_permission("manage_roles"):
        raise PermissionDeniedError("Only role managers can modify roles")
    return actor


def _get_role(role_id, lock=False):
    from apps.users.models import Role

    queryset = Role.objects.select_for_update() if lock else Role.objects
    try:
        return queryset.get(id=role_id)
    except (Role.DoesNotExist, ValueError):
        raise NotFoundError(f"Role {role_id} does not exist")


def _duplicate_role_message(attrs):
    return f"Role '{attrs.get('name')}' already exists"


def _permission_names(role):
    return sorted(role.permissions.values_list("name", flat=True))


def list_roles():
    """Roles with their permissions and the number of assigned users."""
    from django.db.models import Count

    from apps.users.models import Role

    return (
        Role.objects.annotate(users_count=Count("users"))
        .prefetch_related("permissions")
        .order_by("name")
    )


def list_permissions_by_module():
    """{module: [Permission, ...]} for building role forms."""
    from apps.users.models import Permission

    grouped = {}
    for permission in Permission.objects.order_by("module", "name"):
        grouped.setdefault(permission.module or "General", []).append(permission)
    return grouped


def _sync_permissions(role, permissions, context):
    """
    Replace the role's permission set. A change is recorded as a
    'synced_permissions' entry; the M2M table never shows up in lifecycle diffs.
    """
    old = _permission_names(role)
    role.permissions.set(permissions)
    new = _permission_names(role)
    if old == new or not context.enabled:
        return

    record_audit_entry(
        action="synced_permissions",
        description=f"Updated permissions of role {role.name}",
        subject=role,
        module=ROLE_MODULE,
        old_values={"Permissions": old},
        new_values={"Permissions": new},
        context=context,
    )


def create_role(actor_id, attrs, context=None):
    """
    Create a role, optionally with its permission set.

    Args:
        actor_id: UUID of the acting user
        attrs: Validated attributes (name, description, permissions)
        context: AuditContext (optional)

    Returns:
        Role: Created role
    """
    from apps.users.models import Role

    actor = _get_role_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    attrs = dict(attrs)
    permissions = attrs.pop("permissions", None)

    with transaction.atomic():
        with conflict_on_integrity_error(_duplicate_role_message(attrs)):
            role = Role.objects.create(**attrs)
        recorder.created(role, context=context)
        if permissions:
            role.permissions.set(permissions)

    logger.info(
        "role_created",
        extra={"operation": "roles.create", "entity_id": str(role.id)},
    )
    return role


def update_role(actor_id, role_id, attrs, context=None):
    """
    Update a role. When `permissions` is given, the role's permission set
    is replaced by it.

    Raises:
        PermissionDeniedError: If a non Super Admin targets the Super Admin role
        InvalidStateError: If a built-in role would be renamed
        ConflictError: If the new name is taken
    """
    from apps.users.models import Role

    actor = _get_role_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    attrs = dict(attrs)
    permissions = attrs.pop("permissions", None)
    if not attrs and permissions is None:
        raise ValidationError("No fields to update")

    with transaction.atomic():
        role = _get_role(role_id, lock=True)
        if role.name == Role.SUPER_ADMIN and not actor.is_super_admin:
            raise PermissionDeniedError("Only a Super Admin can modify the Super Admin role")
        if role.name in Role.BUILT_IN and attrs.get("name", role.name) != role.name:
            raise InvalidStateError(f"Cannot rename the {role.name} role")

        before = snapshot(role)
        for name, value in attrs.items():
            setattr(role, name, value)
        with conflict_on_integrity_error(_duplicate_role_message(attrs)):
            role.save()
        recorder.updated(role, before, context=context)

        if permissions is not None:
            _sync_permissions(role, permissions, context)

    logger.info(
        "role_updated",
        extra={"operation": "roles.update", "entity_id": str(role.id)},
    )
    return role


def delete_role(actor_id, role_id, context=None):
    """Delete a role. Built-in administrative roles and roles in use are kept."""
    from apps.users.models import Role

    actor = _get_role_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        role = _get_role(role_id, lock=True)
        if role.name in Role.PROTECTED:
            raise InvalidStateError(f"Cannot delete the {role.name} role")
        if role.users.exists():
            raise InvalidStateError(
                "Cannot delete role with assigned users",
                {"users": role.users.count()},
            )
        recorder.delete(role, context=context)

    logger.info(
        "role_deleted",
        extra={"operation": "roles.delete", "entity_id": str(role_id)},
    )
