"""
User, Role and Permission models for the liquidation tracker.

Fields: id (UUID), name, email (login), role, hei, region, status,
created_at, updated_at. Email unique. Roles carry named permissions.
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models

from . import services


class UserStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Permission(models.Model):
    """Named capability granted to roles (e.g. 'manage_registry')."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    module = models.CharField(max_length=100, null=True, blank=True)
    description = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "permissions"
        ordering = ["module", "name"]

    def __str__(self):
        return self.name


class Role(models.Model):
    """Role with a set of permissions."""

    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    REGIONAL_COORDINATOR = "Regional Coordinator"
    ACCOUNTANT = "Accountant"
    HEI = "HEI"

    # Code refers to built-in roles by name; the administrative ones are never deleted
    BUILT_IN = (SUPER_ADMIN, ADMIN, REGIONAL_COORDINATOR, ACCOUNTANT, HEI)
    PROTECTED = (SUPER_ADMIN, ADMIN)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, null=True, blank=True)
    permissions = models.ManyToManyField(
        Permission, related_name="roles", db_table="role_permission", blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "roles"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def has_permission(self, permission_name):
        return services.role_has_permission(role=self, permission_name=permission_name)


class UserManager(BaseUserManager):
    """Custom user manager."""

    def create_user(self, email, password=None, name=None, **extra_fields):
        return services.save_new_user(
            user_model=self.model,
            email=email,
            password=password,
            name=name,
            using=self._db,
            **extra_fields,
        )

    def create_superuser(self, email, password=None, **extra_fields):
        return services.save_new_superuser(
            user_model=self.model,
            email=email,
            password=password,
            using=self._db,
            **extra_fields,
        )


class User(AbstractBaseUser):
    """Custom User model with UUID primary key, email login and role FK."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    role = models.ForeignKey(
        Role, on_delete=models.PROTECT, related_name="users", null=True, blank=True
    )
    hei = models.ForeignKey(
        "registry.HEI",
        on_delete=models.SET_NULL,
        related_name="users",
        null=True,
        blank=True,
    )
    region = models.ForeignKey(
        "registry.Region",
        on_delete=models.SET_NULL,
        related_name="users",
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=10, choices=UserStatus.choices, default=UserStatus.ACTIVE
    )
    two_factor_secret = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        db_table = "users"
        ordering = ["name"]

    def __str__(self):
        return self.email

    @property
    def is_active(self):
        """Inactive users cannot authenticate."""
        return self.status == UserStatus.ACTIVE

    @property
    def role_name(self):
        return self.role.name if self.role_id else None

    def has_permission(self, permission_name):
        return services.user_has_permission(user=self, permission_name=permission_name)

    @property
    def is_admin(self):
        return self.role_name in (Role.ADMIN, Role.SUPER_ADMIN)

    @property
    def is_super_admin(self):
        return self.role_name == Role.SUPER_ADMIN

    @property
    def is_regional_coordinator(self):
        return self.role_name == Role.REGIONAL_COORDINATOR

    @property
    def is_accountant(self):
        return self.role_name == Role.ACCOUNTANT

    @property
    def is_hei_user(self):
        return self.role_name == Role.HEI

    @property
    def is_staff(self):
        """Required for Django admin compatibility."""
        return services.user_is_staff(user=self)

    @property
    def is_superuser(self):
        """Required for Django admin compatibility."""
        return services.user_is_superuser(user=self)

    def has_perm(self, perm, obj=None):
        """Required for Django admin compatibility."""
        return services.user_has_perm(user=self, perm=perm, obj=obj)

    def has_module_perms(self, app_label):
        """Required for Django admin compatibility."""
        return services.user_has_module_perms(user=self, app_label=app_label)
