"""
Serializers for User model.

No business logic in serializers - validation only.
"""

from rest_framework import serializers
from apps.registry.models import HEI, Region
from apps.users.models import Permission, Role, User, UserStatus


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    id = serializers.UUIDField(read_only=True)
    role = serializers.CharField(source="role_name", read_only=True)
    roleId = serializers.UUIDField(source="role_id", read_only=True)
    heiId = serializers.UUIDField(source="hei_id", read_only=True)
    hei = serializers.CharField(source="hei.name", read_only=True, default=None)
    regionId = serializers.UUIDField(source="region_id", read_only=True)
    region = serializers.CharField(source="region.name", read_only=True, default=None)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "role",
            "roleId",
            "heiId",
            "hei",
            "regionId",
            "region",
            "status",
            "createdAt",
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    """Serializer for user creation endpoint."""

    name = serializers.CharField(max_length=255, required=True)
    email = serializers.EmailField(max_length=255, required=True)
    password = serializers.CharField(write_only=True, required=True, min_length=8)
    roleId = serializers.PrimaryKeyRelatedField(
        source="role", queryset=Role.objects.all(), required=True
    )
    heiId = serializers.PrimaryKeyRelatedField(
        source="hei", queryset=HEI.objects.all(), required=False, allow_null=True
    )
    regionId = serializers.PrimaryKeyRelatedField(
        source="region", queryset=Region.objects.all(), required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=UserStatus.choices, default=UserStatus.ACTIVE)

    def validate_roleId(self, value):
        """Super Admin accounts are created with the create_super_admin command."""
        if value.name == Role.SUPER_ADMIN:
            raise serializers.ValidationError("Cannot create Super Admin users via API")
        return value


class UserUpdateSerializer(UserCreateSerializer):
    """Serializer for user update endpoint. All fields optional."""

    name = serializers.CharField(max_length=255, required=False)
    email = serializers.EmailField(max_length=255, required=False)
    password = serializers.CharField(
        write_only=True, required=False, allow_blank=True, min_length=8
    )
    roleId = serializers.PrimaryKeyRelatedField(
        source="role", queryset=Role.objects.all(), required=False
    )
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ["id", "name", "module", "description"]
        read_only_fields = fields


class RoleSerializer(serializers.ModelSerializer):
    """Role with permission names and, when annotated, its user count."""

    permissions = serializers.SlugRelatedField(slug_field="name", many=True, read_only=True)
    usersCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Role
        fields = ["id", "name", "description", "permissions", "usersCount", "createdAt"]
        read_only_fields = fields

    def get_usersCount(self, obj):
        count = getattr(obj, "users_count", None)
        return obj.users.count() if count is None else count


class RoleWriteSerializer(serializers.Serializer):
    """Serializer for role create / update. permissionIds replaces the whole set."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True
    )
    permissionIds = serializers.PrimaryKeyRelatedField(
        source="permissions", queryset=Permission.objects.all(), many=True, required=False
    )
