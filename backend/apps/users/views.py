"""
User views: current user, list, create, update, delete, toggle status,
and role management.

User mutations require the manage_users permission, role mutations manage_roles.
"""

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.pagination import LimitOffsetPagination
from core.permissions import CanManageRoles, CanManageUsers, IsAuthenticatedReadOnly
from apps.users import services
from apps.users.models import User
from apps.users.serializers import (
    PermissionSerializer,
    RoleSerializer,
    RoleWriteSerializer,
    UserSerializer,
    UserCreateSerializer,
    UserUpdateSerializer,
)


def _forbidden(message):
    return Response(
        {
            "error": {
                "code": "FORBIDDEN",
                "message": message,
                "details": {},
            }
        },
        status=status.HTTP_403_FORBIDDEN,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticatedReadOnly])
def get_current_user(request):
    """
    GET /api/v1/users/me

    Get current authenticated user.
    """
    serializer = UserSerializer(request.user)
    return Response({"data": serializer.data}, status=status.HTTP_200_OK)


@api_view(["GET", "POST"])
def list_or_create_users(request):
    """
    GET /api/v1/users - List users with pagination (user managers).
    POST /api/v1/users - Create a new user (user managers).
    """
    if not request.user or not request.user.is_authenticated:
        return Response(
            {
                "error": {
                    "code": "UNAUTHORIZED",
                    "message": "Authentication required",
                    "details": {},
                }
            },
            status=status.HTTP_401_UNAUTHORIZED,
        )

    if not CanManageUsers().has_permission(request, None):
        return _forbidden("Only user managers can access users")

    if request.method == "GET":
        paginator = LimitOffsetPagination()
        paginator.default_limit = 50
        paginator.max_limit = 100

        users = User.objects.select_related("role", "hei", "region").order_by("name")
        search = request.query_params.get("search")
        if search:
            users = users.filter(Q(name__icontains=search) | Q(email__icontains=search))
        role_id = request.query_params.get("roleId")
        if role_id:
            users = users.filter(role_id=role_id)
        user_status = request.query_params.get("status")
        if user_status:
            users = users.filter(status=user_status)

        page = paginator.paginate_queryset(users, request)
        serializer = UserSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = services.create_user(request.user.id, serializer.validated_data)
    return Response({"data": UserSerializer(user).data}, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([CanManageUsers])
def update_or_delete_user(request, userId):
    """
    PATCH /api/v1/users/{userId} - Update user.
    DELETE /api/v1/users/{userId} - Delete user.
    """
    if request.method == "DELETE":
        services.delete_user(request.user.id, userId)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UserUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    user = services.update_user(request.user.id, userId, serializer.validated_data)
    return Response({"data": UserSerializer(user).data}, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([CanManageUsers])
def toggle_user_status(request, userId):
    """
    POST /api/v1/users/{userId}/toggle-status

    Flip the user's status between active and inactive.
    """
    user = services.toggle_user_status(request.user.id, userId)
    return Response({"data": UserSerializer(user).data}, status=status.HTTP_200_OK)


@api_view(["GET", "POST"])
@permission_classes([CanManageRoles])
def list_or_create_roles(request):
    """
    GET /api/v1/users/roles - List roles with permissions and user counts.
    POST /api/v1/users/roles - Create a role.
    """
    if request.method == "GET":
        serializer = RoleSerializer(services.list_roles(), many=True)
        return Response({"data": serializer.data}, status=status.HTTP_200_OK)

    serializer = RoleWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    role = services.create_role(request.user.id, serializer.validated_data)
    return Response({"data": RoleSerializer(role).data}, status=status.HTTP_201_CREATED)


@api_view(["PATCH", "DELETE"])
@permission_classes([CanManageRoles])
def update_or_delete_role(request, roleId):
    """
    PATCH /api/v1/users/roles/{roleId} - Update a role and sync its permissions.
    DELETE /api/v1/users/roles/{roleId} - Delete an unused, non built-in role.
    """
    if request.method == "DELETE":
        services.delete_role(request.user.id, roleId)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = RoleWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    role = services.update_role(request.user.id, roleId, serializer.validated_data)
    return Response({"data": RoleSerializer(role).data}, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([CanManageRoles])
def list_permissions(request):
    """GET /api/v1/users/permissions - Permissions grouped by module."""
    grouped = services.list_permissions_by_module()
    data = [
        {"module": module, "permissions": PermissionSerializer(items, many=True).data}
        for module, items in grouped.items()
    ]
    return Response({"data": data}, status=status.HTTP_200_OK)
