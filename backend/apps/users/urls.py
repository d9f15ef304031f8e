"""
URL routing for user endpoints.
"""

from django.urls import path
from apps.users import views

app_name = "users"

urlpatterns = [
    path("me", views.get_current_user, name="current-user"),
    path("roles", views.list_or_create_roles, name="list-or-create-roles"),
    path("roles/<uuid:roleId>", views.update_or_delete_role, name="update-or-delete-role"),
    path("permissions", views.list_permissions, name="list-permissions"),
    path("", views.list_or_create_users, name="list-or-create-users"),
    path("<uuid:userId>", views.update_or_delete_user, name="update-or-delete-user"),
    path(
        "<uuid:userId>/toggle-status",
        views.toggle_user_status,
        name="toggle-user-status",
    ),
]
