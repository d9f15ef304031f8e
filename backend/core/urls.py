from django.contrib import admin
from django.urls import include, path

from health.views import database_check

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health/", database_check, name="health-database"),
    path("health/", include("health.urls")),
    # API v1
    path("api/v1/auth/", include("apps.auth.urls")),
    path("api/v1/users/", include("apps.users.urls")),
    path("api/v1/audit/", include("apps.audit.urls")),
    path("api/v1/registry/", include("apps.registry.urls")),
    path("api/v1/notifications/", include("apps.notifications.urls")),
    path("api/v1/liquidations/", include("apps.liquidations.urls")),
]
