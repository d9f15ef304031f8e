import logging

from django.apps import apps
from django.core.cache import caches
from django.db import DatabaseError, connection
from django.db.migrations.executor import MigrationExecutor
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


def _database():
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    return "ok"


def _migrations():
    executor = MigrationExecutor(connection)
    plan = executor.migration_plan(executor.loader.graph.leaf_nodes())
    return "pending" if plan else "ok"


def _cache():
    cache = caches["default"]
    cache.set("health_check", "ok", timeout=5)
    return "ok" if cache.get("health_check") == "ok" else "error"


def _audit_table():
    apps.get_model("audit", "AuditEntry").objects.exists()
    return "ok"


READINESS_CHECKS = (
    ("database", _database),
    ("migrations", _migrations),
    ("cache", _cache),
    ("audit_table", _audit_table),
)


def run_check(name, check):
    try:
        return check()
    except Exception:
        logger.warning("health_check_failed", extra={"operation": f"health.{name}"}, exc_info=True)
        return "error"


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def database_check(request):
    """GET /api/health/ - Database ping."""
    try:
        _database()
    except DatabaseError:
        logger.warning("health_check_failed", extra={"operation": "health.database"}, exc_info=True)
        return Response(
            {"status": "unhealthy", "database": "disconnected"},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"status": "ok", "database": "connected"})


class LiveView(APIView):
    """Liveness probe: process is running. No DB or external deps."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "alive"})


class ReadyView(APIView):
    """Readiness probe: database, migrations, cache, activity log table."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        checks = {name: run_check(name, check) for name, check in READINESS_CHECKS}
        ready = all(value == "ok" for value in checks.values())
        return Response(
            {"status": "ready" if ready else "not_ready", "checks": checks},
            status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
