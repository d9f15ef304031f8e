"""
Activity log views - query activity log entries.

Read-only - activity log entries are append-only.
"""

from uuid import UUID

from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

from core.permissions import CanViewActivityLogs
from apps.audit.models import AuditEntry
from apps.audit.serializers import AuditEntrySerializer


class AuditEntryPagination(LimitOffsetPagination):
    default_limit = 25
    max_limit = 100


def _validation_error(message):
    return Response(
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": message,
                "details": {},
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _param(request, name):
    """Query parameter value, treating '' and 'all' as absent."""
    value = request.query_params.get(name)
    if not value or value == "all":
        return None
    return value


@api_view(["GET"])
@permission_classes([CanViewActivityLogs])
def query_audit_log(request):
    """
    GET /api/v1/audit/

    Query activity log entries with optional filters, newest first.
    """
    search = _param(request, "search")
    actor_id = _param(request, "actor")
    action = _param(request, "action")
    module = _param(request, "module")
    subject_type = _param(request, "subjectType")
    subject_id = _param(request, "subjectId")
    date_from = _param(request, "dateFrom")
    date_to = _param(request, "dateTo")

    queryset = AuditEntry.objects.all()

    if search:
        queryset = queryset.search(search)

    if actor_id:
        try:
            queryset = queryset.for_actor(UUID(actor_id))
        except ValueError:
            return _validation_error("Invalid actor format")

    if action:
        queryset = queryset.for_action(action)

    if module:
        queryset = queryset.for_module(module)

    if subject_type:
        if "." in subject_type:
            queryset = queryset.filter(subject_type=subject_type)
        else:
            queryset = queryset.filter(subject_type__endswith=f".{subject_type}")

    if subject_id:
        queryset = queryset.filter(subject_id=subject_id)

    parsed_from = parsed_to = None
    if date_from:
        try:
            parsed_from = parse_date(date_from)
        except ValueError:
            parsed_from = None
        if parsed_from is None:
            return _validation_error("Invalid dateFrom format (use YYYY-MM-DD)")

    if date_to:
        try:
            parsed_to = parse_date(date_to)
        except ValueError:
            parsed_to = None
        if parsed_to is None:
            return _validation_error("Invalid dateTo format (use YYYY-MM-DD)")

    queryset = queryset.between(parsed_from, parsed_to).select_related("actor")

    # Order by created_at descending
    queryset = queryset.newest_first()

    paginator = AuditEntryPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = AuditEntrySerializer(page, many=True)

    return paginator.get_paginated_response(serializer.data)


@api_view(["GET"])
@permission_classes([CanViewActivityLogs])
def audit_filter_options(request):
    """
    GET /api/v1/audit/filters

    Distinct actions and modules present in the activity log.
    """
    actions = (
        AuditEntry.objects.order_by("action").values_list("action", flat=True).distinct()
    )
    modules = (
        AuditEntry.objects.exclude(module__isnull=True)
        .order_by("module")
        .values_list("module", flat=True)
        .distinct()
    )
    return Response(
        {"data": {"actions": list(actions), "modules": list(modules)}},
        status=status.HTTP_200_OK,
    )
