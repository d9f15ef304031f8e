"""
Registry API views.

All mutations flow through service layer.
Mutations require the manage_registry permission.
Read-only for authenticated users.
"""

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.permissions import CanManageRegistry, IsAuthenticatedReadOnly
from apps.registry import services
from apps.registry.serializers import (
    AcademicYearSerializer,
    DocumentRequirementSerializer,
    HEISerializer,
    ProgramSerializer,
    RegionSerializer,
    SemesterSerializer,
)

SERIALIZERS = {
    "regions": RegionSerializer,
    "programs": ProgramSerializer,
    "heis": HEISerializer,
    "semesters": SemesterSerializer,
    "academic-years": AcademicYearSerializer,
    "document-requirements": DocumentRequirementSerializer,
}

SEARCH_FIELDS = ("code", "name")


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


def _validation_error(details):
    return Response(
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": details,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _list_queryset(request, kind):
    model = services.get_model(kind)
    queryset = model.objects.all()
    if kind == "heis":
        queryset = queryset.select_related("region")
        region_id = request.query_params.get("regionId")
        if region_id:
            queryset = queryset.filter(region_id=region_id)
    elif kind == "document-requirements":
        queryset = queryset.select_related("program")
        program_id = request.query_params.get("programId")
        if program_id:
            queryset = queryset.filter(program_id=program_id)

    search = request.query_params.get("search")
    if search:
        condition = Q()
        for name in SEARCH_FIELDS:
            condition |= Q(**{f"{name}__icontains": search})
        if kind == "heis":
            condition |= Q(uii__icontains=search)
        queryset = queryset.filter(condition)
    return queryset


@api_view(["GET", "POST"])
def list_or_create_records(request, kind):
    """GET /api/v1/registry/{kind} - List records (read-only)"""
    """POST /api/v1/registry/{kind} - Create record (registry managers)"""
    serializer_class = SERIALIZERS.get(kind)
    services.get_model(kind)

    if request.method == "GET":
        if not IsAuthenticatedReadOnly().has_permission(request, None):
            return _forbidden("Permission denied")

        serializer = serializer_class(_list_queryset(request, kind), many=True)
        return Response({"data": serializer.data}, status=status.HTTP_200_OK)

    if not CanManageRegistry().has_permission(request, None):
        return _forbidden("Only registry managers can create registry records")

    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        return _validation_error(serializer.errors)

    record = services.create_record(request.user.id, kind, serializer.validated_data)
    return Response(
        {"data": serializer_class(record).data}, status=status.HTTP_201_CREATED
    )


@api_view(["PATCH", "DELETE"])
def update_or_delete_record(request, kind, recordId):
    """PATCH /api/v1/registry/{kind}/{recordId} - Update record"""
    """DELETE /api/v1/registry/{kind}/{recordId} - Delete record"""
    serializer_class = SERIALIZERS.get(kind)
    services.get_model(kind)

    if not CanManageRegistry().has_permission(request, None):
        return _forbidden("Only registry managers can modify registry records")

    if request.method == "DELETE":
        services.delete_record(request.user.id, kind, recordId)
        return Response(status=status.HTTP_204_NO_CONTENT)

    record = services.get_record(services.get_model(kind), recordId)
    serializer = serializer_class(record, data=request.data, partial=True)
    if not serializer.is_valid():
        return _validation_error(serializer.errors)

    record = services.update_record(
        request.user.id, kind, recordId, serializer.validated_data
    )
    return Response({"data": serializer_class(record).data}, status=status.HTTP_200_OK)
