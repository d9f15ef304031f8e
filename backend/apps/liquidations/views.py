"""
Liquidation API views.

All mutations flow through service layer.
Reads are scoped to the caller's role (HEI, region, all, or own).
"""

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

from core.exceptions import ValidationError
from core.permissions import CanViewLiquidations
from apps.liquidations import services
from apps.liquidations.beneficiary_import import beneficiary_template, read_beneficiary_rows
from apps.liquidations.serializers import (
    BeneficiaryImportRowSerializer,
    LiquidationBeneficiarySerializer,
    LiquidationDetailSerializer,
    LiquidationSerializer,
    WorkflowActionSerializer,
)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class LiquidationPagination(LimitOffsetPagination):
    default_limit = 15
    max_limit = 100


@api_view(["GET", "POST"])
@permission_classes([CanViewLiquidations])
def list_or_create_liquidations(request):
    """
    GET /api/v1/liquidations/ - List liquidations visible to the caller.
    POST /api/v1/liquidations/ - Create a DRAFT liquidation.
    """
    if request.method == "GET":
        queryset = services.list_liquidations(
            request.user,
            search=request.query_params.get("search"),
            status=request.query_params.get("status"),
            program_id=request.query_params.get("program"),
        )
        paginator = LiquidationPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = LiquidationSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    serializer = LiquidationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    liquidation = services.create_liquidation(request.user.id, serializer.validated_data)
    return Response(
        {"data": LiquidationSerializer(liquidation).data}, status=status.HTTP_201_CREATED
    )


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([CanViewLiquidations])
def liquidation_detail(request, liquidationId):
    """
    GET /api/v1/liquidations/{liquidationId} - Liquidation with beneficiaries.
    PATCH /api/v1/liquidations/{liquidationId} - Update (DRAFT / RETURNED_TO_HEI).
    DELETE /api/v1/liquidations/{liquidationId} - Delete (DRAFT only).
    """
    if request.method == "DELETE":
        services.delete_liquidation(request.user.id, liquidationId)
        return Response(status=status.HTTP_204_NO_CONTENT)

    liquidation = services.get_liquidation(request.user, liquidationId)

    if request.method == "GET":
        serializer = LiquidationDetailSerializer(liquidation)
        return Response({"data": serializer.data}, status=status.HTTP_200_OK)

    serializer = LiquidationSerializer(liquidation, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    liquidation = services.update_liquidation(
        request.user.id, liquidationId, serializer.validated_data
    )
    return Response({"data": LiquidationSerializer(liquidation).data}, status=status.HTTP_200_OK)


def _workflow_view(action, doc):
    service = getattr(services, action)

    @api_view(["POST"])
    @permission_classes([CanViewLiquidations])
    def view(request, liquidationId):
        serializer = WorkflowActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        liquidation = service(
            request.user.id,
            liquidationId,
            remarks=serializer.validated_data.get("remarks"),
        )
        return Response(
            {"data": LiquidationSerializer(liquidation).data}, status=status.HTTP_200_OK
        )

    view.__doc__ = doc
    view.__name__ = action
    return view


submit_liquidation = _workflow_view(
    "submit", "POST /api/v1/liquidations/{liquidationId}/submit"
)
endorse_to_accounting = _workflow_view(
    "endorse_to_accounting",
    "POST /api/v1/liquidations/{liquidationId}/endorse-to-accounting",
)
return_to_hei = _workflow_view(
    "return_to_hei", "POST /api/v1/liquidations/{liquidationId}/return-to-hei"
)
endorse_to_coa = _workflow_view(
    "endorse_to_coa", "POST /api/v1/liquidations/{liquidationId}/endorse-to-coa"
)
return_to_rc = _workflow_view(
    "return_to_rc", "POST /api/v1/liquidations/{liquidationId}/return-to-rc"
)


@api_view(["GET", "POST"])
@permission_classes([CanViewLiquidations])
def list_or_add_beneficiaries(request, liquidationId):
    """
    GET /api/v1/liquidations/{liquidationId}/beneficiaries - List beneficiaries.
    POST /api/v1/liquidations/{liquidationId}/beneficiaries - Add one beneficiary.
    """
    if request.method == "GET":
        liquidation = services.get_liquidation(request.user, liquidationId)
        serializer = LiquidationBeneficiarySerializer(
            liquidation.beneficiaries.all(), many=True
        )
        return Response({"data": serializer.data}, status=status.HTTP_200_OK)

    serializer = LiquidationBeneficiarySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    beneficiary = services.add_beneficiary(
        request.user.id, liquidationId, serializer.validated_data
    )
    return Response(
        {"data": LiquidationBeneficiarySerializer(beneficiary).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST"])
@permission_classes([CanViewLiquidations])
def import_beneficiaries(request, liquidationId):
    """
    POST /api/v1/liquidations/{liquidationId}/beneficiaries/import

    Accepts a multipart `file` (.xlsx / .csv) or a JSON body {"rows": [...]}.
    """
    uploaded = request.FILES.get("file")
    if uploaded is not None:
        rows = read_beneficiary_rows(uploaded)
    else:
        raw_rows = request.data.get("rows")
        if not isinstance(raw_rows, list):
            raise ValidationError("Provide a file or a list of rows")
        serializer = BeneficiaryImportRowSerializer(data=raw_rows, many=True)
        serializer.is_valid(raise_exception=True)
        rows = serializer.validated_data

    result = services.import_beneficiaries(request.user.id, liquidationId, rows)
    return Response(
        {"data": {"imported": result.imported, "errors": result.errors}},
        status=status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([CanViewLiquidations])
def download_beneficiary_template(request):
    """GET /api/v1/liquidations/beneficiary-template - Blank .xlsx import template."""
    content, filename = beneficiary_template()
    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
