"""
Domain exceptions and the API error envelope.

Every error response, domain or framework, is rendered as:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable description",
        "details": {}
    }
}
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for all domain errors."""

    code = "DOMAIN_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, details=None, code=None):
        if code is not None:
            self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Request body, parameters or an uploaded file fail validation."""

    code = "VALIDATION_ERROR"


class InvalidStateError(DomainError):
    """Entity is not in the required state for the operation."""

    code = "INVALID_STATE"
    status_code = status.HTTP_409_CONFLICT


class ConflictError(InvalidStateError):
    """A uniqueness constraint rejected the write."""

    code = "CONFLICT"


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(DomainError):
    """Authenticated user lacks the permission or scope."""

    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class PreconditionFailedError(DomainError):
    code = "PRECONDITION_FAILED"
    status_code = status.HTTP_412_PRECONDITION_FAILED


HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "UNSUPPORTED_MEDIA_TYPE",
    status.HTTP_429_TOO_MANY_REQUESTS: "THROTTLED",
}


def _envelope(code, message, details=None):
    return {"error": {"code": code, "message": message, "details": details or {}}}


def domain_exception_handler(exc, context):
    """
    REST framework exception handler.

    Domain errors carry their own code and status. Framework errors keep
    DRF's status; field errors from serializers land in `details`.
    """
    if isinstance(exc, DomainError):
        return Response(
            _envelope(exc.code, exc.message, exc.details), status=exc.status_code
        )

    response = exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled exception", exc_info=exc)
        return Response(
            _envelope("INTERNAL_ERROR", "An internal error occurred"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = HTTP_ERROR_CODES.get(response.status_code, "INTERNAL_ERROR")
    if isinstance(response.data, dict) and "detail" in response.data:
        response.data = _envelope(code, str(response.data["detail"]))
    else:
        response.data = _envelope(code, "Request validation failed", response.data)
    return response
