"""Translate service error codes into DRF responses."""

from rest_framework import serializers, status
from rest_framework.response import Response

from .service_base import ErrorCodes, ServiceResult


ERROR_STATUS_MAP = {
    ErrorCodes.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_RANKING_CATEGORY: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.PRICE_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INSUFFICIENT_STOCK: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.PRODUCT_INACTIVE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_ORDER_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCodes.CONFLICT: status.HTTP_409_CONFLICT,
}


def status_for_error(error_code: str) -> int:
    return ERROR_STATUS_MAP.get(error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(result: ServiceResult) -> Response:
    """Build the standard error body for a failed ServiceResult."""
    return Response(
        {"error": result.error, "detail": result.error_detail},
        status=status_for_error(result.error),
    )


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response (documentation only)"""

    error = serializers.CharField(help_text="Error code identifier")
    detail = serializers.CharField(help_text="Human-readable error message")
