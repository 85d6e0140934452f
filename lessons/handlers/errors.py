"""Mapping from domain errors to HTTP responses."""

from loguru import logger
from rest_framework import status
from rest_framework.response import Response

from lessons.domain.errors import DomainError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_LESSON_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ORDER_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LESSON_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INSUFFICIENT_CAPACITY: status.HTTP_409_CONFLICT,
    ErrorCode.IDEMPOTENCY_KEY_REUSED: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENCY_CONFLICT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TRANSIENT_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(code: ErrorCode, message: str, details: dict | None = None) -> dict:
    return {"error": {"code": code.value, "message": message, "details": details or {}}}


def error_response(error: DomainError) -> Response:
    """Render a domain error. Only the user-safe message and details are exposed."""
    http_status = STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if http_status >= 500:
        logger.warning("Responding {} for {}", http_status, error.code.value)
        # internal details stay in the logs
        return Response(error_body(error.code, error.message), status=http_status)
    return Response(error_body(error.code, error.message, error.details), status=http_status)


def invalid_request_response(errors: dict) -> Response:
    """Render serializer errors in the same envelope as domain validation errors."""
    return Response(
        error_body(ErrorCode.VALIDATION_FAILED, "Request body is invalid", {"fields": errors}),
        status=status.HTTP_400_BAD_REQUEST,
    )
