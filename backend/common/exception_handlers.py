"""
DRF exception handler: every API error leaves as
{"success": false, "message": ..., "error_code": ...}.

Service exceptions (common.exceptions) keep their own code and status.
DRF's own exceptions (validation, authentication, 404, 405, ...) are rendered
by DRF first and then wrapped; field errors are kept under "errors".
Anything else is logged and reported as "internal".
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler, set_rollback

from .exceptions import InteractionError, InternalError

logger = logging.getLogger(__name__)

# Checked in order, so subclasses (simplejwt's InvalidToken) match their parent
ERROR_CODES = (
    (exceptions.ValidationError, "invalid_input"),
    (exceptions.ParseError, "invalid_input"),
    (exceptions.NotAuthenticated, "unauthorized"),
    (exceptions.AuthenticationFailed, "unauthorized"),
    (exceptions.PermissionDenied, "forbidden"),
    (exceptions.NotFound, "not_found"),
    (exceptions.MethodNotAllowed, "method_not_allowed"),
    (exceptions.UnsupportedMediaType, "invalid_input"),
    (exceptions.Throttled, "throttled"),
)


def error_envelope(message: str, error_code: str, status_code: int) -> Response:
    return Response(
        {
            "success": False,
            "message": message,
            "error_code": error_code,
        },
        status=status_code,
    )


def _error_code(exc: exceptions.APIException) -> str:
    for exc_class, code in ERROR_CODES:
        if isinstance(exc, exc_class):
            return code
    return exc.default_code


def _first_message(detail) -> str:
    """Flatten a DRF error detail into one readable line."""
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for field, value in detail.items():
            message = _first_message(value)
            if field == api_settings.NON_FIELD_ERRORS_KEY:
                return message
            return f"{field}: {message}"
        return "Invalid input"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid input"
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, InteractionError):
        set_rollback()
        return error_envelope(exc.message, exc.error_code, exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unexpected error in %s", type(view).__name__ if view else "view")
        set_rollback()
        return error_envelope(
            InternalError.default_message,
            InternalError.error_code,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    body = {
        "success": False,
        "message": _first_message(exc.detail),
        "error_code": _error_code(exc),
    }
    if isinstance(exc, exceptions.ValidationError):
        body["errors"] = response.data
    response.data = body
    return response
