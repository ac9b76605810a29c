"""Custom exception handler for the back-office REST API.

Every error response carries an ``error`` message and the ``status_code``.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(data):
    """Return the first human readable message in a DRF error payload."""
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        for key, value in data.items():
            message = _first_message(value)
            if message:
                return message if key == "non_field_errors" else f"{key}: {message}"
        return None
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else None
    return str(data)


def custom_exception_handler(exc, context):
    """Handle Django ValidationError as a REST framework validation error.

    Unhandled exceptions are logged and reported as a generic 500 instead of
    leaking internals to the client.
    """
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.messages)

    if isinstance(exc, Http404):
        message = str(exc) or "Not found."
        if "matches the given query" in message:
            model = message.split(" ", 1)[-1].split(" matches", 1)[0]
            message = f"{model} not found"
        return Response(
            {"error": message, "status_code": status.HTTP_404_NOT_FOUND},
            status=status.HTTP_404_NOT_FOUND,
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "view",
            exc_info=exc,
        )
        return Response(
            {"error": "Internal server error", "status_code": 500},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(response.data, dict):
        response.data.setdefault("error", _first_message(response.data))
    else:
        response.data = {"error": _first_message(response.data), "errors": response.data}
    response.data["status_code"] = response.status_code
    return response
