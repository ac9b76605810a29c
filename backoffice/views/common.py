from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response


def service_response(ok, message, payload=None, success_status=status.HTTP_200_OK,
                     failure_status=status.HTTP_400_BAD_REQUEST):
    """Turn a service ``(ok, message, payload)`` result into a JSON response."""

    body = {"message": message} if ok else {"error": message}
    if isinstance(payload, dict):
        body.update(payload)
    body["success"] = ok
    return Response(body, status=success_status if ok else failure_status)


def items_from(request):
    items = request.data.get("items")
    return items if isinstance(items, list) else []


def id_param(value, name):
    """Parse an id taken from the query string or body; 400 when not a number."""
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({name: f"{name} must be a number"})
