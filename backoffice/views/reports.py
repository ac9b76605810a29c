from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..services import dashboard_service, kpis
from ..services.numbering import as_date


def _date_param(request, name):
    raw = request.query_params.get(name)
    if not raw:
        return None
    value = as_date(raw)
    if value is None:
        raise ValidationError({name: f"{name} must be a date (YYYY-MM-DD)"})
    return value


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def dashboard(request):
    """Operational overview: stock, purchasing queues and sales."""
    return Response(dashboard_service.main_dashboard())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def staff_dashboard(request):
    return Response(dashboard_service.staff_dashboard())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def accounts_dashboard(request):
    return Response(dashboard_service.accounts_dashboard())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def mtd_cogs(request):
    """Month-to-date cost of goods sold.

    Query params:
        date: evaluate as of this day instead of today.
    """
    return Response(kpis.mtd_cogs(_date_param(request, "date")))


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def sales_trends(request):
    return Response(dashboard_service.sales_trends())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def cash_ledger(request):
    date_from = _date_param(request, "date_from")
    date_to = _date_param(request, "date_to")
    if date_from and date_to and date_from > date_to:
        raise ValidationError({"date_from": "date_from must not be after date_to"})
    return Response(dashboard_service.cash_ledger(date_from, date_to))
