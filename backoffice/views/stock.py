from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import Ingredient
from ..serializers import StockMovementSerializer
from ..services import stock_service
from .common import items_from, service_response


class StockViewSet(viewsets.ViewSet):
    """Current stock levels, counts and the movement ledger."""

    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):
        low_only = bool(request.query_params.get("low_stock"))
        return Response(stock_service.list_stock(low_stock_only=low_only))

    @action(detail=False, methods=["post"])
    def adjust(self, request):
        ok, msg, payload = stock_service.adjust_stock(
            request.data, items_from(request), user=request.user
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"movements/(?P<ingredient_id>\d+)",
    )
    def movements(self, request, ingredient_id=None):
        ingredient = get_object_or_404(Ingredient, pk=ingredient_id)
        try:
            limit = int(request.query_params.get("limit", 100))
        except ValueError:
            limit = 100
        qs = stock_service.get_movements(ingredient.pk, limit=max(limit, 1))
        return Response(StockMovementSerializer(qs, many=True).data)
