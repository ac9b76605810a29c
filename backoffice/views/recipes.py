from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import Recipe, Sale
from ..serializers import SaleSerializer
from ..services import recipe_service, sale_service
from .common import items_from, service_response


def _lines_from(request):
    lines = request.data.get("ingredients")
    return lines if isinstance(lines, list) else None


class RecipeViewSet(viewsets.ViewSet):
    """Recipes with live costing.

    Query params:
        portions: number of portions to cost on retrieve (default 1).
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        rows = []
        for recipe in Recipe.objects.order_by("name"):
            costing = recipe_service.recipe_cost(recipe)
            rows.append(
                {
                    "recipe_id": recipe.recipe_id,
                    "name": recipe.name,
                    "category": recipe.category,
                    "selling_price": recipe.selling_price,
                    "current_cost": costing["current_cost"],
                    "profit_margin": costing["profit_margin"],
                    "ingredient_count": len(costing["cost_breakdown"]),
                    "is_active": recipe.is_active,
                }
            )
        return Response(rows)

    def create(self, request):
        ok, msg, recipe_id = recipe_service.create_recipe(
            request.data, _lines_from(request) or []
        )
        payload = {"recipe_id": recipe_id} if ok else None
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        recipe = get_object_or_404(Recipe, pk=pk)
        portions = request.query_params.get("portions", 1)
        return Response(recipe_service.recipe_detail(recipe, portions))

    def update(self, request, pk=None):
        recipe = get_object_or_404(Recipe, pk=pk)
        ok, msg = recipe_service.update_recipe(
            recipe.pk, request.data, _lines_from(request)
        )
        return service_response(ok, msg)

    partial_update = update

    def destroy(self, request, pk=None):
        recipe = get_object_or_404(Recipe, pk=pk)
        ok, msg = recipe_service.delete_recipe(recipe)
        return service_response(ok, msg, failure_status=status.HTTP_403_FORBIDDEN)


class SaleViewSet(viewsets.ViewSet):
    """Dish sales; processing a sale consumes ingredient stock.

    Query params:
        status, date_from, date_to: list filters.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        params = request.query_params
        qs = sale_service.list_sales(
            params.get("status"), params.get("date_from"), params.get("date_to")
        )
        return Response(SaleSerializer(qs, many=True).data)

    def create(self, request):
        process = request.data.get("process", True)
        if isinstance(process, str):
            process = process.lower() not in ("0", "false", "no")
        ok, msg, payload = sale_service.create_sale(
            request.data, items_from(request), user=request.user, process=bool(process)
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        sale = get_object_or_404(Sale, pk=pk)
        return Response(sale_service.get_sale(sale))

    def destroy(self, request, pk=None):
        sale = get_object_or_404(Sale, pk=pk)
        ok, msg = sale_service.delete_sale(sale)
        return service_response(ok, msg, failure_status=status.HTTP_403_FORBIDDEN)

    @action(detail=True, methods=["post"])
    def process(self, request, pk=None):
        sale = get_object_or_404(Sale, pk=pk)
        ok, msg, payload = sale_service.process_sale(sale.pk, user=request.user)
        return service_response(ok, msg, payload)
