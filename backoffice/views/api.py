import logging

from django.contrib.auth import get_user_model
from django.db.models import F
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import ExpenseCategory, Ingredient, Vendor
from ..permissions import IsAccountsRole, IsAdminRole
from ..serializers import (
    ExpenseCategorySerializer,
    IngredientSerializer,
    UserSerializer,
    VendorSerializer,
)
from ..services import ingredient_service, vendor_service

logger = logging.getLogger(__name__)


class IngredientViewSet(viewsets.ModelViewSet):
    """API endpoint for CRUD operations on ingredients.

    Query params:
        name: optional substring to filter ingredient names.
        low_stock: when set, only ingredients at or below minimum stock.
    """

    queryset = Ingredient.objects.all()
    lookup_value_regex = r"\d+"
    serializer_class = IngredientSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        name = self.request.query_params.get("name")
        if name:
            queryset = queryset.filter(name__icontains=name)
        if self.request.query_params.get("low_stock"):
            queryset = queryset.filter(current_stock__lte=F("min_stock"))
        return queryset

    def perform_create(self, serializer):
        serializer.instance = ingredient_service.create_ingredient(
            serializer.validated_data, user=self.request.user
        )

    def perform_update(self, serializer):
        serializer.instance = ingredient_service.update_ingredient(
            serializer.instance, serializer.validated_data, user=self.request.user
        )

    def destroy(self, request, *args, **kwargs):
        ok, msg = ingredient_service.delete_ingredient(self.get_object())
        if not ok:
            return Response({"error": msg}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def search(self, request):
        query = request.query_params.get("q", "").strip()
        results = ingredient_service.search(query)
        return Response(self.get_serializer(results, many=True).data)

    @action(detail=False, methods=["get"], url_path="last-prices")
    def last_prices(self, request):
        return Response(ingredient_service.last_prices())


class VendorViewSet(viewsets.ModelViewSet):
    """Standard CRUD API for vendors with a purchasing dashboard."""

    queryset = Vendor.objects.all()
    lookup_value_regex = r"\d+"
    serializer_class = VendorSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        name = self.request.query_params.get("name")
        if name:
            queryset = queryset.filter(name__icontains=name)
        return queryset

    def destroy(self, request, *args, **kwargs):
        ok, msg = vendor_service.delete_vendor(self.get_object())
        if not ok:
            return Response({"error": msg}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def dashboard(self, request, pk=None):
        return Response(vendor_service.vendor_dashboard(self.get_object()))


class ExpenseCategoryViewSet(viewsets.ModelViewSet):
    """Expense categories; changes are limited to admin and accounts users."""

    queryset = ExpenseCategory.objects.all()
    lookup_value_regex = r"\d+"
    serializer_class = ExpenseCategorySerializer

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.IsAuthenticated()]
        return [IsAccountsRole()]


class UserViewSet(viewsets.ModelViewSet):
    """Manage back-office users. Admin only."""

    queryset = get_user_model().objects.all().order_by("username")
    lookup_value_regex = r"\d+"
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]

    def _username_taken(self, username, exclude_pk=None):
        qs = get_user_model().objects.filter(username=username)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        return qs.exists()

    def create(self, request, *args, **kwargs):
        if self._username_taken(request.data.get("username")):
            return Response(
                {"error": "Username already exists"}, status=status.HTTP_409_CONFLICT
            )
        response = super().create(request, *args, **kwargs)
        logger.info("Created user %s", response.data.get("username"))
        return response

    def update(self, request, *args, **kwargs):
        username = request.data.get("username")
        if username and self._username_taken(username, exclude_pk=kwargs.get("pk")):
            return Response(
                {"error": "Username already exists"}, status=status.HTTP_409_CONFLICT
            )
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response(
                {"error": "You cannot delete your own account"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().destroy(request, *args, **kwargs)
