from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import OtherExpense
from ..serializers import OtherExpenseSerializer
from ..services import expense_service
from .common import id_param, service_response


class ExpenseViewSet(viewsets.ViewSet):
    """Operating expenses outside purchase orders.

    Query params:
        category_id, payment_status, date_from, date_to: list filters.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        params = request.query_params
        qs = expense_service.list_expenses(
            id_param(params.get("category_id"), "category_id"),
            params.get("payment_status"),
            params.get("date_from"),
            params.get("date_to"),
        )
        return Response(OtherExpenseSerializer(qs, many=True).data)

    def create(self, request):
        ok, msg, expense = expense_service.create_expense(request.data)
        payload = expense_service.expense_detail(expense) if ok else None
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        expense = get_object_or_404(OtherExpense, pk=pk)
        return Response(expense_service.expense_detail(expense))

    @action(detail=True, methods=["post"])
    def payments(self, request, pk=None):
        expense = get_object_or_404(OtherExpense, pk=pk)
        ok, msg, payload = expense_service.record_expense_payment(
            expense.pk, request.data
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="opex-summary")
    def opex_summary(self, request):
        try:
            months = int(request.query_params.get("months", 6))
        except ValueError:
            months = 6
        return Response(expense_service.opex_summary(months=max(months, 1)))
