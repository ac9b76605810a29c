from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..intend_pdf import generate_intend_pdf
from ..models import GoodsReceivedNote, Intend, IntendItem, Payment, PurchaseOrder
from ..serializers import (
    GoodsReceivedNoteSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    PurchaseOrderListSerializer,
)
from ..services import (
    goods_receiving_service,
    intend_service,
    payment_service,
    purchase_order_service,
)
from .common import id_param, items_from, service_response


class IntendViewSet(viewsets.ViewSet):
    """Requisitions and their items.

    Query params:
        status: derived status filter for the list.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        return Response(intend_service.list_intends(request.query_params.get("status")))

    def create(self, request):
        ok, msg, intend = intend_service.create_intend(
            request.data, items_from(request), user=request.user
        )
        payload = (
            {"intend_id": intend.intend_id, "intend_number": intend.intend_number}
            if ok
            else None
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        intend = get_object_or_404(Intend, pk=pk)
        return Response(intend_service.get_intend(intend))

    def update(self, request, pk=None):
        intend = get_object_or_404(Intend, pk=pk)
        ok, msg = intend_service.update_intend(intend, request.data)
        payload = intend_service.get_intend(intend) if ok else None
        return service_response(ok, msg, payload)

    partial_update = update

    def destroy(self, request, pk=None):
        intend = get_object_or_404(Intend, pk=pk)
        ok, msg = intend_service.delete_intend(intend)
        return service_response(ok, msg, failure_status=status.HTTP_403_FORBIDDEN)

    @action(detail=True, methods=["get", "post", "patch", "delete"])
    def items(self, request, pk=None):
        intend = get_object_or_404(Intend, pk=pk)
        if request.method == "GET":
            return Response(intend_service.get_intend(intend)["items"])
        if request.method == "POST":
            ok, msg, item = intend_service.add_item(intend, request.data)
            payload = {"intend_item_id": item.intend_item_id} if ok else None
            return service_response(
                ok, msg, payload, success_status=status.HTTP_201_CREATED
            )
        item_id = id_param(
            request.data.get("item_id") or request.query_params.get("item_id"),
            "item_id",
        )
        if not item_id:
            return service_response(False, "item_id is required")
        item = get_object_or_404(IntendItem, pk=item_id, intend=intend)
        if request.method == "PATCH":
            ok, msg = intend_service.update_item_quantity(
                item, request.data.get("quantity")
            )
            return service_response(ok, msg)
        ok, msg = intend_service.remove_item(item)
        return service_response(ok, msg, failure_status=status.HTTP_403_FORBIDDEN)

    @action(detail=True, methods=["get"])
    def pdf(self, request, pk=None):
        intend = get_object_or_404(Intend, pk=pk)
        items = intend.items.select_related("ingredient").order_by("intend_item_id")
        response = HttpResponse(
            generate_intend_pdf(intend, items), content_type="application/pdf"
        )
        response["Content-Disposition"] = (
            f'attachment; filename="{intend.intend_number}.pdf"'
        )
        return response


class PurchaseOrderViewSet(viewsets.ViewSet):
    """Purchase orders, raised directly or from an intend.

    Query params:
        status: exact PO status.
        vendor_id: restrict to one vendor.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        qs = purchase_order_service.list_pos(
            request.query_params.get("status"),
            id_param(request.query_params.get("vendor_id"), "vendor_id"),
        )
        return Response(PurchaseOrderListSerializer(qs, many=True).data)

    def create(self, request):
        ok, msg, po = purchase_order_service.create_po(
            request.data, items_from(request), user=request.user
        )
        payload = {"po_id": po.po_id, "po_number": po.po_number} if ok else None
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        po = get_object_or_404(
            PurchaseOrder.objects.select_related("vendor", "intend"), pk=pk
        )
        return Response(purchase_order_service.get_po(po))

    def update(self, request, pk=None):
        po = get_object_or_404(PurchaseOrder, pk=pk)
        ok, msg = purchase_order_service.update_po(po, request.data)
        return service_response(ok, msg, {"status": po.status} if ok else None)

    partial_update = update

    def destroy(self, request, pk=None):
        po = get_object_or_404(PurchaseOrder, pk=pk)
        ok, msg = purchase_order_service.delete_po(po)
        return service_response(ok, msg, failure_status=status.HTTP_403_FORBIDDEN)

    @action(detail=False, methods=["post"], url_path="generate-from-intend")
    def generate_from_intend(self, request):
        ok, msg, payload = purchase_order_service.generate_from_intend(
            request.data, user=request.user
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)


class GoodsReceivedNoteViewSet(viewsets.ViewSet):
    """Record receipts against purchase orders.

    Query params:
        po_id: restrict the list to one purchase order.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        qs = goods_receiving_service.list_grns(
            id_param(request.query_params.get("po_id"), "po_id")
        )
        return Response(GoodsReceivedNoteSerializer(qs, many=True).data)

    def create(self, request):
        ok, msg, payload = goods_receiving_service.create_grn(
            request.data, items_from(request), user=request.user
        )
        replayed = bool(payload and payload.get("replayed"))
        return service_response(
            ok,
            msg,
            payload,
            success_status=status.HTTP_200_OK if replayed else status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        grn = get_object_or_404(
            GoodsReceivedNote.objects.select_related("purchase_order__vendor"), pk=pk
        )
        return Response(goods_receiving_service.get_grn(grn))


class PaymentViewSet(viewsets.ViewSet):
    """Vendor payments against purchase orders.

    Query params:
        vendor_id, po_id, status: list filters.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        params = request.query_params
        qs = payment_service.list_payments(
            id_param(params.get("vendor_id"), "vendor_id"),
            id_param(params.get("po_id"), "po_id"),
            params.get("status"),
        )
        return Response(PaymentSerializer(qs, many=True).data)

    def create(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ok, msg, payload = payment_service.create_payment(
            serializer.validated_data, user=request.user
        )
        return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        payment = get_object_or_404(
            Payment.objects.select_related("vendor", "purchase_order"), pk=pk
        )
        return Response(payment_service.payment_detail(payment))

    @action(detail=False, methods=["get"])
    def outstanding(self, request):
        return Response(payment_service.list_outstanding())
