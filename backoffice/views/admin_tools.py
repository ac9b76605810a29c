import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from ..permissions import IsAdminRole
from ..services import admin_data_service
from .common import service_response

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def seed_transaction_data(request):
    logger.info("Seeding transaction data requested by %s", request.user)
    ok, msg, payload = admin_data_service.seed_transaction_data(user=request.user)
    return service_response(ok, msg, payload, success_status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAdminRole])
def delete_all_transactions(request):
    """Wipe transactional data; requires ``{"confirm": "DELETE_ALL_TRANSACTIONS"}``."""
    logger.warning("Delete all transactions requested by %s", request.user)
    ok, msg, payload = admin_data_service.delete_all_transactions(
        request.data.get("confirm")
    )
    return service_response(ok, msg, payload)
