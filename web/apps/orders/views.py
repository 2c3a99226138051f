"""HTTP views for the orders app.

``PlaceOrderView`` is kept small: it validates the body (via Pydantic),
delegates to the domain service obtained from ``providers`` and maps the
outcome to the storefront's response format::

    200 {"success": true, "message": ..., "orderId": ...}
    400 {"success": false, "message": ...}
    500 {"success": false, "message": ..., "error": ...}

``error`` is only included when ``settings.DEBUG`` is on. Notification
failures never show up in the response.
"""

import logging

from django.conf import settings
from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import providers
from .domain import InvalidRequest, PersistenceError
from .schemas import PlaceOrderDTO

logger = logging.getLogger(__name__)


def _failure(message: str, status_code: int, error: str | None = None) -> Response:
    body = {"success": False, "message": message}
    if error and settings.DEBUG:
        body["error"] = error
    return Response(body, status=status_code)


class PlaceOrderView(APIView):
    """Accept an order from the storefront.

    Validates the payload, notifies the operator (best effort), marks the
    sold products and stores the order in the catalog store.
    """

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "place_order"

    def post(self, request):
        """Place a new order.

        Args:
            request (Request): DRF request with a JSON body
                ``{"orderDetails": {...}, "soldProducts": [...]}``.

        Returns:
            Response: One of the following responses.
            - 200 with {success, message, orderId} when the order is stored.
            - 400 with {success: false, message} when a field is missing
              or malformed.
            - 500 with {success: false, message, error?} when the order
              could not be stored.
        """
        # 1) Pydantic validation
        try:
            dto = PlaceOrderDTO.model_validate(request.data)
        except ValidationError as e:
            logger.info("order rejected", extra={"reason": "INVALID_PAYLOAD"})
            return _failure("Invalid order data", status.HTTP_400_BAD_REQUEST, str(e))

        details = dto.orderDetails
        if details is not None:
            items = details.get("items")
            logger.info(
                "order received",
                extra={"customer": details.get("name"), "items": len(items) if isinstance(items, list) else 0},
            )

        # 2) Domain
        service = providers.get_order_service()
        try:
            placement = service.place_order(details, dto.soldProducts)
        except InvalidRequest as e:
            logger.info("order rejected", extra={"reason": str(e)})
            return _failure(str(e), status.HTTP_400_BAD_REQUEST)
        except PersistenceError as e:
            return _failure("Error processing order", status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
        except Exception as e:
            logger.exception("order processing failed")
            return _failure("Error processing order", status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

        # 3) Response
        return Response(
            {
                "success": True,
                "message": "Order placed successfully",
                "orderId": placement.order_id,
            },
            status=status.HTTP_200_OK,
        )
