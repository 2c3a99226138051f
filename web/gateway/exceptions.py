"""DRF exception handler giving every API error the storefront's shape.

Errors raised by DRF (parse errors, 404s, throttling) and catalog store
failures all come back as ``{"success": false, "message": ...}``. Store
failures map to 500 and only carry an ``error`` detail when
``settings.DEBUG`` is on.
"""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.catalog.store import StoreError

logger = logging.getLogger(__name__)


def _message(data) -> str:
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def api_exception_handler(exc, context):
    """Reshape DRF error responses and map ``StoreError`` to HTTP 500."""
    if isinstance(exc, StoreError):
        logger.error("catalog store failure", extra={"code": exc.code, "error": str(exc)})
        body = {"success": False, "message": "Catalog store unavailable"}
        if settings.DEBUG:
            body["error"] = str(exc)
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {"success": False, "message": _message(response.data)}
    return response
