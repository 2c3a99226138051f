"""Gateway middleware: request ids, request logging and body size limits.

``RequestIdMiddleware`` makes sure every request carries an identifier:
the incoming ``X-Request-Id`` header is reused when the client sends one,
otherwise a UUIDv4 is generated. The id is stored on the request, in a
context variable for code that has no request at hand (log filters), and
echoed back in the ``X-Request-ID`` response header.

``RequestLogMiddleware`` writes one structured ``request handled`` line per
request. ``ApiSizeLimitMiddleware`` rejects oversized ``/api/`` bodies
before they are parsed.
"""

import contextvars
import logging
import os
import time
import uuid

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")
MAX_API_BYTES = int(os.getenv("API_MAX_BYTES", str(1 * 1024 * 1024)))

logger = logging.getLogger("gateway.requests")


class RequestIdMiddleware(MiddlewareMixin):
    """Django middleware that sets and returns a per-request identifier.

    Attributes:
        HEADER (str): The incoming header (in ``request.META`` casing) that
            may contain a client-provided id.
        RESPONSE_HEADER (str): The header added to responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        """Attach a request id to the request and the context variable.

        The client-supplied header value is reused when present; otherwise
        a new UUIDv4 string is generated. The id is stored on
        ``request.request_id`` and in ``REQUEST_ID_CTX`` for code that runs
        without the request object (log filters, the domain layer).

        Args:
            request: Django HttpRequest instance.
        """
        rid = request.META.get(self.HEADER)
        if not rid:
            rid = str(uuid.uuid4())
        request.request_id = rid
        REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Echo the request id in the ``X-Request-ID`` response header.

        Args:
            request: Django HttpRequest.
            response: Django HttpResponse to modify.

        Returns:
            The same HttpResponse with the header set.
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        return response


class RequestLogMiddleware(MiddlewareMixin):
    """Log method, path, status and duration of every request."""

    def process_request(self, request):
        """Remember when the request started."""
        request._started_at = time.monotonic()

    def process_response(self, request, response):
        """Log one ``request handled`` line and return the response unchanged.

        Args:
            request: Django HttpRequest.
            response: Django HttpResponse.

        Returns:
            The response passed in.
        """
        started = getattr(request, "_started_at", None)
        duration_ms = round((time.monotonic() - started) * 1000, 2) if started is not None else None
        logger.info(
            "request handled",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response


class ApiSizeLimitMiddleware(MiddlewareMixin):
    """Reject ``/api/`` requests whose declared body exceeds ``API_MAX_BYTES``."""

    def process_request(self, request):
        """Short-circuit oversized API requests.

        Args:
            request: Django HttpRequest instance.

        Returns:
            A 413 JsonResponse when ``CONTENT_LENGTH`` exceeds
            ``MAX_API_BYTES``, otherwise None so processing continues.
        """
        if request.path.startswith("/api/"):
            clen = request.META.get("CONTENT_LENGTH")
            if clen and clen.isdigit() and int(clen) > MAX_API_BYTES:
                return JsonResponse({"success": False, "message": "PAYLOAD_TOO_LARGE"}, status=413)
