"""Logging filter that stamps log records with the current request id.

The id comes from the ContextVar set by ``RequestIdMiddleware``. Records
logged outside a request (start-up, management commands) get ``-`` so
formatters can always reference ``%(request_id)s``.
"""

from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach a ``request_id`` attribute to every log record."""

    def filter(self, record: LogRecord) -> bool:
        """Populate ``record.request_id`` unless the caller already set one.

        Args:
            record: The log record to enrich.

        Returns:
            bool: Always True so the record is processed.
        """
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True
