"""Service provider helpers for wiring OrderService with its ports.

``get_order_service`` returns an ``OrderService`` backed by the catalog
store configured in ``settings.CATALOG_DB_PATH``. The notifier is the
email adapter when ``settings.USE_MAIL_NOTIFIER`` is truthy, and the
in-process stub otherwise (tests, or environments without SMTP
credentials).
"""

from django.conf import settings

from apps.catalog.store import get_store

from .adapters import NotifierStub
from .domain import NotifierPort, OrderService
from .mail_adapters import EmailNotifier
from .repository import OrderRepository


def get_notifier() -> NotifierPort:
    """Return the configured notifier."""
    if getattr(settings, "USE_MAIL_NOTIFIER", True):
        return EmailNotifier()
    return NotifierStub()


def get_order_service() -> OrderService:
    """Return a configured OrderService instance.

    Returns:
        OrderService: A service wired with the notifier and the order
        repository over the catalog store.
    """
    return OrderService(
        notifier=get_notifier(),
        orders=OrderRepository(
            get_store(),
            products_key=getattr(settings, "CATALOG_PRODUCTS_COLLECTION", "products"),
        ),
    )
