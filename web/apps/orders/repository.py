"""Repository layer for persisting orders into the catalog store.

Orders and products share one JSON document. Saving an order is one store
session: mark the sold products, append the stamped order, rewrite the
document.
"""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Any, Callable, List

from django.utils import timezone

from apps.catalog.store import CatalogStore, StoreError

from .domain import OrderStorePort

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def _iso_millis(moment) -> str:
    """Format an aware datetime as ``2024-05-01T10:20:30.123Z``."""
    return moment.astimezone(dt_timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderRepository(OrderStorePort):
    """Persist orders and sold-out flags in a ``CatalogStore``.

    Args:
        store: The catalog store holding products and orders.
        products_key: Top-level key of the products collection.
        orders_key: Top-level key of the orders collection.
        clock: Callable returning the current aware datetime.
    """

    def __init__(
        self,
        store: CatalogStore,
        products_key: str = "products",
        orders_key: str = "orders",
        clock: Callable = timezone.now,
    ):
        self.store = store
        self.products_key = products_key
        self.orders_key = orders_key
        self.clock = clock

    def save_order(self, details: dict, sold_products: List[Any]) -> dict:
        """Mark sold products and append a new order record.

        Products whose id is in ``sold_products`` get ``isSoldOut = True``;
        ids with no matching product are ignored. The new order is
        ``{id, orderDate, **details}`` with the stamped ``id`` and
        ``orderDate`` taking precedence over client values.

        Args:
            details: Submitted order fields.
            sold_products: Product ids to mark as sold out.

        Returns:
            dict: The order record as stored.

        Raises:
            StoreError: When the document cannot be loaded or written, or
                its orders collection is not a list.
        """
        sold = list(sold_products)
        with self.store.session() as s:
            products = s.collection(self.products_key)
            if isinstance(products, list):
                for product in products:
                    if isinstance(product, dict) and _contains(sold, product.get("id")):
                        product["isSoldOut"] = True

            orders = s.collection(self.orders_key)
            if orders is None:
                orders = s.doc[self.orders_key] = []
            elif not isinstance(orders, list):
                raise StoreError(StoreError.PARSE_FAILED, f"'{self.orders_key}' is not a list")

            now = self.clock()
            order = {"id": self._next_id(orders, now), "orderDate": _iso_millis(now)}
            order.update((k, v) for k, v in details.items() if k not in order)
            orders.append(order)
            s.commit()
        return order

    @staticmethod
    def _next_id(orders: list, now) -> int:
        # submission time in epoch ms, strictly above every existing id
        candidate = (now - EPOCH) // timedelta(milliseconds=1)
        last = max(
            (o["id"] for o in orders if isinstance(o, dict) and _is_int(o.get("id"))),
            default=None,
        )
        if last is not None and candidate <= last:
            candidate = last + 1
        return candidate


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _json_key(value):
    # JSON equality: 7 and 7.0 match, "7" and true do not
    if _is_int(value) or isinstance(value, float):
        return ("number", value)
    return (type(value).__name__, value)


def _contains(ids: list, value) -> bool:
    key = _json_key(value)
    return any(_json_key(i) == key for i in ids)
