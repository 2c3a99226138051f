"""Pydantic schemas for order placement.

The schema only checks the shape of a submission: ``orderDetails`` must be
a JSON object and ``soldProducts`` a JSON array. Values inside them are
``JsonValue`` and pass through untouched, so the stored order holds
exactly what the storefront sent (``"100"`` stays a string, ``7.0`` stays
a float, ``true`` stays a boolean). Presence of both fields is checked by
the domain service.
"""

from typing import Optional

from pydantic import BaseModel, JsonValue


class PlaceOrderDTO(BaseModel):
    """Body of ``POST /api/place-order``.

    Attributes:
        orderDetails: The order as submitted; None when absent or null.
        soldProducts: Ids of the products to mark sold out, compared by
            JSON equality; None when absent or null.
    """

    orderDetails: Optional[dict[str, JsonValue]] = None
    soldProducts: Optional[list[JsonValue]] = None
