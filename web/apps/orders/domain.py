"""Domain types, ports and service for placing storefront orders.

Placing an order runs three steps: validate the submission, notify the
operator, persist the order. Notification and persistence each report into
their own result channel (``StepResult``). Only the persistence channel
can fail the placement; ``settle`` is the policy that combines the two.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol

from apps.catalog.store import StoreError

logger = logging.getLogger(__name__)


# ---- Enums ----
class PlacementStatus(str, Enum):
    """Lifecycle of a single order placement."""

    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    NOTIFIED = "NOTIFIED"
    NOTIFY_FAILED = "NOTIFY_FAILED"
    PERSISTED = "PERSISTED"
    PERSIST_FAILED = "PERSIST_FAILED"


# ---- Errors ----
class InvalidRequest(ValueError):
    """The submission is incomplete or malformed. Nothing was done."""


class NotificationFailure(RuntimeError):
    """The operator notification could not be delivered."""


class PersistenceError(RuntimeError):
    """The order could not be saved to the catalog store.

    Attributes:
        placement: The placement as it stood when persistence failed. Its
            notification channel tells whether the operator was already
            notified.
    """

    def __init__(self, message: str, placement: Optional["Placement"] = None):
        super().__init__(message)
        self.placement = placement


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class StepResult:
    """Outcome of one pipeline step.

    Attributes:
        ok: Whether the step succeeded.
        error: Short description of the failure, None on success.
    """

    ok: bool
    error: Optional[str] = None


@dataclass
class Placement:
    """An order submission moving through the pipeline.

    Attributes:
        details: Order fields as submitted by the storefront.
        sold_products: Ids of the products to mark as sold out.
        status: Current PlacementStatus.
        notification: Result channel of the notify step.
        persistence: Result channel of the persist step.
        order: The stored order record once persisted.
    """

    details: dict
    sold_products: List[Any]
    status: PlacementStatus = PlacementStatus.RECEIVED
    notification: Optional[StepResult] = None
    persistence: Optional[StepResult] = None
    order: Optional[dict] = field(default=None)

    @property
    def order_id(self):
        return self.order["id"] if self.order else None


# ---- Ports (DIP) ----
class NotifierPort(Protocol):
    """Port for delivering an order notification to the operator."""

    def notify_order(self, details: dict) -> None:
        """Send a notification describing ``details``.

        Raises:
            Exception: Any failure. Callers treat it as best effort.
        """
        raise NotImplementedError()


class OrderStorePort(Protocol):
    """Port for persisting an order and marking its products sold."""

    def save_order(self, details: dict, sold_products: List[Any]) -> dict:
        """Persist the order and return the stored record.

        Raises:
            apps.catalog.store.StoreError: When the store cannot be read,
                parsed or written.
        """
        raise NotImplementedError()


# ---- Policy ----
def settle(placement: Placement) -> Placement:
    """Combine the result channels into the outcome of the placement.

    The notification channel is informational only. A failed or missing
    persistence result raises.

    Raises:
        PersistenceError: When the persistence channel did not succeed.
    """
    result = placement.persistence
    if result is None or not result.ok:
        raise PersistenceError(result.error if result else "NOT_PERSISTED", placement)
    return placement


# ---- Domain service ----
class OrderService:
    """Validate, notify and persist a new order.

    No step rolls back an earlier one: when persistence fails after the
    notification went out, the operator has been told about an order that
    was never stored.
    """

    def __init__(self, notifier: NotifierPort, orders: OrderStorePort):
        self.notifier = notifier
        self.orders = orders

    def place_order(self, details: Optional[dict], sold_products: Optional[List[Any]]) -> Placement:
        """Run the placement pipeline.

        Args:
            details: Order fields; may lack ``id`` and ``orderDate``.
            sold_products: Product ids to mark as sold out.

        Returns:
            Placement: The settled placement; ``order_id`` holds the new id.

        Raises:
            InvalidRequest: When either input is missing. No side effects.
            PersistenceError: When the order could not be stored.
        """
        if details is None or sold_products is None:
            raise InvalidRequest("Missing required data")

        placement = Placement(details=details, sold_products=list(sold_products))
        placement.status = PlacementStatus.VALIDATED

        # 1) Notify (best effort)
        placement.notification = self._notify(placement)
        placement.status = PlacementStatus.NOTIFIED if placement.notification.ok else PlacementStatus.NOTIFY_FAILED

        # 2) Persist
        placement.persistence = self._persist(placement)
        placement.status = PlacementStatus.PERSISTED if placement.persistence.ok else PlacementStatus.PERSIST_FAILED

        return settle(placement)

    def _notify(self, placement: Placement) -> StepResult:
        try:
            self.notifier.notify_order(placement.details)
        except Exception as e:
            logger.exception("order notification failed")
            return StepResult(ok=False, error=str(e) or e.__class__.__name__)
        logger.info("order notification sent")
        return StepResult(ok=True)

    def _persist(self, placement: Placement) -> StepResult:
        try:
            placement.order = self.orders.save_order(placement.details, placement.sold_products)
        except StoreError as e:
            logger.error("order persistence failed", extra={"code": e.code, "error": str(e)})
            return StepResult(ok=False, error=str(e))
        logger.info("order persisted", extra={"order_id": placement.order_id})
        return StepResult(ok=True)
