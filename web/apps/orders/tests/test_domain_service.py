"""Unit tests for the OrderService placement pipeline.

Stubbed ports drive the outcomes: missing inputs, a failing notifier and a
failing store. The point under test is that the notification channel never
decides the outcome and the persistence channel always does.
"""

import pytest

from apps.catalog.store import StoreError
from apps.orders.adapters import NotifierStub
from apps.orders.domain import (
    InvalidRequest,
    OrderService,
    PersistenceError,
    Placement,
    PlacementStatus,
    StepResult,
    settle,
)


class StubOrdersOK:
    """Order store stub that records calls and returns a stamped order."""
    def __init__(self):
        self.calls = []
    def save_order(self, details, sold_products):
        self.calls.append((details, sold_products))
        return {"id": 1000 + len(self.calls), "orderDate": "2024-01-01T00:00:00.000Z", **details}


class StubOrdersFail:
    """Order store stub whose writes always fail."""
    def save_order(self, details, sold_products):
        raise StoreError(StoreError.WRITE_FAILED, "disk full")


class ExplodingNotifier:
    """Notifier raising something other than NotificationFailure."""
    def __init__(self):
        self.calls = 0
    def notify_order(self, details):
        self.calls += 1
        raise TimeoutError("smtp timed out")


DETAILS = {"name": "A", "items": [{"id": 7, "name": "Shoe", "price": 100}], "total": 100}


def test_place_order_ok():
    """Happy path: notified, persisted, order id returned."""
    notifier, orders = NotifierStub(), StubOrdersOK()
    out = OrderService(notifier, orders).place_order(DETAILS, [7])
    assert out.status == PlacementStatus.PERSISTED
    assert out.notification == StepResult(ok=True)
    assert out.persistence == StepResult(ok=True)
    assert out.order_id == 1001
    assert notifier.sent == [DETAILS]
    assert orders.calls == [(DETAILS, [7])]


@pytest.mark.parametrize("details, sold", [(None, [7]), (DETAILS, None), (None, None)])
def test_place_order_missing_input_has_no_side_effects(details, sold):
    """Validation: a missing field raises before any port is called."""
    notifier, orders = NotifierStub(), StubOrdersOK()
    with pytest.raises(InvalidRequest) as e:
        OrderService(notifier, orders).place_order(details, sold)
    assert str(e.value) == "Missing required data"
    assert notifier.sent == []
    assert orders.calls == []


def test_empty_details_and_empty_sold_list_are_present():
    orders = StubOrdersOK()
    out = OrderService(NotifierStub(), orders).place_order({}, [])
    assert out.status == PlacementStatus.PERSISTED
    assert orders.calls == [({}, [])]


@pytest.mark.parametrize("notifier", [NotifierStub(fail=True), ExplodingNotifier()])
def test_notification_failure_does_not_block_persistence(notifier):
    orders = StubOrdersOK()
    out = OrderService(notifier, orders).place_order(DETAILS, [7])
    assert out.notification.ok is False
    assert out.notification.error
    assert out.status == PlacementStatus.PERSISTED
    assert out.order_id == 1001
    assert len(orders.calls) == 1


def test_persistence_failure_raises_after_notification_was_sent():
    """The operator is notified even though the order is never stored."""
    notifier = NotifierStub()
    with pytest.raises(PersistenceError) as e:
        OrderService(notifier, StubOrdersFail()).place_order(DETAILS, [7])
    placement = e.value.placement
    assert placement.status == PlacementStatus.PERSIST_FAILED
    assert placement.notification.ok is True
    assert "WRITE_FAILED" in placement.persistence.error
    assert placement.order is None
    assert notifier.sent == [DETAILS]


def test_unexpected_store_exception_propagates():
    class Broken:
        def save_order(self, details, sold_products):
            raise KeyError("bug")

    with pytest.raises(KeyError):
        OrderService(NotifierStub(), Broken()).place_order(DETAILS, [])


def test_settle_escalates_only_persistence():
    ok = Placement(details={}, sold_products=[], notification=StepResult(False, "down"),
                   persistence=StepResult(True), order={"id": 5})
    assert settle(ok) is ok

    failed = Placement(details={}, sold_products=[], notification=StepResult(True),
                       persistence=StepResult(False, "READ_FAILED: gone"))
    with pytest.raises(PersistenceError) as e:
        settle(failed)
    assert str(e.value) == "READ_FAILED: gone"

    with pytest.raises(PersistenceError):
        settle(Placement(details={}, sold_products=[]))
