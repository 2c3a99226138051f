"""In-process stub adapter for the notifier port.

The stub implements ``NotifierPort`` without touching a mail server. It is
used for local development without SMTP credentials and in tests, where
deterministic behavior is useful.
"""

import logging
from typing import List

from .domain import NotificationFailure, NotifierPort

logger = logging.getLogger(__name__)


class NotifierStub(NotifierPort):
    """Stub implementation of ``NotifierPort``.

    Records every notification it is asked to send and logs it instead of
    delivering it.

    Attributes:
        sent: Order details of each notification, in call order.
        fail: When True every call raises ``NotificationFailure``.
    """

    def __init__(self, fail: bool = False):
        self.sent: List[dict] = []
        self.fail = fail

    def notify_order(self, details: dict) -> None:
        """Record the notification, or fail when configured to.

        Args:
            details: Order details that would be sent to the operator.

        Raises:
            NotificationFailure: When ``fail`` is set.
        """
        if self.fail:
            raise NotificationFailure("STUB_FAILURE")
        self.sent.append(details)
        logger.info(
            "notification recorded (stub)",
            extra={"customer": details.get("name"), "items": len(details.get("items") or [])},
        )
