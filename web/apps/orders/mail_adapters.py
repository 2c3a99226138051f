"""Email adapter for the notifier port.

``EmailNotifier`` renders the order notification with Django templates
(``orders/order_notification.txt`` and ``.html``) and sends it through
Django's mail framework to the operator address configured in
``settings.ORDER_NOTIFICATION_RECIPIENT``.

The SMTP connection is opened with ``settings.EMAIL_TIMEOUT`` so a slow
or unreachable server cannot hold up the rest of the order pipeline. Every
transport error, timeout included, surfaces as ``NotificationFailure``.
"""

import logging
import smtplib
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string

from .domain import NotificationFailure, NotifierPort

logger = logging.getLogger(__name__)


def build_context(details: dict) -> dict:
    """Template context for an order notification.

    Missing fields render as empty strings; absent notes as ``None``.
    """
    items = []
    raw_items = details.get("items")
    for item in raw_items if isinstance(raw_items, list) else []:
        if isinstance(item, dict):
            items.append({"id": item.get("id", ""), "name": item.get("name", ""), "price": item.get("price", "")})
    return {
        "store_name": settings.STORE_NAME,
        "currency": settings.CURRENCY_LABEL,
        "customer": {
            "name": details.get("name") or "",
            "email": details.get("email") or "",
            "phone": details.get("phone") or "",
            "address": details.get("address") or "",
            "city": details.get("city") or "",
        },
        "notes": details.get("notes") or "None",
        "items": items,
        "total": details.get("total", ""),
        "payment_method": details.get("paymentMethod") or "",
    }


class EmailNotifier(NotifierPort):
    """Send order notifications by email."""

    def __init__(
        self,
        recipient: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.recipient = recipient or settings.ORDER_NOTIFICATION_RECIPIENT
        self.sender = sender or settings.DEFAULT_FROM_EMAIL
        self.timeout = timeout or settings.EMAIL_TIMEOUT

    def _connection(self):
        return get_connection(fail_silently=False, timeout=self.timeout)

    def build_message(self, details: dict) -> EmailMultiAlternatives:
        """Render the notification for ``details``.

        Returns:
            EmailMultiAlternatives: Plain-text body with an HTML alternative.
        """
        ctx = build_context(details)
        subject = f"New Order Received - {ctx['store_name']}"
        text = render_to_string("orders/order_notification.txt", ctx)
        html = render_to_string("orders/order_notification.html", ctx)
        msg = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=self.sender,
            to=[self.recipient],
            connection=self._connection(),
        )
        msg.attach_alternative(html, "text/html")
        return msg

    def notify_order(self, details: dict) -> None:
        """Deliver one notification for the order.

        Raises:
            NotificationFailure: When no recipient is configured, the
                transport fails or times out, or nothing was sent.
        """
        if not self.recipient:
            raise NotificationFailure("NO_RECIPIENT")
        msg = self.build_message(details)
        try:
            sent = msg.send()
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationFailure(f"SEND_FAILED: {e}") from e
        if not sent:
            raise NotificationFailure("NOT_SENT")
        logger.info("notification email sent", extra={"recipient": self.recipient})

    def verify(self) -> bool:
        """Open and close a connection to the mail server.

        Returns:
            bool: True when the server accepted the connection.
        """
        conn = self._connection()
        try:
            conn.open()
        except (smtplib.SMTPException, OSError):
            logger.warning("mail server check failed", exc_info=True)
            return False
        conn.close()
        return True
