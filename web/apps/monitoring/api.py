"""Health endpoint for the storefront backend.

The store component is healthy when the catalog document loads. The mail
component is only checked when ``settings.HEALTH_CHECK_MAIL`` is set,
because it opens a real SMTP connection.
"""

from django.conf import settings
from django.http import JsonResponse

from apps.catalog.store import StoreError, get_store
from apps.orders.mail_adapters import EmailNotifier


def health_view(_request):
    components = {}

    try:
        get_store().load()
        components["store"] = {"ok": True}
    except StoreError as e:
        components["store"] = {"ok": False, "code": e.code}

    if getattr(settings, "HEALTH_CHECK_MAIL", False):
        components["mail"] = {"ok": EmailNotifier().verify()}

    ok = all(c["ok"] for c in components.values())
    code = 200 if ok else 503
    return JsonResponse({"ok": ok, "components": components}, status=code)
