"""URL configuration.

Order placement and health come first; every other ``/api/`` path falls
through to the generic record API over the catalog store.
"""

from django.urls import include, path

urlpatterns = [
    path("api/", include("apps.orders.urls")),
    path("api/", include("apps.monitoring.urls")),
    path("api/", include("apps.catalog.urls")),
]
