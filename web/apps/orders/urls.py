from django.urls import re_path

from .views import PlaceOrderView

app_name = "orders"

urlpatterns = [
    re_path(r"^place-order/?$", PlaceOrderView.as_view(), name="place-order"),
]
