from django.urls import re_path

from .api import health_view

urlpatterns = [
    re_path(r"^health/?$", health_view, name="health"),
]
