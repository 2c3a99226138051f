from django.urls import re_path

from .views import CollectionView, DatabaseView, RecordView

app_name = "catalog"

urlpatterns = [
    re_path(r"^db/?$", DatabaseView.as_view(), name="db"),
    re_path(r"^(?P<collection>[\w-]+)/?$", CollectionView.as_view(), name="collection"),
    re_path(r"^(?P<collection>[\w-]+)/(?P<rid>[^/]+)/?$", RecordView.as_view(), name="record"),
]
