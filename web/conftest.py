import json

import pytest
from django.core.cache import cache

SEED = {
    "products": [
        {"id": 7, "name": "Shoe", "price": 100, "isSoldOut": False},
        {"id": 8, "name": "Boot", "price": 250, "isSoldOut": False},
        {"id": 9, "name": "Sandal", "price": 60, "isSoldOut": True},
    ],
    "orders": [],
}


@pytest.fixture
def seed():
    return json.loads(json.dumps(SEED))


@pytest.fixture
def catalog_path(tmp_path, seed):
    path = tmp_path / "db.json"
    path.write_text(json.dumps(seed, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings, catalog_path):
    settings.USE_MAIL_NOTIFIER = False
    settings.CATALOG_DB_PATH = str(catalog_path)
    settings.CATALOG_PRODUCTS_COLLECTION = "products"
    # throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def read_catalog(catalog_path):
    def _read():
        return json.loads(catalog_path.read_text(encoding="utf-8"))
    return _read
