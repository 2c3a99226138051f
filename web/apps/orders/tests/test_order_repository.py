"""Tests for OrderRepository read-modify-write over the catalog store."""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from apps.catalog.store import CatalogStore, StoreError
from apps.orders.repository import OrderRepository

FROZEN = datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)
FROZEN_MS = 1714558830123


def frozen_clock():
    return FROZEN


@pytest.fixture
def repo(catalog_path):
    return OrderRepository(CatalogStore(catalog_path), clock=frozen_clock)


def test_save_order_marks_sold_products_and_appends_order(repo, read_catalog):
    details = {"name": "A", "items": [{"id": 7, "name": "Shoe", "price": 100}], "total": 100}
    order = repo.save_order(details, [7])

    assert order["id"] == FROZEN_MS
    assert order["orderDate"] == "2024-05-01T10:20:30.123Z"
    assert list(order)[:2] == ["id", "orderDate"]

    doc = read_catalog()
    products = {p["id"]: p for p in doc["products"]}
    assert products[7]["isSoldOut"] is True
    assert products[8]["isSoldOut"] is False
    assert products[9]["isSoldOut"] is True  # already sold, untouched
    assert doc["orders"] == [order]
    assert doc["orders"][0]["items"] == details["items"]


def test_unknown_and_mistyped_ids_are_ignored(repo, read_catalog):
    repo.save_order({"name": "A"}, [404, "8", True])
    products = {p["id"]: p for p in read_catalog()["products"]}
    assert products[8]["isSoldOut"] is False
    assert products[7]["isSoldOut"] is False


def test_stamped_fields_override_client_values(repo):
    order = repo.save_order({"id": 1, "orderDate": "yesterday", "name": "A"}, [])
    assert order["id"] == FROZEN_MS
    assert order["orderDate"] == "2024-05-01T10:20:30.123Z"
    assert order["name"] == "A"


def test_ids_stay_unique_with_a_frozen_clock(repo, read_catalog):
    ids = [repo.save_order({"name": str(i)}, [])["id"] for i in range(5)]
    assert ids == [FROZEN_MS + i for i in range(5)]
    assert [o["id"] for o in read_catalog()["orders"]] == ids


def test_id_moves_past_existing_larger_ids(catalog_path, seed):
    seed["orders"] = [{"id": FROZEN_MS + 500, "name": "future"}]
    catalog_path.write_text(json.dumps(seed), encoding="utf-8")
    order = OrderRepository(CatalogStore(catalog_path), clock=frozen_clock).save_order({}, [])
    assert order["id"] == FROZEN_MS + 501


def test_missing_orders_collection_is_created(catalog_path, seed, read_catalog):
    del seed["orders"]
    catalog_path.write_text(json.dumps(seed), encoding="utf-8")
    OrderRepository(CatalogStore(catalog_path), clock=frozen_clock).save_order({"name": "A"}, [7])
    assert len(read_catalog()["orders"]) == 1


def test_custom_products_key(catalog_path, seed, read_catalog):
    seed["shoes"] = seed.pop("products")
    catalog_path.write_text(json.dumps(seed), encoding="utf-8")
    repo = OrderRepository(CatalogStore(catalog_path), products_key="shoes", clock=frozen_clock)
    repo.save_order({}, [8])
    doc = read_catalog()
    assert "products" not in doc
    assert {p["id"]: p["isSoldOut"] for p in doc["shoes"]}[8] is True


def test_orders_not_a_list_is_a_store_error(catalog_path, seed):
    seed["orders"] = {"oops": True}
    catalog_path.write_text(json.dumps(seed), encoding="utf-8")
    before = catalog_path.read_bytes()
    with pytest.raises(StoreError) as e:
        OrderRepository(CatalogStore(catalog_path)).save_order({}, [])
    assert e.value.code == StoreError.PARSE_FAILED
    assert catalog_path.read_bytes() == before


def test_concurrent_saves_in_one_process_are_all_kept(catalog_path, read_catalog):
    repo = OrderRepository(CatalogStore(catalog_path))
    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda i: repo.save_order({"name": f"c{i}"}, [])["id"], range(24)))
    orders = read_catalog()["orders"]
    assert len(orders) == 24
    assert len(set(ids)) == 24
    assert sorted(o["id"] for o in orders) == sorted(ids)
