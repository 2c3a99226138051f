"""Generic record API over the collections of the catalog store.

Every top-level key of the catalog document is exposed under
``/api/<collection>``, in the manner of json-server:

- lists support ``field=value`` filters, ``_sort``/``_order`` and
  ``_page``/``_limit`` pagination (total in ``X-Total-Count``);
- records are addressed by ``/api/<collection>/<id>`` where ``id`` is
  compared as text, so ``/api/products/7`` finds ``{"id": 7}``;
- a key holding an object instead of a list is a singular resource that
  can be read, replaced and merged as a whole.

Each request runs in one store session, so writes here serialise with
order placement inside the process.
"""

import uuid

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ParseError
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from .store import get_store

DEFAULT_PAGE_LIMIT = 10


class DuplicateRecord(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "A record with this id already exists."
    default_code = "duplicate"


def _query_text(value) -> str:
    """Render a JSON value the way it appears in a query string."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def _sort_key(field: str):
    def key(record):
        value = record.get(field) if isinstance(record, dict) else None
        if isinstance(value, bool):
            return (1, int(value), "")
        if isinstance(value, (int, float)):
            return (0, value, "")
        if value is None:
            return (3, 0, "")
        return (2, 0, str(value))
    return key


def _find(records: list, rid: str):
    """Return ``(index, record)`` for the record whose id matches ``rid``."""
    for i, record in enumerate(records):
        if isinstance(record, dict) and "id" in record and _query_text(record["id"]) == rid:
            return i, record
    raise NotFound()


def _next_id(records: list):
    ids = [r.get("id") for r in records if isinstance(r, dict) and "id" in r]
    if all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
        return max(ids, default=0) + 1
    return str(uuid.uuid4())


def _body(request) -> dict:
    if not isinstance(request.data, dict):
        raise ParseError("Request body must be a JSON object.")
    return dict(request.data)


class CatalogView(APIView):
    """Common throttling for the record API: reads and writes have separate scopes."""

    throttle_classes = [ScopedRateThrottle]

    def get_throttles(self):
        # DRF evaluates throttles in initial(), before get/post
        self.throttle_scope = "catalog_read" if self.request.method == "GET" else "catalog_write"
        return [throttle() for throttle in self.throttle_classes]


class DatabaseView(CatalogView):
    """Return the whole catalog document."""

    def get(self, request):
        return Response(get_store().load())


class CollectionView(CatalogView):
    """List or create records; read or replace a singular resource."""

    def get(self, request, collection: str):
        data = get_store().load().get(collection)
        if data is None:
            raise NotFound()
        if not isinstance(data, list):
            return Response(data)

        records = data
        params = request.query_params
        for field in params:
            if field.startswith("_"):
                continue
            wanted = set(params.getlist(field))
            records = [r for r in records if isinstance(r, dict) and _query_text(r.get(field)) in wanted]

        sort = params.get("_sort")
        if sort:
            records = sorted(records, key=_sort_key(sort), reverse=params.get("_order", "asc").lower() == "desc")

        total = len(records)
        page = params.get("_page")
        limit = params.get("_limit")
        try:
            if page or limit:
                size = int(limit) if limit else DEFAULT_PAGE_LIMIT
                if size < 0:
                    raise ValueError(limit)
                start = (max(int(page), 1) - 1) * size if page else 0
                records = records[start:start + size]
        except ValueError:
            raise ParseError("_page and _limit must be non-negative integers.")

        resp = Response(records)
        resp["X-Total-Count"] = str(total)
        return resp

    def post(self, request, collection: str):
        body = _body(request)
        with get_store().session() as s:
            records = s.doc.setdefault(collection, [])
            if not isinstance(records, list):
                raise ParseError(f"'{collection}' is not a collection.")
            if "id" in body:
                if any(isinstance(r, dict) and "id" in r and _query_text(r["id"]) == _query_text(body["id"]) for r in records):
                    raise DuplicateRecord()
                record = body
            else:
                record = {"id": _next_id(records), **body}
            records.append(record)
            s.commit()
        return Response(record, status=status.HTTP_201_CREATED)

    def put(self, request, collection: str):
        return self._write_singular(request, collection, merge=False)

    def patch(self, request, collection: str):
        return self._write_singular(request, collection, merge=True)

    def _write_singular(self, request, collection: str, merge: bool):
        body = _body(request)
        with get_store().session() as s:
            current = s.collection(collection)
            if not isinstance(current, dict):
                raise NotFound()
            s.doc[collection] = {**current, **body} if merge else body
            s.commit()
            return Response(s.doc[collection])


class RecordView(CatalogView):
    """Read, replace, merge or delete a single record."""

    def _records(self, doc: dict, collection: str) -> list:
        records = doc.get(collection)
        if not isinstance(records, list):
            raise NotFound()
        return records

    def get(self, request, collection: str, rid: str):
        _, record = _find(self._records(get_store().load(), collection), rid)
        return Response(record)

    def put(self, request, collection: str, rid: str):
        return self._update(request, collection, rid, merge=False)

    def patch(self, request, collection: str, rid: str):
        return self._update(request, collection, rid, merge=True)

    def _update(self, request, collection: str, rid: str, merge: bool):
        body = _body(request)
        body.pop("id", None)
        with get_store().session() as s:
            records = self._records(s.doc, collection)
            i, record = _find(records, rid)
            updated = {**record, **body} if merge else {"id": record["id"], **body}
            records[i] = updated
            s.commit()
        return Response(updated)

    def delete(self, request, collection: str, rid: str):
        with get_store().session() as s:
            records = self._records(s.doc, collection)
            i, _ = _find(records, rid)
            del records[i]
            s.commit()
        return Response({})
