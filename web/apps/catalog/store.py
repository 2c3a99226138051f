"""JSON file store backing the catalog and the order records.

The whole catalog lives in a single JSON document on disk: one top-level
key per collection (``products``, ``orders`` and whatever else the
storefront keeps there). Every change is a full read-modify-write cycle:
the document is loaded into memory, mutated and written back wholesale.

Writes go to a temporary file next to the target and are moved into place
with an atomic rename, so a reader never sees a half-written document.
Read-modify-write cycles run inside a ``session()``, which holds a lock
shared by every store pointing at the same file. The lock is per process;
separate processes still race and the last write wins.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from django.conf import settings

logger = logging.getLogger(__name__)

_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    """Return the process-wide lock for a store file, creating it once."""
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.RLock()
        return lock


class StoreError(Exception):
    """Raised when the catalog document cannot be read, parsed or written.

    Attributes:
        code: One of ``READ_FAILED``, ``PARSE_FAILED`` or ``WRITE_FAILED``.
    """

    READ_FAILED = "READ_FAILED"
    PARSE_FAILED = "PARSE_FAILED"
    WRITE_FAILED = "WRITE_FAILED"

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code


class CatalogSession:
    """One locked read-modify-write cycle over the catalog document.

    Attributes:
        doc: The document loaded when the session opened. Mutate it in
            place and call ``commit()`` to persist the changes.
    """

    def __init__(self, store: "CatalogStore", doc: dict):
        self.store = store
        self.doc = doc
        self.committed = False

    def collection(self, name: str) -> Any:
        """Return the value stored under ``name`` or None when absent."""
        return self.doc.get(name)

    def commit(self) -> None:
        """Write the whole document back to disk."""
        self.store.save(self.doc)
        self.committed = True


class CatalogStore:
    """Access to the catalog JSON document at ``path``."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def load(self) -> dict:
        """Read and parse the full document.

        Returns:
            dict: The parsed top-level JSON object.

        Raises:
            StoreError: ``READ_FAILED`` when the file cannot be read,
                ``PARSE_FAILED`` when it is not a JSON object.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(StoreError.READ_FAILED, f"cannot read {self.path}: {e}") from e
        try:
            doc = json.loads(raw)
        except ValueError as e:
            raise StoreError(StoreError.PARSE_FAILED, f"invalid JSON in {self.path}: {e}") from e
        if not isinstance(doc, dict):
            raise StoreError(StoreError.PARSE_FAILED, f"{self.path} does not hold a JSON object")
        return doc

    def save(self, doc: dict) -> None:
        """Replace the file contents with ``doc``.

        Raises:
            StoreError: ``WRITE_FAILED`` when serialisation or any file
                operation fails. The previous contents are left in place.
        """
        try:
            body = json.dumps(doc, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreError(StoreError.WRITE_FAILED, f"document is not serialisable: {e}") from e
        try:
            self._write_atomic(body)
        except OSError as e:
            raise StoreError(StoreError.WRITE_FAILED, f"cannot write {self.path}: {e}") from e

    def _write_atomic(self, body: str) -> None:
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(body)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise

    @contextmanager
    def session(self) -> Iterator[CatalogSession]:
        """Open a locked read-modify-write session.

        The lock is held from the read until the block exits. Nothing is
        written unless the block calls ``commit()``.

        Yields:
            CatalogSession: Session holding the loaded document.

        Raises:
            StoreError: When the document cannot be loaded or saved.
        """
        with self._lock:
            s = CatalogSession(self, self.load())
            yield s
            if not s.committed:
                logger.debug("catalog session closed without commit", extra={"path": str(self.path)})


def get_store() -> CatalogStore:
    """Return a store for the configured ``CATALOG_DB_PATH``."""
    return CatalogStore(settings.CATALOG_DB_PATH)
