"""
Document store for the studio collections.

Each collection (``bookings``, ``packages``, ``users``, ``gallery``,
``contact``) is a list of JSON documents.  Two ways of working with
them are offered:

* whole-collection access through ``get_collection`` and
  ``save_collection``, which read or replace every document of a
  collection at once;
* keyed access through ``get``, ``insert``, ``replace`` and ``delete``,
  which touch a single row.  ``replace`` is a compare-and-swap on the
  row's ``version`` counter: if another request wrote the document
  after it was read, ``StaleWriteError`` is raised instead of silently
  overwriting that change.

The services use keyed access.  Whole-collection access remains for
seeding and maintenance scripts.

Database failures are re-raised as ``StoreError`` so the HTTP layer can
answer with a generic 500 without knowing about ``sqlite3``.
"""

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .db import get_cursor
from .exceptions import ConflictError, NotFoundError, StaleWriteError, StoreError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """A stored record together with its concurrency version."""

    id: str
    version: int
    data: Dict[str, Any]


@contextmanager
def _store_cursor() -> Iterator[sqlite3.Cursor]:
    try:
        with get_cursor() as cursor:
            yield cursor
    except sqlite3.IntegrityError as e:
        raise ConflictError(str(e)) from e
    except sqlite3.Error as e:
        logger.exception("Document store failure")
        raise StoreError(str(e)) from e


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(id=row["id"], version=row["version"], data=json.loads(row["data"]))


class CollectionStore:
    """Keyed and whole-collection access to the ``documents`` table."""

    @classmethod
    def get_collection(cls, name: str) -> List[Dict[str, Any]]:
        """Return every document of ``name`` in insertion order."""
        return [doc.data for doc in cls.list_documents(name)]

    @classmethod
    def list_documents(cls, name: str) -> List[Document]:
        with _store_cursor() as cursor:
            rows = cursor.execute(
                "SELECT id, version, data FROM documents WHERE collection = ? ORDER BY seq, rowid",
                (name,),
            ).fetchall()
        return [_row_to_document(row) for row in rows]

    @classmethod
    def save_collection(cls, name: str, items: Iterable[Dict[str, Any]]) -> None:
        """Replace the whole collection with ``items`` in one transaction.

        Every item must carry a non-empty ``id``.  Versions restart at 1,
        so any reader holding an older version will see its next
        ``replace`` rejected.
        """
        items = list(items)
        for item in items:
            if not item.get("id"):
                raise ValidationError(f"Every document in {name} needs an id")
        with _store_cursor() as cursor:
            cursor.execute("DELETE FROM documents WHERE collection = ?", (name,))
            for seq, item in enumerate(items, start=1):
                cursor.execute(
                    "INSERT INTO documents (collection, id, version, data, seq) VALUES (?, ?, 1, ?, ?)",
                    (name, str(item["id"]), json.dumps(item), seq),
                )
        logger.info("Saved collection %s (%d documents)", name, len(items))

    @classmethod
    def get(cls, name: str, doc_id: str) -> Optional[Document]:
        with _store_cursor() as cursor:
            row = cursor.execute(
                "SELECT id, version, data FROM documents WHERE collection = ? AND id = ?",
                (name, doc_id),
            ).fetchone()
        return _row_to_document(row) if row else None

    @classmethod
    def insert(cls, name: str, data: Dict[str, Any]) -> Document:
        """Add a new document.  Raises ``ConflictError`` if the id is taken."""
        doc_id = data.get("id")
        if not doc_id:
            raise ValidationError(f"Every document in {name} needs an id")
        with _store_cursor() as cursor:
            row = cursor.execute(
                "SELECT COALESCE(MAX(seq), 0) + 1 AS next_seq FROM documents WHERE collection = ?",
                (name,),
            ).fetchone()
            cursor.execute(
                "INSERT INTO documents (collection, id, version, data, seq) VALUES (?, ?, 1, ?, ?)",
                (name, doc_id, json.dumps(data), row["next_seq"]),
            )
        return Document(id=doc_id, version=1, data=data)

    @classmethod
    def replace(cls, name: str, doc_id: str, data: Dict[str, Any], expected_version: int) -> Document:
        """Overwrite a document if it is still at ``expected_version``.

        Raises
        ------
        NotFoundError
            If the document no longer exists.
        StaleWriteError
            If the document was written since ``expected_version`` was read.
        """
        with _store_cursor() as cursor:
            cursor.execute(
                """
                UPDATE documents
                SET data = ?, version = version + 1, updated_at = CURRENT_TIMESTAMP
                WHERE collection = ? AND id = ? AND version = ?
                """,
                (json.dumps(data), name, doc_id, expected_version),
            )
            if cursor.rowcount == 0:
                exists = cursor.execute(
                    "SELECT version FROM documents WHERE collection = ? AND id = ?",
                    (name, doc_id),
                ).fetchone()
                if not exists:
                    raise NotFoundError(f"{name} document {doc_id} not found")
                logger.warning(
                    "Rejected stale write to %s/%s (expected version %s, found %s)",
                    name,
                    doc_id,
                    expected_version,
                    exists["version"],
                )
                raise StaleWriteError(f"{name} document {doc_id} was modified concurrently; reload and retry")
        return Document(id=doc_id, version=expected_version + 1, data=data)

    @classmethod
    def modify(
        cls,
        name: str,
        doc_id: str,
        mutate: Callable[[Dict[str, Any]], Dict[str, Any]],
    ) -> Document:
        """Read a document, pass a copy to ``mutate`` and write the result back.

        The write is conditional on the version that was read, so a
        concurrent change makes this raise ``StaleWriteError`` rather
        than being lost.  ``mutate`` may raise to abort without writing.
        """
        doc = cls.get(name, doc_id)
        if doc is None:
            raise NotFoundError(f"{name} document {doc_id} not found")
        data = mutate(dict(doc.data))
        return cls.replace(name, doc_id, data, doc.version)

    @classmethod
    def delete(cls, name: str, doc_id: str) -> bool:
        """Remove a document.  Returns ``False`` if it did not exist."""
        with _store_cursor() as cursor:
            cursor.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (name, doc_id),
            )
            return cursor.rowcount > 0

    @classmethod
    def clear(cls, name: str) -> int:
        """Remove every document of a collection and return how many went."""
        with _store_cursor() as cursor:
            cursor.execute("DELETE FROM documents WHERE collection = ?", (name,))
            return cursor.rowcount


def new_id() -> str:
    """Identifier for a new document."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current time as an ISO 8601 string, the format stored in documents."""
    return datetime.now(timezone.utc).isoformat()
