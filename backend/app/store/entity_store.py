"""
Entity Store: collections of schemaless JSON records.

Every record lives in the `documents` table addressed by (collection, id).
The store enforces no schema: callers validate with the pydantic records in
app.schemas before writing.

Writes bump an integer version. Passing expected_version to update() turns
the write into a compare-and-set, which is how read-modify-write callers
(item status reconciliation) avoid silently discarding a concurrent change.

Live queries: watch() registers a callback that receives the current result
right away and again after every committed write to that collection.
"""
import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional
from uuid import uuid4

from sqlalchemy import func, select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.audit import AuditLog
from app.core.exceptions import (
    DocumentNotFound,
    StoreUnavailable,
    ValidationFailed,
    VersionConflict,
)
from app.models.document import Document

logger = logging.getLogger(__name__)

COLLECTIONS = ("customers", "employees", "invoices", "tasks")

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]
Listener = Callable[[List[Record]], None]


class DocumentSnapshot(NamedTuple):
    id: str
    data: Record
    version: int


def new_id() -> str:
    return uuid4().hex[:20]


class Subscription:
    """Handle returned by EntityStore.watch(); close() stops delivery."""

    def __init__(self, store: "EntityStore", collection: str, callback: Listener,
                 predicate: Optional[Predicate] = None):
        self._store = store
        self.collection = collection
        self.callback = callback
        self.predicate = predicate
        self.closed = False

    def deliver(self, records: List[Record]) -> None:
        if self.closed:
            return
        try:
            self.callback(records)
        except Exception:
            # A broken listener must not fail the write that triggered it
            logger.exception(f"Listener on '{self.collection}' raised; continuing")

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._store._remove_subscription(self)


class EntityStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Store operation failed: {type(e).__name__}: {e}")
            raise StoreUnavailable("The data store could not complete the operation") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValidationFailed(f"Unknown collection '{collection}'")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, collection: str, record: Record, doc_id: Optional[str] = None) -> str:
        """Insert a record and return its id. The id is also stored as record['id']."""
        self._check_collection(collection)
        doc_id = doc_id or new_id()
        data = copy.deepcopy(record)
        data["id"] = doc_id

        with self._session() as db:
            if db.get(Document, (collection, doc_id)) is not None:
                raise ValidationFailed(f"{collection}/{doc_id} already exists")
            seq = (
                db.query(func.max(Document.seq))
                .filter(Document.collection == collection)
                .scalar()
                or 0
            )
            db.add(Document(collection=collection, id=doc_id, data=data, version=1, seq=seq + 1))

        AuditLog.log_document("create", collection, doc_id, version=1)
        self._notify(collection)
        return doc_id

    def get_snapshot(self, collection: str, doc_id: str) -> DocumentSnapshot:
        self._check_collection(collection)
        with self._session() as db:
            row = db.get(Document, (collection, doc_id))
            if row is None:
                raise DocumentNotFound(collection, doc_id)
            return DocumentSnapshot(row.id, copy.deepcopy(row.data), row.version)

    def get(self, collection: str, doc_id: str) -> Record:
        return self.get_snapshot(collection, doc_id).data

    def update(
        self,
        collection: str,
        doc_id: str,
        partial: Record,
        merge: bool = True,
        expected_version: Optional[int] = None,
    ) -> int:
        """
        Write to an existing record and return its new version.

        merge=True merges top-level keys (arrays are replaced whole);
        merge=False replaces the record. With expected_version the write only
        lands if nobody else wrote since that version (VersionConflict otherwise).
        """
        self._check_collection(collection)

        with self._session() as db:
            row = db.get(Document, (collection, doc_id))
            if row is None:
                raise DocumentNotFound(collection, doc_id)
            if expected_version is not None and row.version != expected_version:
                raise VersionConflict(collection, doc_id, expected_version)

            data = {**row.data, **copy.deepcopy(partial)} if merge else copy.deepcopy(partial)
            data["id"] = doc_id

            stmt = (
                sql_update(Document)
                .where(Document.collection == collection, Document.id == doc_id)
                .values(data=data, version=Document.version + 1)
            )
            if expected_version is not None:
                # Conditional UPDATE is the compare-and-set
                stmt = stmt.where(Document.version == expected_version)
            result = db.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount != 1:
                raise VersionConflict(collection, doc_id, expected_version or row.version)
            # Read back inside the transaction that holds the row lock
            new_version = db.execute(
                select(Document.version).where(Document.collection == collection, Document.id == doc_id)
            ).scalar_one()

        AuditLog.log_document("update", collection, doc_id, version=new_version, fields=partial.keys())
        self._notify(collection)
        return new_version

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a record. Returns False if it was already gone."""
        self._check_collection(collection)
        with self._session() as db:
            row = db.get(Document, (collection, doc_id))
            if row is None:
                return False
            db.delete(row)

        AuditLog.log_document("delete", collection, doc_id)
        self._notify(collection)
        return True

    def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Record]:
        """All records of a collection in creation order, optionally filtered."""
        self._check_collection(collection)
        with self._session() as db:
            rows = (
                db.query(Document)
                .filter(Document.collection == collection)
                .order_by(Document.seq)
                .all()
            )
            records = [copy.deepcopy(r.data) for r in rows]
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def find_by(self, collection: str, field: str, value: Any) -> List[Record]:
        return self.query(collection, lambda r: r.get(field) == value)

    # ------------------------------------------------------------------
    # live queries
    # ------------------------------------------------------------------

    def watch(self, collection: str, callback: Listener,
              predicate: Optional[Predicate] = None) -> Subscription:
        self._check_collection(collection)
        sub = Subscription(self, collection, callback, predicate)
        with self._lock:
            self._subscriptions.setdefault(collection, []).append(sub)
        sub.deliver(self.query(collection, predicate))
        return sub

    def _remove_subscription(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(sub.collection, [])
            if sub in subs:
                subs.remove(sub)

    def _notify(self, collection: str) -> None:
        with self._lock:
            subs = list(self._subscriptions.get(collection, []))
        for sub in subs:
            try:
                records = self.query(collection, sub.predicate)
            except Exception:
                logger.exception(f"Could not refresh live query on '{collection}'")
                continue
            sub.deliver(records)
