"""InMemoryDocumentStore — dict-backed DocumentStoreProtocol implementation.

Used for local demos (STORE_BACKEND=memory) and as the store in unit tests.
Behaves like the remote store on the points the services rely on:
  - every read returns copies, so callers cannot mutate stored state
  - batch_commit validates every target before applying any update
  - subscriptions emit the current result at once, then once per write
    that changes the result (membership or field values)
  - set_available(False) makes every call raise ConnectionError

`calls` counts adapter calls by method name for round-trip assertions.
"""

import copy
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Any

from src.mt_common.datetime_utils import utc_now
from src.mt_store.domain.models import (
    Document,
    DocumentNotFoundError,
    Filter,
    WriteOp,
    matches_all,
    resolve_server_timestamps,
    sort_documents,
)
from src.mt_store.domain.subscription import Subscription


@dataclass(eq=False)
class _Watch:
    collection: str
    filters: list[Filter]
    order_by: str | None
    subscription: Subscription
    last: list[tuple[str, dict[str, Any]]]


class InMemoryDocumentStore:
    def __init__(self, batch_limit: int = 500) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._watches: list[_Watch] = []
        self._batch_limit = batch_limit
        self._available = True
        self.calls: Counter[str] = Counter()

    # -- test/demo controls -------------------------------------------------

    def set_available(self, available: bool) -> None:
        self._available = available

    def seed(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Write a document directly, bypassing call counting."""
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        self._notify(collection)

    def break_subscriptions(self, exc: BaseException) -> None:
        """Fail every open subscription feed with exc."""
        for watch in list(self._watches):
            watch.subscription.fail(exc)
        self._watches.clear()

    @property
    def open_subscriptions(self) -> int:
        return len(self._watches)

    # -- reads ----------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Document | None:
        self._enter("get")
        data = self._collections.get(collection, {}).get(doc_id)
        return Document(id=doc_id, data=copy.deepcopy(data)) if data is not None else None

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> list[Document]:
        self._enter("query")
        return self._run_query(collection, filters or [], order_by)

    async def query_in(
        self,
        collection: str,
        field: str,
        values: list[Any],
    ) -> list[Document]:
        self._enter("query_in")
        if not values:
            return []
        return self._run_query(collection, [Filter(field, "in", list(values))], None)

    # -- writes ---------------------------------------------------------------

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        self._enter("insert")
        doc_id = uuid.uuid4().hex[:20]
        data = resolve_server_timestamps(copy.deepcopy(fields), utc_now())
        self._collections.setdefault(collection, {})[doc_id] = data
        self._notify(collection)
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._enter("update")
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs[doc_id].update(resolve_server_timestamps(copy.deepcopy(fields), utc_now()))
        self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._enter("delete")
        self._collections.get(collection, {}).pop(doc_id, None)
        self._notify(collection)

    async def batch_commit(self, ops: list[WriteOp]) -> None:
        self._enter("batch_commit")
        if len(ops) > self._batch_limit:
            raise ValueError(f"Batch of {len(ops)} writes exceeds limit {self._batch_limit}")
        # validate everything first: all-or-nothing
        for op in ops:
            if op.doc_id not in self._collections.get(op.collection, {}):
                raise DocumentNotFoundError(op.collection, op.doc_id)
        now = utc_now()
        touched: set[str] = set()
        for op in ops:
            self._collections[op.collection][op.doc_id].update(
                resolve_server_timestamps(copy.deepcopy(op.fields), now)
            )
            touched.add(op.collection)
        for collection in touched:
            self._notify(collection)

    # -- subscriptions --------------------------------------------------------

    async def subscribe(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> Subscription:
        self._enter("subscribe")
        sub = Subscription()
        watch = _Watch(
            collection=collection,
            filters=list(filters or []),
            order_by=order_by,
            subscription=sub,
            last=[],
        )
        sub.set_on_cancel(lambda: self._detach(watch))
        self._watches.append(watch)
        snapshot = self._run_query(collection, watch.filters, order_by)
        watch.last = _fingerprint(snapshot)
        sub.emit(snapshot)
        return sub

    # -- internals ------------------------------------------------------------

    def _enter(self, method: str) -> None:
        self.calls[method] += 1
        if not self._available:
            raise ConnectionError("in-memory store is offline")

    def _run_query(
        self, collection: str, filters: list[Filter], order_by: str | None
    ) -> list[Document]:
        docs = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collections.get(collection, {}).items()
        ]
        hits = [d for d in docs if matches_all(d, filters)]
        if order_by:
            return sort_documents(hits, order_by)
        return sorted(hits, key=lambda d: d.id)

    def _notify(self, collection: str) -> None:
        for watch in list(self._watches):
            if watch.collection != collection:
                continue
            snapshot = self._run_query(collection, watch.filters, watch.order_by)
            fingerprint = _fingerprint(snapshot)
            if fingerprint != watch.last:
                watch.last = fingerprint
                watch.subscription.emit(snapshot)

    def _detach(self, watch: _Watch) -> None:
        if watch in self._watches:
            self._watches.remove(watch)


def _fingerprint(snapshot: list[Document]) -> list[tuple[str, dict[str, Any]]]:
    return [(d.id, d.data) for d in snapshot]

