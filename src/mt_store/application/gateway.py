"""StoreGateway — timeouts, connectivity switching and timing for any adapter.

Every service talks to the store through this wrapper. It conforms to
DocumentStoreProtocol itself and translates adapter failures into the
application taxonomy:

  timeout / ConnectionError / OSError  → StoreUnavailableError
  network disabled                     → StoreUnavailableError (no call made)
  batch_commit rejected by the adapter → BatchCommitError

disable_network() gates calls made through the gateway, including opening a
subscription. A feed that is already open keeps running inside the adapter
(the SQL adapter re-queries on every change announcement) until it is
cancelled or fails; the network switch does not pause it.

Connectivity listeners are a best-effort signal for UIs ("offline" banner);
nothing in the services depends on them for correctness.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.mt_common.errors import BatchCommitError, StoreUnavailableError
from src.mt_store.domain.models import Document, DocumentNotFoundError, Filter, WriteOp
from src.mt_store.domain.repository import DocumentStoreProtocol
from src.mt_store.domain.subscription import Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

ConnectionListener = Callable[[bool], None]


class StoreGateway:
    def __init__(
        self,
        store: DocumentStoreProtocol,
        timeout_seconds: float = 10.0,
        slow_query_ms: float = 1000.0,
    ) -> None:
        self._store = store
        self._timeout = timeout_seconds
        self._slow_ms = slow_query_ms
        self._online = True
        self._listeners: list[ConnectionListener] = []

    # -- connectivity ---------------------------------------------------------

    @property
    def is_online(self) -> bool:
        return self._online

    def disable_network(self) -> None:
        self._set_online(False)

    def enable_network(self) -> None:
        self._set_online(True)

    def add_connection_listener(self, listener: ConnectionListener) -> Callable[[], None]:
        """Register listener(online); returns a handle that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        logger.info("Document store network %s", "enabled" if online else "disabled")
        for listener in list(self._listeners):
            try:
                listener(online)
            except Exception:
                logger.exception("Connection listener failed")

    # -- protocol -------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Document | None:
        return await self._call(
            f"get {collection}/{doc_id}", lambda: self._store.get(collection, doc_id)
        )

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> list[Document]:
        return await self._call(
            f"query {collection}",
            lambda: self._store.query(collection, filters, order_by),
        )

    async def query_in(
        self,
        collection: str,
        field: str,
        values: list[Any],
    ) -> list[Document]:
        return await self._call(
            f"query_in {collection}.{field} ({len(values)} values)",
            lambda: self._store.query_in(collection, field, values),
        )

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        return await self._call(
            f"insert {collection}", lambda: self._store.insert(collection, fields)
        )

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        await self._call(
            f"update {collection}/{doc_id}",
            lambda: self._store.update(collection, doc_id, fields),
        )

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._call(
            f"delete {collection}/{doc_id}", lambda: self._store.delete(collection, doc_id)
        )

    async def batch_commit(self, ops: list[WriteOp]) -> None:
        try:
            await self._call(
                f"batch_commit ({len(ops)} ops)", lambda: self._store.batch_commit(ops)
            )
        except StoreUnavailableError as exc:
            raise BatchCommitError(f"Batch write failed: {exc.message}") from exc
        except (DocumentNotFoundError, ValueError) as exc:
            raise BatchCommitError(f"Batch write rejected: {exc}") from exc

    async def subscribe(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> Subscription:
        return await self._call(
            f"subscribe {collection}",
            lambda: self._store.subscribe(collection, filters, order_by),
        )

    # -- internals ------------------------------------------------------------

    async def _call(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        if not self._online:
            raise StoreUnavailableError(f"Network disabled; {name} not sent")
        start = time.perf_counter()
        failed = False
        try:
            return await asyncio.wait_for(fn(), timeout=self._timeout)
        except TimeoutError as exc:
            failed = True
            raise StoreUnavailableError(f"{name} timed out after {self._timeout}s") from exc
        except OSError as exc:  # ConnectionError and socket-level failures
            failed = True
            raise StoreUnavailableError(f"{name} failed: {exc}") from exc
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            label = f"{name}_ERROR" if failed else name
            if elapsed_ms > self._slow_ms:
                logger.warning("Slow store call: %s took %.0fms", label, elapsed_ms)
            else:
                logger.debug("Store call: %s (%.0fms)", label, elapsed_ms)
