# src/mt_store/domain/repository.py
"""Document store Protocol — dependency inversion for testability.

Unit tests inject the in-memory adapter or an AsyncMock conforming to this
Protocol. Infrastructure provides the PostgreSQL/Redis implementation;
StoreGateway wraps either one with timeouts and connectivity switching.

Adapters raise ConnectionError / TimeoutError when the backend cannot be
reached and DocumentNotFoundError when a write targets a missing document.
"""

from typing import Any, Protocol

from src.mt_store.domain.models import Document, Filter, WriteOp
from src.mt_store.domain.subscription import Subscription


class DocumentStoreProtocol(Protocol):
    async def get(self, collection: str, doc_id: str) -> Document | None: ...

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> list[Document]: ...

    async def query_in(
        self,
        collection: str,
        field: str,
        values: list[Any],
    ) -> list[Document]: ...

    async def insert(self, collection: str, fields: dict[str, Any]) -> str: ...

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...

    async def batch_commit(self, ops: list[WriteOp]) -> None: ...

    async def subscribe(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> Subscription: ...
