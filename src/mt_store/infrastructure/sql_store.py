"""SqlDocumentStore — PostgreSQL JSONB documents + Redis change feed.

All queries use raw text() SQL against one `documents` table
(see alembic/versions/001_create_documents.py). Filters compare JSONB
values (`data -> field`), so booleans, numbers and strings keep their
types and a missing field yields NULL, which never matches.

Change feed: after every committed write the store publishes the
collection name's channel on Redis. A subscription listens on that channel
and re-runs its query, emitting only when the result differs from the
last snapshot it emitted. It subscribes to the channel before the initial
query, so no commit can fall between the two.

Updates merge top-level fields (`data || patch`); nested paths are not
addressable.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import redis.asyncio as aioredis
from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.mt_common.datetime_utils import utc_now
from src.mt_common.redis_client import change_channel
from src.mt_store.domain.models import (
    DOCUMENT_ID,
    Document,
    DocumentNotFoundError,
    Filter,
    WriteOp,
    resolve_server_timestamps,
)
from src.mt_store.domain.subscription import Subscription

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_SQL = text("""
    SELECT id, data
    FROM documents
    WHERE collection = :collection AND id = :doc_id
""")

_INSERT_SQL = text("""
    INSERT INTO documents (collection, id, data)
    VALUES (:collection, :doc_id, CAST(:data AS JSONB))
""")

_UPDATE_SQL = text("""
    UPDATE documents
    SET data = data || CAST(:patch AS JSONB),
        updated_at = NOW()
    WHERE collection = :collection AND id = :doc_id
""")

_DELETE_SQL = text("""
    DELETE FROM documents
    WHERE collection = :collection AND id = :doc_id
""")

_COMPARISON_SQL = {
    "==": "=",
    "!=": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def _dumps(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_json_default)


def _build_select(
    collection: str,
    filters: list[Filter],
    order_by: str | None,
) -> tuple[Any, dict[str, Any]]:
    """Compose the SELECT for a filtered, optionally ordered scan."""
    clauses = ["collection = :collection"]
    params: dict[str, Any] = {"collection": collection}

    for i, flt in enumerate(filters):
        value_key = f"v{i}"
        if flt.field == DOCUMENT_ID:
            if flt.op == "in":
                clauses.append(f"id = ANY(CAST(:{value_key} AS TEXT[]))")
                params[value_key] = [str(v) for v in flt.value]
            else:
                clauses.append(f"id {_COMPARISON_SQL[flt.op]} :{value_key}")
                params[value_key] = str(flt.value)
            continue

        field_key = f"f{i}"
        params[field_key] = flt.field
        lhs = f"(data -> CAST(:{field_key} AS TEXT))"
        if flt.op == "in":
            clauses.append(
                f"{lhs} IN (SELECT jsonb_array_elements(CAST(:{value_key} AS JSONB)))"
            )
            params[value_key] = json.dumps(list(flt.value), default=_json_default)
        else:
            clauses.append(f"{lhs} {_COMPARISON_SQL[flt.op]} CAST(:{value_key} AS JSONB)")
            params[value_key] = json.dumps(flt.value, default=_json_default)

    sql = "SELECT id, data FROM documents WHERE " + " AND ".join(clauses)
    if order_by:
        direction = "DESC" if order_by.startswith("-") else "ASC"
        params["order_field"] = order_by.lstrip("-")
        # documents without the ordering field are excluded from ordered scans
        sql += " AND data -> CAST(:order_field AS TEXT) IS NOT NULL"
        sql += f" ORDER BY data -> CAST(:order_field AS TEXT) {direction}, id {direction}"
    else:
        sql += " ORDER BY id"
    return text(sql), params


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_document(row: object) -> Document:
    data = row.data  # type: ignore[attr-defined]
    if isinstance(data, str):
        data = json.loads(data)
    return Document(id=row.id, data=dict(data))  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class SqlDocumentStore:
    """Concrete store — every method opens its own short-lived session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        redis_factory: Callable[[], Awaitable[aioredis.Redis]],
        batch_limit: int = 500,
    ) -> None:
        self._session_factory = session_factory
        self._redis_factory = redis_factory
        self._batch_limit = batch_limit

    # -- reads ----------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Document | None:
        async with self._session() as db:
            result = await db.execute(_GET_SQL, {"collection": collection, "doc_id": doc_id})
            row = result.fetchone()
        return _row_to_document(row) if row else None

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> list[Document]:
        stmt, params = _build_select(collection, list(filters or []), order_by)
        async with self._session() as db:
            result = await db.execute(stmt, params)
            rows = result.fetchall()
        return [_row_to_document(row) for row in rows]

    async def query_in(
        self,
        collection: str,
        field: str,
        values: list[Any],
    ) -> list[Document]:
        if not values:
            return []
        return await self.query(collection, [Filter(field, "in", list(values))])

    # -- writes ---------------------------------------------------------------

    async def insert(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        data = resolve_server_timestamps(fields, utc_now())
        async with self._session() as db:
            await db.execute(
                _INSERT_SQL,
                {"collection": collection, "doc_id": doc_id, "data": _dumps(data)},
            )
            await db.commit()
        await self._publish({collection})
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        patch = resolve_server_timestamps(fields, utc_now())
        async with self._session() as db:
            result = await db.execute(
                _UPDATE_SQL,
                {"collection": collection, "doc_id": doc_id, "patch": _dumps(patch)},
            )
            if result.rowcount == 0:  # type: ignore[attr-defined]
                await db.rollback()
                raise DocumentNotFoundError(collection, doc_id)
            await db.commit()
        await self._publish({collection})

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._session() as db:
            await db.execute(_DELETE_SQL, {"collection": collection, "doc_id": doc_id})
            await db.commit()
        await self._publish({collection})

    async def batch_commit(self, ops: list[WriteOp]) -> None:
        """Apply every update in one transaction; any missing target rolls back all."""
        if len(ops) > self._batch_limit:
            raise ValueError(f"Batch of {len(ops)} writes exceeds limit {self._batch_limit}")
        if not ops:
            return
        now = utc_now()
        async with self._session() as db:
            try:
                for op in ops:
                    patch = resolve_server_timestamps(op.fields, now)
                    result = await db.execute(
                        _UPDATE_SQL,
                        {
                            "collection": op.collection,
                            "doc_id": op.doc_id,
                            "patch": _dumps(patch),
                        },
                    )
                    if result.rowcount == 0:  # type: ignore[attr-defined]
                        raise DocumentNotFoundError(op.collection, op.doc_id)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        await self._publish({op.collection for op in ops})

    # -- subscriptions --------------------------------------------------------

    async def subscribe(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
    ) -> Subscription:
        sub = Subscription()
        redis = await self._redis_factory()
        pubsub = redis.pubsub()
        await pubsub.subscribe(change_channel(collection))
        task = asyncio.create_task(
            self._watch(sub, pubsub, collection, list(filters or []), order_by)
        )
        sub.set_on_cancel(task.cancel)
        return sub

    async def _watch(
        self,
        sub: Subscription,
        pubsub: Any,
        collection: str,
        filters: list[Filter],
        order_by: str | None,
    ) -> None:
        last: list[tuple[str, dict[str, Any]]] | None = None
        try:
            snapshot = await self.query(collection, filters, order_by)
            last = [(d.id, d.data) for d in snapshot]
            sub.emit(snapshot)
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                snapshot = await self.query(collection, filters, order_by)
                fingerprint = [(d.id, d.data) for d in snapshot]
                if fingerprint != last:
                    last = fingerprint
                    sub.emit(snapshot)
        except Exception as exc:
            logger.warning("Subscription on %s failed: %s", collection, exc)
            sub.fail(exc)
        finally:
            try:
                await pubsub.unsubscribe()
                await pubsub.aclose()
            except Exception as exc:  # connection already gone
                logger.debug("Pub/sub close on %s: %s", collection, exc)

    # -- internals ------------------------------------------------------------

    def _session(self) -> "_ConnectivitySession":
        return _ConnectivitySession(self._session_factory)

    async def _publish(self, collections: set[str]) -> None:
        """Announce committed writes; the write stands even if this fails."""
        try:
            redis = await self._redis_factory()
            for collection in collections:
                await redis.publish(change_channel(collection), "changed")
        except Exception as exc:
            logger.warning("Change feed publish failed for %s: %s", sorted(collections), exc)


class _ConnectivitySession:
    """Session context that reports driver connection failures as ConnectionError."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> AsyncSession:
        self._session = self._factory()
        return self._session

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> bool:
        session, self._session = self._session, None
        if session is None:
            raise RuntimeError("session context exited without being entered")
        await session.close()
        if isinstance(exc, (OperationalError, InterfaceError)):
            raise ConnectionError(str(exc)) from exc
        return False
