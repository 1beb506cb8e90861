"""RealTimeSynchronizer — live bank lists driven by store push notifications.

Two shapes of the same feed:

  stream_*()    → BankSnapshotStream, an async iterator of bank lists with
                  cancel(). First item is the current result.
  subscribe_*() → runs a stream in a task and calls on_change(banks) for
                  each item; returns an Unsubscribe handle.

The exchange feed watches the *assignment* collection: every change to the
exchange's active assignments re-extracts the bank ids, re-resolves them
through the batch resolver and drops inactive banks, even though no bank
document changed.

On a feed error the callback receives [] once and the subscription ends;
resubscribing is the caller's decision. After Unsubscribe returns no
callback fires, including one for a snapshot already being resolved.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from src.mt_bank.application.resolver import BatchBankResolver
from src.mt_bank.domain.models import PlatformBank
from src.mt_bank.infrastructure.persistence import MalformedDocumentError, doc_to_bank
from src.mt_common.enums import Collection
from src.mt_store.domain.models import Document, where
from src.mt_store.domain.repository import DocumentStoreProtocol
from src.mt_store.domain.subscription import Subscription

logger = logging.getLogger(__name__)

OnChange = Callable[[list[PlatformBank]], None | Awaitable[None]]
Transform = Callable[[list[Document]], Awaitable[list[PlatformBank]]]


class BankSnapshotStream:
    def __init__(self, subscription: Subscription, transform: Transform) -> None:
        self._subscription = subscription
        self._transform = transform
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        self._subscription.cancel()

    def __aiter__(self) -> "BankSnapshotStream":
        return self

    async def __anext__(self) -> list[PlatformBank]:
        if self._cancelled:
            raise StopAsyncIteration
        docs = await self._subscription.__anext__()
        banks = await self._transform(docs)
        if self._cancelled:
            raise StopAsyncIteration
        return banks


class Unsubscribe:
    """Callable, idempotent cancellation handle for a callback subscription."""

    def __init__(self, stream: BankSnapshotStream | None = None) -> None:
        self._stream = stream
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def attach(self, task: asyncio.Task[None]) -> None:
        self._task = task

    def __call__(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._stream is not None:
            self._stream.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()


def _docs_to_banks(docs: list[Document]) -> list[PlatformBank]:
    banks: list[PlatformBank] = []
    for doc in docs:
        try:
            banks.append(doc_to_bank(doc))
        except MalformedDocumentError as exc:
            logger.warning("Skipping bank in live feed: %s", exc)
    return banks


class RealTimeSynchronizer:
    def __init__(self, store: DocumentStoreProtocol, resolver: BatchBankResolver) -> None:
        self._store = store
        self._resolver = resolver

    # -- streams --------------------------------------------------------------

    async def stream_active_banks(self) -> BankSnapshotStream:
        async def transform(docs: list[Document]) -> list[PlatformBank]:
            banks = [b for b in _docs_to_banks(docs) if b.is_active]
            return sorted(banks, key=lambda b: (b.priority, b.name))

        sub = await self._store.subscribe(
            Collection.PLATFORM_BANKS.value,
            [where("isActive", "==", True)],
            order_by="name",
        )
        return BankSnapshotStream(sub, transform)

    async def stream_all_banks(self) -> BankSnapshotStream:
        async def transform(docs: list[Document]) -> list[PlatformBank]:
            return _docs_to_banks(docs)

        sub = await self._store.subscribe(Collection.PLATFORM_BANKS.value, order_by="name")
        return BankSnapshotStream(sub, transform)

    async def stream_exchange_banks(self, exchange_id: str) -> BankSnapshotStream:
        async def transform(docs: list[Document]) -> list[PlatformBank]:
            bank_ids = {d.get("bankId") for d in docs if d.get("bankId")}
            if not bank_ids:
                return []
            banks = await self._resolver.resolve_banks(bank_ids)
            return sorted((b for b in banks if b.is_active), key=lambda b: (b.priority, b.name))

        sub = await self._store.subscribe(
            Collection.BANK_ASSIGNMENTS.value,
            [where("exchangeId", "==", exchange_id), where("isActive", "==", True)],
        )
        return BankSnapshotStream(sub, transform)

    # -- callbacks ------------------------------------------------------------

    async def subscribe_active_banks(self, on_change: OnChange) -> Unsubscribe:
        return await self._subscribe("active banks", self.stream_active_banks, on_change)

    async def subscribe_all_banks(self, on_change: OnChange) -> Unsubscribe:
        return await self._subscribe("all banks", self.stream_all_banks, on_change)

    async def subscribe_exchange_banks(self, exchange_id: str, on_change: OnChange) -> Unsubscribe:
        return await self._subscribe(
            f"exchange {exchange_id} banks",
            lambda: self.stream_exchange_banks(exchange_id),
            on_change,
        )

    async def _subscribe(
        self,
        label: str,
        open_stream: Callable[[], Awaitable[BankSnapshotStream]],
        on_change: OnChange,
    ) -> Unsubscribe:
        try:
            stream = await open_stream()
        except Exception as exc:
            logger.warning("Subscribing to %s failed: %s", label, exc)
            await _deliver(on_change, [])
            return Unsubscribe()

        handle = Unsubscribe(stream)
        handle.attach(asyncio.create_task(self._pump(label, stream, handle, on_change)))
        return handle

    async def _pump(
        self,
        label: str,
        stream: BankSnapshotStream,
        handle: Unsubscribe,
        on_change: OnChange,
    ) -> None:
        try:
            async for banks in stream:
                if handle.cancelled:
                    return
                await _deliver(on_change, banks)
        except Exception as exc:
            if handle.cancelled:
                return
            logger.warning("Live feed for %s terminated: %s", label, exc)
            stream.cancel()
            await _deliver(on_change, [])


async def _deliver(on_change: OnChange, banks: list[PlatformBank]) -> None:
    try:
        result = on_change(banks)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Bank list subscriber raised")
