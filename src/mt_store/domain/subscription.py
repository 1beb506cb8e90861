"""Subscription — a cancellable async stream of query snapshots.

Adapters push snapshots with `emit()`, a feed failure with `fail()`. The
consumer iterates with `async for snapshot in sub`. After `cancel()` the
iterator ends and nothing queued or in flight is delivered.
"""

import asyncio
from collections.abc import Callable

from src.mt_store.domain.models import Document

_CLOSED = object()


class Subscription:
    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._on_cancel = on_cancel
        self._cancelled = False
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def set_on_cancel(self, on_cancel: Callable[[], None]) -> None:
        self._on_cancel = on_cancel

    def emit(self, snapshot: list[Document]) -> None:
        if not self._cancelled and not self._finished:
            self._queue.put_nowait(snapshot)

    def fail(self, exc: BaseException) -> None:
        """Deliver exc to the consumer; the stream ends after it."""
        if not self._cancelled and not self._finished:
            self._finished = True
            self._queue.put_nowait(exc)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._queue.put_nowait(_CLOSED)
        if self._on_cancel is not None:
            self._on_cancel()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> list[Document]:
        if self._cancelled:
            raise StopAsyncIteration
        item = await self._queue.get()
        if self._cancelled or item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._cancelled = True
            raise item
        return item  # type: ignore[return-value]
