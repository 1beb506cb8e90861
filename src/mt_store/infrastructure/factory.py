"""Build the configured DocumentStoreProtocol adapter.

STORE_BACKEND=sql    → SqlDocumentStore (PostgreSQL + Redis change feed)
STORE_BACKEND=memory → InMemoryDocumentStore (demos, tests)
"""

from config.settings import Settings
from src.mt_common.database import get_session_factory
from src.mt_common.redis_client import get_redis
from src.mt_store.domain.repository import DocumentStoreProtocol
from src.mt_store.infrastructure.memory_store import InMemoryDocumentStore
from src.mt_store.infrastructure.sql_store import SqlDocumentStore


def create_store(settings: Settings) -> DocumentStoreProtocol:
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return InMemoryDocumentStore(batch_limit=settings.BATCH_WRITE_LIMIT)
    if backend == "sql":
        return SqlDocumentStore(
            session_factory=get_session_factory(),
            redis_factory=get_redis,
            batch_limit=settings.BATCH_WRITE_LIMIT,
        )
    raise ValueError(
        f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}; expected 'sql' or 'memory'"
    )
