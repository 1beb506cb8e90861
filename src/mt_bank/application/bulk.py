"""Bulk bank status changes.

One atomic batch sets isActive (and updatedAt) on every listed bank:
either all documents change or none do. On success the whole TTL cache is
cleared, because cached batch-resolution entries are keyed by id *sets*
and any of them may contain one of the affected ids.
"""

import logging

from src.mt_bank.domain.repository import BankRepositoryProtocol
from src.mt_common.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


class BulkBankOperations:
    def __init__(self, banks: BankRepositoryProtocol, cache: TTLCache) -> None:
        self._banks = banks
        self._cache = cache

    async def bulk_set_bank_active(self, bank_ids: list[str], is_active: bool) -> int:
        """Returns the number of banks written. Raises BatchCommitError on failure."""
        ids = list(dict.fromkeys(bid for bid in bank_ids if bid))
        if not ids:
            return 0
        try:
            await self._banks.set_active_many(ids, is_active)
        except Exception:
            logger.error("Bulk isActive=%s failed for %d banks; none changed", is_active, len(ids))
            raise
        evicted = self._cache.invalidate()
        logger.info(
            "Bulk isActive=%s applied to %d banks; cache cleared (%d entries)",
            is_active, len(ids), evicted,
        )
        return len(ids)
