"""BatchBankResolver — bank ids → PlatformBank records in one round trip.

Cache key is the sorted, comma-joined id set ("banks:b1,b2"), so the same
set requested in any order shares one entry. A miss issues a single
equality-in query for every id. Failures (store unreachable, malformed
document) resolve to [] and are logged; callers must read [] as "unknown",
not "confirmed none".

The cache holds its own copies of the bank records; callers always get
fresh objects they may modify.
"""

import copy
import logging
from collections.abc import Iterable

from src.mt_bank.domain.models import PlatformBank
from src.mt_bank.domain.repository import BankRepositoryProtocol
from src.mt_common.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "banks:"


def cache_key(bank_ids: Iterable[str]) -> str:
    return CACHE_KEY_PREFIX + ",".join(sorted(set(bank_ids)))


class BatchBankResolver:
    def __init__(self, banks: BankRepositoryProtocol, cache: TTLCache) -> None:
        self._banks = banks
        self._cache = cache

    async def resolve_banks(self, bank_ids: Iterable[str]) -> list[PlatformBank]:
        ids = sorted({bid for bid in bank_ids if bid})
        if not ids:
            return []

        key = cache_key(ids)
        cached = self._cache.get(key)
        if cached is not None:
            return copy.deepcopy(cached)

        try:
            resolved = await self._banks.find_by_ids(ids)
        except Exception as exc:
            logger.warning("Bank batch resolution failed for %d ids: %s", len(ids), exc)
            return []

        missing = set(ids) - {b.id for b in resolved}
        if missing:
            logger.debug("Bank ids with no document: %s", sorted(missing))

        self._cache.set(key, copy.deepcopy(resolved))
        return resolved
