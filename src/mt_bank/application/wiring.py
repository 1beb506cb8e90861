"""Composition root for the reference-data services.

One ReferenceData per process (and one per test). Everything shares the
same StoreGateway and TTLCache instance; nothing is a module global.
"""

from dataclasses import dataclass

from src.mt_bank.application.assignments import AssignmentRegistry
from src.mt_bank.application.bank_service import PlatformBankService
from src.mt_bank.application.bulk import BulkBankOperations
from src.mt_bank.application.resolver import BatchBankResolver
from src.mt_bank.application.sync import RealTimeSynchronizer
from src.mt_bank.infrastructure.persistence import AssignmentRepository, BankRepository
from src.mt_commission.application.service import CommissionService
from src.mt_common.ttl_cache import DEFAULT_TTL_SECONDS, TTLCache
from src.mt_store.application.gateway import StoreGateway
from src.mt_store.domain.repository import DocumentStoreProtocol


@dataclass
class ReferenceData:
    gateway: StoreGateway
    cache: TTLCache
    resolver: BatchBankResolver
    registry: AssignmentRegistry
    banks: PlatformBankService
    bulk: BulkBankOperations
    sync: RealTimeSynchronizer
    commission: CommissionService


def build_reference_data(
    store: DocumentStoreProtocol,
    cache: TTLCache | None = None,
    timeout_seconds: float = 10.0,
    slow_query_ms: float = 1000.0,
) -> ReferenceData:
    gateway = StoreGateway(store, timeout_seconds=timeout_seconds, slow_query_ms=slow_query_ms)
    cache = cache or TTLCache(ttl_seconds=DEFAULT_TTL_SECONDS)
    bank_repo = BankRepository(gateway)
    resolver = BatchBankResolver(bank_repo, cache)
    registry = AssignmentRegistry(AssignmentRepository(gateway), resolver)
    return ReferenceData(
        gateway=gateway,
        cache=cache,
        resolver=resolver,
        registry=registry,
        banks=PlatformBankService(bank_repo, registry, cache),
        bulk=BulkBankOperations(bank_repo, cache),
        sync=RealTimeSynchronizer(gateway, resolver),
        commission=CommissionService(gateway),
    )
