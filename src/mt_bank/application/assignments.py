"""AssignmentRegistry — bank-to-exchange grants.

Invariant: at most one active assignment per (exchange, bank). The store
enforces no uniqueness, so `assign` checks then inserts. Two clients racing
on the same pair can still both insert; that race is tolerated and cleaned
up by `remove` (deactivates every active record for the pair) and by
`resolve_assigned_banks` (one entry per bank).

Removal is a soft delete: records are never deleted, only flipped to
isActive = false, so assignment history stays auditable.

Listing methods are read paths: a store failure yields [] and a warning.
assign/remove are write paths: failures raise.
"""

import logging

from src.mt_bank.application.resolver import BatchBankResolver
from src.mt_bank.domain.models import AssignedBank, BankAssignment, PlatformBank
from src.mt_bank.domain.repository import AssignmentRepositoryProtocol
from src.mt_common.enums import AssignmentType
from src.mt_common.errors import DuplicateAssignmentError

logger = logging.getLogger(__name__)


class AssignmentRegistry:
    def __init__(
        self,
        assignments: AssignmentRepositoryProtocol,
        resolver: BatchBankResolver,
    ) -> None:
        self._assignments = assignments
        self._resolver = resolver

    async def assign(
        self,
        exchange_id: str,
        bank_id: str,
        assignment_type: str,
        assigned_by: str,
        priority: int = 1,
    ) -> str:
        """Create an active assignment; DuplicateAssignmentError if one exists."""
        kind = AssignmentType(assignment_type).value
        existing = await self._assignments.list_active(exchange_id=exchange_id, bank_id=bank_id)
        if existing:
            raise DuplicateAssignmentError(exchange_id, bank_id)

        assignment_id = await self._assignments.create(
            exchange_id, bank_id, kind, assigned_by, priority
        )
        logger.info(
            "Bank %s assigned to exchange %s (%s) by %s: %s",
            bank_id, exchange_id, kind, assigned_by, assignment_id,
        )
        return assignment_id

    async def remove(self, exchange_id: str, bank_id: str) -> int:
        """Deactivate every active record for the pair; returns how many.

        Idempotent: an already-removed pair deactivates nothing and succeeds.
        """
        active = await self._assignments.list_active(exchange_id=exchange_id, bank_id=bank_id)
        if not active:
            return 0
        if len(active) > 1:
            logger.warning(
                "Found %d active assignments for exchange %s / bank %s; deactivating all",
                len(active), exchange_id, bank_id,
            )
        await self._assignments.deactivate([a.id for a in active])
        logger.info("Bank %s unassigned from exchange %s", bank_id, exchange_id)
        return len(active)

    async def list_for_exchange(self, exchange_id: str) -> list[BankAssignment]:
        try:
            return await self._assignments.list_active(exchange_id=exchange_id)
        except Exception as exc:
            logger.warning("Listing assignments for exchange %s failed: %s", exchange_id, exc)
            return []

    async def list_all(self) -> list[BankAssignment]:
        try:
            return await self._assignments.list_active()
        except Exception as exc:
            logger.warning("Listing all assignments failed: %s", exc)
            return []

    async def has_active_for_bank(self, bank_id: str) -> bool:
        """Write-path guard (bank deletion): store failures propagate."""
        return bool(await self._assignments.list_active(bank_id=bank_id))

    async def resolve_assigned_banks(self, exchange_id: str) -> list[AssignedBank]:
        """Active assignments joined with their banks, inactive banks dropped.

        Ordered by assignment priority, then bank priority, then bank name.
        """
        assignments = await self.list_for_exchange(exchange_id)
        if not assignments:
            return []

        banks = await self._resolver.resolve_banks(a.bank_id for a in assignments)
        try:
            return _join(assignments, banks)
        except Exception as exc:
            logger.warning("Joining banks for exchange %s failed: %s", exchange_id, exc)
            return []


def _join(assignments: list[BankAssignment], banks: list[PlatformBank]) -> list[AssignedBank]:
    """One entry per active bank; earliest, highest-priority assignment wins."""
    by_id = {b.id: b for b in banks}
    joined: list[AssignedBank] = []
    seen: set[str] = set()
    for assignment in sorted(assignments, key=lambda a: (a.priority, a.assigned_at)):
        bank = by_id.get(assignment.bank_id)
        if bank is None or not bank.is_active or bank.id in seen:
            continue
        seen.add(bank.id)
        joined.append(AssignedBank(assignment=assignment, bank=bank))

    joined.sort(key=lambda ab: (ab.assignment.priority, ab.bank.priority, ab.bank.name))
    return joined
