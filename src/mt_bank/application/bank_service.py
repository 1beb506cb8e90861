"""PlatformBankService — admin management of settlement banks.

Every single-bank mutation evicts the cache entries whose key contains the
bank id, so batch resolutions never serve a bank older than its last write
through this process. Bulk status changes go through BulkBankOperations,
which clears the whole cache instead.
"""

import logging
from typing import Any

from src.mt_bank.application.assignments import AssignmentRegistry
from src.mt_bank.domain.models import CliqDetails, PlatformBank
from src.mt_bank.domain.repository import BankRepositoryProtocol
from src.mt_bank.infrastructure.persistence import bank_fields
from src.mt_common.enums import CliqType
from src.mt_common.errors import (
    BankHasActiveAssignmentsError,
    BankNotFoundError,
    InvalidBankDataError,
)
from src.mt_common.money import is_valid_amount, round_money
from src.mt_common.ttl_cache import TTLCache
from src.mt_store.domain.models import DocumentNotFoundError

logger = logging.getLogger(__name__)


def _validate(updates: dict[str, Any]) -> None:
    if "name" in updates and not str(updates["name"] or "").strip():
        raise InvalidBankDataError("name must not be empty")
    if "balance" in updates and not is_valid_amount(updates["balance"]):
        raise InvalidBankDataError(
            f"balance must be a non-negative number, got {updates['balance']!r}"
        )
    if "priority" in updates:
        priority = updates["priority"]
        if isinstance(priority, bool) or not isinstance(priority, int) or priority < 1:
            raise InvalidBankDataError(f"priority must be a positive integer, got {priority!r}")
    cliq = updates.get("cliq_details")
    if cliq is not None:
        if not isinstance(cliq, CliqDetails):
            raise InvalidBankDataError("cliq_details must be CliqDetails")
        if cliq.type not in {t.value for t in CliqType}:
            raise InvalidBankDataError(f"unknown CliQ type {cliq.type!r}")


class PlatformBankService:
    def __init__(
        self,
        banks: BankRepositoryProtocol,
        registry: AssignmentRegistry,
        cache: TTLCache,
    ) -> None:
        self._banks = banks
        self._registry = registry
        self._cache = cache

    # -- reads (failures → [] / None) -----------------------------------------

    async def get_bank(self, bank_id: str) -> PlatformBank | None:
        """Direct lookup; inactive banks are returned too."""
        try:
            return await self._banks.get(bank_id)
        except Exception as exc:
            logger.warning("Reading bank %s failed: %s", bank_id, exc)
            return None

    async def list_all_banks(self) -> list[PlatformBank]:
        try:
            return await self._banks.list_banks()
        except Exception as exc:
            logger.warning("Listing platform banks failed: %s", exc)
            return []

    async def list_active_banks(self) -> list[PlatformBank]:
        try:
            banks = await self._banks.list_banks(active_only=True)
        except Exception as exc:
            logger.warning("Listing active platform banks failed: %s", exc)
            return []
        return sorted((b for b in banks if b.is_active), key=lambda b: (b.priority, b.name))

    # -- writes (failures raise) ------------------------------------------------

    async def create_bank(
        self,
        name: str,
        account_holder: str,
        cliq_details: CliqDetails | None = None,
        balance: float = 0,
        is_active: bool = True,
        description: str | None = None,
        priority: int = 1,
    ) -> str:
        attrs: dict[str, Any] = {
            "name": name,
            "cliq_details": cliq_details or CliqDetails(),
            "account_holder": account_holder,
            "balance": balance,
            "is_active": is_active,
            "description": description,
            "priority": priority,
        }
        _validate(attrs)
        attrs["balance"] = round_money(balance)
        bank_id = await self._banks.create(bank_fields(attrs))
        logger.info("Platform bank created: %s (%s)", bank_id, name)
        return bank_id

    async def update_bank(self, bank_id: str, **updates: Any) -> None:
        if not updates:
            return
        unknown = set(updates) - {
            "name", "cliq_details", "account_holder", "balance",
            "is_active", "description", "priority",
        }
        if unknown:
            raise InvalidBankDataError(f"unknown fields {sorted(unknown)}")
        _validate(updates)
        if "balance" in updates:
            updates["balance"] = round_money(updates["balance"])
        await self._write(bank_id, bank_fields(updates))

    async def update_balance(self, bank_id: str, new_balance: float) -> None:
        if not is_valid_amount(new_balance):
            raise InvalidBankDataError(
                f"balance must be a non-negative number, got {new_balance!r}"
            )
        await self._write(bank_id, {"balance": round_money(new_balance)})

    async def delete_bank(self, bank_id: str) -> None:
        """Hard delete, refused while any active assignment references the bank."""
        if await self._registry.has_active_for_bank(bank_id):
            raise BankHasActiveAssignmentsError(bank_id)
        await self._banks.delete(bank_id)
        self._cache.invalidate(bank_id)
        logger.info("Platform bank deleted: %s", bank_id)

    async def _write(self, bank_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._banks.update(bank_id, fields)
        except DocumentNotFoundError:
            raise BankNotFoundError(bank_id) from None
        self._cache.invalidate(bank_id)
