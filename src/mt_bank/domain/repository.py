# src/mt_bank/domain/repository.py
"""Repository Protocols — dependency inversion for testability.

Unit tests inject a mock that conforms to these Protocols.
Infrastructure layer provides the real implementation over the document store.
"""

from typing import Any, Protocol

from src.mt_bank.domain.models import BankAssignment, PlatformBank


class BankRepositoryProtocol(Protocol):
    async def get(self, bank_id: str) -> PlatformBank | None: ...

    async def find_by_ids(self, bank_ids: list[str]) -> list[PlatformBank]: ...

    async def list_banks(self, active_only: bool = False) -> list[PlatformBank]: ...

    async def create(self, fields: dict[str, Any]) -> str: ...

    async def update(self, bank_id: str, fields: dict[str, Any]) -> None: ...

    async def delete(self, bank_id: str) -> None: ...

    async def set_active_many(self, bank_ids: list[str], is_active: bool) -> None: ...


class AssignmentRepositoryProtocol(Protocol):
    async def list_active(
        self,
        exchange_id: str | None = None,
        bank_id: str | None = None,
    ) -> list[BankAssignment]: ...

    async def create(
        self,
        exchange_id: str,
        bank_id: str,
        assignment_type: str,
        assigned_by: str,
        priority: int = 1,
    ) -> str: ...

    async def deactivate(self, assignment_ids: list[str]) -> None: ...
