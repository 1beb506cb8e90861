# tests/unit/test_assignment_registry.py
"""Unit tests for AssignmentRegistry: uniqueness, soft removal, joined reads."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mt_bank.application.assignments import AssignmentRegistry
from src.mt_bank.application.wiring import ReferenceData
from src.mt_bank.domain.models import CliqDetails, PlatformBank
from src.mt_bank.infrastructure.persistence import AssignmentRepository
from src.mt_common.errors import DuplicateAssignmentError, StoreUnavailableError
from src.mt_store.infrastructure.memory_store import InMemoryDocumentStore


def _bank(store: InMemoryDocumentStore, bank_id: str, name: str, **kwargs) -> None:
    data = {"name": name, "accountHolder": "Platform", "balance": 100, "isActive": True}
    data.update(kwargs)
    store.seed("platformBanks", bank_id, data)


def _assignment(
    store: InMemoryDocumentStore,
    assignment_id: str,
    exchange_id: str,
    bank_id: str,
    is_active: bool = True,
    priority: int = 1,
) -> None:
    store.seed("bankAssignments", assignment_id, {
        "exchangeId": exchange_id,
        "bankId": bank_id,
        "assignmentType": "private",
        "isActive": is_active,
        "priority": priority,
        "assignedBy": "admin-1",
    })


class TestAssign:
    @pytest.mark.asyncio
    async def test_creates_active_record(self, refdata: ReferenceData, store) -> None:
        assignment_id = await refdata.registry.assign("ex1", "b1", "public", "admin-1")

        doc = await store.get("bankAssignments", assignment_id)
        assert doc.get("exchangeId") == "ex1"
        assert doc.get("bankId") == "b1"
        assert doc.get("assignmentType") == "public"
        assert doc.get("isActive") is True
        assert doc.get("assignedBy") == "admin-1"
        assert doc.get("assignedAt") is not None

    @pytest.mark.asyncio
    async def test_duplicate_active_pair_rejected(self, refdata: ReferenceData) -> None:
        await refdata.registry.assign("ex1", "b1", "private", "admin-1")

        with pytest.raises(DuplicateAssignmentError) as exc_info:
            await refdata.registry.assign("ex1", "b1", "private", "admin-1")
        assert exc_info.value.code == 3001
        assert exc_info.value.http_status == 409

    @pytest.mark.asyncio
    async def test_same_bank_other_exchange_allowed(self, refdata: ReferenceData) -> None:
        await refdata.registry.assign("ex1", "b1", "private", "admin-1")
        await refdata.registry.assign("ex2", "b1", "private", "admin-1")

        assert len(await refdata.registry.list_all()) == 2

    @pytest.mark.asyncio
    async def test_reassign_after_removal(self, refdata: ReferenceData) -> None:
        await refdata.registry.assign("ex1", "b1", "private", "admin-1")
        await refdata.registry.remove("ex1", "b1")

        await refdata.registry.assign("ex1", "b1", "private", "admin-1")

        assert len(await refdata.registry.list_for_exchange("ex1")) == 1

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, refdata: ReferenceData) -> None:
        with pytest.raises(ValueError):
            await refdata.registry.assign("ex1", "b1", "shared", "admin-1")

    @pytest.mark.asyncio
    async def test_store_failure_raises(self, refdata: ReferenceData, store) -> None:
        store.set_available(False)
        with pytest.raises(StoreUnavailableError):
            await refdata.registry.assign("ex1", "b1", "private", "admin-1")


class TestRemove:
    @pytest.mark.asyncio
    async def test_soft_delete_keeps_record(self, refdata: ReferenceData, store) -> None:
        _assignment(store, "a1", "ex1", "b1")

        assert await refdata.registry.remove("ex1", "b1") == 1

        doc = await store.get("bankAssignments", "a1")
        assert doc is not None
        assert doc.get("isActive") is False

    @pytest.mark.asyncio
    async def test_deactivates_every_duplicate(self, refdata: ReferenceData, store) -> None:
        # two clients raced on assign
        _assignment(store, "a1", "ex1", "b1")
        _assignment(store, "a2", "ex1", "b1")

        assert await refdata.registry.remove("ex1", "b1") == 2
        assert await refdata.registry.list_for_exchange("ex1") == []
        assert store.calls["batch_commit"] == 1

    @pytest.mark.asyncio
    async def test_idempotent(self, refdata: ReferenceData, store) -> None:
        assert await refdata.registry.remove("ex1", "b1") == 0
        assert store.calls["batch_commit"] == 0

    @pytest.mark.asyncio
    async def test_other_pairs_untouched(self, refdata: ReferenceData, store) -> None:
        _assignment(store, "a1", "ex1", "b1")
        _assignment(store, "a2", "ex1", "b2")

        await refdata.registry.remove("ex1", "b1")

        assert [a.bank_id for a in await refdata.registry.list_for_exchange("ex1")] == ["b2"]


class TestReads:
    @pytest.mark.asyncio
    async def test_list_for_exchange_only_active(self, refdata: ReferenceData, store) -> None:
        _assignment(store, "a1", "ex1", "b1")
        _assignment(store, "a2", "ex1", "b2", is_active=False)
        _assignment(store, "a3", "ex2", "b1")

        items = await refdata.registry.list_for_exchange("ex1")

        assert [a.id for a in items] == ["a1"]

    @pytest.mark.asyncio
    async def test_reads_degrade_to_empty(self, refdata: ReferenceData, store) -> None:
        _assignment(store, "a1", "ex1", "b1")
        store.set_available(False)

        assert await refdata.registry.list_for_exchange("ex1") == []
        assert await refdata.registry.list_all() == []
        assert await refdata.registry.resolve_assigned_banks("ex1") == []

    @pytest.mark.asyncio
    async def test_has_active_for_bank_propagates_failure(
        self, refdata: ReferenceData, store
    ) -> None:
        store.set_available(False)
        with pytest.raises(StoreUnavailableError):
            await refdata.registry.has_active_for_bank("b1")


class TestResolveAssignedBanks:
    @pytest.mark.asyncio
    async def test_join_filters_and_orders(self, refdata: ReferenceData, store) -> None:
        _bank(store, "b1", "Housing Bank")
        _bank(store, "b2", "Zeta Bank")
        _bank(store, "b3", "Alpha Bank")
        _bank(store, "b4", "Closed Bank", isActive=False)
        _assignment(store, "a1", "ex1", "b1", priority=2)
        _assignment(store, "a2", "ex1", "b2", priority=1)
        _assignment(store, "a3", "ex1", "b3", priority=1)
        _assignment(store, "a4", "ex1", "b4", priority=1)
        _assignment(store, "a5", "ex1", "ghost", priority=1)

        joined = await refdata.registry.resolve_assigned_banks("ex1")

        assert [ab.bank.id for ab in joined] == ["b3", "b2", "b1"]
        assert joined[0].assignment.id == "a3"

    @pytest.mark.asyncio
    async def test_one_entry_per_bank(self, refdata: ReferenceData, store) -> None:
        _bank(store, "b1", "Housing Bank")
        _assignment(store, "a1", "ex1", "b1")
        _assignment(store, "a2", "ex1", "b1")

        joined = await refdata.registry.resolve_assigned_banks("ex1")

        assert len(joined) == 1

    @pytest.mark.asyncio
    async def test_uses_one_bank_query(self, refdata: ReferenceData, store) -> None:
        for i in range(5):
            _bank(store, f"b{i}", f"Bank {i}")
            _assignment(store, f"a{i}", "ex1", f"b{i}")

        joined = await refdata.registry.resolve_assigned_banks("ex1")

        assert len(joined) == 5
        assert store.calls["query"] == 1
        assert store.calls["query_in"] == 1

    @pytest.mark.asyncio
    async def test_no_assignments_skips_bank_lookup(self, refdata: ReferenceData, store) -> None:
        assert await refdata.registry.resolve_assigned_banks("ex1") == []
        assert store.calls["query_in"] == 0

    @pytest.mark.asyncio
    async def test_naive_and_missing_timestamps_mix(self, refdata: ReferenceData, store) -> None:
        _bank(store, "b1", "Housing Bank")
        _bank(store, "b2", "Arab Bank")
        _assignment(store, "a2", "ex1", "b2")
        store.seed("bankAssignments", "a1", {
            "exchangeId": "ex1",
            "bankId": "b1",
            "isActive": True,
            "assignedAt": "2024-01-01T00:00:00",
        })

        joined = await refdata.registry.resolve_assigned_banks("ex1")

        assert [ab.bank.id for ab in joined] == ["b2", "b1"]
        assert joined[1].assignment.assigned_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_join_fault_degrades_to_empty(self, store) -> None:
        _assignment(store, "a1", "ex1", "b1")
        _assignment(store, "a2", "ex1", "b2")
        resolver = MagicMock()
        resolver.resolve_banks = AsyncMock(return_value=[
            PlatformBank(id="b1", name=None, cliq_details=CliqDetails(),
                         account_holder="", balance=0, is_active=True),
            PlatformBank(id="b2", name="Arab Bank", cliq_details=CliqDetails(),
                         account_holder="", balance=0, is_active=True),
        ])
        registry = AssignmentRegistry(AssignmentRepository(store), resolver)

        assert await registry.resolve_assigned_banks("ex1") == []
