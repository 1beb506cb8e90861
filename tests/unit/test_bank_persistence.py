# tests/unit/test_bank_persistence.py
"""Unit tests for bank/assignment document mappers and repositories."""

from datetime import UTC, datetime

import pytest

from src.mt_bank.domain.models import CliqDetails
from src.mt_bank.infrastructure.persistence import (
    BankRepository,
    MalformedDocumentError,
    bank_fields,
    doc_to_assignment,
    doc_to_bank,
)
from src.mt_store.domain.models import SERVER_TIMESTAMP, Document
from src.mt_store.infrastructure.memory_store import InMemoryDocumentStore


class TestDocToBank:
    def test_full_document(self) -> None:
        created = datetime(2026, 1, 5, 9, 30, tzinfo=UTC)
        bank = doc_to_bank(Document(id="b1", data={
            "name": "Arab Bank",
            "cliqDetails": {"type": "mobile", "value": "0791234567"},
            "accountHolder": "MT Platform",
            "balance": 1500.25,
            "isActive": True,
            "description": "Primary",
            "priority": 2,
            "createdAt": created,
            "updatedAt": created.isoformat(),
        }))
        assert bank.cliq_details == CliqDetails("mobile", "0791234567")
        assert bank.balance == 1500.25
        assert bank.priority == 2
        assert bank.created_at == created
        assert bank.updated_at == created

    def test_defaults_for_missing_optionals(self) -> None:
        bank = doc_to_bank(Document(id="b1", data={"name": "Arab Bank"}))
        assert bank.cliq_details == CliqDetails("alias", "")
        assert bank.balance == 0
        assert bank.priority == 1
        assert bank.is_active is False
        assert bank.description is None

    @pytest.mark.parametrize("data", [
        {},
        {"name": ""},
        {"name": "X", "balance": "100"},
        {"name": "X", "priority": "high"},
        {"name": "X", "balance": True},
    ])
    def test_malformed(self, data) -> None:
        with pytest.raises(MalformedDocumentError):
            doc_to_bank(Document(id="b1", data=data))


class TestDocToAssignment:
    def test_defaults(self) -> None:
        a = doc_to_assignment(Document(id="a1", data={"exchangeId": "ex1", "bankId": "b1"}))
        assert a.assignment_type == "private"
        assert a.priority == 1
        assert a.is_active is False

    def test_requires_both_ids(self) -> None:
        with pytest.raises(MalformedDocumentError):
            doc_to_assignment(Document(id="a1", data={"exchangeId": "ex1"}))


class TestBankFields:
    def test_translates_names_and_cliq(self) -> None:
        fields = bank_fields({
            "account_holder": "MT",
            "is_active": False,
            "cliq_details": CliqDetails("alias", "MTPAY"),
        })
        assert fields == {
            "accountHolder": "MT",
            "isActive": False,
            "cliqDetails": {"type": "alias", "value": "MTPAY"},
        }

    def test_unknown_attribute(self) -> None:
        with pytest.raises(KeyError):
            bank_fields({"swift": "ARABJOAX"})


class TestBankRepository:
    @pytest.mark.asyncio
    async def test_update_stamps_updated_at(self) -> None:
        store = InMemoryDocumentStore()
        store.seed("platformBanks", "b1", {"name": "Arab Bank"})

        await BankRepository(store).update("b1", {"balance": 10})

        doc = await store.get("platformBanks", "b1")
        assert doc.get("balance") == 10
        assert isinstance(doc.get("updatedAt"), datetime)
        assert doc.get("updatedAt") is not SERVER_TIMESTAMP

    @pytest.mark.asyncio
    async def test_list_active_only(self) -> None:
        store = InMemoryDocumentStore()
        store.seed("platformBanks", "b1", {"name": "B", "isActive": True})
        store.seed("platformBanks", "b2", {"name": "A", "isActive": False})

        repo = BankRepository(store)

        assert [b.id for b in await repo.list_banks(active_only=True)] == ["b1"]
        assert [b.id for b in await repo.list_banks()] == ["b2", "b1"]
