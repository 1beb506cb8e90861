"""Bank and assignment repositories over the document store.

Stored documents use the camelCase field names shared with the exchange
and admin front-ends (`isActive`, `cliqDetails`, ...). The mappers below
are the only place that knows them.

Optional attributes missing from a stored bank are filled with defaults:
cliqDetails → {alias, ""}, balance → 0, priority → 1. A document without a
name, or with a non-numeric balance/priority, is malformed.
"""

from typing import Any

from src.mt_bank.domain.models import BankAssignment, CliqDetails, PlatformBank
from src.mt_common.datetime_utils import coerce_datetime
from src.mt_common.enums import CliqType, Collection
from src.mt_store.domain.models import (
    DOCUMENT_ID,
    SERVER_TIMESTAMP,
    Document,
    Filter,
    WriteOp,
    where,
)
from src.mt_store.domain.repository import DocumentStoreProtocol

_BANKS = Collection.PLATFORM_BANKS.value
_ASSIGNMENTS = Collection.BANK_ASSIGNMENTS.value

# model attribute → document field, for partial updates
BANK_FIELD_NAMES = {
    "name": "name",
    "cliq_details": "cliqDetails",
    "account_holder": "accountHolder",
    "balance": "balance",
    "is_active": "isActive",
    "description": "description",
    "priority": "priority",
}


class MalformedDocumentError(ValueError):
    def __init__(self, doc_id: str, detail: str) -> None:
        super().__init__(f"Malformed document {doc_id}: {detail}")


# ---------------------------------------------------------------------------
# Document mappers
# ---------------------------------------------------------------------------

def _number(doc: Document, key: str, default: float) -> float:
    value = doc.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDocumentError(doc.id, f"{key} is not numeric: {value!r}")
    return value


def _cliq_from_doc(raw: Any) -> CliqDetails:
    if not isinstance(raw, dict):
        return CliqDetails(type=CliqType.ALIAS.value, value="")
    return CliqDetails(
        type=raw.get("type") or CliqType.ALIAS.value,
        value=str(raw.get("value") or ""),
    )


def doc_to_bank(doc: Document) -> PlatformBank:
    name = doc.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedDocumentError(doc.id, "name is missing")
    return PlatformBank(
        id=doc.id,
        name=name,
        cliq_details=_cliq_from_doc(doc.get("cliqDetails")),
        account_holder=str(doc.get("accountHolder") or ""),
        balance=_number(doc, "balance", 0),
        is_active=bool(doc.get("isActive", False)),
        description=doc.get("description"),
        priority=int(_number(doc, "priority", 1)),
        created_at=coerce_datetime(doc.get("createdAt")),
        updated_at=coerce_datetime(doc.get("updatedAt")),
    )


def doc_to_assignment(doc: Document) -> BankAssignment:
    exchange_id = doc.get("exchangeId")
    bank_id = doc.get("bankId")
    if not exchange_id or not bank_id:
        raise MalformedDocumentError(doc.id, "exchangeId/bankId missing")
    return BankAssignment(
        id=doc.id,
        exchange_id=exchange_id,
        bank_id=bank_id,
        assignment_type=doc.get("assignmentType") or "private",
        is_active=bool(doc.get("isActive", False)),
        priority=int(_number(doc, "priority", 1)),
        assigned_at=coerce_datetime(doc.get("assignedAt")),
        assigned_by=str(doc.get("assignedBy") or ""),
    )


def bank_fields(updates: dict[str, Any]) -> dict[str, Any]:
    """Translate model-attribute updates into document fields."""
    fields: dict[str, Any] = {}
    for attr, value in updates.items():
        if attr not in BANK_FIELD_NAMES:
            raise KeyError(attr)
        if isinstance(value, CliqDetails):
            value = {"type": value.type, "value": value.value}
        fields[BANK_FIELD_NAMES[attr]] = value
    return fields


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

class BankRepository:
    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._store = store

    async def get(self, bank_id: str) -> PlatformBank | None:
        doc = await self._store.get(_BANKS, bank_id)
        return doc_to_bank(doc) if doc else None

    async def find_by_ids(self, bank_ids: list[str]) -> list[PlatformBank]:
        """One equality-in query for the whole id set."""
        docs = await self._store.query_in(_BANKS, DOCUMENT_ID, bank_ids)
        return [doc_to_bank(d) for d in docs]

    async def list_banks(self, active_only: bool = False) -> list[PlatformBank]:
        filters = [where("isActive", "==", True)] if active_only else []
        docs = await self._store.query(_BANKS, filters, order_by="name")
        return [doc_to_bank(d) for d in docs]

    async def create(self, fields: dict[str, Any]) -> str:
        return await self._store.insert(
            _BANKS,
            {**fields, "createdAt": SERVER_TIMESTAMP, "updatedAt": SERVER_TIMESTAMP},
        )

    async def update(self, bank_id: str, fields: dict[str, Any]) -> None:
        await self._store.update(_BANKS, bank_id, {**fields, "updatedAt": SERVER_TIMESTAMP})

    async def delete(self, bank_id: str) -> None:
        await self._store.delete(_BANKS, bank_id)

    async def set_active_many(self, bank_ids: list[str], is_active: bool) -> None:
        ops = [
            WriteOp(_BANKS, bank_id, {"isActive": is_active, "updatedAt": SERVER_TIMESTAMP})
            for bank_id in bank_ids
        ]
        await self._store.batch_commit(ops)


class AssignmentRepository:
    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._store = store

    async def list_active(
        self,
        exchange_id: str | None = None,
        bank_id: str | None = None,
    ) -> list[BankAssignment]:
        filters: list[Filter] = [where("isActive", "==", True)]
        if exchange_id is not None:
            filters.append(where("exchangeId", "==", exchange_id))
        if bank_id is not None:
            filters.append(where("bankId", "==", bank_id))
        docs = await self._store.query(_ASSIGNMENTS, filters)
        return [doc_to_assignment(d) for d in docs]

    async def create(
        self,
        exchange_id: str,
        bank_id: str,
        assignment_type: str,
        assigned_by: str,
        priority: int = 1,
    ) -> str:
        return await self._store.insert(
            _ASSIGNMENTS,
            {
                "exchangeId": exchange_id,
                "bankId": bank_id,
                "assignmentType": assignment_type,
                "isActive": True,
                "priority": priority,
                "assignedAt": SERVER_TIMESTAMP,
                "assignedBy": assigned_by,
            },
        )

    async def deactivate(self, assignment_ids: list[str]) -> None:
        """Soft-delete in one atomic batch."""
        ops = [WriteOp(_ASSIGNMENTS, aid, {"isActive": False}) for aid in assignment_ids]
        await self._store.batch_commit(ops)
