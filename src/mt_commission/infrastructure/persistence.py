"""User record access for commission resolution (read-only)."""

from src.mt_commission.domain.models import UserProfile
from src.mt_common.enums import Collection
from src.mt_store.domain.models import Document
from src.mt_store.domain.repository import DocumentStoreProtocol


def doc_to_profile(doc: Document) -> UserProfile:
    rates = doc.get("commissionRates")
    return UserProfile(
        id=doc.id,
        role=str(doc.get("role") or ""),
        commission_rates=rates if isinstance(rates, dict) else {},
        exchange_name=doc.get("exchangeName"),
    )


class UserRepository:
    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._store = store

    async def get_profile(self, user_id: str) -> UserProfile | None:
        doc = await self._store.get(Collection.USERS.value, user_id)
        return doc_to_profile(doc) if doc else None
