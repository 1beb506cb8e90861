"""CommissionService — loads the user record, then applies the pure rules.

The rules themselves live in mt_commission.domain.rates and never touch
the store. Admin callers skip the lookup: their rate does not depend on
anything stored.
"""

from src.mt_commission.domain.models import CommissionQuote, CommissionRate, UserProfile
from src.mt_commission.domain.rates import quote, resolve_rate
from src.mt_commission.infrastructure.persistence import UserRepository
from src.mt_common.enums import TransferDirection, UserRole
from src.mt_common.errors import UserNotFoundError
from src.mt_store.domain.repository import DocumentStoreProtocol


class CommissionService:
    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._users = UserRepository(store)

    async def _profile(self, user_id: str, role: str | None) -> UserProfile:
        if role == UserRole.ADMIN.value:
            return UserProfile(id=user_id, role=role)
        profile = await self._users.get_profile(user_id)
        if profile is None:
            raise UserNotFoundError(user_id)
        return profile

    async def rate_for_user(
        self, user_id: str, direction: TransferDirection | str, role: str | None = None
    ) -> CommissionRate:
        return resolve_rate(await self._profile(user_id, role), direction)

    async def quote_for_user(
        self,
        user_id: str,
        amount: float,
        direction: TransferDirection | str,
        role: str | None = None,
    ) -> CommissionQuote:
        return quote(await self._profile(user_id, role), amount, direction)
